"""Document references as seen by diagnostic callers."""

from typing import Protocol

from pydantic import BaseModel, ConfigDict, field_validator


class DocumentPathLike(Protocol):
    """Anything that exposes a document path relative to the database root."""

    @property
    def path(self) -> str: ...


class DocumentReference(BaseModel):
    """A reference to a document, e.g. ``DocumentReference(path="rooms/eros")``."""

    model_config = ConfigDict(frozen=True)

    path: str

    @field_validator("path")
    @classmethod
    def _validate_path(cls, value: str) -> str:
        segments = value.strip("/").split("/")
        if not value.strip("/") or any(not s for s in segments):
            raise ValueError(f"Invalid document path: {value!r}")
        if len(segments) % 2 != 0:
            raise ValueError(
                f"Document path must have an even number of segments, "
                f"but {value!r} has {len(segments)}"
            )
        return "/".join(segments)

    @property
    def id(self) -> str:
        """The last segment of the path."""
        return self.path.rsplit("/", 1)[-1]

    @property
    def parent_path(self) -> str:
        """Path of the collection containing this document."""
        return self.path.rsplit("/", 1)[0]
