"""Data models for existence filter mismatch reports.

Two shapes exist for each report. The internal shape is what the sync engine
publishes: it carries the project and database ids, and its Bloom filter
predicate works on fully-qualified resource names. The public shape is what
``capture_existence_filter_mismatches`` hands back: ids dropped, predicate
rebound to document references.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BloomFilterInfoInternal(BaseModel):
    """Bloom filter details as published by the sync engine."""

    model_config = ConfigDict(frozen=True)

    applied: bool = Field(..., description="Whether the filter was evaluated against the local cache")
    hash_count: int = Field(..., ge=0, description="Number of hash functions")
    bitmap_length: int = Field(..., ge=0, description="Bitmap size in bits")
    padding: int = Field(..., ge=0, le=7, description="Unused trailing bits of the last byte")
    might_contain: Callable[[str], bool] | None = Field(
        None, description="Membership test over fully-qualified resource names"
    )


class ExistenceFilterMismatchInfoInternal(BaseModel):
    """A mismatch between the local cache and an existence filter."""

    model_config = ConfigDict(frozen=True)

    local_cache_count: int = Field(..., ge=0, description="Documents the local cache believes match")
    existence_filter_count: int = Field(..., ge=0, description="Documents the server says match")
    project_id: str
    database_id: str
    bloom_filter: BloomFilterInfoInternal | None = None


class BloomFilterInfo(BaseModel):
    """Bloom filter details as exposed to callers.

    ``might_contain`` is always callable. When the engine supplied no
    predicate it answers False for everything.
    """

    model_config = ConfigDict(frozen=True)

    applied: bool
    hash_count: int
    bitmap_length: int
    padding: int
    # Takes a DocumentPathLike; pydantic only checks callability.
    might_contain: Callable[[Any], bool]


class ExistenceFilterMismatchInfo(BaseModel):
    """An existence filter mismatch captured during a block of work."""

    model_config = ConfigDict(frozen=True)

    local_cache_count: int
    existence_filter_count: int
    bloom_filter: BloomFilterInfo | None = None
