"""Entry point for the sync engine to report existence filter mismatches.

Deciding that a mismatch happened is the engine's job. Once it has, it calls
``report_existence_filter_mismatch`` with what it knows, and this module
shapes that into an ExistenceFilterMismatchInfoInternal and publishes it.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .bloom_filter import BloomFilter
from .logging_config import get_logger
from .models import BloomFilterInfoInternal, ExistenceFilterMismatchInfoInternal
from .testing_hooks import TestingHooks

logger = get_logger("reporting")


class BloomFilterApplicationStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FALSE_POSITIVE = "false_positive"


class BloomFilterParams(BaseModel):
    """Raw Bloom filter parameters from an existence filter."""

    model_config = ConfigDict(frozen=True)

    bitmap: bytes = b""
    padding: int = Field(default=0, ge=0, le=7)
    hash_count: int = Field(default=0, ge=0)


class ExistenceFilter(BaseModel):
    """The server's claim about which documents match a target."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(..., ge=0, description="Number of documents that match")
    unchanged_names: BloomFilterParams | None = None


def build_existence_filter_mismatch_info(
    local_cache_count: int,
    existence_filter: ExistenceFilter,
    project_id: str,
    database_id: str,
    bloom_filter: BloomFilter | None = None,
    status: BloomFilterApplicationStatus = BloomFilterApplicationStatus.SKIPPED,
) -> ExistenceFilterMismatchInfoInternal:
    """Shape the engine's view of a mismatch into a report.

    Args:
        local_cache_count: Documents the local cache believes match
        existence_filter: Filter received from the server
        project_id: Project of the listening client
        database_id: Database of the listening client
        bloom_filter: Filter decoded from ``existence_filter.unchanged_names``,
            if decoding succeeded
        status: Outcome of applying the Bloom filter to the local cache
    """
    bloom_filter_info = None
    unchanged_names = existence_filter.unchanged_names
    if unchanged_names is not None:
        bloom_filter_info = BloomFilterInfoInternal(
            applied=status == BloomFilterApplicationStatus.SUCCESS,
            hash_count=unchanged_names.hash_count,
            bitmap_length=len(unchanged_names.bitmap) * 8,
            padding=unchanged_names.padding,
            might_contain=bloom_filter.might_contain if bloom_filter is not None else None,
        )

    return ExistenceFilterMismatchInfoInternal(
        local_cache_count=local_cache_count,
        existence_filter_count=existence_filter.count,
        project_id=project_id,
        database_id=database_id,
        bloom_filter=bloom_filter_info,
    )


def report_existence_filter_mismatch(
    local_cache_count: int,
    existence_filter: ExistenceFilter,
    project_id: str,
    database_id: str,
    bloom_filter: BloomFilter | None = None,
    status: BloomFilterApplicationStatus = BloomFilterApplicationStatus.SKIPPED,
) -> ExistenceFilterMismatchInfoInternal:
    """Publish a mismatch to the process-wide TestingHooks registry.

    Takes the same arguments as ``build_existence_filter_mismatch_info`` and
    returns the published report.
    """
    info = build_existence_filter_mismatch_info(
        local_cache_count,
        existence_filter,
        project_id,
        database_id,
        bloom_filter=bloom_filter,
        status=status,
    )
    logger.info(
        f"Existence filter mismatch for {project_id}/{database_id}: "
        f"local={local_cache_count}, filter={existence_filter.count}, "
        f"bloom_filter={status.value if info.bloom_filter else 'none'}"
    )
    TestingHooks.get_or_create_instance().notify_on_existence_filter_mismatch(info)
    return info
