"""Capture existence filter mismatches raised during a block of async work."""

from collections.abc import Awaitable, Callable
from typing import TypeVar

from .document import DocumentPathLike
from .models import (
    BloomFilterInfo,
    BloomFilterInfoInternal,
    ExistenceFilterMismatchInfo,
    ExistenceFilterMismatchInfoInternal,
)
from .testing_hooks import TestingHooks

T = TypeVar("T")


async def capture_existence_filter_mismatches(
    callback: Callable[[], Awaitable[T]],
) -> tuple[list[ExistenceFilterMismatchInfo], T]:
    """Capture all existence filter mismatches published while awaiting callback.

    The capture window is exactly the await of ``callback()``: reports
    published by work it spawned but did not await are not captured.

    Args:
        callback: Zero-argument coroutine function to run

    Returns:
        The captured mismatches, in publication order, and callback's result.

    Raises:
        Whatever ``callback`` raises, unchanged. Captured mismatches are
        discarded in that case.
    """
    results: list[ExistenceFilterMismatchInfo] = []

    def on_existence_filter_mismatch(info: ExistenceFilterMismatchInfoInternal) -> None:
        results.append(create_existence_filter_mismatch_info_from(info))

    unregister = TestingHooks.get_or_create_instance().on_existence_filter_mismatch(
        on_existence_filter_mismatch
    )
    try:
        callback_result = await callback()
    finally:
        unregister()

    return results, callback_result


def create_existence_filter_mismatch_info_from(
    internal_info: ExistenceFilterMismatchInfoInternal,
) -> ExistenceFilterMismatchInfo:
    """Convert an engine-side mismatch report to its public shape."""
    bloom_filter = None
    if internal_info.bloom_filter is not None:
        internal_bloom_filter = internal_info.bloom_filter
        bloom_filter = BloomFilterInfo(
            applied=internal_bloom_filter.applied,
            hash_count=internal_bloom_filter.hash_count,
            bitmap_length=internal_bloom_filter.bitmap_length,
            padding=internal_bloom_filter.padding,
            might_contain=_document_predicate(
                internal_bloom_filter,
                project_id=internal_info.project_id,
                database_id=internal_info.database_id,
            ),
        )

    return ExistenceFilterMismatchInfo(
        local_cache_count=internal_info.local_cache_count,
        existence_filter_count=internal_info.existence_filter_count,
        bloom_filter=bloom_filter,
    )


def _document_predicate(
    bloom_filter: BloomFilterInfoInternal, *, project_id: str, database_id: str
) -> Callable[[DocumentPathLike], bool]:
    might_contain = bloom_filter.might_contain
    if might_contain is None:
        return _never_contains

    prefix = f"projects/{project_id}/databases/{database_id}/documents/"

    def might_contain_document(document_ref: DocumentPathLike) -> bool:
        return bool(might_contain(prefix + document_ref.path))

    return might_contain_document


def _never_contains(document_ref: DocumentPathLike) -> bool:
    return False
