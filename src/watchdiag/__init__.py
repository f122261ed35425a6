"""watchdiag: in-band diagnostics for Watch stream existence filter mismatches."""

from .bloom_filter import BloomFilter
from .capture import (
    capture_existence_filter_mismatches,
    create_existence_filter_mismatch_info_from,
)
from .config import HooksConfig, load_config
from .document import DocumentPathLike, DocumentReference
from .errors import BloomFilterError, WatchDiagError
from .models import (
    BloomFilterInfo,
    BloomFilterInfoInternal,
    ExistenceFilterMismatchInfo,
    ExistenceFilterMismatchInfoInternal,
)
from .reporting import (
    BloomFilterApplicationStatus,
    BloomFilterParams,
    ExistenceFilter,
    build_existence_filter_mismatch_info,
    report_existence_filter_mismatch,
)
from .testing_hooks import ExistenceFilterMismatchCallback, TestingHooks, Unregister

__version__ = "0.1.0"

__all__ = [
    "BloomFilter",
    "BloomFilterApplicationStatus",
    "BloomFilterError",
    "BloomFilterInfo",
    "BloomFilterInfoInternal",
    "BloomFilterParams",
    "DocumentPathLike",
    "DocumentReference",
    "ExistenceFilter",
    "ExistenceFilterMismatchCallback",
    "ExistenceFilterMismatchInfo",
    "ExistenceFilterMismatchInfoInternal",
    "HooksConfig",
    "TestingHooks",
    "Unregister",
    "WatchDiagError",
    "build_existence_filter_mismatch_info",
    "capture_existence_filter_mismatches",
    "create_existence_filter_mismatch_info_from",
    "load_config",
]
