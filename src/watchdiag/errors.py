"""Exceptions raised by watchdiag."""


class WatchDiagError(Exception):
    """Base class for watchdiag errors."""


class BloomFilterError(WatchDiagError, ValueError):
    """Bloom filter parameters are malformed."""
