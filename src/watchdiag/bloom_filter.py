"""Bloom filter used by the Watch stream for existence filter checks.

The server sends the names of documents that still match a query as a Bloom
filter: a bitmap, a count of unused trailing bits, and a hash count. Keys are
fully-qualified resource names such as
``projects/p/databases/(default)/documents/rooms/eros``.

Hashing is double hashing over MD5: the digest's two little-endian 64-bit
halves h1 and h2 give bit ``(h1 + i * h2) mod 2**64 mod bit_count`` for
i in ``range(hash_count)``. Bit n is ``bitmap[n // 8] & (1 << (n % 8))``.
"""

import base64
import binascii
import hashlib
from collections.abc import Iterable

from .errors import BloomFilterError

_UINT64_MASK = (1 << 64) - 1


class BloomFilter:
    """Probabilistic set membership test (False = definitely absent)."""

    def __init__(self, bitmap: bytes, padding: int, hash_count: int):
        if padding < 0 or padding >= 8:
            raise BloomFilterError(f"Invalid padding: {padding}")
        if hash_count < 0:
            raise BloomFilterError(f"Invalid hash count: {hash_count}")
        if len(bitmap) > 0 and hash_count == 0:
            raise BloomFilterError(f"Invalid hash count: {hash_count}")
        if len(bitmap) == 0 and padding != 0:
            raise BloomFilterError(f"Invalid padding when bitmap length is 0: {padding}")

        self.bitmap = bytes(bitmap)
        self.padding = padding
        self.hash_count = hash_count
        self.bit_count = len(self.bitmap) * 8 - padding

    @classmethod
    def from_base64(cls, bitmap: str, padding: int, hash_count: int) -> "BloomFilter":
        """Build a filter from the base64 bitmap carried on the wire."""
        try:
            raw = base64.b64decode(bitmap, validate=True)
        except binascii.Error as e:
            raise BloomFilterError(f"Invalid base64 bitmap: {e}") from e
        return cls(raw, padding, hash_count)

    @classmethod
    def create(cls, keys: Iterable[str], bit_count: int, hash_count: int) -> "BloomFilter":
        """Build a filter holding keys, sized to bit_count bits."""
        if bit_count < 0:
            raise BloomFilterError(f"Invalid bit count: {bit_count}")
        byte_count = (bit_count + 7) // 8
        padding = byte_count * 8 - bit_count
        bitmap = bytearray(byte_count)
        if bit_count > 0:
            for key in keys:
                for index in _bit_indexes(key, bit_count, hash_count):
                    bitmap[index // 8] |= 1 << (index % 8)
        return cls(bytes(bitmap), padding, hash_count)

    def might_contain(self, key: str) -> bool:
        """Check membership (True = possibly present, False = definitely absent)."""
        if self.bit_count == 0 or not key:
            return False
        for index in _bit_indexes(key, self.bit_count, self.hash_count):
            if not self.bitmap[index // 8] & (1 << (index % 8)):
                return False
        return True

    def __contains__(self, key: str) -> bool:
        return self.might_contain(key)

    def __repr__(self) -> str:
        return (
            f"BloomFilter(bit_count={self.bit_count}, padding={self.padding}, "
            f"hash_count={self.hash_count})"
        )


def _bit_indexes(key: str, bit_count: int, hash_count: int) -> Iterable[int]:
    digest = hashlib.md5(key.encode("utf-8")).digest()
    h1 = int.from_bytes(digest[:8], byteorder="little")
    h2 = int.from_bytes(digest[8:16], byteorder="little")
    for i in range(hash_count):
        yield ((h1 + i * h2) & _UINT64_MASK) % bit_count
