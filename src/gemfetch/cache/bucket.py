"""Cache buckets: top-level, versioned cache categories."""

from collections.abc import Iterator
from enum import Enum


class CacheBucket(Enum):
    """The different kinds of data kept in the cache.

    Each bucket is a subdirectory of the cache root named ``<name>-v<N>``.
    Bumping the version abandons the old directory; ``Cache.prune()`` reclaims
    it later. Data is never migrated between versions.
    """

    RUBY = "ruby-v0"
    """Ruby interpreters."""

    GEM = "gem-v0"
    """Gem archives, keyed by the digest of their download URL."""

    def __str__(self) -> str:
        return self.value

    @classmethod
    def iter(cls) -> Iterator["CacheBucket"]:
        """Return an iterator over all cache buckets."""
        return iter(cls)

    @classmethod
    def is_bucket_name(cls, name: str) -> bool:
        """Return True if ``name`` is the directory name of a current bucket."""
        return any(bucket.value == name for bucket in cls)
