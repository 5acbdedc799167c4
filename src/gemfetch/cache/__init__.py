"""Content-addressed on-disk cache."""

from gemfetch.cache.bucket import CacheBucket
from gemfetch.cache.disk import Cache, write_entry
from gemfetch.cache.paths import CacheEntry, CacheShard
from gemfetch.cache.removal import Removal, Remover, rm_rf
from gemfetch.cache.reporter import CleanReporter, NullReporter

__all__ = [
    "Cache",
    "CacheBucket",
    "CacheEntry",
    "CacheShard",
    "CleanReporter",
    "NullReporter",
    "Removal",
    "Remover",
    "rm_rf",
    "write_entry",
]
