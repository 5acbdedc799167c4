"""gemfetch: content-addressed gem cache and concurrent install pipeline."""

from importlib.metadata import PackageNotFoundError, version

from gemfetch.cache import (
    Cache,
    CacheBucket,
    CacheEntry,
    CacheShard,
    CleanReporter,
    Removal,
    rm_rf,
)
from gemfetch.ci import fetch_and_install
from gemfetch.config import Settings
from gemfetch.errors import (
    BadArchiveError,
    BadBundlePathError,
    BadRemoteError,
    BadUrlError,
    DownloadError,
    GemfetchError,
    InvalidTarballPathError,
)
from gemfetch.lockfile import GemfileLock, GemSection, GemVersion, Spec

try:
    __version__ = version("gemfetch")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

__all__ = [
    "BadArchiveError",
    "BadBundlePathError",
    "BadRemoteError",
    "BadUrlError",
    "Cache",
    "CacheBucket",
    "CacheEntry",
    "CacheShard",
    "CleanReporter",
    "DownloadError",
    "GemSection",
    "GemVersion",
    "GemfetchError",
    "GemfileLock",
    "InvalidTarballPathError",
    "Removal",
    "Settings",
    "Spec",
    "fetch_and_install",
    "rm_rf",
    "__version__",
]
