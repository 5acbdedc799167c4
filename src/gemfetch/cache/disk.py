"""Cache: the on-disk, content-addressed cache root."""

import contextlib
import logging
import os
import tempfile
from os import PathLike
from pathlib import Path

from gemfetch.cache.bucket import CacheBucket
from gemfetch.cache.paths import CacheEntry, CacheShard
from gemfetch.cache.removal import Removal, Remover, rm_rf
from gemfetch.cache.reporter import CleanReporter

logger = logging.getLogger(__name__)

MARKER_FILE = ".gitignore"
MARKER_CONTENTS = b"*"


class Cache:
    """The main cache abstraction.

    Layout::

        <root>/
          .gitignore            # "*"
          <bucket>-v<N>/        # one per CacheBucket
            .../<digest>.<ext>

    A cache is either persistent (rooted at a caller-supplied directory) or
    temporary. A temporary cache owns a ``tempfile.TemporaryDirectory`` that
    is shared by every Cache derived from it; the directory is deleted once
    the last of them is garbage collected.
    """

    def __init__(
        self,
        root: str | PathLike[str],
        temp_dir: tempfile.TemporaryDirectory[str] | None = None,
    ) -> None:
        """Initialize Cache.

        Prefer ``Cache.from_path()`` or ``Cache.temp()``.

        Args:
            root: The cache directory.
            temp_dir: Backing temporary directory, kept alive for as long as
                this Cache is referenced.
        """
        self._root = Path(root)
        self._temp_dir = temp_dir

    @classmethod
    def from_path(cls, root: str | PathLike[str]) -> "Cache":
        """A persistent cache directory at ``root``."""
        return cls(Path(root).expanduser())

    @classmethod
    def temp(cls) -> "Cache":
        """Create a cache in a fresh temporary directory."""
        temp_dir = tempfile.TemporaryDirectory(prefix="gemfetch-cache-")
        return cls(temp_dir.name, temp_dir=temp_dir)

    # Aliases matching the names used by callers that think in lifetimes
    new_persistent = from_path
    new_ephemeral = temp

    @property
    def root(self) -> Path:
        """Return the root of the cache."""
        return self._root

    def is_temporary(self) -> bool:
        """Return True if the cache lives in a temporary directory."""
        return self._temp_dir is not None

    def bucket(self, cache_bucket: CacheBucket) -> Path:
        """Return the directory for a cache bucket."""
        return self._root / str(cache_bucket)

    bucket_path = bucket

    def shard(self, cache_bucket: CacheBucket, dir: str | PathLike[str]) -> CacheShard:
        """Compute a shard in the cache."""
        return CacheShard(self.bucket(cache_bucket) / dir)

    def entry(
        self,
        cache_bucket: CacheBucket,
        dir: str | PathLike[str],
        file: str | PathLike[str],
    ) -> CacheEntry:
        """Compute an entry in the cache."""
        return CacheEntry.new(self.bucket(cache_bucket) / dir, file)

    def init(self) -> "Cache":
        """Create the cache root and its marker file.

        Safe to call repeatedly: an existing marker is left untouched.

        Returns:
            A Cache with a canonical, absolute root. A temporary directory,
            if any, is shared with the returned Cache.

        Raises:
            OSError: If the root or marker cannot be created.
        """
        self._root.mkdir(parents=True, exist_ok=True)

        try:
            with open(self._root / MARKER_FILE, "xb") as f:
                f.write(MARKER_CONTENTS)
        except FileExistsError:
            pass

        return Cache(self._root.resolve(strict=True), temp_dir=self._temp_dir)

    initialize = init

    def clear(self, reporter: CleanReporter | None = None) -> Removal:
        """Clear the cache, removing all entries including the marker."""
        return Remover(reporter).rm_rf(self._root)

    def prune(self) -> Removal:
        """Remove everything at the top level that is not a current bucket.

        Outdated bucket directories (e.g. ``gem-v0`` after a bump to
        ``gem-v1``) and stray files are removed. The marker is kept and
        current buckets are not descended into.

        Raises:
            OSError: On any failure other than an entry disappearing mid-prune.
        """
        summary = Removal()

        with os.scandir(self._root) as entries:
            children = list(entries)

        for entry in children:
            if entry.name == MARKER_FILE:
                continue

            if entry.is_dir(follow_symlinks=False):
                if not CacheBucket.is_bucket_name(entry.name):
                    logger.debug("Removing dangling cache bucket: %s", entry.path)
                    summary += rm_rf(entry.path)
            else:
                logger.debug("Removing dangling cache file: %s", entry.path)
                summary += rm_rf(entry.path)

        return summary

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cache):
            return NotImplemented
        return self._root == other._root

    def __hash__(self) -> int:
        return hash(self._root)

    def __repr__(self) -> str:
        kind = "temporary" if self.is_temporary() else "persistent"
        return f"Cache({str(self._root)!r}, {kind})"


def write_entry(entry: CacheEntry, contents: bytes) -> None:
    """Write ``contents`` to a cache entry, creating missing parent directories.

    The bytes go to a uniquely named temporary file in the entry's directory
    which is then renamed over the entry, so concurrent readers see either
    the old file, no file, or the complete new file.

    A failed write removes its temporary file. A process killed mid-write
    leaves a ``.<file>.*.tmp`` next to the entry; ``prune`` only looks at the
    top level of the cache root and does not reclaim it, ``clear`` does.
    """
    entry.dir.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        dir=entry.dir, prefix=f".{entry.path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(contents)
        os.replace(temp_path, entry.path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(temp_path)
        raise
