"""Path values addressing locations inside the cache. No I/O happens here."""

from functools import total_ordering
from os import PathLike
from pathlib import Path


@total_ordering
class CacheShard:
    """A subdirectory within the cache.

    Equality and ordering follow the underlying path.
    """

    __slots__ = ("_path",)

    def __init__(self, path: str | PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Return the directory this shard refers to."""
        return self._path

    def entry(self, file: str | PathLike[str]) -> "CacheEntry":
        """Return a CacheEntry within this shard."""
        return CacheEntry.new(self._path, file)

    def shard(self, dir: str | PathLike[str]) -> "CacheShard":
        """Return a CacheShard nested within this shard."""
        return CacheShard(self._path / dir)

    def __fspath__(self) -> str:
        return str(self._path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CacheShard):
            return NotImplemented
        return self._path == other._path

    def __lt__(self, other: "CacheShard") -> bool:
        if not isinstance(other, CacheShard):
            return NotImplemented
        return self._path < other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"CacheShard({str(self._path)!r})"


class CacheEntry:
    """A file location in the cache which may or may not exist yet.

    An entry always has a parent directory; building one from a bare root or a
    single path component is rejected.
    """

    __slots__ = ("_path",)

    def __init__(self, path: str | PathLike[str]) -> None:
        path = Path(path)
        if path.name == "" or path.parent == Path(path.anchor):
            raise ValueError(f"Cache entry has no parent: {path}")
        self._path = path

    @classmethod
    def new(cls, dir: str | PathLike[str], file: str | PathLike[str]) -> "CacheEntry":
        """Create an entry from a directory and a file name."""
        return cls(Path(dir) / file)

    @classmethod
    def from_path(cls, path: str | PathLike[str]) -> "CacheEntry":
        """Create an entry from a full path."""
        return cls(path)

    @property
    def path(self) -> Path:
        """Return the path to the entry."""
        return self._path

    @property
    def dir(self) -> Path:
        """Return the entry's parent directory."""
        return self._path.parent

    def shard(self) -> CacheShard:
        """Return the shard that owns this entry."""
        return CacheShard(self.dir)

    def with_file(self, file: str | PathLike[str]) -> "CacheEntry":
        """Return a sibling entry in the same directory."""
        return CacheEntry(self.dir / file)

    def __fspath__(self) -> str:
        return str(self._path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CacheEntry):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"CacheEntry({str(self._path)!r})"
