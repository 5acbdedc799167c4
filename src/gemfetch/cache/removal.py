"""Recursive removal of cache contents with byte and directory accounting."""

import os
import stat
from dataclasses import dataclass
from os import PathLike

from gemfetch.cache.reporter import CleanReporter, NullReporter


@dataclass(frozen=True)
class Removal:
    """Summary of a removal operation.

    Removals add up: ``Removal()`` is the identity and addition is
    associative and commutative, so partial results from a tree walk can be
    combined in any order (``sum()`` works too).
    """

    directories_removed: int = 0
    bytes_removed: int = 0

    def is_empty(self) -> bool:
        """Return True if nothing was removed."""
        return self.directories_removed == 0 and self.bytes_removed == 0

    def __add__(self, other: "Removal") -> "Removal":
        if not isinstance(other, Removal):
            return NotImplemented
        return Removal(
            directories_removed=self.directories_removed + other.directories_removed,
            bytes_removed=self.bytes_removed + other.bytes_removed,
        )

    def __radd__(self, other: object) -> "Removal":
        # sum() starts from 0
        if other == 0:
            return self
        return NotImplemented

    def __str__(self) -> str:
        dirs = self.directories_removed
        size = self.bytes_removed
        if dirs == 0 and size == 0:
            return "No cache entries removed"
        if dirs == 0:
            return f"Removed {size} bytes"
        if size == 0:
            return f"Removed {dirs} {_plural(dirs, 'directory', 'directories')}"
        return f"Removed {dirs} {_plural(dirs, 'directory', 'directories')} ({size} bytes)"


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


class Remover:
    """Removes files and directory trees, reporting progress as it goes."""

    def __init__(self, reporter: CleanReporter | None = None) -> None:
        """Initialize Remover.

        Args:
            reporter: Receives one ``on_clean`` per removed filesystem object
                and one ``on_complete`` per top-level ``rm_rf`` call.
        """
        self.reporter = reporter if reporter is not None else NullReporter()

    def rm_rf(self, path: str | PathLike[str]) -> Removal:
        """Remove a file or directory and everything beneath it.

        A path that does not exist yields an empty Removal.

        Raises:
            OSError: If anything other than a missing path prevents removal.
        """
        removal = self._remove(os.fspath(path))
        self.reporter.on_complete()
        return removal

    def _remove(self, path: str) -> Removal:
        try:
            metadata = os.lstat(path)
        except FileNotFoundError:
            return Removal()

        # Symlinks are removed, never followed
        if not stat.S_ISDIR(metadata.st_mode):
            try:
                os.unlink(path)
            except FileNotFoundError:
                return Removal()
            self.reporter.on_clean()
            return Removal(bytes_removed=metadata.st_size)

        # Post-order: children first, then the now-empty directory
        removal = Removal()
        with os.scandir(path) as entries:
            children = [entry.path for entry in entries]
        for child in children:
            removal += self._remove(child)

        try:
            os.rmdir(path)
        except FileNotFoundError:
            return removal
        self.reporter.on_clean()
        return removal + Removal(directories_removed=1)


def rm_rf(path: str | PathLike[str]) -> Removal:
    """Remove a file or directory tree without progress reporting."""
    return Remover().rm_rf(path)
