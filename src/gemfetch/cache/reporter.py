"""CleanReporter Protocol definition."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CleanReporter(Protocol):
    """Receives progress notifications while the cache is being removed.

    Implementations are typically provided by a CLI to drive a progress bar.
    """

    def on_clean(self) -> None:
        """Called after one file or directory is removed."""
        ...

    def on_complete(self) -> None:
        """Called once after all files and directories are removed."""
        ...


class NullReporter:
    """Reporter that ignores every notification."""

    def on_clean(self) -> None:
        pass

    def on_complete(self) -> None:
        pass
