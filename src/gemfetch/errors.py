"""Exception types raised by the fetch and install pipeline.

Filesystem failures are not wrapped: they surface as the built-in ``OSError``
subclasses so the original cause stays intact.
"""


class GemfetchError(Exception):
    """Base class for all gemfetch errors."""


class BadRemoteError(GemfetchError):
    """A gem source remote could not be parsed as a URL."""

    def __init__(self, remote: str, reason: str) -> None:
        self.remote = remote
        self.reason = reason
        super().__init__(f"Invalid remote URL {remote!r}: {reason}")


class BadUrlError(GemfetchError):
    """A composed download URL could not be parsed."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid download URL {url!r}: {reason}")


class DownloadError(GemfetchError):
    """A gem download failed at the network or HTTP level."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"Failed to download {url}: {message}")


class BadBundlePathError(GemfetchError):
    """The install directory could not be read from Bundler."""

    def __init__(self, message: str = "Could not read install directory from Bundler") -> None:
        super().__init__(message)


class InvalidTarballPathError(GemfetchError):
    """An archive entry would be written outside of its install directory."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Failed to unpack tarball path {path}")


class BadArchiveError(GemfetchError):
    """A downloaded gem, or one of its inner archives, could not be read."""

    def __init__(self, nameversion: str, reason: str) -> None:
        self.nameversion = nameversion
        self.reason = reason
        super().__init__(f"Failed to unpack gem {nameversion}: {reason}")
