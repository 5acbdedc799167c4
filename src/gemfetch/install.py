"""Unpacking downloaded gem archives into a Bundler install directory.

A ``.gem`` file is an uncompressed tar archive holding, among others:

- ``metadata.gz``: the gzipped gem specification
- ``data.tar.gz``: a gzipped tar archive with the gem's files

Both are written below the install root::

    <root>/specifications/<name>-<version>.gemspec
    <root>/gems/<name>-<version>/<files...>
"""

import gzip
import io
import logging
import shutil
import subprocess
import tarfile
import zlib
from collections.abc import Iterable
from dataclasses import dataclass
from os import PathLike
from pathlib import Path, PurePosixPath
from typing import IO

from gemfetch.errors import BadArchiveError, BadBundlePathError, InvalidTarballPathError
from gemfetch.lockfile import Spec

logger = logging.getLogger(__name__)

DESCRIPTOR_EXT = ".gemspec"

METADATA_ENTRY = "metadata.gz"
DATA_ENTRY = "data.tar.gz"

# Recognized, but their checksums and signatures are not validated yet
UNVERIFIED_ENTRIES = frozenset(
    {
        "checksums.yaml.gz",
        "data.tar.gz.sig",
        "metadata.gz.sig",
        "checksums.yaml.gz.sig",
    }
)


@dataclass
class Downloaded:
    """The bytes of a fetched ``.gem`` archive and the spec it belongs to."""

    contents: bytes
    spec: Spec

    @property
    def nameversion(self) -> str:
        return f"{self.spec.name}-{self.spec.version}"

    def unpack_tarball(self, bundle_path: str | PathLike[str]) -> None:
        """Unpack this gem below ``bundle_path``.

        Raises:
            InvalidTarballPathError: If the gem's name or an archive entry would
                land outside the install root.
            BadArchiveError: If the gem or one of its inner archives is malformed.
            OSError: If writing to the install root fails.
        """
        bundle_path = Path(bundle_path)
        install_name = _install_name(self.nameversion)
        logger.debug("Unpacking %s", install_name)

        try:
            with tarfile.open(fileobj=io.BytesIO(self.contents), mode="r:") as archive:
                for member in archive:
                    name = member.name
                    if name == METADATA_ENTRY:
                        _unpack_metadata(archive, member, bundle_path, install_name)
                    elif name == DATA_ENTRY:
                        _unpack_data(archive, member, bundle_path, install_name)
                    elif name in UNVERIFIED_ENTRIES:
                        logger.debug("Not validating %s in %s", name, install_name)
                    else:
                        logger.info("Unknown entry %s in gem %s", name, install_name)
        except (tarfile.TarError, EOFError, gzip.BadGzipFile, zlib.error) as err:
            raise BadArchiveError(self.nameversion, str(err) or type(err).__name__) from err


def _install_name(nameversion: str) -> str:
    """Check that ``<name>-<version>`` is usable as a single path component."""
    relative = safe_relative_path(nameversion)
    if relative is None or len(relative.parts) != 1:
        raise InvalidTarballPathError(nameversion)
    return relative.name


def _unpack_metadata(
    archive: tarfile.TarFile, member: tarfile.TarInfo, bundle_path: Path, install_name: str
) -> None:
    metadata_dir = bundle_path / "specifications"
    metadata_dir.mkdir(parents=True, exist_ok=True)
    dst_path = metadata_dir / f"{install_name}{DESCRIPTOR_EXT}"

    src = _extract_member(archive, member)
    with gzip.GzipFile(fileobj=src) as unzipped, open(dst_path, "wb") as dst:
        shutil.copyfileobj(unzipped, dst)


def _unpack_data(
    archive: tarfile.TarFile, member: tarfile.TarInfo, bundle_path: Path, install_name: str
) -> None:
    data_dir = bundle_path / "gems" / install_name
    data_dir.mkdir(parents=True, exist_ok=True)

    src = _extract_member(archive, member)
    with tarfile.open(fileobj=src, mode="r:gz") as data_archive:
        for entry in data_archive:
            relative = safe_relative_path(entry.name)
            if relative is None:
                continue

            dst = data_dir.joinpath(*relative.parts)
            dst.parent.mkdir(parents=True, exist_ok=True)
            try:
                data_archive.extract(entry, data_dir, filter="data")
            except tarfile.FilterError as err:
                raise InvalidTarballPathError(entry.name) from err


def _extract_member(archive: tarfile.TarFile, member: tarfile.TarInfo) -> IO[bytes]:
    src = archive.extractfile(member)
    if src is None:
        raise tarfile.ReadError(f"{member.name} is not a regular file")
    return src


def safe_relative_path(name: str) -> PurePosixPath | None:
    """Validate an archive entry name as a path relative to its install directory.

    Returns:
        The normalized relative path, or None for the archive root itself.

    Raises:
        InvalidTarballPathError: If the name is absolute or climbs out with ``..``.
    """
    path = PurePosixPath(name.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts:
        raise InvalidTarballPathError(name)
    # Windows drive letters have no meaning inside an archive
    if path.parts and ":" in path.parts[0]:
        raise InvalidTarballPathError(name)
    if not path.parts:
        return None
    return path


def find_bundle_path() -> Path:
    """Ask Bundler where gems are installed.

    Raises:
        BadBundlePathError: If Ruby is missing, Bundler fails, or prints nothing useful.
    """
    try:
        result = subprocess.run(
            ["ruby", "-rbundler", "-e", "puts Bundler.bundle_path"],
            capture_output=True,
            check=False,
        )
    except OSError as err:
        raise BadBundlePathError(f"Could not run ruby to find the bundle path: {err}") from err

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise BadBundlePathError(f"Bundler exited with status {result.returncode}: {stderr}")

    try:
        output = result.stdout.decode("utf-8").strip()
    except UnicodeDecodeError as err:
        raise BadBundlePathError() from err

    if not output:
        raise BadBundlePathError()
    return Path(output)


def install_gems(downloaded: Iterable[Downloaded], bundle_path: str | PathLike[str]) -> None:
    """Unpack every downloaded gem below ``bundle_path``, in order."""
    for download in downloaded:
        download.unpack_tarball(bundle_path)
