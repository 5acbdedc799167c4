"""Pytest configuration and fixtures."""

import asyncio
import gzip
import io
import tarfile

import httpx
import pytest

from gemfetch.cache import Cache
from gemfetch.fetch import gem_http_client
from gemfetch.lockfile import GemfileLock


def run(coro):
    """Drive a coroutine to completion."""
    return asyncio.run(coro)


def _add_file(archive: tarfile.TarFile, name: str, data: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = 0o644
    archive.addfile(info, io.BytesIO(data))


def make_tar(files: dict[str, bytes], compress: bool = False) -> bytes:
    """Build a tar archive (gzipped if ``compress``) from name -> contents."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz" if compress else "w") as archive:
        for name, data in files.items():
            _add_file(archive, name, data)
    return buffer.getvalue()


def make_gem(
    files: dict[str, bytes],
    metadata: bytes = b"--- !ruby/object:Gem::Specification\n",
    extra: dict[str, bytes] | None = None,
) -> bytes:
    """Build a ``.gem`` archive with metadata.gz, data.tar.gz and any extra entries."""
    entries = {
        "metadata.gz": gzip.compress(metadata),
        "data.tar.gz": make_tar(files, compress=True),
    }
    entries.update(extra or {})
    return make_tar(entries)


class GemServer:
    """In-process gem server backing an ``httpx.MockTransport``."""

    def __init__(self, gems: dict[str, bytes] | None = None) -> None:
        self.gems = dict(gems or {})
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = self.gems.get(request.url.path.rsplit("/", 1)[-1])
        if body is None:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(200, content=body)

    def client(self) -> httpx.AsyncClient:
        return gem_http_client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def cache(tmp_path):
    """Create an initialized persistent cache under tmp_path."""
    return Cache.from_path(tmp_path / "cache").init()


@pytest.fixture
def demo_gem():
    """A gem archive for demo-1.0 with a single lib/foo.rb."""
    return make_gem({"lib/foo.rb": b"puts 'foo'\n"}, metadata=b"name: demo\nversion: 1.0\n")


@pytest.fixture
def lockfile():
    """A lockfile with two gems from a single source."""
    return GemfileLock.from_dict(
        {
            "gem": [
                {
                    "remote": "https://gems.example.com/",
                    "specs": [
                        {"name": "demo", "version": "1.0"},
                        {"name": "other", "version": "2.1.3"},
                    ],
                }
            ]
        }
    )
