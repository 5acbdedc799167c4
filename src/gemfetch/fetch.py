"""Downloading gems with a cache-aside lookup in the gem bucket."""

import asyncio
import logging
import sysconfig

import httpx

from gemfetch.cache import Cache, CacheBucket, CacheEntry, write_entry
from gemfetch.concurrency import buffered
from gemfetch.errors import BadRemoteError, BadUrlError, DownloadError
from gemfetch.hashing import cache_digest
from gemfetch.install import Downloaded
from gemfetch.lockfile import GemfileLock, GemSection, Spec

logger = logging.getLogger(__name__)

# Gem sources downloaded at once, regardless of user configuration
MAX_CONCURRENT_SOURCES = 10
DEFAULT_MAX_CONCURRENT_REQUESTS = 10

DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)


def _user_agent() -> str:
    from gemfetch import __version__

    return f"gemfetch-{__version__}"


def gem_http_client(
    command: str = "ci",
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the HTTP client used for gem downloads.

    Every request identifies the invoking command and the host platform.

    Args:
        command: Name of the command issuing requests.
        transport: Optional transport override, e.g. ``httpx.MockTransport``.
    """
    headers = {
        "User-Agent": _user_agent(),
        "X-Gemfetch-Platform": sysconfig.get_platform(),
        "X-Gemfetch-Command": command,
    }
    return httpx.AsyncClient(
        headers=headers,
        follow_redirects=True,
        timeout=DEFAULT_TIMEOUT,
        transport=transport,
    )


def url_for_spec(remote: str, spec: Spec) -> httpx.URL:
    """Return the download URL of a gem, relative to its source remote.

    Raises:
        BadRemoteError: If the remote is not an absolute http(s) URL.
        BadUrlError: If the composed URL is invalid.
    """
    try:
        base = httpx.URL(remote)
    except httpx.InvalidURL as err:
        raise BadRemoteError(remote, str(err)) from err
    if base.scheme not in ("http", "https") or not base.host:
        raise BadRemoteError(remote, "expected an absolute http(s) URL")

    path = f"gems/{spec.name}-{spec.version}.gem"
    try:
        return base.join(path)
    except httpx.InvalidURL as err:
        raise BadUrlError(f"{remote}{path}", str(err)) from err


def gem_cache_entry(cache: Cache, url: httpx.URL | str) -> CacheEntry:
    """Return where the archive downloaded from ``url`` is cached."""
    cache_key = cache_digest(str(url))
    return cache.shard(CacheBucket.GEM, "gems").entry(f"{cache_key}.gem")


async def download_gem(
    remote: str,
    spec: Spec,
    client: httpx.AsyncClient,
    cache: Cache,
) -> Downloaded:
    """Download a single gem, or read it from the cache if already present.

    Cached archives are returned as-is; their contents are not re-checked.

    Raises:
        DownloadError: On network errors or a non-success HTTP status.
        OSError: If the cache cannot be read or written.
    """
    url = url_for_spec(remote, spec)
    entry = gem_cache_entry(cache, url)

    if await asyncio.to_thread(entry.path.exists):
        contents = await asyncio.to_thread(entry.path.read_bytes)
        logger.debug("Reusing gem from %s in cache", url)
        return Downloaded(contents=contents, spec=spec)

    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as err:
        raise DownloadError(str(url), str(err)) from err

    contents = response.content
    await asyncio.to_thread(write_entry, entry, contents)
    logger.debug("Downloaded gem from %s", url)
    return Downloaded(contents=contents, spec=spec)


async def download_gem_source(
    gem_source: GemSection,
    cache: Cache,
    max_concurrent_requests: int,
    client: httpx.AsyncClient,
) -> list[Downloaded]:
    """Download every gem of one source, at most ``max_concurrent_requests`` at a time."""
    return await buffered(
        [
            lambda spec=spec: download_gem(gem_source.remote, spec, client, cache)
            for spec in gem_source.specs
        ],
        max_concurrent_requests,
    )


async def download_gems(
    lockfile: GemfileLock,
    cache: Cache,
    max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS,
    client: httpx.AsyncClient | None = None,
) -> list[Downloaded]:
    """Download all gems from a lockfile.

    Sources are fetched concurrently (up to ``MAX_CONCURRENT_SOURCES``), and
    gems within a source up to ``max_concurrent_requests``. The result lists
    gems in lockfile order. The first failure aborts the whole download;
    archives already written to the cache stay there.

    Args:
        lockfile: The resolved lockfile.
        cache: An initialized cache.
        max_concurrent_requests: Per-source limit of in-flight downloads.
        client: HTTP client to use. A new one is created and closed if None.
    """
    if max_concurrent_requests < 1:
        raise ValueError(
            f"max_concurrent_requests must be at least 1, got {max_concurrent_requests}"
        )

    if client is None:
        async with gem_http_client() as owned_client:
            return await download_gems(lockfile, cache, max_concurrent_requests, owned_client)

    per_source = await buffered(
        [
            lambda section=section: download_gem_source(
                section, cache, max_concurrent_requests, client
            )
            for section in lockfile.gem
        ],
        MAX_CONCURRENT_SOURCES,
    )
    return [downloaded for source in per_source for downloaded in source]
