"""Clean install of all gems in a lockfile."""

import asyncio
import logging
from os import PathLike
from pathlib import Path

import httpx

from gemfetch.cache import Cache
from gemfetch.fetch import DEFAULT_MAX_CONCURRENT_REQUESTS, download_gems
from gemfetch.install import find_bundle_path, install_gems
from gemfetch.lockfile import GemfileLock

logger = logging.getLogger(__name__)


async def fetch_and_install(
    lockfile: GemfileLock,
    cache: Cache,
    install_root: str | PathLike[str] | None = None,
    concurrency_limit: int = DEFAULT_MAX_CONCURRENT_REQUESTS,
    client: httpx.AsyncClient | None = None,
) -> None:
    """Download every gem in ``lockfile`` and unpack it into the install root.

    Args:
        lockfile: The resolved lockfile.
        cache: An initialized cache.
        install_root: Directory receiving ``specifications/`` and ``gems/``.
            Asked from Bundler when None.
        concurrency_limit: Per-source limit of in-flight downloads.
        client: Optional HTTP client (mainly for tests).

    Raises:
        GemfetchError: On network, URL or install path failures, and
            ``BadArchiveError`` for a malformed gem archive.
        OSError: On filesystem failures.
    """
    gems = await download_gems(lockfile, cache, concurrency_limit, client)

    if install_root is None:
        bundle_path = await asyncio.to_thread(find_bundle_path)
    else:
        bundle_path = Path(install_root)

    logger.debug("Installing %d gems into %s", len(gems), bundle_path)
    await asyncio.to_thread(install_gems, gems, bundle_path)
