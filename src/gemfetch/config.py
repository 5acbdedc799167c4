"""Centralized configuration for gemfetch."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from gemfetch.cache import Cache
from gemfetch.fetch import DEFAULT_MAX_CONCURRENT_REQUESTS

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def default_cache_dir() -> Path:
    """Return ``$XDG_CACHE_HOME/gemfetch``, falling back to ``~/.cache/gemfetch``."""
    xdg_cache_home = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache_home:
        return Path(xdg_cache_home) / "gemfetch"
    return Path.home() / ".cache" / "gemfetch"


@dataclass(slots=True)
class Settings:
    """All gemfetch configuration in one place.

    Environment variables (all optional):
        GEMFETCH_CACHE_DIR:               Persistent cache root.
                                          Default ``$XDG_CACHE_HOME/gemfetch``.
        GEMFETCH_NO_CACHE:                Use a temporary cache that is deleted
                                          when the run ends. Default off.
        GEMFETCH_MAX_CONCURRENT_REQUESTS: Downloads in flight per gem source.
                                          Default 10.
        GEMFETCH_LOG_LEVEL:               Logging level. Default "WARNING".
    """

    cache_dir: Path
    no_cache: bool = False
    max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.max_concurrent_requests < 1:
            raise ValueError(
                f"max_concurrent_requests must be at least 1, got {self.max_concurrent_requests}"
            )

    @classmethod
    def from_env(
        cls,
        *,
        cache_dir: str | os.PathLike[str] | None = None,
        no_cache: bool | None = None,
        max_concurrent_requests: int | None = None,
        log_level: str | None = None,
    ) -> "Settings":
        """Build settings from environment variables + explicit overrides."""
        if cache_dir is None:
            env_dir = os.environ.get("GEMFETCH_CACHE_DIR")
            cache_dir = Path(env_dir) if env_dir else default_cache_dir()
        if no_cache is None:
            no_cache = os.environ.get("GEMFETCH_NO_CACHE", "").strip().lower() in _TRUTHY
        if max_concurrent_requests is None:
            max_concurrent_requests = int(
                os.environ.get(
                    "GEMFETCH_MAX_CONCURRENT_REQUESTS", str(DEFAULT_MAX_CONCURRENT_REQUESTS)
                )
            )
        if log_level is None:
            log_level = os.environ.get("GEMFETCH_LOG_LEVEL", "WARNING")

        return cls(
            cache_dir=Path(cache_dir).expanduser(),
            no_cache=no_cache,
            max_concurrent_requests=max_concurrent_requests,
            log_level=log_level.upper(),
        )

    def cache(self) -> Cache:
        """Return an initialized cache, temporary if caching is disabled."""
        cache = Cache.temp() if self.no_cache else Cache.from_path(self.cache_dir)
        return cache.init()

    def configure_logging(self) -> None:
        """Attach a stderr handler to the ``gemfetch`` logger at the configured level."""
        logger = logging.getLogger("gemfetch")
        logger.setLevel(self.log_level)
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
            logger.addHandler(handler)
