"""Deterministic digests used as cache keys."""

import hashlib


def cache_digest(value: str | bytes) -> str:
    """Compute a stable SHA-256 digest suitable for naming a cache entry.

    Strings are the common case (a download URL) and are hashed as UTF-8.

    Args:
        value: The key to digest.

    Returns:
        A hexadecimal SHA-256 hash string (64 characters).

    Raises:
        TypeError: If value is neither str nor bytes.
    """
    if isinstance(value, str):
        return hashlib.sha256(value.encode("utf-8")).hexdigest()

    if isinstance(value, bytes):
        return hashlib.sha256(value).hexdigest()

    raise TypeError(
        f"Unsupported type for cache digest: {type(value).__name__}. "
        f"Value must be str or bytes."
    )
