"""
Cache Backend Contract

Defines the capability a render context needs from a fragment store and the
key expansion shared by backends.
"""

import hashlib
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Sequence


def md5_digest(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def cache_key_part(part: Any) -> str:
    """Convert one key element to text, preferring an object's own ``cache_key``."""
    cache_key = getattr(part, "cache_key", None)
    if cache_key is not None:
        return str(cache_key() if callable(cache_key) else cache_key)
    if isinstance(part, (list, tuple)):
        return "/".join(cache_key_part(item) for item in part)
    return str(part)


def expand_cache_key(
    key: Sequence[Any],
    skip_digest: bool = False,
    prefix: str = "",
    digest: Optional[Callable[[str], str]] = None,
) -> str:
    """Build the storage key for a cache key sequence.

    With ``skip_digest`` the joined key is used verbatim; otherwise it is
    passed through ``digest`` (MD5 hex by default).
    """
    expanded = "/".join(cache_key_part(part) for part in key)
    if not skip_digest:
        expanded = (digest or md5_digest)(expanded)
    return f"{prefix}{expanded}"


class CacheBackend(ABC):
    """Fetch-or-compute-and-store capability used by cacheable widgets."""

    @abstractmethod
    def fetch_or_store(self, key: Sequence[Any], options: Dict[str, Any], compute: Callable[[], str]) -> str:
        """Return the content stored under ``key``, computing and storing it on a miss.

        ``options["skip_digest"]`` asks the backend to use the key sequence
        directly as its storage key. Implementations decide whether the
        sequence is atomic; callers must not assume ``compute`` runs at most once.
        """
