"""
Fragment Caching System

In-memory store for rendered widget fragments with LRU eviction, optional
expiry and JSON persistence.
"""

import json
import logging
import os
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

from config.manager import ConfigValidationError
from config.settings import CacheSettings
from utils.error_handling import CacheBackendError

from .backend import CacheBackend, cache_key_part, expand_cache_key, md5_digest


@dataclass
class CacheEntry:
    """Represents a cached fragment."""

    key: str
    content: str
    created_at: datetime
    last_accessed: datetime
    key_parts: List[str] = field(default_factory=list)
    access_count: int = 0
    ttl_seconds: Optional[int] = None

    def is_expired(self) -> bool:
        """Check if the cache entry has expired."""
        if self.ttl_seconds is None:
            return False
        return datetime.now() > (self.created_at + timedelta(seconds=self.ttl_seconds))

    def access(self):
        """Mark the entry as accessed."""
        self.last_accessed = datetime.now()
        self.access_count += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "key_parts": self.key_parts,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "last_accessed": self.last_accessed.isoformat(),
            "access_count": self.access_count,
            "ttl_seconds": self.ttl_seconds,
            "expired": self.is_expired(),
        }


class FragmentCache(CacheBackend):
    """In-memory fragment store keyed by expanded cache keys."""

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: Optional[int] = None,
        key_prefix: str = "views/",
        digest: Callable[[str], str] = md5_digest,
    ):
        if max_size < 1:
            raise ConfigValidationError(
                f"Fragment cache max_size must be at least 1, got {max_size}",
                config_key="cache_max_size",
                config_value=max_size,
            )

        self.max_size = max_size
        self.default_ttl = default_ttl
        self.key_prefix = key_prefix
        self.digest = digest
        self.cache: Dict[str, CacheEntry] = {}
        self.lock = threading.RLock()
        self.logger = logging.getLogger(__name__)

        # Statistics
        self.hits = 0
        self.misses = 0
        self.writes = 0
        self.evictions = 0

        self.logger.info(f"Fragment cache initialized with max_size={max_size}, default_ttl={default_ttl}")

    def storage_key(self, key: Sequence[Any], options: Dict[str, Any] = None) -> str:
        """Expand a key sequence into the string this store indexes by."""
        skip_digest = bool((options or {}).get("skip_digest"))
        return expand_cache_key(key, skip_digest=skip_digest, prefix=self.key_prefix, digest=self.digest)

    def fetch_or_store(self, key: Sequence[Any], options: Dict[str, Any], compute: Callable[[], str]) -> str:
        # Not atomic: two callers missing on the same key both compute, last write wins
        content = self.read(key, options)
        if content is not None:
            return content

        content = compute()
        self.write(key, content, options)
        return content

    def read(self, key: Sequence[Any], options: Dict[str, Any] = None) -> Optional[str]:
        """Return stored content or None on a miss."""
        cache_key = self.storage_key(key, options)

        with self.lock:
            entry = self.cache.get(cache_key)

            if entry is not None and entry.is_expired():
                del self.cache[cache_key]
                self.logger.debug(f"Fragment expired: {cache_key}")
                entry = None

            if entry is None:
                self.misses += 1
                self.logger.debug(f"Fragment cache miss: {cache_key}")
                return None

            entry.access()
            self.hits += 1
            self.logger.debug(f"Fragment cache hit: {cache_key} (accessed {entry.access_count} times)")
            return entry.content

    def write(self, key: Sequence[Any], content: str, options: Dict[str, Any] = None, ttl: Optional[int] = None):
        """Store content under key."""
        cache_key = self.storage_key(key, options)
        now = datetime.now()

        entry = CacheEntry(
            key=cache_key,
            content=content,
            created_at=now,
            last_accessed=now,
            key_parts=[cache_key_part(part) for part in key],
            ttl_seconds=ttl if ttl is not None else self.default_ttl,
        )

        with self.lock:
            if cache_key not in self.cache and len(self.cache) >= self.max_size:
                self._evict_entries()

            self.cache[cache_key] = entry
            self.writes += 1

        self.logger.debug(f"Cached fragment: {cache_key} (TTL: {entry.ttl_seconds})")

    def delete(self, key: Sequence[Any], options: Dict[str, Any] = None) -> bool:
        """Remove a single fragment. Returns whether it existed."""
        cache_key = self.storage_key(key, options)

        with self.lock:
            return self.cache.pop(cache_key, None) is not None

    def _evict_entries(self):
        """Evict expired entries, then least recently used ones, until there is room."""
        expired_keys = [key for key, entry in self.cache.items() if entry.is_expired()]
        for key in expired_keys:
            del self.cache[key]

        evicted = 0
        while len(self.cache) >= self.max_size:
            lru_key = min(self.cache.keys(), key=lambda k: self.cache[k].last_accessed)
            del self.cache[lru_key]
            evicted += 1

        self.evictions += evicted
        if expired_keys or evicted:
            self.logger.debug(f"Evicted {len(expired_keys)} expired and {evicted} LRU fragments")

    def invalidate(self, pattern: str) -> int:
        """Remove fragments whose key parts contain pattern."""
        pattern = pattern.lower()

        with self.lock:
            keys_to_remove = [
                key
                for key, entry in self.cache.items()
                if pattern in "/".join(entry.key_parts).lower() or pattern in key.lower()
            ]
            for key in keys_to_remove:
                del self.cache[key]

        self.logger.info(f"Invalidated {len(keys_to_remove)} fragments matching '{pattern}'")
        return len(keys_to_remove)

    def clear(self) -> int:
        """Clear all fragments."""
        with self.lock:
            count = len(self.cache)
            self.cache.clear()

        self.logger.info(f"Cleared {count} fragments")
        return count

    def cleanup_expired(self) -> int:
        """Remove all expired fragments."""
        with self.lock:
            expired_keys = [key for key, entry in self.cache.items() if entry.is_expired()]
            for key in expired_keys:
                del self.cache[key]

        if expired_keys:
            self.logger.info(f"Cleaned up {len(expired_keys)} expired fragments")
        return len(expired_keys)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total_requests = self.hits + self.misses
        hit_rate = (self.hits / total_requests * 100) if total_requests > 0 else 0

        return {
            "cache_size": len(self.cache),
            "max_size": self.max_size,
            "utilization_percent": len(self.cache) / self.max_size * 100,
            "hits": self.hits,
            "misses": self.misses,
            "writes": self.writes,
            "hit_rate": hit_rate,
            "evictions": self.evictions,
            "default_ttl": self.default_ttl,
        }

    def get_entries(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Get fragments for inspection, most recently used first."""
        with self.lock:
            entries = sorted(self.cache.values(), key=lambda e: e.last_accessed, reverse=True)
        return [entry.to_dict() for entry in entries[:limit]]

    def save_to_disk(self, filepath: str):
        """Save fragments to a JSON file."""
        with self.lock:
            cache_data = {
                "entries": [entry.to_dict() for entry in self.cache.values()],
                "stats": {"hits": self.hits, "misses": self.misses, "evictions": self.evictions},
                "saved_at": datetime.now().isoformat(),
            }

        try:
            with open(filepath, 'w') as f:
                json.dump(cache_data, f, indent=2, default=str)
        except (OSError, TypeError) as e:
            self.logger.error(f"Failed to save fragment cache to disk: {e}")
            raise CacheBackendError(f"Failed to save fragment cache to {filepath}", details={"error": str(e)}) from e

        self.logger.info(f"Saved fragment cache to {filepath}")

    def load_from_disk(self, filepath: str) -> bool:
        """Load unexpired fragments from a JSON file. Returns False when the file is absent."""
        if not os.path.exists(filepath):
            self.logger.info("No fragment cache file found, starting with empty cache")
            return False

        try:
            with open(filepath, 'r') as f:
                cache_data = json.load(f)

            entries = []
            for entry_data in cache_data.get("entries", []):
                entry = CacheEntry(
                    key=entry_data["key"],
                    content=entry_data["content"],
                    created_at=datetime.fromisoformat(entry_data["created_at"]),
                    last_accessed=datetime.fromisoformat(entry_data["last_accessed"]),
                    key_parts=entry_data.get("key_parts", []),
                    access_count=entry_data.get("access_count", 0),
                    ttl_seconds=entry_data.get("ttl_seconds"),
                )
                if not entry.is_expired():
                    entries.append(entry)
        except (OSError, ValueError, KeyError) as e:
            self.logger.error(f"Failed to load fragment cache from disk: {e}")
            raise CacheBackendError(f"Failed to load fragment cache from {filepath}", details={"error": str(e)}) from e

        with self.lock:
            for entry in entries:
                self.cache[entry.key] = entry

            stats = cache_data.get("stats", {})
            self.hits = stats.get("hits", 0)
            self.misses = stats.get("misses", 0)
            self.evictions = stats.get("evictions", 0)

        self.logger.info(f"Loaded {len(entries)} fragments from {filepath}")
        return True


def create_cache_backend(settings: CacheSettings = None) -> Optional[FragmentCache]:
    """Build the fragment store described by settings, or None when caching is off."""
    settings = settings or CacheSettings()

    if not settings.enabled or settings.backend == "none":
        return None
    if settings.backend != "memory":
        raise ConfigValidationError(
            f"Unsupported cache backend: {settings.backend}", config_key="cache_backend", config_value=settings.backend
        )

    return FragmentCache(max_size=settings.max_size, default_ttl=settings.default_ttl, key_prefix=settings.key_prefix)
