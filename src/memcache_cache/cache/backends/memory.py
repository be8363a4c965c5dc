"""
memcache-cache - Memory Cache Backend

In-process cache with LRU eviction and TTL support. Lets applications run
against the same cache interface without a memcached server.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any

from ...errors import ConfigurationError
from ..interface import CacheInterface

logger = logging.getLogger(__name__)


class MemoryCache(CacheInterface):
    """
    In-memory cache backend with LRU eviction.

    Features:
    - LRU eviction when max_size is reached
    - Per-key TTL support
    - Thread-safe operations
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: int | None = None,
    ):
        """
        Initialize memory cache backend.

        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
            default_ttl: Default TTL in seconds (None or 0 = no expiry)
        """
        if max_size < 1:
            raise ConfigurationError("max_size must be at least 1", details={"max_size": max_size})

        self.max_size = max_size
        self.default_ttl = default_ttl

        # key -> (value, expiry_time)
        self._cache: OrderedDict[str, tuple[Any, float | None]] = OrderedDict()

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0
        self._evictions = 0

        self._lock = threading.Lock()

    def _expiry(self, ttl: int | None) -> float | None:
        if ttl is None:
            ttl = self.default_ttl
        if not ttl or ttl <= 0:
            return None
        return time.time() + ttl

    def get(self, key: str) -> Any | None:
        """Retrieve value from cache."""
        if not key:
            logger.warning("Attempted to get cache value with empty key")
            return None

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            value, expiry = entry
            if expiry is not None and time.time() > expiry:
                del self._cache[key]
                self._misses += 1
                return None

            self._cache.move_to_end(key)
            self._hits += 1
            return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store value in cache."""
        if not key:
            logger.warning("Attempted to set cache value with empty key")
            return False

        with self._lock:
            if key not in self._cache and len(self._cache) >= self.max_size:
                evicted_key, _ = self._cache.popitem(last=False)
                self._evictions += 1
                logger.debug(f"Evicted key from memory cache: {evicted_key}")

            self._cache[key] = (value, self._expiry(ttl))
            self._cache.move_to_end(key)
            self._sets += 1
            return True

    def purge(self, key: str) -> bool:
        """Delete key from cache."""
        if not key:
            logger.warning("Attempted to purge cache value with empty key")
            return False

        with self._lock:
            if self._cache.pop(key, None) is None:
                return False
            self._deletes += 1
            return True

    def purge_all(self) -> bool:
        """Clear all entries from cache."""
        with self._lock:
            size = len(self._cache)
            self._cache.clear()
            self._deletes += size
        logger.info(f"Cleared {size} entries from memory cache")
        return True

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            total_requests = self._hits + self._misses
            return {
                "backend": "memory",
                "size": len(self._cache),
                "max_size": self.max_size,
                "default_ttl": self.default_ttl,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total_requests * 100, 2) if total_requests else 0.0,
                "sets": self._sets,
                "deletes": self._deletes,
                "evictions": self._evictions,
            }

    def close(self) -> None:
        # Entries live in-process, nothing to release
        logger.debug("Memory cache backend closed")
