"""
memcache-cache - Cache Interface

Defines the abstract interface that all cache backends must implement.
"""

from abc import ABC, abstractmethod
from typing import Any


class CacheInterface(ABC):
    """
    Abstract base class for cache backends.

    Backends never let an ordinary operational failure escape: a failed
    lookup is reported as a miss (None) and a failed write or removal as
    False. Only configuration errors and, where the backend is configured
    to crash, a total connection failure are raised.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """
        Retrieve a value from the cache.

        Args:
            key: Cache key

        Returns:
            Cached value if found, None on a miss or any retrieval failure
        """

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """
        Store a value in the cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time-to-live in seconds (None = backend default, 0 = no expiry)

        Returns:
            True if stored, False otherwise
        """

    @abstractmethod
    def purge(self, key: str) -> bool:
        """
        Remove a single key from the cache.

        Returns:
            True if the backend acknowledged the removal
        """

    @abstractmethod
    def purge_all(self) -> bool:
        """
        Remove every entry from the cache.

        For shared backends this clears the whole backing store, not only
        the keys written through this instance.
        """

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics (hits, misses, sets, etc.)
        """

    @abstractmethod
    def close(self) -> None:
        """Release any resources held by the backend."""
