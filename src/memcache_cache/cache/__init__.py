"""
memcache-cache - Cache Module

Provides the cache interface, the memcache backend and an in-memory backend.

Usage:
    from memcache_cache.cache import MemcacheCache

    cache = MemcacheCache(servers=["127.0.0.1;11211"], default_ttl=3600, crash=False)
    cache.set("key", "value")
    value = cache.get("key")
    cache.purge("key")
    cache.purge_all()
"""

from .backends import ConnectionOutcome, ConnectionState, MemcacheCache, MemoryCache
from .endpoints import DEFAULT_PORT, Endpoint, parse_endpoints
from .factory import (
    close_all_caches,
    create_cache,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from .interface import CacheInterface
from .session import MemcacheSession

__all__ = [
    # Factory functions
    "create_cache",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Interface and backends
    "CacheInterface",
    "MemcacheCache",
    "MemoryCache",
    "ConnectionState",
    "ConnectionOutcome",
    # Memcache plumbing
    "MemcacheSession",
    "Endpoint",
    "DEFAULT_PORT",
    "parse_endpoints",
]
