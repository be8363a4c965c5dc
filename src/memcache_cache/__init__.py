"""
memcache-cache - Memcached Cache Adapter

Uniform get/set/purge/purge_all cache interface backed by memcached, with
lazy connection to the server set and a configurable crash-or-degrade
policy when no server can be reached.
"""

__version__ = "1.0.0"

from .cache import (
    CacheInterface,
    ConnectionState,
    MemcacheCache,
    MemoryCache,
    create_cache,
    get_cache,
)
from .errors import CacheConnectionError, CacheError, CacheOperationError, ConfigurationError

__all__ = [
    "CacheInterface",
    "ConnectionState",
    "MemcacheCache",
    "MemoryCache",
    "create_cache",
    "get_cache",
    "CacheError",
    "CacheConnectionError",
    "CacheOperationError",
    "ConfigurationError",
]
