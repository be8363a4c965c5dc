"""
memcache-cache - Cache Backends

Exports available cache backend implementations.
"""

from .memcache import ConnectionOutcome, ConnectionState, MemcacheCache, establish_connection
from .memory import MemoryCache

__all__ = [
    "ConnectionOutcome",
    "ConnectionState",
    "MemcacheCache",
    "MemoryCache",
    "establish_connection",
]
