"""
memcache-cache - Cache Factory

Canonical factory for creating cache instances based on configuration.

Key points:
- Backend selected with CACHE_BACKEND=memcache|memory
  - Defaults to memcache when MEMCACHE_SERVERS is set, memory otherwise
- Creating a memcache backend never touches the network; the server set is
  contacted on the first cache operation
- Instances are kept in a registry by name

Examples:
    from memcache_cache.cache.factory import create_cache, get_cache

    cache = create_cache()

    from memcache_cache.config import CacheBackend, CacheConfig, MemcacheConfig
    cfg = CacheConfig(
        backend=CacheBackend.MEMCACHE,
        default_ttl=600,
        memcache=MemcacheConfig(servers=["10.0.0.5;11211"], crash=False),
    )
    cache = create_cache(cfg, name="sessions")
"""

from __future__ import annotations

import logging

from ..config import CacheBackend, CacheConfig, get_config
from ..errors import ConfigurationError
from .backends.memcache import MemcacheCache
from .backends.memory import MemoryCache
from .interface import CacheInterface

logger = logging.getLogger(__name__)

_cache_instances: dict[str, CacheInterface] = {}


def create_cache(
    config: CacheConfig | None = None,
    name: str = "default",
) -> CacheInterface:
    """
    Create a cache backend instance based on configuration.

    Args:
        config: Cache configuration (uses global config if not provided)
        name: Cache instance name (for multiple cache instances)

    Returns:
        Configured cache backend instance

    Raises:
        ConfigurationError: If cache configuration is invalid
    """
    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    if config is None:
        config = get_config().cache

    backend = CacheBackend(config.backend)
    logger.info(
        "Creating cache instance '%s' with backend: %s",
        name,
        backend.value,
        extra={"cache_name": name, "backend": backend.value},
    )

    cache: CacheInterface
    if backend is CacheBackend.MEMCACHE:
        cache = MemcacheCache.from_config(config)
    elif backend is CacheBackend.MEMORY:
        cache = MemoryCache(max_size=config.max_size, default_ttl=config.default_ttl)
    else:  # pragma: no cover
        raise ConfigurationError(
            f"Unknown cache backend: {config.backend}",
            details={"backend": str(config.backend), "supported": [b.value for b in CacheBackend]},
        )

    _cache_instances[name] = cache
    return cache


def get_cache(name: str = "default") -> CacheInterface:
    """
    Get an existing cache instance by name.

    If the instance doesn't exist, it is created from the global configuration.
    """
    if name not in _cache_instances:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(name=name)

    return _cache_instances[name]


def close_all_caches() -> None:
    """Close all cache instances and clear the registry."""
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        cache.close()
        logger.info("Closed cache instance: %s", name)

    _cache_instances.clear()


def reset_cache_factory() -> None:
    """
    Clear all instance references without closing them.

    Only use this in testing contexts; close_all_caches() releases resources.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())
