"""
memcache-cache - Observability Module

Usage:
    from memcache_cache.observability import configure_logging

    configure_logging(get_config().log_level)
"""

from .structured_logging import JSONFormatter, configure_logging

__all__ = [
    "JSONFormatter",
    "configure_logging",
]
