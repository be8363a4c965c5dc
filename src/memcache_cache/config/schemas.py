"""
memcache-cache - Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
All configuration is defined here and validated when loaded.

An empty server list is accepted here on purpose: a missing connection set is
reported by the memcache backend at its first connection attempt.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class CacheBackend(str, Enum):
    """Supported cache backends."""

    MEMCACHE = "memcache"
    MEMORY = "memory"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MemcacheConfig(BaseModel):
    """Memcached server set and failure policy."""

    servers: list[str] = Field(
        default_factory=list,
        description='Server endpoints as "host[;port]" strings, port defaults to 11211',
    )
    crash: bool = Field(
        default=True,
        description="Raise when no server is reachable (True) or degrade silently (False)",
    )
    connect_timeout: float = Field(default=1.0, gt=0, description="Socket connect timeout in seconds")
    timeout: float = Field(default=1.0, gt=0, description="Socket read/write timeout in seconds")
    key_prefix: str = Field(default="", description="Prefix prepended to every key by the client")

    @field_validator("servers")
    @classmethod
    def strip_servers(cls, v: list[str]) -> list[str]:
        """Drop blank entries and surrounding whitespace."""
        return [s.strip() for s in v if s and s.strip()]


class CacheConfig(BaseModel):
    """Cache configuration."""

    backend: CacheBackend = Field(default=CacheBackend.MEMORY, description="Cache backend to use")
    default_ttl: int | None = Field(
        default=None,
        ge=0,
        description="Default TTL in seconds (None or 0 = live until evicted or flushed)",
    )
    max_size: int = Field(default=1000, ge=1, description="Max cache entries (memory backend)")
    memcache: MemcacheConfig = Field(default_factory=MemcacheConfig)


class AppConfig(BaseModel):
    """Root configuration."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
