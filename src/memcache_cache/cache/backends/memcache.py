"""
memcache-cache - Memcache Cache Backend

Cache backend over one or more memcached servers.

Connection handling:
- The server set is contacted lazily, on the first cache operation.
- Every configured server is registered, then each one is probed. One
  reachable server is enough for the backend to be connected; servers that
  did not answer are taken off the hash ring.
- When no server answers, an error is logged once. With crash=True a
  CacheConnectionError is raised and the next operation tries again from
  scratch. With crash=False the backend switches to degraded mode for the
  rest of its lifetime: every operation returns a miss / False without
  touching the network.

Per-operation failures of the memcache client never escape: get() reports a
miss, set()/purge()/purge_all() report False.

Example:
    cache = MemcacheCache(servers=["127.0.0.1;11211", "cache-2"], default_ttl=300)
    cache.set("greeting", {"msg": "hello"})
    cache.get("greeting")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from ...errors import CacheConnectionError, CacheOperationError, ConfigurationError
from ..endpoints import parse_endpoints
from ..interface import CacheInterface
from ..session import MemcacheSession

if TYPE_CHECKING:
    from ...config import CacheConfig

logger = logging.getLogger(__name__)

NO_SERVER_MESSAGE = "Memcache Exception, Impossible to establish connection to memcached server"


class ConnectionState(str, Enum):
    """Lifecycle of the backend's connection to the server set."""

    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    FAILED = "failed"


class ConnectionOutcome(str, Enum):
    """Non-fatal results of a connection attempt."""

    CONNECTED = "connected"
    DEGRADED = "degraded"


def establish_connection(
    session: MemcacheSession,
    servers: list[str],
    crash: bool,
    log: logging.Logger = logger,
) -> ConnectionOutcome:
    """
    Register every server with the session and check that one answers.

    Args:
        session: Fresh session to register servers on
        servers: "host[;port]" endpoint strings
        crash: Raise instead of degrading when no server is reachable
        log: Logger receiving the failure entry

    Returns:
        CONNECTED if at least one server is reachable, DEGRADED otherwise

    Raises:
        ConfigurationError: If no server is configured or an endpoint is malformed
        CacheConnectionError: If no server is reachable and crash is True
    """
    if not servers:
        raise ConfigurationError(
            "Error no connection set in Memcache cache. Configure at least one server.",
            details={"setting": "servers"},
        )

    endpoints = parse_endpoints(servers)
    for endpoint in endpoints:
        session.add_server(endpoint.host, endpoint.port)

    reachable = [endpoint for endpoint in endpoints if session.get_server_status(endpoint.host, endpoint.port)]
    if reachable:
        # Keys must not hash to a server that failed its probe
        for endpoint in dict.fromkeys(endpoints):
            if endpoint not in reachable:
                session.remove_server(endpoint.host, endpoint.port)
                log.warning(
                    "Memcache server %s is unreachable, removed from the pool",
                    endpoint,
                    extra={"server": str(endpoint)},
                )
        log.info(
            "Connected to %d of %d memcache server(s)",
            len(reachable),
            len(endpoints),
            extra={"servers": [str(e) for e in endpoints], "reachable": [str(e) for e in reachable]},
        )
        return ConnectionOutcome.CONNECTED

    log.error(
        NO_SERVER_MESSAGE,
        extra={"servers": [str(e) for e in endpoints], "crash": crash},
    )
    if crash:
        raise CacheConnectionError("memcached", details={"servers": [str(e) for e in endpoints]})
    return ConnectionOutcome.DEGRADED


class MemcacheCache(CacheInterface):
    """
    Memcached cache backend with lazy connection and a crash-or-degrade policy.

    Thread-safe: concurrent first calls connect once, under a lock. After
    that, operations share the same session. Its client checks a pooled
    connection out per call, so threads never share a socket.
    """

    def __init__(
        self,
        servers: list[str] | None = None,
        default_ttl: int | None = None,
        crash: bool = True,
        log: logging.Logger | None = None,
        connect_timeout: float = 1.0,
        timeout: float = 1.0,
        key_prefix: str = "",
        session_factory: Callable[..., MemcacheSession] = MemcacheSession,
    ) -> None:
        """
        Initialize memcache backend. No network call is made here.

        Args:
            servers: Endpoint strings like "127.0.0.1;11211" (port defaults to 11211)
            default_ttl: Default TTL in seconds (None or 0 = no expiry)
            crash: Raise CacheConnectionError when no server is reachable
            log: Logger for cache activity (defaults to the module logger)
            connect_timeout: Socket connect timeout in seconds
            timeout: Socket read/write timeout in seconds
            key_prefix: Prefix applied to every key by the client
            session_factory: Callable building the underlying session
        """
        if default_ttl is not None and default_ttl < 0:
            raise ConfigurationError(
                "default_ttl must be a non-negative number of seconds",
                details={"default_ttl": default_ttl},
            )

        self.servers = list(servers or [])
        self.default_ttl = default_ttl
        self.crash = crash
        self.log = log or logger
        self.connect_timeout = connect_timeout
        self.timeout = timeout
        self.key_prefix = key_prefix
        self._session_factory = session_factory

        self._session: MemcacheSession | None = None
        self._state = ConnectionState.UNINITIALIZED
        self._lock = threading.Lock()

        # Stats
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0
        self._errors = 0

    @classmethod
    def from_config(cls, config: CacheConfig, **kwargs: Any) -> MemcacheCache:
        """Build a backend from a CacheConfig section."""
        memcache = config.memcache
        return cls(
            servers=memcache.servers,
            default_ttl=config.default_ttl,
            crash=memcache.crash,
            connect_timeout=memcache.connect_timeout,
            timeout=memcache.timeout,
            key_prefix=memcache.key_prefix,
            **kwargs,
        )

    @property
    def state(self) -> ConnectionState:
        return self._state

    # ------------ Connection ------------

    def _connected_session(self) -> MemcacheSession | None:
        """
        Connect on first use.

        Returns:
            The shared session, or None in degraded mode
        """
        session = self._session
        if session is not None:
            return session
        if self._state is ConnectionState.FAILED:
            return None

        with self._lock:
            if self._state is not ConnectionState.UNINITIALIZED:
                return self._session

            session = self._session_factory(
                connect_timeout=self.connect_timeout,
                timeout=self.timeout,
                key_prefix=self.key_prefix,
            )
            try:
                outcome = establish_connection(session, self.servers, self.crash, self.log)
            except (ConfigurationError, CacheConnectionError):
                # State stays UNINITIALIZED: the next call starts over
                self._discard(session)
                raise

            if outcome is ConnectionOutcome.DEGRADED:
                self._discard(session)
                self._state = ConnectionState.FAILED
                return None

            self._session = session
            self._state = ConnectionState.CONNECTED
            return session

    def _discard(self, session: MemcacheSession) -> None:
        """Close a session that will not be kept."""
        try:
            session.close()
        except CacheOperationError as e:
            self.log.warning(f"Error closing memcache session: {e}", extra=e.details)

    def _expire(self, ttl: int | None) -> int:
        """
        Normalize TTL to memcached expiry seconds:
        - None -> default_ttl (or no expiry when unset)
        - 0 or negative -> no expiry
        """
        if ttl is None:
            ttl = self.default_ttl
        if ttl is None:
            return 0
        ttl = int(ttl)
        return ttl if ttl > 0 else 0

    # ------------ Core Interface ------------

    def get(self, key: str) -> Any | None:
        """Retrieve a value by key. Any failure is reported as a miss."""
        session = self._connected_session()
        if session is None:
            self._misses += 1
            return None

        if not key:
            self.log.warning("Attempted to get cache value with empty key")
            self._misses += 1
            return None

        try:
            value = session.get(key)
        except CacheOperationError as e:
            # Suppressed on purpose: a retrieval failure is only ever a miss
            self.log.warning(f"Failed to get key '{key}' from memcache: {e}", extra={"key": key, **e.details})
            self._errors += 1
            self._misses += 1
            return None

        if value is None:
            self._misses += 1
            return None

        self._hits += 1
        return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store a value with the given or default TTL."""
        session = self._connected_session()
        if session is None:
            return False

        if not key:
            self.log.warning("Attempted to set cache value with empty key")
            return False

        try:
            stored = session.set(key, value, expire=self._expire(ttl))
        except CacheOperationError as e:
            # Suppressed on purpose: writes are best effort
            self.log.warning(f"Failed to set key '{key}' in memcache: {e}", extra={"key": key, **e.details})
            self._errors += 1
            return False

        if stored:
            self._sets += 1
        return stored

    def purge(self, key: str) -> bool:
        """Remove a single key."""
        session = self._connected_session()
        if session is None:
            return False

        if not key:
            self.log.warning("Attempted to purge cache value with empty key")
            return False

        try:
            deleted = session.delete(key)
        except CacheOperationError as e:
            # Suppressed on purpose: removal is best effort
            self.log.warning(f"Failed to purge key '{key}' from memcache: {e}", extra={"key": key, **e.details})
            self._errors += 1
            return False

        if deleted:
            self._deletes += 1
        return deleted

    def purge_all(self) -> bool:
        """
        Flush every registered memcached server.

        This empties the whole memcached instance, including entries written
        by other applications sharing it.
        """
        session = self._connected_session()
        if session is None:
            return False

        try:
            flushed = session.flush_all()
        except CacheOperationError as e:
            # Suppressed on purpose: flushing is best effort
            self.log.warning(f"Failed to flush memcache: {e}", extra=e.details)
            self._errors += 1
            return False

        self.log.info("Flushed all memcache servers", extra={"servers": self.servers})
        return flushed

    def get_stats(self) -> dict[str, Any]:
        """Return cache statistics and connection state. Never connects."""
        total_requests = self._hits + self._misses
        return {
            "backend": "memcache",
            "state": self._state.value,
            "servers": list(self.servers),
            "crash": self.crash,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
            "errors": self._errors,
        }

    def close(self) -> None:
        """Close the session. The next operation reconnects from scratch."""
        with self._lock:
            self._state = ConnectionState.UNINITIALIZED
            if self._session is not None:
                self._discard(self._session)
                self._session = None
            self.log.info("Closed memcache cache backend", extra={"servers": self.servers})
