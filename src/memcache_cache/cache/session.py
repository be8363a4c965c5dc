"""
memcache-cache - Memcache Session

Thin wrapper over pymemcache that exposes the handful of primitives the
memcache backend relies on:

- add_server(host, port) / remove_server(host, port)
- get_server_status(host, port)
- get / set / delete / flush_all

Keys are distributed across the registered servers by pymemcache's
HashClient. Every server gets a connection pool, so one session can be
shared by concurrent threads. Values are pickled with pymemcache's pickle
serde, so any picklable Python object can be stored.

Anything raised by a pymemcache call (socket errors, protocol errors,
reply parsing errors, serde errors) is re-raised as CacheOperationError so
callers can tell a backing-client failure apart from their own bugs.
"""

from __future__ import annotations

import logging
from typing import Any

from pymemcache.client.base import Client
from pymemcache.client.hash import HashClient
from pymemcache.exceptions import MemcacheError
from pymemcache.serde import pickle_serde

from ..errors import CacheOperationError

logger = logging.getLogger(__name__)


class MemcacheSession:
    """Session over one or more memcached servers."""

    def __init__(
        self,
        connect_timeout: float = 1.0,
        timeout: float = 1.0,
        key_prefix: str = "",
    ) -> None:
        self.connect_timeout = connect_timeout
        self.timeout = timeout
        self._client = HashClient(
            [],
            serde=pickle_serde,
            connect_timeout=connect_timeout,
            timeout=timeout,
            key_prefix=key_prefix.encode("utf-8"),
            use_pooling=True,
            ignore_exc=False,
            default_noreply=False,
            allow_unicode_keys=True,
        )
        self._servers: list[tuple[str, int]] = []

    @property
    def servers(self) -> list[tuple[str, int]]:
        """Servers currently on the hash ring, in registration order."""
        return list(self._servers)

    def add_server(self, host: str, port: int) -> None:
        """Register a server with the underlying hash client."""
        self._client.add_server(host, port)
        self._servers.append((host, port))
        logger.debug("Registered memcache server %s:%s", host, port)

    def remove_server(self, host: str, port: int) -> None:
        """Take a server off the hash ring so its keys move to the remaining servers."""
        node = f"{host}:{port}"
        self._client.hasher.remove_node(node)
        client = self._client.clients.pop(node, None)
        if client is not None:
            client.close()
        self._servers = [server for server in self._servers if server != (host, port)]
        logger.debug("Removed memcache server %s:%s", host, port)

    def get_server_status(self, host: str, port: int) -> bool:
        """
        Probe a single server with the VERSION command.

        Returns:
            True if the server answered, False otherwise
        """
        probe = Client(
            (host, port),
            connect_timeout=self.connect_timeout,
            timeout=self.timeout,
        )
        try:
            probe.version()
            return True
        except (MemcacheError, OSError) as e:
            logger.debug(
                "Memcache server %s:%s is unreachable: %s",
                host,
                port,
                e,
                extra={"host": host, "port": port, "error": str(e)},
            )
            return False
        finally:
            probe.close()

    def get(self, key: str) -> Any | None:
        try:
            return self._client.get(key)
        except Exception as e:
            raise CacheOperationError("get", key, {"error": repr(e)}) from e

    def set(self, key: str, value: Any, expire: int = 0) -> bool:
        try:
            stored = self._client.set(key, value, expire=expire)
        except Exception as e:
            raise CacheOperationError("set", key, {"error": repr(e), "expire": expire}) from e
        return bool(stored)

    def delete(self, key: str) -> bool:
        try:
            deleted = self._client.delete(key)
        except Exception as e:
            raise CacheOperationError("delete", key, {"error": repr(e)}) from e
        return bool(deleted)

    def flush_all(self) -> bool:
        """Flush every server on the ring. Returns True once every server accepted it."""
        try:
            # HashClient.flush_all() returns None; a failing server raises
            self._client.flush_all()
        except Exception as e:
            raise CacheOperationError("flush_all", details={"error": repr(e)}) from e
        return True

    def close(self) -> None:
        """Close every socket held by the hash client."""
        try:
            self._client.close()
        except Exception as e:
            raise CacheOperationError("close", details={"error": repr(e)}) from e
