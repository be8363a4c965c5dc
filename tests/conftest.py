"""
memcache-cache - Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
import socket
import socketserver
import threading
from collections import Counter
from collections.abc import Generator
from typing import Any

import pytest

from memcache_cache.errors import CacheOperationError

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"


def is_memcached_available(host: str = "localhost", port: int = 11211) -> bool:
    """Check if a memcached server is available for testing."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex((host, port))
        sock.close()
        return result == 0
    except OSError:
        return False


@pytest.fixture
def memcached_server() -> str:
    """
    Endpoint string of a live memcached server.

    Skips the test when no server is listening.
    """
    host = os.environ.get("TEST_MEMCACHED_HOST", "localhost")
    port = int(os.environ.get("TEST_MEMCACHED_PORT", "11211"))
    if not is_memcached_available(host, port):
        pytest.skip(f"memcached not available at {host}:{port}")
    return f"{host};{port}"


class _TextProtocolHandler(socketserver.StreamRequestHandler):
    """Serves the memcached text commands the session uses: get, set, delete, flush_all, version."""

    def handle(self) -> None:
        server: TextProtocolServer = self.server  # type: ignore[assignment]
        while True:
            line = self.rfile.readline()
            if not line:
                return
            parts = line.split()
            if not parts:
                continue
            command = parts[0]

            if server.malformed_replies:
                self.wfile.write(b"VALUE garbled\r\n")
            elif command == b"get":
                reply = b""
                with server.lock:
                    for key in parts[1:]:
                        if key in server.store:
                            flags, data = server.store[key]
                            reply += b"VALUE %s %d %d\r\n%s\r\n" % (key, flags, len(data), data)
                self.wfile.write(reply + b"END\r\n")
            elif command == b"set":
                key, flags, _exptime, length = parts[1:5]
                data = self.rfile.read(int(length) + 2)[:-2]
                with server.lock:
                    server.store[key] = (int(flags), data)
                if b"noreply" not in parts:
                    self.wfile.write(b"STORED\r\n")
            elif command == b"delete":
                with server.lock:
                    found = server.store.pop(parts[1], None) is not None
                self.wfile.write(b"DELETED\r\n" if found else b"NOT_FOUND\r\n")
            elif command == b"flush_all":
                with server.lock:
                    server.store.clear()
                    server.flushes += 1
                self.wfile.write(b"OK\r\n")
            elif command == b"version":
                self.wfile.write(b"VERSION 1.6.0\r\n")
            else:
                self.wfile.write(b"ERROR\r\n")


class TextProtocolServer(socketserver.ThreadingTCPServer):
    """
    Minimal in-process memcached speaking the text protocol on 127.0.0.1.

    Lets the real pymemcache client run against the library's actual reply
    contracts without an external memcached.
    """

    daemon_threads = True
    allow_reuse_address = True

    def __init__(self) -> None:
        super().__init__(("127.0.0.1", 0), _TextProtocolHandler)
        self.store: dict[bytes, tuple[int, bytes]] = {}
        self.lock = threading.Lock()
        self.flushes = 0
        self.malformed_replies = False

    @property
    def endpoint(self) -> str:
        host, port = self.server_address[:2]
        return f"{host};{port}"


@pytest.fixture
def unused_endpoint() -> str:
    """Endpoint string for a local port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"127.0.0.1;{port}"


@pytest.fixture
def text_protocol_server() -> Generator[TextProtocolServer, None, None]:
    """In-process memcached stand-in, serving until the test ends."""
    server = TextProtocolServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join()


class FakeSession:
    """
    In-memory stand-in for MemcacheSession.

    Records every call so tests can assert on network usage, and can be told
    to fail individual operations the way a flaky server would.
    """

    def __init__(self, reachable: set[tuple[str, int]] | None = None, probe_delay: float = 0.0, **kwargs: Any):
        self.kwargs = kwargs
        self.reachable = reachable
        self.probe_delay = probe_delay
        self.added: list[tuple[str, int]] = []
        self.removed: list[tuple[str, int]] = []
        self.calls: Counter[str] = Counter()
        self.store: dict[str, tuple[Any, int]] = {}
        self.failing: set[str] = set()
        self.closed = False

    def _maybe_fail(self, operation: str, key: str | None = None) -> None:
        self.calls[operation] += 1
        if operation in self.failing:
            raise CacheOperationError(operation, key, {"error": "simulated failure"})

    def add_server(self, host: str, port: int) -> None:
        self.calls["add_server"] += 1
        self.added.append((host, port))

    def remove_server(self, host: str, port: int) -> None:
        self.calls["remove_server"] += 1
        self.removed.append((host, port))

    def get_server_status(self, host: str, port: int) -> bool:
        self.calls["get_server_status"] += 1
        if self.probe_delay:
            threading.Event().wait(self.probe_delay)
        return self.reachable is None or (host, port) in self.reachable

    def get(self, key: str) -> Any | None:
        self._maybe_fail("get", key)
        entry = self.store.get(key)
        return entry[0] if entry else None

    def set(self, key: str, value: Any, expire: int = 0) -> bool:
        self._maybe_fail("set", key)
        self.store[key] = (value, expire)
        return True

    def delete(self, key: str) -> bool:
        self._maybe_fail("delete", key)
        return self.store.pop(key, None) is not None

    def flush_all(self) -> bool:
        self._maybe_fail("flush_all")
        self.store.clear()
        return True

    def close(self) -> None:
        self.calls["close"] += 1
        self.closed = True


class FakeSessionFactory:
    """Session factory handing out FakeSession instances."""

    def __init__(self, reachable: set[tuple[str, int]] | None = None, probe_delay: float = 0.0):
        self.reachable = reachable
        self.probe_delay = probe_delay
        self.sessions: list[FakeSession] = []

    def __call__(self, **kwargs: Any) -> FakeSession:
        session = FakeSession(self.reachable, self.probe_delay, **kwargs)
        self.sessions.append(session)
        return session

    @property
    def session(self) -> FakeSession:
        return self.sessions[-1]

    def network_calls(self) -> int:
        """Total calls that would have reached a server."""
        local = ("close", "remove_server")
        return sum(count for s in self.sessions for op, count in s.calls.items() if op not in local)


@pytest.fixture
def session_factory() -> FakeSessionFactory:
    """Factory whose sessions see every server as reachable."""
    return FakeSessionFactory()


@pytest.fixture
def unreachable_factory() -> FakeSessionFactory:
    """Factory whose sessions see no server as reachable."""
    return FakeSessionFactory(reachable=set())


@pytest.fixture
def make_factory() -> Any:
    """Build a factory with a custom set of reachable servers."""

    def _make(reachable: set[tuple[str, int]] | None = None, probe_delay: float = 0.0) -> FakeSessionFactory:
        return FakeSessionFactory(reachable, probe_delay)

    return _make


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "complex_dict": {"nested": {"key": "value", "list": [1, 2, 3]}},
        "complex_list": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}],
    }


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Reset cache registry and loaded config after each test to prevent state leakage."""
    yield
    from memcache_cache.cache.factory import reset_cache_factory
    from memcache_cache.config import reset_config

    reset_cache_factory()
    reset_config()
