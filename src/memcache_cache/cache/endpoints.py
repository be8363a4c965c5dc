"""
memcache-cache - Server Endpoints

Parses "host[;port]" server strings into (host, port) pairs.
"""

from dataclasses import dataclass

from ..errors import ConfigurationError

DEFAULT_PORT = 11211
SEPARATOR = ";"


@dataclass(frozen=True)
class Endpoint:
    """A single memcached server address."""

    host: str
    port: int = DEFAULT_PORT

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def parse(cls, raw: str) -> "Endpoint":
        """
        Parse an endpoint string such as "127.0.0.1;11211" or "cache-1".

        Raises:
            ConfigurationError: If the host is empty or the port is not a valid TCP port
        """
        host, _, port_part = raw.strip().partition(SEPARATOR)
        host = host.strip()
        port_part = port_part.strip()

        if not host:
            raise ConfigurationError(
                f"Invalid memcache server '{raw}': missing host",
                details={"server": raw},
            )

        if not port_part:
            return cls(host=host)

        try:
            port = int(port_part)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid memcache server '{raw}': port must be an integer",
                details={"server": raw, "port": port_part},
            ) from e

        if not 0 < port < 65536:
            raise ConfigurationError(
                f"Invalid memcache server '{raw}': port out of range",
                details={"server": raw, "port": port},
            )

        return cls(host=host, port=port)


def parse_endpoints(servers: list[str]) -> list[Endpoint]:
    """Parse a list of server strings, preserving order."""
    return [Endpoint.parse(server) for server in servers]
