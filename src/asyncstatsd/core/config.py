"""Endpoint configuration for clients and servers."""

import os
from dataclasses import dataclass

from asyncstatsd.core.errors import ConfigError

DEFAULT_PORT = 8125
DEFAULT_ENV_VAR = "STATSD_SERVER"


@dataclass(frozen=True)
class Endpoint:
    """A UDP host and port.

    Attributes:
        host: Hostname or address literal.
        port: Port number in 1-65535.

    Raises:
        ConfigError: If host is empty or port is out of range.
    """

    host: str
    port: int

    def __post_init__(self) -> None:
        if not self.host:
            raise ConfigError("host must not be empty")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigError("port must be an integer", {"port": self.port})
        if not 1 <= self.port <= 65535:
            raise ConfigError("port out of range", {"port": self.port})

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"

    @classmethod
    def parse(cls, value: str, default_port: int = DEFAULT_PORT) -> "Endpoint":
        """Parse "host:port", "host" or "[v6addr]:port".

        Args:
            value: Text to parse.
            default_port: Port used when value has none.

        Returns:
            Endpoint for the parsed host and port.
        """
        value = value.strip()
        if value.startswith("["):
            host, sep, rest = value[1:].partition("]")
            if not sep:
                raise ConfigError("unterminated IPv6 address", {"value": value})
            port_str = rest[1:] if rest.startswith(":") else ""
            if rest and not rest.startswith(":"):
                raise ConfigError("malformed endpoint", {"value": value})
        elif value.count(":") == 1:
            host, _, port_str = value.partition(":")
        else:
            host, port_str = value, ""

        if not port_str:
            return cls(host=host, port=default_port)
        try:
            port = int(port_str)
        except ValueError as exc:
            raise ConfigError("port must be an integer", {"value": value}) from exc
        return cls(host=host, port=port)

    @classmethod
    def from_env(
        cls,
        name: str = DEFAULT_ENV_VAR,
        default: str = f"localhost:{DEFAULT_PORT}",
    ) -> "Endpoint":
        """Read an endpoint from an environment variable in "host:port" form."""
        return cls.parse(os.environ.get(name) or default)
