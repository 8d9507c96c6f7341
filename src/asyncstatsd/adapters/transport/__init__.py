"""UDP transports for the statsd client and server."""

from asyncstatsd.adapters.transport.client import StatsdClient
from asyncstatsd.adapters.transport.server import StatsdServer

__all__ = [
    "StatsdClient",
    "StatsdServer",
]
