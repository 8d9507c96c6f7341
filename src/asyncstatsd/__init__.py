"""asyncstatsd - asynchronous statsd client and server for asyncio."""

from asyncstatsd.adapters.logging import StatsdLogHandler, get_logger
from asyncstatsd.adapters.transport.client import StatsdClient
from asyncstatsd.adapters.transport.server import StatsdServer
from asyncstatsd.core.config import Endpoint
from asyncstatsd.core.encoding.wire import (
    encode_event,
    encode_value,
    format_line,
    parse_line,
)
from asyncstatsd.core.errors import (
    BindError,
    ConfigError,
    ConnectError,
    DecodeError,
    ReceiveError,
    ResolutionError,
    StatsdError,
    UnhandledEventError,
    WriteError,
)
from asyncstatsd.core.events.registry import EventBus, UnhandledPolicy
from asyncstatsd.core.models import MetricEvent, MetricKind, TransportState, WireLine
from asyncstatsd.core.sampling import Sampler

__version__ = "0.1.0"

__all__ = [
    "BindError",
    "ConfigError",
    "ConnectError",
    "DecodeError",
    "Endpoint",
    "EventBus",
    "MetricEvent",
    "MetricKind",
    "ReceiveError",
    "ResolutionError",
    "Sampler",
    "StatsdClient",
    "StatsdError",
    "StatsdLogHandler",
    "StatsdServer",
    "TransportState",
    "UnhandledEventError",
    "UnhandledPolicy",
    "WireLine",
    "WriteError",
    "encode_event",
    "encode_value",
    "format_line",
    "get_logger",
    "parse_line",
]
