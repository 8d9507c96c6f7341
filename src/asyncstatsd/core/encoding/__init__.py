"""Statsd wire format encoding."""

from asyncstatsd.core.encoding.wire import (
    encode_event,
    encode_value,
    format_line,
    parse_line,
)

__all__ = [
    "encode_event",
    "encode_value",
    "format_line",
    "parse_line",
]
