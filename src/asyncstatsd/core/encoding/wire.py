"""Encoder and parser for the statsd line protocol.

A line has the form ``key:value|unit[|@rate]``. The rate suffix is only
present when the event was sampled at a rate below 1.
"""

from asyncstatsd.core.errors import DecodeError
from asyncstatsd.core.models import VALID_UNITS, MetricEvent, MetricKind, WireLine

# Fixed value parts for counters that ignore their value argument
_FIXED_VALUES = {
    MetricKind.INCREMENT: "1|c",
    MetricKind.DECREMENT: "-1|c",
}


def encode_value(kind: MetricKind, value: float | None = None) -> str:
    """Encode the value part of a line for the given kind.

    Args:
        kind: Metric kind.
        value: Numeric value; truncated toward zero. Ignored for
            INCREMENT and DECREMENT.

    Returns:
        Value and unit, e.g. "133|ms".
    """
    fixed = _FIXED_VALUES.get(kind)
    if fixed is not None:
        return fixed
    if value is None:
        raise TypeError(f"{kind.name.lower()} requires a value")
    return f"{int(value)}|{kind.unit}"


def format_line(key: str, value_part: str, rate: float | None = None) -> str:
    """Join a key and value part, appending the rate when below 1.

    Args:
        key: Metric key. Not validated.
        value_part: Output of encode_value().
        rate: Optional sampling rate.

    Returns:
        The complete line without a trailing newline.
    """
    if rate is None or rate >= 1:
        return f"{key}:{value_part}"
    return f"{key}:{value_part}|@{float(rate)!r}"


def encode_event(event: MetricEvent) -> str:
    """Encode a MetricEvent to a wire line."""
    return format_line(event.key, encode_value(event.kind, event.value), event.rate)


def _parse_rate(segment: str, line: str) -> float:
    if not segment.startswith("@"):
        raise DecodeError("unexpected segment", {"segment": segment, "line": line})
    try:
        rate = float(segment[1:])
    except ValueError as exc:
        raise DecodeError("invalid rate", {"line": line}) from exc
    if not 0 < rate <= 1:
        raise DecodeError("rate out of range", {"rate": rate, "line": line})
    return rate


def parse_line(line: str | bytes) -> WireLine:
    """Parse a single statsd line.

    Args:
        line: Line as text or ASCII bytes. One trailing newline is allowed.

    Returns:
        WireLine with the decoded fields.

    Raises:
        DecodeError: If the line is not valid wire format.
    """
    if isinstance(line, bytes):
        try:
            line = line.decode("ascii")
        except UnicodeDecodeError as exc:
            raise DecodeError("line is not ASCII") from exc
    if line.endswith("\n"):
        line = line[:-1]

    key, sep, rest = line.partition(":")
    if not sep or not key:
        raise DecodeError("missing key", {"line": line})

    segments = rest.split("|")
    if len(segments) not in (2, 3):
        raise DecodeError("expected value|unit[|@rate]", {"line": line})

    value_str, unit = segments[0], segments[1]
    try:
        value = int(value_str)
    except ValueError as exc:
        raise DecodeError("value is not an integer", {"line": line}) from exc
    if unit not in VALID_UNITS:
        raise DecodeError("unknown unit", {"unit": unit, "line": line})

    rate = _parse_rate(segments[2], line) if len(segments) == 3 else None
    return WireLine(key=key, value=value, unit=unit, rate=rate)
