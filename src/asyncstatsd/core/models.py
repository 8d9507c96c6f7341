"""Core domain models for statsd metric events."""

from dataclasses import dataclass
from enum import Enum


class MetricKind(Enum):
    """Kinds of metric event a client can emit.

    Each kind carries the statsd unit it is encoded with. INCREMENT and
    DECREMENT are counters with a fixed value of 1 and -1.
    """

    TIMING = "ms"
    GAUGE = "g"
    DELTA = "c"
    INCREMENT = "inc"
    DECREMENT = "dec"

    @property
    def unit(self) -> str:
        """Unit suffix used on the wire."""
        if self in (MetricKind.INCREMENT, MetricKind.DECREMENT):
            return "c"
        return self.value


VALID_UNITS = frozenset({"ms", "g", "c"})


class TransportState(Enum):
    """Lifecycle states of the client and server transports."""

    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    READY = "ready"
    UNBOUND = "unbound"
    BINDING = "binding"
    LISTENING = "listening"
    CLOSED = "closed"


@dataclass(frozen=True)
class MetricEvent:
    """A single metric event, built per call and consumed by the encoder.

    Attributes:
        key: Metric key (e.g., "some.task"). Must not contain ":", "|" or
            newlines; this is not checked.
        value: Integer value. Ignored for INCREMENT and DECREMENT.
        kind: What the value measures.
        rate: Optional sampling rate in (0, 1].
    """

    key: str
    value: int
    kind: MetricKind
    rate: float | None = None

    @classmethod
    def create(
        cls,
        key: str,
        value: float | None,
        kind: MetricKind,
        rate: float | None = None,
    ) -> "MetricEvent":
        """Build an event, truncating the value toward zero.

        Raises:
            TypeError: If value is None for a kind other than INCREMENT or
                DECREMENT.
            ValueError: If value is NaN.
            OverflowError: If value is infinite.
        """
        if value is None:
            if kind not in (MetricKind.INCREMENT, MetricKind.DECREMENT):
                raise TypeError(f"{kind.name.lower()} requires a value")
            value = 0
        return cls(key=key, value=int(value), kind=kind, rate=rate)


@dataclass(frozen=True)
class WireLine:
    """A decoded statsd line.

    Attributes:
        key: Metric key.
        value: Integer value as sent.
        unit: One of "ms", "g", "c".
        rate: Sampling rate, or None when the line had no "|@rate" suffix.
    """

    key: str
    value: int
    unit: str
    rate: float | None = None

    def __str__(self) -> str:
        line = f"{self.key}:{self.value}|{self.unit}"
        if self.rate is not None and self.rate < 1:
            line += f"|@{self.rate!r}"
        return line
