"""Asynchronous statsd client.

All send methods return an asyncio.Future that resolves when the local
stack has accepted the datagram. Since writes are UDP packets there is no
guarantee the remote receives anything, so the future is mostly useful for
detecting slow or failing writes.

Example:
    ```python
    async with StatsdClient("localhost", 8125) as statsd:
        await asyncio.gather(
            statsd.timing("some.task", 133),
            statsd.gauge("some.value", 80),
        )
    ```
"""

import asyncio
import socket
from typing import Any

from asyncstatsd.adapters.logging import get_logger
from asyncstatsd.adapters.transport.base import UdpTransportBase, format_peer
from asyncstatsd.core.config import DEFAULT_PORT, Endpoint
from asyncstatsd.core.encoding.wire import encode_event
from asyncstatsd.core.errors import ConnectError, ResolutionError, WriteError
from asyncstatsd.core.models import MetricEvent, MetricKind, TransportState
from asyncstatsd.core.sampling import Sampler

logger = get_logger(__name__)

_WILDCARD = {
    socket.AF_INET: ("0.0.0.0", 0),
    socket.AF_INET6: ("::", 0),
}


class StatsdClient(UdpTransportBase):
    """Sends metric events to a statsd server over UDP."""

    # Sampling rate used when a call passes no rate
    default_rate = 1.0

    def __init__(
        self,
        host: str = "localhost",
        port: int = DEFAULT_PORT,
        *,
        sampler: Sampler | None = None,
        family: int = socket.AF_INET,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize the client. No socket is opened until connect().

        Args:
            host: Destination host.
            port: Destination port.
            sampler: Sampling decision maker (default: Sampler()).
            family: Address family used to resolve host.
            loop: Event loop; defaults to the running loop at connect().
        """
        super().__init__(
            Endpoint(host=host, port=port),
            TransportState.UNCONNECTED,
            family=family,
            loop=loop,
        )
        self.sampler = sampler or Sampler()
        self._remote_addr: Any = None
        self._pending_write: asyncio.Future[int | None] | None = None

    @classmethod
    def from_endpoint(cls, endpoint: Endpoint, **kwargs: Any) -> "StatsdClient":
        """Create a client for an Endpoint."""
        return cls(endpoint.host, endpoint.port, **kwargs)

    async def connect(self) -> None:
        """Resolve the destination and open the UDP socket.

        Raises:
            ResolutionError: If the host cannot be resolved.
            ConnectError: If the socket cannot be created.
        """
        loop = self._get_loop()
        self.state = TransportState.CONNECTING
        try:
            infos = await loop.getaddrinfo(
                self.host, self.port, family=self.family, type=socket.SOCK_DGRAM
            )
        except OSError as exc:
            self.state = TransportState.UNCONNECTED
            raise ResolutionError(
                "could not resolve statsd host", {"endpoint": str(self.endpoint)}
            ) from exc

        family, _, proto, _, addr = infos[0]
        try:
            transport, _ = await loop.create_datagram_endpoint(
                self._create_protocol,
                local_addr=_WILDCARD.get(family, ("0.0.0.0", 0)),
                family=family,
                proto=proto,
            )
        except OSError as exc:
            self.state = TransportState.UNCONNECTED
            raise ConnectError(
                "could not open UDP socket", {"endpoint": str(self.endpoint)}
            ) from exc

        self._transport = transport
        self._remote_addr = addr
        self.state = TransportState.READY

    async def open(self) -> None:
        await self.connect()

    def send_metric(
        self,
        key: str,
        value: float | None,
        kind: MetricKind,
        rate: float | None = None,
    ) -> "asyncio.Future[int | None]":
        """Sample, encode and send one metric event.

        Args:
            key: Metric key.
            value: Metric value, truncated to an integer. Ignored for
                   increments and decrements.
            kind: Metric kind.
            rate: Sampling rate; defaults to default_rate.

        Returns:
            Future resolving to the number of bytes written, or to None if
            the event was sampled out. Fails with WriteError if the OS
            rejects the datagram, with TypeError if a value is required but
            missing, and with ValueError or OverflowError for a value that
            has no integer form or a key that is not ASCII.
        """
        future: asyncio.Future[int | None] = self._get_loop().create_future()
        effective_rate = self.default_rate if rate is None else rate
        try:
            event = MetricEvent.create(key, value, kind, effective_rate)
            # The line protocol is ASCII; parse_line rejects anything else
            data = encode_event(event).encode("ascii")
        except (TypeError, ValueError, OverflowError) as exc:
            future.set_exception(exc)
            return future

        if not self.sampler.should_sample(effective_rate):
            future.set_result(None)
            return future
        self._write(data, future)
        return future

    def _write(self, data: bytes, future: "asyncio.Future[int | None]") -> None:
        if self.state is not TransportState.READY or self._transport is None:
            future.set_exception(
                WriteError("client is not connected", {"state": self.state.value})
            )
            return

        # Send errors are reported synchronously through on_receive_error
        self._pending_write = future
        try:
            self._transport.sendto(data, self._remote_addr)
        finally:
            self._pending_write = None
        if not future.done():
            future.set_result(len(data))

    def timing(
        self, key: str, ms: float, rate: float | None = None
    ) -> "asyncio.Future[int | None]":
        """Record elapsed time in milliseconds. Only the integer part is sent."""
        return self.send_metric(key, ms, MetricKind.TIMING, rate)

    def gauge(
        self, key: str, value: float, rate: float | None = None
    ) -> "asyncio.Future[int | None]":
        """Record the current value of a gauge."""
        return self.send_metric(key, value, MetricKind.GAUGE, rate)

    def delta(
        self, key: str, value: float, rate: float | None = None
    ) -> "asyncio.Future[int | None]":
        """Adjust a counter by value."""
        return self.send_metric(key, value, MetricKind.DELTA, rate)

    def increment(
        self, key: str, rate: float | None = None
    ) -> "asyncio.Future[int | None]":
        """Add one to a counter."""
        return self.send_metric(key, None, MetricKind.INCREMENT, rate)

    def decrement(
        self, key: str, rate: float | None = None
    ) -> "asyncio.Future[int | None]":
        """Subtract one from a counter."""
        return self.send_metric(key, None, MetricKind.DECREMENT, rate)

    def on_receive_data(self, payload: bytes, addr: Any) -> None:
        """Called if the client socket receives a datagram."""
        logger.debug("UDP packet received from %s", format_peer(addr))

    def on_receive_error(self, exc: Exception) -> None:
        """Called on socket errors, including failed writes."""
        pending = self._pending_write
        if pending is not None and not pending.done():
            error = WriteError(
                "datagram write failed",
                {"endpoint": str(self.endpoint), "error": exc},
            )
            error.__cause__ = exc
            pending.set_exception(error)
            return
        logger.debug("UDP packet receive error: %s", exc)
