"""Asynchronous statsd server.

Listens for statsd datagrams and hands each one to the handlers subscribed
to the "datagram" event. The server does not decode payloads; handlers can
use asyncstatsd.parse_line for that.

Example:
    ```python
    def show(payload: bytes, peer) -> None:
        print(parse_line(payload))

    async with StatsdServer("0.0.0.0", 8125, on_datagram=show) as server:
        await server.serve_forever()
    ```
"""

import asyncio
import socket
from typing import Any

from asyncstatsd.adapters.logging import get_logger
from asyncstatsd.adapters.transport.base import UdpTransportBase, format_peer
from asyncstatsd.core.config import DEFAULT_PORT, Endpoint
from asyncstatsd.core.errors import BindError, ReceiveError
from asyncstatsd.core.events.registry import EventBus, Handler, UnhandledPolicy
from asyncstatsd.core.models import TransportState
from asyncstatsd.core.ports import DatagramHandler, ErrorHandler

logger = get_logger(__name__)

DATAGRAM_EVENT = "datagram"
ERROR_EVENT = "error"


class StatsdServer(UdpTransportBase):
    """Receives statsd datagrams on a bound UDP socket."""

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = DEFAULT_PORT,
        *,
        on_datagram: DatagramHandler | None = None,
        on_error: ErrorHandler | None = None,
        family: int = socket.AF_INET,
        loop: asyncio.AbstractEventLoop | None = None,
        unhandled: UnhandledPolicy = UnhandledPolicy.IGNORE,
    ) -> None:
        """Initialize the server. The socket is bound by listen().

        Args:
            host: Local address to bind.
            port: Local port to bind.
            on_datagram: Optional handler subscribed to "datagram".
            on_error: Optional handler subscribed to "error".
            family: Address family used to resolve host.
            loop: Event loop; defaults to the running loop at listen().
            unhandled: Policy for events nobody subscribed to.
        """
        super().__init__(
            Endpoint(host=host, port=port),
            TransportState.UNBOUND,
            family=family,
            loop=loop,
        )
        self.events = EventBus(unhandled)
        self._closed = asyncio.Event()
        if on_datagram is not None:
            self.events.subscribe(DATAGRAM_EVENT, on_datagram)
        if on_error is not None:
            self.events.subscribe(ERROR_EVENT, on_error)

    @classmethod
    def from_endpoint(cls, endpoint: Endpoint, **kwargs: Any) -> "StatsdServer":
        """Create a server bound to an Endpoint."""
        return cls(endpoint.host, endpoint.port, **kwargs)

    def subscribe(self, event: str, handler: Handler) -> None:
        """Register a handler for "datagram" or "error"."""
        self.events.subscribe(event, handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        """Remove a previously registered handler."""
        self.events.unsubscribe(event, handler)

    async def listen(self) -> None:
        """Bind the UDP socket.

        Raises:
            BindError: If the address is in use, not permitted or cannot
                be resolved. The server stays UNBOUND.
        """
        loop = self._get_loop()
        self.state = TransportState.BINDING
        try:
            transport, _ = await loop.create_datagram_endpoint(
                self._create_protocol,
                local_addr=(self.host, self.port),
                family=self.family,
            )
        except OSError as exc:
            self.state = TransportState.UNBOUND
            raise BindError(
                "could not bind statsd server",
                {"endpoint": str(self.endpoint), "error": exc},
            ) from exc

        self._transport = transport
        self._closed.clear()
        self.state = TransportState.LISTENING

    async def open(self) -> None:
        await self.listen()

    async def serve_forever(self) -> None:
        """Listen if not already listening, then wait until closed."""
        if self.state is TransportState.UNBOUND:
            await self.listen()
        await self._closed.wait()

    def on_receive_data(self, payload: bytes, addr: Any) -> None:
        self.on_datagram(payload, addr)

    def on_receive_error(self, exc: Exception) -> None:
        error = ReceiveError("UDP packet receive error", {"error": exc})
        error.__cause__ = exc
        self.on_error(error)

    def on_datagram(self, payload: bytes, peer: Any) -> None:
        """Called for every datagram received."""
        logger.debug("UDP packet received from %s", format_peer(peer))
        self._dispatch(DATAGRAM_EVENT, payload, peer)

    def on_error(self, error: ReceiveError) -> None:
        """Called if an error occurred while receiving. The server keeps listening."""
        logger.debug("UDP packet receive error: %s", error.__cause__ or error)
        self._dispatch(ERROR_EVENT, error)

    def _dispatch(self, event: str, *args: Any) -> None:
        try:
            self.events.emit(event, *args)
        except Exception:
            logger.exception("Error dispatching %r event", event)

    def on_connection_lost(self, exc: Exception | None) -> None:
        super().on_connection_lost(exc)
        self._closed.set()

    def close(self) -> None:
        super().close()
        self._closed.set()
