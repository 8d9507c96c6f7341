"""Shared UDP plumbing for the client and server transports."""

import asyncio
import socket
import weakref
from abc import ABC, abstractmethod
from typing import Any

from asyncstatsd.adapters.logging import get_logger
from asyncstatsd.core.config import Endpoint
from asyncstatsd.core.models import TransportState

logger = get_logger(__name__)

_NAMEINFO_FLAGS = socket.NI_NUMERICHOST | socket.NI_NUMERICSERV | socket.NI_DGRAM


def format_peer(addr: Any) -> str:
    """Render a socket address as numeric "host:port" text.

    Args:
        addr: Address tuple as returned by recvfrom or getsockname.

    Returns:
        "host:port", or str(addr) for addresses that are not host/port pairs.
    """
    try:
        host, port = socket.getnameinfo(addr, _NAMEINFO_FLAGS)
    except (OSError, TypeError):
        if isinstance(addr, tuple) and len(addr) >= 2:
            return f"{addr[0]}:{addr[1]}"
        return str(addr)
    return f"{host}:{port}"


class DatagramProtocol(asyncio.DatagramProtocol):
    """asyncio protocol forwarding socket events to a transport object.

    Holds only a weak reference to its owner so a live socket does not keep
    an abandoned client or server alive. Events arriving after the owner is
    gone close the socket.
    """

    def __init__(self, owner: "UdpTransportBase") -> None:
        self._owner = weakref.ref(owner)
        self._transport: asyncio.DatagramTransport | None = None

    def _live_owner(self) -> "UdpTransportBase | None":
        owner = self._owner()
        if owner is None and self._transport is not None:
            self._transport.close()
        return owner

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._transport = transport  # type: ignore[assignment]
        owner = self._live_owner()
        if owner is not None:
            owner.on_socket_ready(transport)  # type: ignore[arg-type]

    def datagram_received(self, data: bytes, addr: Any) -> None:
        owner = self._live_owner()
        if owner is not None:
            owner.on_receive_data(data, addr)

    def error_received(self, exc: Exception) -> None:
        owner = self._live_owner()
        if owner is not None:
            owner.on_receive_error(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        owner = self._owner()
        self._transport = None
        if owner is not None:
            owner.on_connection_lost(exc)


class UdpTransportBase(ABC):
    """Owns one UDP socket for its whole lifetime.

    Subclasses implement open() and the receive callbacks.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        initial_state: TransportState,
        family: int = socket.AF_INET,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.family = family
        self.state = initial_state
        self._loop = loop
        self._transport: asyncio.DatagramTransport | None = None

    @property
    def host(self) -> str:
        return self.endpoint.host

    @property
    def port(self) -> int:
        return self.endpoint.port

    @property
    def sockname(self) -> Any:
        """Local socket address, or None when no socket is open."""
        if self._transport is None:
            return None
        return self._transport.get_extra_info("sockname")

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _create_protocol(self) -> DatagramProtocol:
        return DatagramProtocol(self)

    @abstractmethod
    async def open(self) -> None:
        """Open the socket: connect for clients, bind for servers."""

    def on_socket_ready(self, transport: asyncio.DatagramTransport) -> None:
        """Called when the socket is established."""
        self._transport = transport
        logger.debug(
            "UDP socket established: %s",
            format_peer(transport.get_extra_info("sockname")),
        )

    @abstractmethod
    def on_receive_data(self, payload: bytes, addr: Any) -> None:
        """Called for every datagram the socket receives."""

    @abstractmethod
    def on_receive_error(self, exc: Exception) -> None:
        """Called when the socket reports an error."""

    def on_connection_lost(self, exc: Exception | None) -> None:
        """Called by the protocol once the socket is closed."""
        self._transport = None
        if self.state is not TransportState.CLOSED:
            if exc is not None:
                logger.warning("UDP socket lost: %s", exc)
            self.state = TransportState.CLOSED

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._transport is not None:
            self._transport.close()
            self._transport = None
        self.state = TransportState.CLOSED

    async def __aenter__(self) -> "UdpTransportBase":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()
