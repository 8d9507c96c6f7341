"""Port interfaces for collaborators of the transports.

These protocols define the callables the core accepts from outside, so
tests and applications can plug in their own implementations.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """Source of uniform random floats in [0, 1).

    random.random satisfies this protocol. Tests inject a fixed sequence.
    """

    def __call__(self) -> float: ...


@runtime_checkable
class DatagramHandler(Protocol):
    """Handler for datagrams received by a StatsdServer."""

    def __call__(self, payload: bytes, peer: Any) -> None:
        """Handle one datagram.

        Args:
            payload: Raw datagram bytes.
            peer: Sender address as returned by the socket, e.g.
                  ("127.0.0.1", 52731).
        """
        ...


@runtime_checkable
class ErrorHandler(Protocol):
    """Handler for non-fatal receive errors."""

    def __call__(self, error: Exception) -> None: ...
