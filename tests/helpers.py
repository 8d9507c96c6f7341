"""Test helpers shared by transport, CLI and feature tests."""

import asyncio
from typing import Any

from asyncstatsd.core.errors import ReceiveError


class DatagramCollector:
    """Records what a StatsdServer dispatches.

    Used as both the "datagram" and "error" handler in transport tests.
    """

    def __init__(self) -> None:
        self.datagrams: list[tuple[bytes, Any]] = []
        self.errors: list[ReceiveError] = []

    def __call__(self, payload: bytes, peer: Any) -> None:
        self.datagrams.append((payload, peer))

    def on_error(self, error: ReceiveError) -> None:
        self.errors.append(error)

    @property
    def payloads(self) -> list[bytes]:
        return [payload for payload, _ in self.datagrams]

    async def wait_for(self, count: int, timeout: float = 2.0) -> None:
        """Wait until at least count datagrams arrived."""

        async def _poll() -> None:
            while len(self.datagrams) < count:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(_poll(), timeout)
