"""Shared test fixtures for all test modules."""

import socket
from collections.abc import AsyncIterator

import pytest
from tests.helpers import DatagramCollector

from asyncstatsd.adapters.transport.server import StatsdServer


@pytest.fixture
def free_udp_port() -> int:
    """A UDP port on 127.0.0.1 that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port: int = sock.getsockname()[1]
    return port


@pytest.fixture
def collector() -> DatagramCollector:
    """Fresh collector for each test."""
    return DatagramCollector()


@pytest.fixture
async def statsd_server(
    free_udp_port: int, collector: DatagramCollector
) -> AsyncIterator[StatsdServer]:
    """Listening server on all interfaces, wired to the collector."""
    server = StatsdServer(
        "0.0.0.0",
        free_udp_port,
        on_datagram=collector,
        on_error=collector.on_error,
    )
    await server.listen()
    yield server
    server.close()
