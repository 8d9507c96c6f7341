"""BDD step definitions for statsd round-trip features.

Each When step runs a complete exchange in its own event loop: the server
(if any) is bound, the client connects and sends, and both are closed
before the Then steps inspect what happened.
"""

import asyncio
import socket
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when
from tests.helpers import DatagramCollector

from asyncstatsd.adapters.transport.client import StatsdClient
from asyncstatsd.adapters.transport.server import StatsdServer
from asyncstatsd.core.errors import BindError
from asyncstatsd.core.models import TransportState
from asyncstatsd.core.sampling import Sampler

ClientAction = Callable[[StatsdClient], "asyncio.Future[int | None]"]


@dataclass
class RoundTripContext:
    """State shared between the steps of one scenario."""

    server_host: str = "0.0.0.0"
    client_host: str = "127.0.0.1"
    port: int = 0
    listening: bool = True
    sampler: Sampler | None = None
    collector: DatagramCollector = field(default_factory=DatagramCollector)
    written: int | None = None
    client_port: int | None = None
    bind_error: BindError | None = None
    second_state: TransportState | None = None


def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Run a coroutine in a new event loop (for sync step functions)."""
    return asyncio.run(coro)


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port: int = sock.getsockname()[1]
    return port


async def _exchange(ctx: RoundTripContext, action: ClientAction) -> None:
    server = None
    if ctx.listening:
        server = StatsdServer(ctx.server_host, ctx.port, on_datagram=ctx.collector)
        await server.listen()
    try:
        async with StatsdClient(ctx.client_host, ctx.port, sampler=ctx.sampler) as client:
            ctx.client_port = client.sockname[1]
            ctx.written = await action(client)
            # Give the datagram time to arrive on loopback
            await asyncio.sleep(0.1)
    finally:
        if server is not None:
            server.close()


async def _bind_twice(ctx: RoundTripContext) -> None:
    first = StatsdServer(ctx.server_host, ctx.port)
    await first.listen()
    second = StatsdServer(ctx.server_host, ctx.port)
    try:
        await second.listen()
    except BindError as e:
        ctx.bind_error = e
    finally:
        ctx.second_state = second.state
        first.close()
        second.close()


@pytest.fixture
def ctx() -> RoundTripContext:
    """Fresh scenario context for each test."""
    return RoundTripContext()


# === Given ===
@given("a statsd server on all interfaces")
def step_server(ctx: RoundTripContext) -> None:
    ctx.server_host = "0.0.0.0"
    ctx.port = _free_port()


@given(parsers.parse("a statsd client for {host} on the server port"))
def step_client(ctx: RoundTripContext, host: str) -> None:
    ctx.client_host = host


@given("no server is listening")
def step_no_server(ctx: RoundTripContext) -> None:
    ctx.listening = False


@given("the sampler always keeps events")
def step_sampler_keeps(ctx: RoundTripContext) -> None:
    ctx.sampler = Sampler(lambda: 0.0)


@given("the sampler never keeps events")
def step_sampler_drops(ctx: RoundTripContext) -> None:
    ctx.sampler = Sampler(lambda: 0.999)


# === When ===
@when(parsers.parse('the client sends a timing of {value:g} for "{key}"'))
def step_send_timing(ctx: RoundTripContext, value: float, key: str) -> None:
    run_async(_exchange(ctx, lambda client: client.timing(key, value)))


@when(parsers.parse('the client increments "{key}" at rate {rate:g}'))
def step_increment(ctx: RoundTripContext, key: str, rate: float) -> None:
    run_async(_exchange(ctx, lambda client: client.increment(key, rate)))


@when("a second server binds the same port")
def step_bind_twice(ctx: RoundTripContext) -> None:
    run_async(_bind_twice(ctx))


# === Then ===
@then(parsers.parse("the write resolves with {count:d} bytes"))
def step_written(ctx: RoundTripContext, count: int) -> None:
    assert ctx.written == count


@then("the write resolves with nothing sent")
def step_nothing_written(ctx: RoundTripContext) -> None:
    assert ctx.written is None


@then(parsers.parse('the server receives exactly one datagram "{line}"'))
def step_one_datagram(ctx: RoundTripContext, line: str) -> None:
    assert ctx.collector.payloads == [line.encode()]


@then("the server receives no datagrams")
def step_no_datagrams(ctx: RoundTripContext) -> None:
    assert ctx.collector.payloads == []


@then("the datagram came from the client's port")
def step_peer_port(ctx: RoundTripContext) -> None:
    _, peer = ctx.collector.datagrams[0]
    assert peer[1] == ctx.client_port


@then("binding fails with BindError")
def step_bind_error(ctx: RoundTripContext) -> None:
    assert isinstance(ctx.bind_error, BindError)


@then("the second server is unbound")
def step_second_unbound(ctx: RoundTripContext) -> None:
    assert ctx.second_state is TransportState.UNBOUND
