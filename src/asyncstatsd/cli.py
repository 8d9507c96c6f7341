"""Command line interface: run a listening server or send a single metric."""

import argparse
import asyncio
import logging
import sys
from typing import Any

from asyncstatsd.adapters.logging import get_logger
from asyncstatsd.adapters.transport.client import StatsdClient
from asyncstatsd.adapters.transport.server import StatsdServer
from asyncstatsd.core.config import DEFAULT_PORT
from asyncstatsd.core.encoding.wire import parse_line
from asyncstatsd.core.errors import DecodeError, StatsdError
from asyncstatsd.core.models import MetricKind

logger = get_logger(__name__)

KINDS = {
    "timing": MetricKind.TIMING,
    "gauge": MetricKind.GAUGE,
    "delta": MetricKind.DELTA,
    "increment": MetricKind.INCREMENT,
    "decrement": MetricKind.DECREMENT,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asyncstatsd",
        description="Send statsd metrics or listen for them over UDP",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    listen = commands.add_parser("listen", help="Log every datagram received")
    listen.add_argument("--host", default="0.0.0.0", help="Bind address")
    listen.add_argument("--port", type=int, default=DEFAULT_PORT, help="Bind port")
    listen.add_argument(
        "--decode",
        action="store_true",
        help="Parse each datagram as a statsd line before logging it",
    )

    send = commands.add_parser("send", help="Send one metric and exit")
    send.add_argument("kind", choices=sorted(KINDS), help="Metric kind")
    send.add_argument("key", help="Metric key")
    send.add_argument(
        "value",
        nargs="?",
        type=float,
        help="Metric value (not used by increment/decrement)",
    )
    send.add_argument("--rate", type=float, default=None, help="Sampling rate")
    send.add_argument("--host", default="localhost", help="Destination host")
    send.add_argument(
        "--port", type=int, default=DEFAULT_PORT, help="Destination port"
    )
    return parser


def _print_datagram(decode: bool) -> Any:
    def handler(payload: bytes, peer: Any) -> None:
        if not decode:
            print(f"{peer[0]}:{peer[1]} {payload.decode('utf-8', errors='replace')}")
            return
        try:
            line = parse_line(payload)
        except DecodeError as e:
            print(f"{peer[0]}:{peer[1]} invalid: {e}")
        else:
            print(
                f"{peer[0]}:{peer[1]} key={line.key} value={line.value} "
                f"unit={line.unit} rate={line.rate}"
            )

    return handler


async def run_listen(arguments: argparse.Namespace) -> None:
    server = StatsdServer(
        arguments.host,
        arguments.port,
        on_datagram=_print_datagram(arguments.decode),
    )
    await server.listen()
    print(f"StatsD server listening on {server.host}:{server.port}")
    try:
        await server.serve_forever()
    finally:
        server.close()


async def run_send(arguments: argparse.Namespace) -> int | None:
    kind = KINDS[arguments.kind]
    if arguments.value is None and kind not in (
        MetricKind.INCREMENT,
        MetricKind.DECREMENT,
    ):
        raise StatsdError(f"{arguments.kind} requires a value")
    async with StatsdClient(arguments.host, arguments.port) as client:
        return await client.send_metric(
            arguments.key, arguments.value, kind, arguments.rate
        )


def main(argv: list[str] | None = None) -> int:
    """Entry point for the asyncstatsd console script."""
    arguments = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if arguments.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if arguments.command == "listen":
            asyncio.run(run_listen(arguments))
        else:
            written = asyncio.run(run_send(arguments))
            if written is None:
                logger.info("Metric sampled out, nothing sent")
    except (StatsdError, ValueError) as e:
        print(f"asyncstatsd: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutting down...")
    return 0
