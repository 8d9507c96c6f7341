"""Python logging integration for asyncstatsd.

Provides the package loggers and a handler that reports log volume as
statsd counters through a StatsdClient.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from asyncstatsd.core.models import TransportState

if TYPE_CHECKING:
    from asyncstatsd.adapters.transport.client import StatsdClient

ROOT_LOGGER_NAME = "asyncstatsd"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def _log_failed_send(future: "asyncio.Future[int | None]") -> None:
    if not future.cancelled() and future.exception() is not None:
        get_logger(__name__).debug("Log counter not sent: %s", future.exception())


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the asyncstatsd namespace.

    Args:
        name: Usually __name__ of the calling module.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


class StatsdLogHandler(logging.Handler):
    """Logging handler that counts records as statsd increments.

    Each record becomes ``increment("{prefix}.{levelname}")``, e.g.
    "log.error". Records from asyncstatsd's own loggers are skipped, and
    nothing is sent while the client is not connected.

    Example:
        ```python
        client = StatsdClient("localhost", 8125)
        await client.connect()
        logging.getLogger().addHandler(StatsdLogHandler(client))
        ```

    The handler must be used from the thread running the client's loop.
    """

    def __init__(
        self,
        client: "StatsdClient",
        prefix: str = "log",
        rate: float | None = None,
        level: int = logging.NOTSET,
    ) -> None:
        """Initialize the handler.

        Args:
            client: Connected client used to send counters.
            prefix: Key prefix for the counters.
            rate: Optional sampling rate for the increments.
            level: Minimum record level handled.
        """
        super().__init__(level)
        self._client = client
        self._prefix = prefix
        self._rate = rate

    def _is_own_record(self, record: logging.LogRecord) -> bool:
        return record.name == ROOT_LOGGER_NAME or record.name.startswith(
            f"{ROOT_LOGGER_NAME}."
        )

    def emit(self, record: logging.LogRecord) -> None:
        """Send one increment for the record's level."""
        if self._is_own_record(record):
            return
        if self._client.state is not TransportState.READY:
            return
        try:
            future = self._client.increment(
                f"{self._prefix}.{record.levelname.lower()}", self._rate
            )
        except Exception:
            self.handleError(record)
            return
        future.add_done_callback(_log_failed_send)
