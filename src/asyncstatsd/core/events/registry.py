"""Named event dispatch with explicit handler registration."""

from collections.abc import Callable
from enum import Enum
from typing import Any

from asyncstatsd.core.errors import UnhandledEventError

Handler = Callable[..., Any]


class UnhandledPolicy(Enum):
    """What to do when an event is emitted with no handlers."""

    IGNORE = "ignore"
    FAIL = "fail"


class EventBus:
    """Maps event names to ordered lists of handlers.

    Handlers run synchronously in registration order. Events without
    handlers are ignored or raise UnhandledEventError depending on policy.

    Example:
        ```python
        bus = EventBus()
        bus.subscribe("datagram", lambda payload, peer: print(payload))
        bus.emit("datagram", b"some.task:133|ms", ("127.0.0.1", 52731))
        ```
    """

    def __init__(self, unhandled: UnhandledPolicy = UnhandledPolicy.IGNORE) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self.unhandled = unhandled

    def subscribe(self, event: str, handler: Handler) -> None:
        """Append a handler for an event.

        Raises:
            TypeError: If handler is not callable.
        """
        if not callable(handler):
            raise TypeError("handler must be callable")
        self._handlers.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        """Remove the first registration of handler for event.

        Raises:
            ValueError: If the handler is not registered for the event.
        """
        handlers = self._handlers.get(event, [])
        if handler not in handlers:
            raise ValueError(f"handler not registered for {event!r}")
        handlers.remove(handler)
        if not handlers:
            del self._handlers[event]

    def handlers(self, event: str) -> list[Handler]:
        """Return a copy of the handlers registered for an event."""
        return list(self._handlers.get(event, []))

    def emit(self, event: str, *args: Any, **kwargs: Any) -> int:
        """Invoke every handler for event with the given arguments.

        Returns:
            Number of handlers invoked.

        Raises:
            UnhandledEventError: If nothing handles the event and the
                policy is FAIL.
        """
        handlers = self.handlers(event)
        if not handlers:
            if self.unhandled is UnhandledPolicy.FAIL:
                raise UnhandledEventError("no handler for event", {"event": event})
            return 0
        for handler in handlers:
            handler(*args, **kwargs)
        return len(handlers)
