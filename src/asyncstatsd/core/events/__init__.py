"""Event dispatch for transport callbacks."""

from asyncstatsd.core.events.registry import EventBus, Handler, UnhandledPolicy

__all__ = [
    "EventBus",
    "Handler",
    "UnhandledPolicy",
]
