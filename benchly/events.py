"""Cancellable publish/subscribe used for every lifecycle transition.

Listeners receive the Event (plus any extra emit arguments). A listener can:
    - return False to mark the event cancelled (the emitter then skips the
      default behavior, e.g. a reset or an abort),
    - set ``event.aborted = True`` to stop the remaining listeners and, for
      scheduler ``cycle`` events, the remaining work.

Usage:
    bench.on("cycle", lambda event: print(event.target))
    bench.on("start complete", listener)
    bench.off("cycle", listener)
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

Listener = Callable[..., Any]


class Event:
    """A single emission of a lifecycle event.

    Attributes:
        type: Event type tag (see EventType).
        target: Object the event is about.
        current_target: Object currently emitting the event.
        cancelled: True once a listener returned False.
        aborted: True once a listener asked to stop further processing.
        result: Return value of the last listener called.
        timestamp: Wall-clock creation time (seconds since the epoch).
    """

    def __init__(
        self,
        type: str,
        target: Any = None,
        current_target: Any = None,
        **extra: Any,
    ) -> None:
        self.type = str(type)
        self.target = target
        self.current_target = current_target
        self.cancelled = False
        self.aborted = False
        self.result: Any = None
        self.timestamp = time.time()
        for key, value in extra.items():
            setattr(self, key, value)

    @classmethod
    def create(cls, type_or_event: str | Event | dict[str, Any]) -> Event:
        """Normalize a type name, a property dict or an Event into an Event."""
        if isinstance(type_or_event, Event):
            return type_or_event
        if isinstance(type_or_event, dict):
            return cls(**type_or_event)
        return cls(type_or_event)

    def __repr__(self) -> str:
        return (
            f"Event(type={self.type!r}, target={self.target!r}, "
            f"cancelled={self.cancelled}, aborted={self.aborted})"
        )


class EventEmitter:
    """Mixin providing on/off/emit/listeners over per-type listener lists."""

    def __init__(self) -> None:
        self.events: dict[str, list[Listener]] = {}

    def on(self, type: str, listener: Listener) -> EventEmitter:
        """Register ``listener`` for one or more space-separated event types."""
        for name in str(type).split():
            self.events.setdefault(name, []).append(listener)
        return self

    def off(self, type: str | None = None, listener: Listener | None = None) -> EventEmitter:
        """Unregister listeners.

        Args:
            type: Space-separated event types; all types when None.
            listener: Listener to remove; all listeners of the type(s) when None.
        """
        names = str(type).split() if type else list(self.events)
        for name in names:
            listeners = self.events.get(name)
            if not listeners:
                continue
            if listener is None:
                listeners.clear()
            elif listener in listeners:
                listeners.remove(listener)
        return self

    def emit(self, type_or_event: str | Event | dict[str, Any], *args: Any) -> Any:
        """Call the listeners of an event in registration order.

        Args:
            type_or_event: Event type, Event instance or Event properties.
            *args: Extra arguments passed to every listener after the event.

        Returns:
            The return value of the last listener called.
        """
        event = Event.create(type_or_event)
        if event.current_target is None:
            event.current_target = self
        if event.target is None:
            event.target = self
        event.result = None

        # Snapshot so listeners may add/remove listeners while being called
        for listener in list(self.events.get(event.type, ())):
            event.result = listener(event, *args)
            if event.result is False:
                event.cancelled = True
            if event.aborted:
                break
        return event.result

    def listeners(self, type: str) -> list[Listener]:
        """Return the live listener list for ``type`` (mutations take effect)."""
        return self.events.setdefault(str(type), [])
