"""Event log — bounded store of build events across generations.

Events are kept in arrival order in a ring buffer; the oldest are dropped
once ``max_events`` is reached.  Queries walk the buffer newest first.

Thread Safety:
    Every method takes the log's ``threading.Lock``.  The watcher thread
    and the event loop may both hold a reference.

"""

from __future__ import annotations

import threading
from collections import Counter, deque
from collections.abc import Iterable
from typing import TypeVar

from vellum.observability.events import BuildEventType

E = TypeVar("E")


def _label(event: BuildEventType) -> str:
    """The path-like text an event is about (node label, output path or trigger)."""
    return getattr(event, "path", None) or getattr(event, "trigger", None) or ""


class EventLog:
    """Ring buffer of build events with filtered, newest-first queries.

    Args:
        max_events: Number of events retained.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[BuildEventType] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def append(self, event: BuildEventType) -> None:
        with self._lock:
            self._events.append(event)

    def extend(self, events: Iterable[BuildEventType]) -> None:
        with self._lock:
            self._events.extend(events)

    def _snapshot(self) -> list[BuildEventType]:
        with self._lock:
            return list(self._events)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        path: str | None = None,
        limit: int = 100,
    ) -> list[BuildEventType]:
        """Matching events, newest first.

        Args:
            event_type: Keep only instances of this event class.
            since_ns: Keep only events stamped at or after this time.
            path: Keep only events whose node label, output path or trigger
                contains this text.
            limit: Maximum number of events returned.

        """
        matches: list[BuildEventType] = []
        for event in reversed(self._snapshot()):
            if len(matches) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if since_ns and event.timestamp_ns < since_ns:
                continue
            if path is not None and path not in _label(event):
                continue
            matches.append(event)
        return matches

    def latest(self, event_type: type[E]) -> E | None:
        """Most recent event of ``event_type``, if any."""
        found = self.query(event_type=event_type, limit=1)
        return found[0] if found else None  # type: ignore[return-value]

    def recent(self, n: int = 20) -> list[BuildEventType]:
        """The ``n`` newest events, oldest first."""
        return self._snapshot()[-n:]

    def clear(self) -> int:
        """Drop every event; returns how many were dropped."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
        return count

    def stats(self) -> dict[str, object]:
        """Event totals by class name."""
        events = self._snapshot()
        return {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": dict(Counter(type(event).__name__ for event in events)),
        }
