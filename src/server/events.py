"""Websocket event encoding and the replay cache for late-joining clients."""

from __future__ import annotations

import datetime as dt
import json
import threading
from typing import Any, Callable

from contracts.ui_protocol import STICKY_EVENT_ORDER, STICKY_EVENT_TYPES


def _encode_value(value: Any) -> Any:
    if isinstance(value, (dt.datetime, dt.date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], dt.datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event with its type and a UTC timestamp."""
    now = now_fn() if now_fn is not None else dt.datetime.now(dt.timezone.utc)
    return json.dumps(
        {"type": event_type, "timestamp": now.isoformat(), **payload},
        default=_encode_value,
    )


class StickyEventStore:
    """Latest event per sticky type, replayed in a fixed order on connect."""
    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            self._events[event_type] = message

    def forget(self, event_type: str) -> None:
        with self._lock:
            self._events.pop(event_type, None)

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]
