"""Web UI websocket event, state, and intent constants."""

from __future__ import annotations

# Websocket event types (server -> UI)
EVENT_HELLO = "hello"
EVENT_STATE_UPDATE = "state_update"
EVENT_TIMER = "timer"
EVENT_STATISTICS = "statistics"
EVENT_SETTINGS = "settings"
EVENT_NOTIFICATION = "notification"
EVENT_ERROR = "error"

# UI runtime states
STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"
STATE_ERROR = "error"

# Intents (UI -> server)
INTENT_START = "start"
INTENT_PAUSE = "pause"
INTENT_RESET = "reset"
INTENT_SET_MODE = "set_mode"
INTENT_OPEN_SETTINGS = "open_settings"
INTENT_COMMIT_SETTINGS = "commit_settings"
INTENT_NOTIFICATION_PERMISSION = "notification_permission"

INTENT_NAMES: frozenset[str] = frozenset(
    {
        INTENT_START,
        INTENT_PAUSE,
        INTENT_RESET,
        INTENT_SET_MODE,
        INTENT_OPEN_SETTINGS,
        INTENT_COMMIT_SETTINGS,
        INTENT_NOTIFICATION_PERMISSION,
    }
)

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_STATE_UPDATE,
        EVENT_TIMER,
        EVENT_STATISTICS,
        EVENT_SETTINGS,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_SETTINGS,
    EVENT_TIMER,
    EVENT_STATISTICS,
    EVENT_ERROR,
    EVENT_STATE_UPDATE,
)
