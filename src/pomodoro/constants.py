"""Mode, phase, action, and reason constants used by pomodoro runtime logic."""

from __future__ import annotations

MODE_WORK = "Work"
MODE_SHORT_BREAK = "Short Break"
MODE_LONG_BREAK = "Long Break"

MODES: tuple[str, ...] = (MODE_WORK, MODE_SHORT_BREAK, MODE_LONG_BREAK)
BREAK_MODES: frozenset[str] = frozenset({MODE_SHORT_BREAK, MODE_LONG_BREAK})

DEFAULT_TITLE = "Work"
DEFAULT_WORK_MINUTES = 13
DEFAULT_SHORT_BREAK_MINUTES = 2
DEFAULT_LONG_BREAK_MINUTES = 10
DEFAULT_SESSIONS_BEFORE_LONG_BREAK = 4

PHASE_IDLE = "idle"
PHASE_RUNNING = "running"
PHASE_PAUSED = "paused"

ACTIVE_PHASES: frozenset[str] = frozenset({PHASE_RUNNING, PHASE_PAUSED})

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESET = "reset"
ACTION_SET_MODE = "set_mode"
ACTION_COMMIT_SETTINGS = "commit_settings"

ACTION_SYNC = "sync"
ACTION_TICK = "tick"
ACTION_COMPLETED = "completed"

REASON_STARTED = "started"
REASON_RESUMED = "resumed"
REASON_PAUSED = "paused"
REASON_RESET = "reset"
REASON_MODE_SWITCHED = "mode_switched"
REASON_SETTINGS_COMMITTED = "settings_committed"
REASON_ALREADY_RUNNING = "already_running"
REASON_NOT_RUNNING = "not_running"
REASON_INVALID_MODE = "invalid_mode"
REASON_INVALID_SETTINGS = "invalid_settings"
REASON_UNSUPPORTED_ACTION = "unsupported_action"

REASON_TICK = "tick"
REASON_COMPLETED = "completed"
REASON_STARTUP = "startup"
