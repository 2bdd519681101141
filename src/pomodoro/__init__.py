from .clock import Clock, SystemClock
from .codec import LegacySession
from .errors import LedgerError, PomodoroError, SettingsValidationError
from .ledger import Activity, ActivityLedger, Segment
from .modes import Mode, mode_duration_seconds, next_mode
from .service import (
    PomodoroAction,
    PomodoroActionResult,
    PomodoroPhase,
    PomodoroSnapshot,
    PomodoroTick,
    PomodoroTimer,
)
from .settings import TimerSettings, settings_from_mapping, settings_to_mapping
from .statistics import DailyHistogram, DashboardStatistics, compute_statistics

__all__ = [
    "Activity",
    "ActivityLedger",
    "Clock",
    "DailyHistogram",
    "DashboardStatistics",
    "LedgerError",
    "LegacySession",
    "Mode",
    "PomodoroAction",
    "PomodoroActionResult",
    "PomodoroError",
    "PomodoroPhase",
    "PomodoroSnapshot",
    "PomodoroTick",
    "PomodoroTimer",
    "Segment",
    "SettingsValidationError",
    "SystemClock",
    "TimerSettings",
    "compute_statistics",
    "mode_duration_seconds",
    "next_mode",
    "settings_from_mapping",
    "settings_to_mapping",
]
