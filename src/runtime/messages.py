"""Status, title, and notification text builders for timer flows."""

from __future__ import annotations

from pomodoro import PomodoroSnapshot
from pomodoro.constants import (
    ACTION_COMMIT_SETTINGS,
    ACTION_PAUSE,
    ACTION_SET_MODE,
    ACTION_START,
    MODE_WORK,
    PHASE_PAUSED,
    PHASE_RUNNING,
    REASON_ALREADY_RUNNING,
    REASON_INVALID_MODE,
    REASON_INVALID_SETTINGS,
    REASON_NOT_RUNNING,
)


def format_duration(seconds: int) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def display_title(snapshot: PomodoroSnapshot) -> str:
    """Window title: the work label (or break name) and the countdown."""
    label = snapshot.title if snapshot.mode == MODE_WORK and snapshot.title else snapshot.mode
    return f"{label} {format_duration(snapshot.remaining_seconds)}"


def completion_message(mode: str) -> str:
    return f"{mode} finished!"


def status_message(snapshot: PomodoroSnapshot) -> str:
    remaining = format_duration(snapshot.remaining_seconds)
    if snapshot.phase == PHASE_RUNNING:
        return f"{snapshot.mode} running ({remaining} remaining)"
    if snapshot.phase == PHASE_PAUSED:
        return f"{snapshot.mode} paused ({remaining} remaining)"
    return f"Ready for {snapshot.mode}"


def rejection_text(action: str, reason: str) -> str:
    if reason == REASON_ALREADY_RUNNING and action == ACTION_START:
        return "The timer is already running."
    if reason == REASON_NOT_RUNNING and action == ACTION_PAUSE:
        return "The timer is not running."
    if reason == REASON_INVALID_MODE and action == ACTION_SET_MODE:
        return "Unknown mode."
    if reason == REASON_INVALID_SETTINGS and action == ACTION_COMMIT_SETTINGS:
        return "Settings were not saved."
    return "That action is not possible right now."
