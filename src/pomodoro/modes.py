"""Mode policy: which interval follows the one that just ended."""

from __future__ import annotations

from typing import Literal

from .constants import (
    MODE_LONG_BREAK,
    MODE_SHORT_BREAK,
    MODE_WORK,
    MODES,
)

Mode = Literal["Work", "Short Break", "Long Break"]


def is_mode(value: object) -> bool:
    return isinstance(value, str) and value in MODES


def next_mode(
    current: Mode,
    completed_work_count: int,
    sessions_before_long: int,
) -> Mode:
    """Return the mode that follows `current`.

    A work interval is followed by a long break every `sessions_before_long`
    completed work intervals, otherwise by a short break. Breaks always lead
    back to work.
    """
    if current != MODE_WORK:
        return MODE_WORK
    if (
        sessions_before_long > 0
        and completed_work_count > 0
        and completed_work_count % sessions_before_long == 0
    ):
        return MODE_LONG_BREAK
    return MODE_SHORT_BREAK


def mode_duration_seconds(settings, mode: Mode) -> int:
    """Target duration of `mode` under the given timer settings."""
    if mode == MODE_WORK:
        minutes = settings.work_minutes
    elif mode == MODE_SHORT_BREAK:
        minutes = settings.short_break_minutes
    elif mode == MODE_LONG_BREAK:
        minutes = settings.long_break_minutes
    else:
        raise ValueError(f"Unknown mode: {mode!r}")
    return int(minutes) * 60
