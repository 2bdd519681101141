"""Dashboard statistics derived from the full activity history."""

from __future__ import annotations

import datetime as dt
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from .codec import LegacySession
from .constants import BREAK_MODES, MODE_WORK
from .ledger import Activity


@dataclass(frozen=True)
class DailyHistogram:
    """Completed work intervals per calendar date, dates ascending."""
    labels: tuple[str, ...] = ()
    counts: tuple[int, ...] = ()


@dataclass(frozen=True)
class DashboardStatistics:
    completed_pomodoros: int
    session_count: int
    total_work_minutes: int
    total_break_minutes: int
    daily_histogram: DailyHistogram
    legacy_pomodoros: int = 0


def compute_statistics(
    activities: Iterable[Activity],
    *,
    sessions_before_long_break: int,
    tz: Optional[dt.tzinfo] = None,
    legacy_sessions: Iterable[LegacySession] = (),
) -> DashboardStatistics:
    """Recompute all dashboard figures from scratch.

    Only completed activities count. Dates are taken from each activity's
    start in `tz` (the local time zone when omitted).
    """
    completed_work: list[Activity] = []
    work_seconds = 0
    break_seconds = 0
    for activity in activities:
        if not activity.completed:
            continue
        if activity.mode == MODE_WORK:
            completed_work.append(activity)
            work_seconds += activity.elapsed_seconds
        elif activity.mode in BREAK_MODES:
            break_seconds += activity.elapsed_seconds

    completed_pomodoros = len(completed_work)
    session_count = (
        completed_pomodoros // sessions_before_long_break
        if sessions_before_long_break > 0
        else 0
    )
    return DashboardStatistics(
        completed_pomodoros=completed_pomodoros,
        session_count=session_count,
        total_work_minutes=round(work_seconds / 60),
        total_break_minutes=round(break_seconds / 60),
        daily_histogram=daily_histogram(completed_work, tz=tz),
        legacy_pomodoros=sum(session.pomodoros for session in legacy_sessions),
    )


def daily_histogram(
    activities: Iterable[Activity],
    *,
    tz: Optional[dt.tzinfo] = None,
) -> DailyHistogram:
    per_day: Counter[dt.date] = Counter(
        activity.start.astimezone(tz).date()
        for activity in activities
        if activity.mode == MODE_WORK and activity.completed
    )
    days = sorted(per_day)
    return DailyHistogram(
        labels=tuple(day.isoformat() for day in days),
        counts=tuple(per_day[day] for day in days),
    )
