"""Activity ledger: ordered history of interval attempts and their segments."""

from __future__ import annotations

import datetime as dt
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional

from .constants import MODE_WORK
from .errors import LedgerError
from .modes import Mode


@dataclass(frozen=True)
class Segment:
    """One contiguous run between a start/resume and a pause/stop."""
    start: dt.datetime
    end: dt.datetime
    elapsed_seconds: int


@dataclass
class Activity:
    """One attempt at a work or break interval."""
    id: int
    mode: Mode
    title: Optional[str]
    start: dt.datetime
    end: Optional[dt.datetime] = None
    segments: list[Segment] = field(default_factory=list)
    elapsed_seconds: int = 0
    completed: bool = False
    segment_start: Optional[dt.datetime] = None

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def is_running(self) -> bool:
        return self.segment_start is not None


class ActivityLedger:
    """Append-only activity store; only the last entry may be amended."""

    def __init__(
        self,
        activities: Iterable[Activity] = (),
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._activities: list[Activity] = list(activities)
        self._logger = logger or logging.getLogger("pomodoro.ledger")
        self._next_id = max((activity.id for activity in self._activities), default=0) + 1

    def __len__(self) -> int:
        return len(self._activities)

    def __iter__(self) -> Iterator[Activity]:
        return iter(tuple(self._activities))

    @property
    def activities(self) -> tuple[Activity, ...]:
        return tuple(self._activities)

    def last(self) -> Optional[Activity]:
        return self._activities[-1] if self._activities else None

    def open_activity(self) -> Optional[Activity]:
        last = self.last()
        if last is not None and last.is_open:
            return last
        return None

    def completed_count(self, mode: Mode) -> int:
        return sum(
            1 for activity in self._activities if activity.mode == mode and activity.completed
        )

    def begin_activity(
        self,
        mode: Mode,
        title: Optional[str],
        now: dt.datetime,
    ) -> Activity:
        if self.open_activity() is not None:
            raise LedgerError("Cannot begin an activity while another one is open")

        activity = Activity(
            id=self._next_id,
            mode=mode,
            title=title if mode == MODE_WORK else None,
            start=now,
        )
        self._next_id += 1
        self._activities.append(activity)
        self._logger.debug("Activity %d begun: mode=%s", activity.id, mode)
        return activity

    def start_segment(self, activity: Activity, now: dt.datetime) -> None:
        if activity.segment_start is not None:
            raise LedgerError(f"Activity {activity.id} already has an open segment")
        activity.segment_start = now

    def end_segment(self, activity: Activity, now: dt.datetime) -> Segment:
        started_at = activity.segment_start
        if started_at is None:
            raise LedgerError(f"Activity {activity.id} has no open segment")

        # A clock that moved backwards closes an empty segment.
        ended_at = max(now, started_at)
        elapsed = int(math.floor((ended_at - started_at).total_seconds()))
        segment = Segment(start=started_at, end=ended_at, elapsed_seconds=elapsed)
        activity.segments.append(segment)
        activity.elapsed_seconds += elapsed
        activity.segment_start = None
        return segment

    def finalize(
        self,
        activity: Activity,
        now: dt.datetime,
        *,
        completed: bool,
    ) -> Activity:
        index = self._index_of(activity)
        if index != len(self._activities) - 1:
            raise LedgerError(f"Activity {activity.id} is not the last ledger entry")

        if activity.segment_start is not None:
            self.end_segment(activity, now)
        activity.end = max(now, activity.start)
        activity.completed = completed
        self._activities[index] = activity
        self._logger.debug(
            "Activity %d finalized: mode=%s completed=%s elapsed=%ss",
            activity.id,
            activity.mode,
            completed,
            activity.elapsed_seconds,
        )
        return activity

    def discard_if_draft(self, activity: Activity) -> bool:
        last = self.last()
        if last is None or last.id != activity.id:
            return False
        if last.completed or last.end is not None:
            return False
        self._activities.pop()
        self._logger.debug("Activity %d discarded", activity.id)
        return True

    def persist(self) -> list[dict[str, Any]]:
        # Lazy import: codec depends on Activity and Segment from this module.
        from .codec import activity_to_record

        return [activity_to_record(activity) for activity in self._activities]

    @classmethod
    def restore(
        cls,
        records: Iterable[Any],
        *,
        logger: Optional[logging.Logger] = None,
    ) -> "ActivityLedger":
        from .codec import activities_from_records

        return cls(activities_from_records(records), logger=logger)

    def _index_of(self, activity: Activity) -> int:
        for index in range(len(self._activities) - 1, -1, -1):
            if self._activities[index].id == activity.id:
                return index
        raise LedgerError(f"Activity {activity.id} is not in the ledger")
