"""Thread-safe pomodoro state machine backed by the activity ledger."""

from __future__ import annotations

import datetime as dt
import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Optional, Protocol

from .clock import Clock, SystemClock
from .codec import LegacySession
from .constants import (
    ACTION_COMMIT_SETTINGS,
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_SET_MODE,
    ACTION_START,
    ACTIVE_PHASES,
    MODE_WORK,
    PHASE_IDLE,
    PHASE_PAUSED,
    PHASE_RUNNING,
    REASON_ALREADY_RUNNING,
    REASON_INVALID_MODE,
    REASON_INVALID_SETTINGS,
    REASON_MODE_SWITCHED,
    REASON_NOT_RUNNING,
    REASON_PAUSED,
    REASON_RESET,
    REASON_RESUMED,
    REASON_SETTINGS_COMMITTED,
    REASON_STARTED,
    REASON_UNSUPPORTED_ACTION,
)
from .errors import SettingsValidationError
from .ledger import Activity, ActivityLedger
from .modes import Mode, is_mode, mode_duration_seconds, next_mode
from .settings import TimerSettings, settings_from_mapping
from .statistics import DashboardStatistics, compute_statistics

PomodoroPhase = Literal["idle", "running", "paused"]
PomodoroAction = Literal["start", "pause", "reset", "set_mode", "commit_settings"]


class TimerStoreLike(Protocol):
    def save_ledger(self, ledger: ActivityLedger) -> None:
        ...

    def save_settings(self, settings: TimerSettings) -> None:
        ...


@dataclass(frozen=True)
class PomodoroSnapshot:
    """Immutable timer snapshot exposed to runtime and UI publishers."""
    phase: PomodoroPhase
    mode: Mode
    title: Optional[str]
    duration_seconds: int
    remaining_seconds: int

    @property
    def is_active(self) -> bool:
        return self.phase in ACTIVE_PHASES

    @property
    def progress_percent(self) -> float:
        if self.duration_seconds <= 0:
            return 0.0
        done = self.duration_seconds - self.remaining_seconds
        return round(100.0 * done / self.duration_seconds, 1)


@dataclass(frozen=True)
class PomodoroActionResult:
    """Result envelope returned after applying a timer action."""
    action: PomodoroAction
    accepted: bool
    reason: str
    snapshot: PomodoroSnapshot
    detail: Optional[str] = None


@dataclass(frozen=True)
class PomodoroTick:
    """Tick payload emitted while the countdown is running."""
    snapshot: PomodoroSnapshot
    completed: bool = False
    finished_mode: Optional[Mode] = None
    auto_started: bool = False


class PomodoroTimer:
    """Work/break cycle state machine recording every run in the ledger.

    Remaining time is always derived from the ledger timestamps of the
    current activity, so a late or skipped poll never accumulates drift.
    """

    def __init__(
        self,
        *,
        ledger: Optional[ActivityLedger] = None,
        settings: Optional[TimerSettings] = None,
        clock: Optional[Clock] = None,
        store: Optional[TimerStoreLike] = None,
        legacy_sessions: Iterable[LegacySession] = (),
        logger: Optional[logging.Logger] = None,
    ):
        self._ledger = ledger if ledger is not None else ActivityLedger()
        self._settings = settings or TimerSettings()
        self._clock: Clock = clock or SystemClock()
        self._store = store
        self._legacy_sessions = tuple(legacy_sessions)
        self._logger = logger or logging.getLogger("pomodoro")
        self._lock = threading.Lock()

        self._mode: Mode = MODE_WORK
        self._phase: PomodoroPhase = PHASE_IDLE
        self._current: Optional[Activity] = None
        self._last_emitted_remaining: Optional[int] = None

        with self._lock:
            self._adopt_open_activity_locked()

    @property
    def settings(self) -> TimerSettings:
        with self._lock:
            return self._settings

    @property
    def ledger(self) -> ActivityLedger:
        return self._ledger

    def snapshot(self) -> PomodoroSnapshot:
        with self._lock:
            return self._snapshot_locked(self._clock.now())

    def statistics(self, *, tz: Optional[dt.tzinfo] = None) -> DashboardStatistics:
        with self._lock:
            return compute_statistics(
                self._ledger,
                sessions_before_long_break=self._settings.sessions_before_long_break,
                tz=tz,
                legacy_sessions=self._legacy_sessions,
            )

    def apply(
        self,
        action: PomodoroAction,
        *,
        mode: Optional[str] = None,
    ) -> PomodoroActionResult:
        with self._lock:
            now = self._clock.now()
            if action == ACTION_START:
                if self._phase == PHASE_RUNNING:
                    return self._result_locked(action, False, REASON_ALREADY_RUNNING, now)
                reason = self._start_locked(now)
                self._persist_locked()
                return self._result_locked(action, True, reason, now)

            if action == ACTION_PAUSE:
                if self._phase != PHASE_RUNNING or self._current is None:
                    return self._result_locked(action, False, REASON_NOT_RUNNING, now)

                self._ledger.end_segment(self._current, now)
                self._phase = PHASE_PAUSED
                self._last_emitted_remaining = None
                self._persist_locked()
                self._logger.info(
                    "Pomodoro paused: mode=%s remaining=%ss",
                    self._mode,
                    self._remaining_locked(now),
                )
                return self._result_locked(action, True, REASON_PAUSED, now)

            if action == ACTION_RESET:
                self._reset_locked()
                self._persist_locked()
                return self._result_locked(action, True, REASON_RESET, now)

            if action == ACTION_SET_MODE:
                if not is_mode(mode):
                    return self._result_locked(
                        action,
                        False,
                        REASON_INVALID_MODE,
                        now,
                        detail=f"Unknown mode: {mode!r}",
                    )
                self._switch_mode_locked(now, completed=False, explicit_mode=mode)
                self._persist_locked()
                return self._result_locked(action, True, REASON_MODE_SWITCHED, now)

            return self._result_locked(action, False, REASON_UNSUPPORTED_ACTION, now)

    def commit_settings(self, draft: Any) -> PomodoroActionResult:
        """Validate and apply a settings object; the timer is reset on success.

        Anything that is not a valid settings mapping is rejected and leaves
        the timer untouched.
        """
        with self._lock:
            now = self._clock.now()
            try:
                settings = settings_from_mapping(draft, base=self._settings)
            except SettingsValidationError as error:
                self._logger.warning("Rejected settings: %s", error)
                return self._result_locked(
                    ACTION_COMMIT_SETTINGS,
                    False,
                    REASON_INVALID_SETTINGS,
                    now,
                    detail=str(error),
                )

            self._settings = settings
            if self._store is not None:
                try:
                    self._store.save_settings(settings)
                except Exception as error:
                    self._logger.error("Failed to persist settings: %s", error)
            self._reset_locked()
            self._persist_locked()
            self._logger.info("Settings committed: %s", settings)
            return self._result_locked(
                ACTION_COMMIT_SETTINGS,
                True,
                REASON_SETTINGS_COMMITTED,
                now,
            )

    def poll(self) -> Optional[PomodoroTick]:
        """Return tick updates while running (max once per second + completion)."""
        with self._lock:
            if self._phase != PHASE_RUNNING:
                return None

            now = self._clock.now()
            remaining = self._remaining_locked(now)
            if remaining <= 0:
                return self._finish_locked(now)

            if self._last_emitted_remaining == remaining:
                return None

            self._last_emitted_remaining = remaining
            return PomodoroTick(snapshot=self._snapshot_locked(now), completed=False)

    def _start_locked(self, now: dt.datetime) -> str:
        reason = REASON_STARTED
        if self._current is None:
            self._current = self._ledger.begin_activity(
                self._mode,
                self._title_locked(),
                now,
            )
        elif self._current.segments:
            reason = REASON_RESUMED

        self._ledger.start_segment(self._current, now)
        self._phase = PHASE_RUNNING
        self._last_emitted_remaining = None
        self._logger.info(
            "Pomodoro %s: mode=%s activity=%d remaining=%ss",
            reason,
            self._mode,
            self._current.id,
            self._remaining_locked(now),
        )
        return reason

    def _reset_locked(self) -> None:
        activity = self._current
        if activity is not None and activity.is_open:
            self._ledger.discard_if_draft(activity)
        self._current = None
        self._phase = PHASE_IDLE
        self._last_emitted_remaining = None
        self._logger.info("Pomodoro reset: mode=%s", self._mode)

    def _finish_locked(self, now: dt.datetime) -> PomodoroTick:
        activity = self._current
        finished_mode = self._mode
        finished_at = now
        if activity is not None and activity.segment_start is not None:
            left = max(0, self._duration_locked() - activity.elapsed_seconds)
            finished_at = activity.segment_start + dt.timedelta(seconds=left)

        self._switch_mode_locked(now, completed=True, finalize_at=finished_at)

        auto_started = False
        if self._settings.auto_start:
            self._start_locked(now)
            auto_started = True
        self._persist_locked()

        return PomodoroTick(
            snapshot=self._snapshot_locked(now),
            completed=True,
            finished_mode=finished_mode,
            auto_started=auto_started,
        )

    def _switch_mode_locked(
        self,
        now: dt.datetime,
        *,
        completed: bool,
        explicit_mode: Optional[Mode] = None,
        finalize_at: Optional[dt.datetime] = None,
    ) -> None:
        activity = self._current
        if activity is not None and activity.is_open:
            if completed:
                self._ledger.finalize(activity, finalize_at or now, completed=True)
                self._logger.info(
                    "Pomodoro completed: mode=%s activity=%d elapsed=%ss",
                    activity.mode,
                    activity.id,
                    activity.elapsed_seconds,
                )
            elif activity.segments or activity.is_running:
                self._ledger.finalize(activity, now, completed=False)
                self._logger.info(
                    "Pomodoro abandoned: mode=%s activity=%d elapsed=%ss",
                    activity.mode,
                    activity.id,
                    activity.elapsed_seconds,
                )
            else:
                self._ledger.discard_if_draft(activity)

        previous_mode = self._mode
        if explicit_mode is None:
            explicit_mode = next_mode(
                previous_mode,
                self._ledger.completed_count(MODE_WORK),
                self._settings.sessions_before_long_break,
            )
        self._mode = explicit_mode
        self._current = self._ledger.begin_activity(self._mode, self._title_locked(), now)
        self._phase = PHASE_IDLE
        self._last_emitted_remaining = None
        self._logger.info("Mode switched: %s -> %s", previous_mode, self._mode)

    def _adopt_open_activity_locked(self) -> None:
        activity = self._ledger.open_activity()
        if activity is None:
            return

        if activity.segment_start is not None:
            self._logger.warning(
                "Dropping unfinished segment of activity %d started at %s",
                activity.id,
                activity.segment_start.isoformat(),
            )
            activity.segment_start = None
            self._persist_locked()

        self._current = activity
        self._mode = activity.mode
        self._phase = PHASE_PAUSED if activity.segments else PHASE_IDLE
        self._logger.info(
            "Restored open activity %d: mode=%s elapsed=%ss",
            activity.id,
            activity.mode,
            activity.elapsed_seconds,
        )

    def _persist_locked(self) -> None:
        if self._store is None:
            return
        try:
            self._store.save_ledger(self._ledger)
        except Exception as error:
            self._logger.error("Failed to persist activities: %s", error)

    def _title_locked(self) -> Optional[str]:
        return self._settings.title if self._mode == MODE_WORK else None

    def _duration_locked(self) -> int:
        return mode_duration_seconds(self._settings, self._mode)

    def _result_locked(
        self,
        action: PomodoroAction,
        accepted: bool,
        reason: str,
        now: dt.datetime,
        *,
        detail: Optional[str] = None,
    ) -> PomodoroActionResult:
        return PomodoroActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self._snapshot_locked(now),
            detail=detail,
        )

    def _snapshot_locked(self, now: dt.datetime) -> PomodoroSnapshot:
        return PomodoroSnapshot(
            phase=self._phase,
            mode=self._mode,
            title=self._title_locked(),
            duration_seconds=self._duration_locked(),
            remaining_seconds=self._remaining_locked(now),
        )

    def _remaining_locked(self, now: dt.datetime) -> int:
        duration = self._duration_locked()
        activity = self._current
        if activity is None:
            return duration

        elapsed = float(activity.elapsed_seconds)
        if activity.segment_start is not None:
            elapsed += max(0.0, (now - activity.segment_start).total_seconds())
        remaining = int(math.ceil(duration - elapsed))
        return max(0, min(duration, remaining))
