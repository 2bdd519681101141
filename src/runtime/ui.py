from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import EVENT_SETTINGS, EVENT_STATISTICS, EVENT_TIMER
from pomodoro import DashboardStatistics, PomodoroSnapshot, TimerSettings, settings_to_mapping

from .messages import display_title, format_duration


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        ...


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        if self._ui_server:
            self._ui_server.publish_state(state, message=message, **payload)

    def publish_timer_update(
        self,
        snapshot: PomodoroSnapshot,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
        message: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "action": action,
            "mode": snapshot.mode,
            "phase": snapshot.phase,
            "title": display_title(snapshot),
            "remaining": format_duration(snapshot.remaining_seconds),
            "remaining_seconds": snapshot.remaining_seconds,
            "duration_seconds": snapshot.duration_seconds,
            "progress_percent": snapshot.progress_percent,
        }
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        if message:
            payload["message"] = message
        self.publish(EVENT_TIMER, **payload)

    def publish_statistics(self, statistics: DashboardStatistics) -> None:
        histogram = statistics.daily_histogram
        self.publish(
            EVENT_STATISTICS,
            completed_pomodoros=statistics.completed_pomodoros,
            session_count=statistics.session_count,
            total_work_minutes=statistics.total_work_minutes,
            total_break_minutes=statistics.total_break_minutes,
            legacy_pomodoros=statistics.legacy_pomodoros,
            daily_histogram={
                "labels": list(histogram.labels),
                "counts": list(histogram.counts),
            },
        )

    def publish_settings(self, settings: TimerSettings, *, open_form: bool = False) -> None:
        self.publish(EVENT_SETTINGS, settings=settings_to_mapping(settings), open=open_form)
