"""Tick handlers that publish countdown updates and completion alerts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from alerts import AlertError
from pomodoro import PomodoroTick, TimerSettings
from pomodoro.constants import (
    ACTION_COMPLETED,
    ACTION_TICK,
    REASON_COMPLETED,
    REASON_TICK,
)

from .contracts import CuePlayerLike, NotifierLike
from .messages import completion_message
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing timer tick events."""
    notifier: Optional[NotifierLike]
    cue_player: Optional[CuePlayerLike]
    logger: logging.Logger
    ui: RuntimeUIPublisher
    current_settings: Callable[[], TimerSettings]
    publish_statistics: Callable[[], None]
    publish_status: Callable[[], None]


class TickProcessor:
    """Handles tick side effects such as UI updates and completion alerts."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def handle_tick(self, tick: PomodoroTick) -> None:
        deps = self._dependencies
        if not tick.completed:
            deps.ui.publish_timer_update(
                tick.snapshot,
                action=ACTION_TICK,
                accepted=True,
                reason=REASON_TICK,
            )
            return

        message = completion_message(tick.finished_mode or tick.snapshot.mode)
        deps.ui.publish_timer_update(
            tick.snapshot,
            action=ACTION_COMPLETED,
            accepted=True,
            reason=REASON_COMPLETED,
            message=message,
        )

        settings = deps.current_settings()
        if settings.notifications and deps.notifier:
            try:
                deps.notifier.notify(message)
            except AlertError as error:
                deps.logger.error("Completion notification failed: %s", error)
        if settings.sound and deps.cue_player:
            try:
                deps.cue_player.play_cue()
            except AlertError as error:
                deps.logger.warning("Completion cue failed: %s", error)

        deps.publish_statistics()
        deps.publish_status()
