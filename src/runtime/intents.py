"""Dispatcher that applies UI intents to the pomodoro timer."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping, Optional

from contracts.ui_protocol import (
    EVENT_ERROR,
    INTENT_COMMIT_SETTINGS,
    INTENT_NAMES,
    INTENT_NOTIFICATION_PERMISSION,
    INTENT_OPEN_SETTINGS,
    INTENT_PAUSE,
    INTENT_RESET,
    INTENT_SET_MODE,
    INTENT_START,
    STATE_ERROR,
)
from pomodoro import PomodoroActionResult, PomodoroTimer
from pomodoro.constants import ACTION_PAUSE, ACTION_RESET, ACTION_SET_MODE, ACTION_START

from .contracts import PermissionAwareNotifierLike
from .messages import rejection_text
from .ui import RuntimeUIPublisher

_INTENT_TO_ACTION = {
    INTENT_START: ACTION_START,
    INTENT_PAUSE: ACTION_PAUSE,
    INTENT_RESET: ACTION_RESET,
    INTENT_SET_MODE: ACTION_SET_MODE,
}


def parse_intent(raw: str | bytes) -> Optional[dict[str, Any]]:
    """Decode a websocket message into an intent mapping, or None if invalid."""
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    name = payload.get("intent")
    if not isinstance(name, str) or name not in INTENT_NAMES:
        return None
    return payload


class IntentDispatcher:
    """Routes start/pause/reset/mode/settings intents from the UI."""
    def __init__(
        self,
        *,
        logger: logging.Logger,
        timer: PomodoroTimer,
        ui: RuntimeUIPublisher,
        notifier: Optional[PermissionAwareNotifierLike],
        publish_statistics: Callable[[], None],
        publish_status: Callable[[], None],
    ):
        self._logger = logger
        self._timer = timer
        self._ui = ui
        self._notifier = notifier
        self._publish_statistics = publish_statistics
        self._publish_status = publish_status

    def handle_raw(self, raw: str | bytes) -> Optional[PomodoroActionResult]:
        intent = parse_intent(raw)
        if intent is None:
            self._logger.warning("Ignoring malformed UI message: %r", raw)
            return None
        return self.handle_intent(intent)

    def handle_intent(self, intent: Mapping[str, Any]) -> Optional[PomodoroActionResult]:
        name = intent.get("intent")

        if name in _INTENT_TO_ACTION:
            result = self._timer.apply(_INTENT_TO_ACTION[name], mode=intent.get("mode"))
            self._publish_result(result)
            return result

        if name == INTENT_OPEN_SETTINGS:
            self._ui.publish_settings(self._timer.settings, open_form=True)
            return None

        if name == INTENT_COMMIT_SETTINGS:
            result = self._timer.commit_settings(intent.get("settings"))
            self._publish_result(result)
            if result.accepted:
                settings = self._timer.settings
                self._ui.publish_settings(settings)
                if settings.notifications and self._notifier:
                    self._notifier.request_permission()
            return result

        if name == INTENT_NOTIFICATION_PERMISSION:
            if self._notifier:
                self._notifier.set_permission(intent.get("permission"))
            return None

        self._logger.warning("Unsupported intent: %s", name)
        return None

    def _publish_result(self, result: PomodoroActionResult) -> None:
        message = None
        if not result.accepted:
            message = rejection_text(result.action, result.reason)
            if result.detail:
                message = f"{message} {result.detail}"
            self._logger.info(
                "Rejected %s: %s",
                result.action,
                result.detail or result.reason,
            )
        self._ui.publish_timer_update(
            result.snapshot,
            action=result.action,
            accepted=result.accepted,
            reason=result.reason,
            message=message,
        )
        if not result.accepted and result.detail:
            self._ui.publish(EVENT_ERROR, state=STATE_ERROR, message=message)
        if result.accepted:
            self._publish_statistics()
        self._publish_status()
