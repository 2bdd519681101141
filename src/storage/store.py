"""Typed load/save of settings, activity history, and legacy sessions."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from pomodoro.codec import LegacySession, legacy_sessions_from_records
from pomodoro.errors import SettingsValidationError
from pomodoro.ledger import ActivityLedger
from pomodoro.settings import TimerSettings, settings_from_mapping, settings_to_mapping

from .backends import StoragePort
from .errors import StorageError

SETTINGS_KEY = "pomodoroSettings"
ACTIVITIES_KEY = "pomodoroActivities"
LEGACY_SESSIONS_KEY = "pomodoroSessions"


class PomodoroStore:
    """Reads and writes the three persisted records through a storage port.

    Loads never fail: unreadable records fall back to defaults with a
    warning. Saves raise `StorageError` and leave recovery to the caller.
    """

    def __init__(self, port: StoragePort, logger: Optional[logging.Logger] = None):
        self._port = port
        self._logger = logger or logging.getLogger("storage")

    def load_settings(self, defaults: Optional[TimerSettings] = None) -> TimerSettings:
        base = defaults or TimerSettings()
        raw = self._read_json(SETTINGS_KEY)
        if raw is None:
            return base
        try:
            return settings_from_mapping(raw, base=base)
        except SettingsValidationError as error:
            self._logger.warning("Ignoring stored settings: %s", error)
            return base

    def save_settings(self, settings: TimerSettings) -> None:
        self._write_json(SETTINGS_KEY, settings_to_mapping(settings))

    def load_ledger(self) -> ActivityLedger:
        raw = self._read_json(ACTIVITIES_KEY)
        if raw is None:
            return ActivityLedger()
        if not isinstance(raw, list):
            self._logger.warning("Ignoring stored activities: expected a list")
            return ActivityLedger()
        ledger = ActivityLedger.restore(raw)
        self._logger.info("Loaded %d activities", len(ledger))
        return ledger

    def save_ledger(self, ledger: ActivityLedger) -> None:
        self._write_json(ACTIVITIES_KEY, ledger.persist())

    def load_legacy_sessions(self) -> list[LegacySession]:
        raw = self._read_json(LEGACY_SESSIONS_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            self._logger.warning("Ignoring stored sessions: expected a list")
            return []
        return legacy_sessions_from_records(raw)

    def _read_json(self, key: str) -> Any:
        try:
            text = self._port.get(key)
        except StorageError as error:
            self._logger.warning("Failed to read %s: %s", key, error)
            return None
        if text is None:
            return None
        try:
            return json.loads(text)
        except ValueError as error:
            self._logger.warning("Failed to decode %s: %s", key, error)
            return None

    def _write_json(self, key: str, value: Any) -> None:
        try:
            text = json.dumps(value)
        except (TypeError, ValueError) as error:
            raise StorageError(f"Failed to encode {key}: {error}") from error
        self._port.set(key, text)
