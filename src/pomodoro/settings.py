"""Timer settings model and validation for settings committed by the UI."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from .constants import (
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_SESSIONS_BEFORE_LONG_BREAK,
    DEFAULT_SHORT_BREAK_MINUTES,
    DEFAULT_TITLE,
    DEFAULT_WORK_MINUTES,
)
from .errors import SettingsValidationError

MAX_TITLE_LENGTH = 60
MAX_INTERVAL_MINUTES = 24 * 60

# Persisted (camelCase) key -> dataclass field.
_FIELD_KEYS: dict[str, str] = {
    "title": "title",
    "work": "work_minutes",
    "shortBreak": "short_break_minutes",
    "longBreak": "long_break_minutes",
    "autoStart": "auto_start",
    "notifications": "notifications",
    "sound": "sound",
    "sessionsBeforeLongBreak": "sessions_before_long_break",
}


@dataclass(frozen=True)
class TimerSettings:
    """User-facing timer settings; replaced only through an explicit commit."""
    title: str = DEFAULT_TITLE
    work_minutes: int = DEFAULT_WORK_MINUTES
    short_break_minutes: int = DEFAULT_SHORT_BREAK_MINUTES
    long_break_minutes: int = DEFAULT_LONG_BREAK_MINUTES
    auto_start: bool = False
    notifications: bool = True
    sound: bool = True
    sessions_before_long_break: int = DEFAULT_SESSIONS_BEFORE_LONG_BREAK

    def __post_init__(self) -> None:
        for field in ("work_minutes", "short_break_minutes", "long_break_minutes"):
            value = getattr(self, field)
            if not 1 <= value <= MAX_INTERVAL_MINUTES:
                raise SettingsValidationError(
                    f"{field} must be in [1, {MAX_INTERVAL_MINUTES}], got: {value}"
                )
        if self.sessions_before_long_break < 1:
            raise SettingsValidationError(
                "sessions_before_long_break must be greater than zero, "
                f"got: {self.sessions_before_long_break}"
            )


def settings_to_mapping(settings: TimerSettings) -> dict[str, Any]:
    """Serialize settings to the flat camelCase object used for persistence."""
    return {key: getattr(settings, field) for key, field in _FIELD_KEYS.items()}


def settings_from_mapping(
    raw: Mapping[str, Any],
    *,
    base: TimerSettings | None = None,
) -> TimerSettings:
    """Merge a (possibly partial) camelCase settings object over `base`.

    Unknown keys are ignored. Raises `SettingsValidationError` for values
    that cannot be coerced or fail validation.
    """
    if not isinstance(raw, Mapping):
        raise SettingsValidationError("Settings must be an object.")

    changes: dict[str, Any] = {}
    for key, field in _FIELD_KEYS.items():
        if key not in raw:
            continue
        value = raw[key]
        if field == "title":
            changes[field] = _as_title(value)
        elif field in ("auto_start", "notifications", "sound"):
            changes[field] = _as_bool(value, key)
        else:
            changes[field] = _as_positive_int(value, key)

    return replace(base or TimerSettings(), **changes)


def _as_title(value: Any) -> str:
    if value is None:
        return DEFAULT_TITLE
    if not isinstance(value, str):
        raise SettingsValidationError("title must be a string.")
    compact = " ".join(value.split())[:MAX_TITLE_LENGTH]
    return compact or DEFAULT_TITLE


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise SettingsValidationError(f"{key} must be a boolean.")


def _as_positive_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise SettingsValidationError(f"{key} must be an integer.")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as error:
            raise SettingsValidationError(f"{key} must be an integer.") from error
    if not isinstance(value, int):
        raise SettingsValidationError(f"{key} must be an integer.")
    if value <= 0:
        raise SettingsValidationError(f"{key} must be greater than zero, got: {value}")
    return value
