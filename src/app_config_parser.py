"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    DEFAULT_STORAGE_FILE,
    AppConfig,
    AppConfigurationError,
    LoggingSettings,
    SoundSettings,
    StorageSettings,
    UIServerSettings,
)
from pomodoro import SettingsValidationError, TimerSettings

_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        timer=_parse_timer_settings(_section(raw, "timer")),
        storage=_parse_storage_settings(_section(raw, "storage"), base_dir=base_dir),
        sound=_parse_sound_settings(_section(raw, "sound")),
        ui_server=_parse_ui_server_settings(_section(raw, "ui_server"), base_dir=base_dir),
        logging=_parse_logging_settings(_section(raw, "logging")),
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    defaults = TimerSettings()
    title = _as_str(section.get("title", defaults.title), "timer.title")
    try:
        return TimerSettings(
            title=title or defaults.title,
            work_minutes=_as_int(
                section.get("work_minutes", defaults.work_minutes),
                "timer.work_minutes",
            ),
            short_break_minutes=_as_int(
                section.get("short_break_minutes", defaults.short_break_minutes),
                "timer.short_break_minutes",
            ),
            long_break_minutes=_as_int(
                section.get("long_break_minutes", defaults.long_break_minutes),
                "timer.long_break_minutes",
            ),
            auto_start=_as_bool(
                section.get("auto_start", defaults.auto_start),
                "timer.auto_start",
            ),
            notifications=_as_bool(
                section.get("notifications", defaults.notifications),
                "timer.notifications",
            ),
            sound=_as_bool(section.get("sound", defaults.sound), "timer.sound"),
            sessions_before_long_break=_as_int(
                section.get(
                    "sessions_before_long_break",
                    defaults.sessions_before_long_break,
                ),
                "timer.sessions_before_long_break",
            ),
        )
    except SettingsValidationError as error:
        raise AppConfigurationError(f"[timer] {error}") from error


def _parse_storage_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StorageSettings:
    path = _as_str(section.get("path", DEFAULT_STORAGE_FILE), "storage.path")
    return StorageSettings(path=_resolve_path(base_dir, path or DEFAULT_STORAGE_FILE))


def _parse_sound_settings(section: Mapping[str, Any]) -> SoundSettings:
    volume = _as_float(section.get("volume", 0.5), "sound.volume")
    if not 0.0 <= volume <= 1.0:
        raise AppConfigurationError(f"sound.volume must be in [0, 1], got: {volume}")
    return SoundSettings(
        enabled=_as_bool(section.get("enabled", True), "sound.enabled"),
        output_device=(
            _as_int(section.get("output_device"), "sound.output_device")
            if "output_device" in section
            else None
        ),
        volume=volume,
    )


def _parse_ui_server_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> UIServerSettings:
    index_file = _as_str(section.get("index_file", ""), "ui_server.index_file")
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        index_file=_resolve_path(base_dir, index_file) if index_file else "",
    )


def _parse_logging_settings(section: Mapping[str, Any]) -> LoggingSettings:
    level = _as_str(section.get("level", "INFO"), "logging.level").upper()
    if level not in _ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(_ALLOWED_LOG_LEVELS))
        raise AppConfigurationError(f"logging.level must be one of: {allowed}.")
    return LoggingSettings(level=level)


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
