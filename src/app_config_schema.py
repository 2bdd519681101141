"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pomodoro import TimerSettings

DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_STORAGE_FILE = "pomodoro_data.json"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class StorageSettings:
    """Durable storage location from `[storage]`."""
    path: str = DEFAULT_STORAGE_FILE


@dataclass(frozen=True)
class SoundSettings:
    """Completion cue output from `[sound]`."""
    enabled: bool = True
    output_device: Optional[int] = None
    volume: float = 0.5


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class LoggingSettings:
    """Root logger setup from `[logging]`."""
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSettings = field(default_factory=TimerSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    sound: SoundSettings = field(default_factory=SoundSettings)
    ui_server: UIServerSettings = field(default_factory=UIServerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source_file: str = ""
