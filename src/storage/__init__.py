"""Durable key/value storage for settings and activity history."""

from .backends import JsonFileStorage, MemoryStorage, StoragePort
from .errors import StorageError
from .store import (
    ACTIVITIES_KEY,
    LEGACY_SESSIONS_KEY,
    SETTINGS_KEY,
    PomodoroStore,
)

__all__ = [
    "ACTIVITIES_KEY",
    "LEGACY_SESSIONS_KEY",
    "SETTINGS_KEY",
    "JsonFileStorage",
    "MemoryStorage",
    "PomodoroStore",
    "StorageError",
    "StoragePort",
]
