"""Completion alerts: UI notifications and an audible cue."""

from .errors import AlertError
from .notifier import (
    PERMISSION_DEFAULT,
    PERMISSION_DENIED,
    PERMISSION_GRANTED,
    UINotifier,
)
from .sound import SoundDeviceCuePlayer, build_chime

__all__ = [
    "AlertError",
    "PERMISSION_DEFAULT",
    "PERMISSION_DENIED",
    "PERMISSION_GRANTED",
    "SoundDeviceCuePlayer",
    "UINotifier",
    "build_chime",
]
