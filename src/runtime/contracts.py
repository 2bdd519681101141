"""Protocols describing runtime-facing alert collaborators."""

from __future__ import annotations

from typing import Protocol


class NotifierLike(Protocol):
    """Notification collaborator; permission denial degrades to a no-op."""
    def request_permission(self) -> str:
        ...

    def notify(self, message: str) -> bool:
        ...


class PermissionAwareNotifierLike(NotifierLike, Protocol):
    def set_permission(self, permission: str) -> None:
        ...


class CuePlayerLike(Protocol):
    """Audible completion cue; raises `AlertError` when playback fails."""
    def play_cue(self) -> None:
        ...
