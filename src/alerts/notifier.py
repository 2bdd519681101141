"""Notification collaborator that forwards alerts to the browser UI."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from contracts.ui_protocol import EVENT_NOTIFICATION

PERMISSION_DEFAULT = "default"
PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"

_KNOWN_PERMISSIONS = frozenset({PERMISSION_DEFAULT, PERMISSION_GRANTED, PERMISSION_DENIED})


class EventPublisherLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


class UINotifier:
    """Delivers notifications through the UI, which owns the browser permission.

    The UI reports the browser's permission state back with a
    `notification_permission` intent. Until it does, notifications are sent
    together with a permission request so the browser can prompt once.
    """

    def __init__(
        self,
        ui: EventPublisherLike,
        logger: Optional[logging.Logger] = None,
    ):
        self._ui = ui
        self._logger = logger or logging.getLogger("alerts.notifier")
        self._permission = PERMISSION_DEFAULT

    @property
    def permission(self) -> str:
        return self._permission

    def set_permission(self, permission: str) -> None:
        value = permission.strip().lower() if isinstance(permission, str) else ""
        if value not in _KNOWN_PERMISSIONS:
            self._logger.warning("Ignoring unknown notification permission: %r", permission)
            return
        if value != self._permission:
            self._logger.info("Notification permission: %s", value)
        self._permission = value

    def request_permission(self) -> str:
        """Return `granted` or `denied`, asking the UI when still undecided."""
        if self._permission == PERMISSION_DEFAULT:
            self._ui.publish(EVENT_NOTIFICATION, request_permission=True)
            return PERMISSION_DENIED
        return self._permission

    def notify(self, message: str) -> bool:
        if self._permission == PERMISSION_DENIED:
            self._logger.debug("Notification suppressed (permission denied): %s", message)
            return False

        self._ui.publish(
            EVENT_NOTIFICATION,
            message=message,
            request_permission=self._permission == PERMISSION_DEFAULT,
        )
        return True
