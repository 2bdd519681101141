"""Runtime orchestration loop for timer ticks and UI intents."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Any, Optional

from contracts.ui_protocol import STATE_IDLE, STATE_PAUSED, STATE_RUNNING
from pomodoro import PomodoroTimer
from pomodoro.constants import ACTION_SYNC, PHASE_PAUSED, PHASE_RUNNING, REASON_STARTUP

from .contracts import CuePlayerLike, PermissionAwareNotifierLike
from .intents import IntentDispatcher
from .messages import status_message
from .ticks import TickDependencies, TickProcessor
from .ui import RuntimeUIPublisher, UIServerLike

POLL_INTERVAL_SECONDS = 0.25

_PHASE_TO_STATE = {
    PHASE_RUNNING: STATE_RUNNING,
    PHASE_PAUSED: STATE_PAUSED,
}


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    timer: PomodoroTimer
    notifier: Optional[PermissionAwareNotifierLike] = None
    cue_player: Optional[CuePlayerLike] = None
    ui_server: Optional[UIServerLike] = None
    intent_queue: Queue[Any] = field(default_factory=Queue)


class RuntimeEngine:
    """Single-threaded loop: the only place where the timer is mutated.

    The UI server thread only enqueues raw intent messages; they are applied
    here between ticks, so ledger mutations never interleave.
    """
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._timer = bootstrap.timer
        self._queue = bootstrap.intent_queue
        self._stop_requested = threading.Event()

        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._tick_processor = TickProcessor(
            TickDependencies(
                notifier=bootstrap.notifier,
                cue_player=bootstrap.cue_player,
                logger=self._logger,
                ui=self._ui,
                current_settings=lambda: self._timer.settings,
                publish_statistics=self._publish_statistics,
                publish_status=self._publish_status,
            )
        )
        self._dispatcher = IntentDispatcher(
            logger=self._logger,
            timer=self._timer,
            ui=self._ui,
            notifier=bootstrap.notifier,
            publish_statistics=self._publish_statistics,
            publish_status=self._publish_status,
        )

    def submit(self, raw_message: Any) -> None:
        """Queue a raw UI message; safe to call from any thread."""
        self._queue.put(raw_message)

    def stop(self) -> None:
        self._stop_requested.set()

    def run(self) -> int:
        self._publish_startup_sync()
        try:
            while not self._stop_requested.is_set():
                self.run_once()
            self._logger.info("Runtime loop stopped.")
            return 0
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def run_once(self, timeout: float = POLL_INTERVAL_SECONDS) -> None:
        self._emit_timer_ticks()
        try:
            raw_message = self._queue.get(timeout=timeout)
        except Empty:
            return
        self._dispatcher.handle_raw(raw_message)

    def _emit_timer_ticks(self) -> None:
        tick = self._timer.poll()
        if tick is not None:
            self._tick_processor.handle_tick(tick)

    def _publish_startup_sync(self) -> None:
        settings = self._timer.settings
        self._ui.publish_settings(settings)
        self._ui.publish_timer_update(
            self._timer.snapshot(),
            action=ACTION_SYNC,
            accepted=True,
            reason=REASON_STARTUP,
        )
        self._publish_statistics()
        self._publish_status()
        if settings.notifications and self._bootstrap.notifier:
            self._bootstrap.notifier.request_permission()

    def _publish_statistics(self) -> None:
        self._ui.publish_statistics(self._timer.statistics())

    def _publish_status(self) -> None:
        snapshot = self._timer.snapshot()
        self._ui.publish_state(
            _PHASE_TO_STATE.get(snapshot.phase, STATE_IDLE),
            message=status_message(snapshot),
        )

    def _shutdown(self) -> None:
        ui_server = self._bootstrap.ui_server
        stop = getattr(ui_server, "stop", None)
        if stop is not None:
            self._logger.info("Stopping UI server...")
            try:
                stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
