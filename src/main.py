import logging
import signal
import sys
from typing import Optional

from alerts import SoundDeviceCuePlayer, UINotifier
from app_config import AppConfigurationError, load_app_config
from pomodoro import PomodoroTimer
from runtime import RuntimeBootstrap, RuntimeEngine
from runtime.ui import RuntimeUIPublisher
from server import ServerConfigurationError, UIServer, UIServerConfig
from storage import JsonFileStorage, PomodoroStore


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_app")


def setup_signal_handlers(engine: RuntimeEngine) -> None:
    """Stop the runtime loop on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logging.getLogger("pomodoro_app").info(
            "%s received, stopping...",
            signal.Signals(signum).name,
        )
        engine.stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def start_ui_server(app_config, logger: logging.Logger) -> Optional[UIServer]:
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        logger.warning("Continuing without UI server.")
        return None

    if not ui_server_config.enabled:
        logger.info("UI server disabled via ui_server.enabled=false")
        return None

    try:
        ui_server = UIServer(
            config=ui_server_config,
            logger=logging.getLogger("ui_server"),
        )
        logger.info("Starting UI server...")
        ui_server.start(timeout_seconds=5.0)
        logger.info("UI server ready at http://%s:%d", ui_server.host, ui_server.port)
        return ui_server
    except Exception as error:
        logger.error("UI server startup failed: %s", error)
        logger.warning("Continuing without UI server.")
        return None


def main() -> int:
    """Run the pomodoro timer with its dashboard server."""
    logger = setup_logging(level=logging.INFO)

    try:
        app_config = load_app_config()
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1
    logging.getLogger().setLevel(app_config.logging.level)
    if app_config.source_file:
        logger.info("Loaded runtime config: %s", app_config.source_file)
    else:
        logger.info("No config file found; using built-in defaults")

    store = PomodoroStore(
        JsonFileStorage(app_config.storage.path, logger=logging.getLogger("storage")),
        logger=logging.getLogger("storage"),
    )
    logger.info("Activity storage: %s", app_config.storage.path)

    timer = PomodoroTimer(
        ledger=store.load_ledger(),
        settings=store.load_settings(defaults=app_config.timer),
        store=store,
        legacy_sessions=store.load_legacy_sessions(),
        logger=logging.getLogger("pomodoro"),
    )

    ui_server = start_ui_server(app_config, logger)
    notifier = UINotifier(
        RuntimeUIPublisher(ui_server),
        logger=logging.getLogger("alerts.notifier"),
    )
    cue_player = None
    if app_config.sound.enabled:
        cue_player = SoundDeviceCuePlayer(
            output_device_index=app_config.sound.output_device,
            volume=app_config.sound.volume,
            logger=logging.getLogger("alerts.sound"),
        )

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logging.getLogger("runtime"),
            timer=timer,
            notifier=notifier,
            cue_player=cue_player,
            ui_server=ui_server,
        )
    )
    if ui_server is not None:
        ui_server.set_message_handler(engine.submit)

    setup_signal_handlers(engine)
    logger.info("Ready.")
    return engine.run()


if __name__ == "__main__":
    sys.exit(main())
