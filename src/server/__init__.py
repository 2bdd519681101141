"""Dashboard server: static page, websocket events and inbound intents."""

from .config import ServerConfigurationError, UIServerConfig, default_index_file
from .events import StickyEventStore, make_event
from .service import UIServer

__all__ = [
    "ServerConfigurationError",
    "StickyEventStore",
    "UIServer",
    "UIServerConfig",
    "default_index_file",
    "make_event",
]
