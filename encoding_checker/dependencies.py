from functools import lru_cache
from typing import Any, Dict

from encoding_checker.core.cqrs.command_bus import CommandBus
from encoding_checker.core.cqrs.query_bus import QueryBus
from encoding_checker.core.events.event_bus import DomainEventBus
from encoding_checker.domains.preferences.store import PreferencesStore
from encoding_checker.domains.presentation.event_handlers import PresentationEventHandlers
from encoding_checker.domains.presentation.websocket_manager import WebSocketManager
from encoding_checker.domains.scanning.charset_detector import (
    CharsetDetectorFactory,
    create_chardet_detector,
)
from encoding_checker.domains.scanning.scan_controller import ScanController

from .config import Settings

# Global singleton instances
_singletons: Dict[str, Any] = {}


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_command_bus() -> CommandBus:
    if "command_bus" not in _singletons:
        _singletons["command_bus"] = CommandBus()
    return _singletons["command_bus"]


def get_query_bus() -> QueryBus:
    if "query_bus" not in _singletons:
        _singletons["query_bus"] = QueryBus()
    return _singletons["query_bus"]


def get_event_bus() -> DomainEventBus:
    if "event_bus" not in _singletons:
        _singletons["event_bus"] = DomainEventBus()
    return _singletons["event_bus"]


def get_detector_factory() -> CharsetDetectorFactory:
    if "detector_factory" not in _singletons:
        _singletons["detector_factory"] = create_chardet_detector
    return _singletons["detector_factory"]


def get_scan_controller() -> ScanController:
    if "scan_controller" not in _singletons:
        settings = get_settings()
        _singletons["scan_controller"] = ScanController(
            event_bus=get_event_bus(),
            detector_factory=get_detector_factory(),
            read_chunk_size=settings.read_chunk_size,
            progress_log_interval_percent=settings.progress_log_interval_percent,
        )
    return _singletons["scan_controller"]


def get_websocket_manager() -> WebSocketManager:
    if "websocket_manager" not in _singletons:
        _singletons["websocket_manager"] = WebSocketManager()
    return _singletons["websocket_manager"]


def get_presentation_event_handlers() -> PresentationEventHandlers:
    if "presentation_event_handlers" not in _singletons:
        _singletons["presentation_event_handlers"] = PresentationEventHandlers(
            websocket_manager=get_websocket_manager()
        )
    return _singletons["presentation_event_handlers"]


def get_preferences_store() -> PreferencesStore:
    if "preferences_store" not in _singletons:
        settings = get_settings()
        _singletons["preferences_store"] = PreferencesStore(
            file_path=settings.preferences_file_path,
            default_file_masks=settings.default_file_masks,
        )
    return _singletons["preferences_store"]


def reset_singletons() -> None:
    _singletons.clear()
