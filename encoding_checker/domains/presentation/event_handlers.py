import logging
from typing import Any, Dict, Optional

from encoding_checker.core.events.scan_events import (
    ScanFinishedEvent,
    ScanProgressEvent,
    ScanStartedEvent,
)
from encoding_checker.domains.presentation.websocket_manager import WebSocketManager
from encoding_checker.models import FileResult


def _serialize_file_result(result: Optional[FileResult]) -> Optional[Dict[str, Any]]:
    if result is None:
        return None
    data = result.model_dump(mode="json")
    data["is_unknown"] = result.is_unknown
    return data


class PresentationEventHandlers:
    """Turns scan domain events into WebSocket messages for the live view."""

    def __init__(self, websocket_manager: WebSocketManager):
        self.websocket_manager = websocket_manager

    async def handle_scan_started(self, event: ScanStartedEvent) -> None:
        message_data = {
            "type": "scan_started",
            "data": {
                "run_id": event.run_id,
                "request": event.request.model_dump(mode="json"),
                "timestamp": event.timestamp.isoformat(),
            },
        }
        self.websocket_manager.broadcast_message(message_data)

    async def handle_scan_progress(self, event: ScanProgressEvent) -> None:
        progress = event.progress
        message_data = {
            "type": "scan_progress",
            "data": {
                "run_id": progress.run_id,
                "completed_count": progress.completed_count,
                "total_count": progress.total_count,
                "percent": progress.percent,
                "result": _serialize_file_result(progress.result),
                "timestamp": event.timestamp.isoformat(),
            },
        }
        self.websocket_manager.broadcast_message(message_data)

    async def handle_scan_finished(self, event: ScanFinishedEvent) -> None:
        logging.debug(f"Broadcasting outcome of scan {event.run_id[:8]}: {event.outcome.status.value}")
        message_data = {
            "type": "scan_finished",
            "data": {
                "run_id": event.run_id,
                "outcome": event.outcome.model_dump(mode="json"),
                "timestamp": event.timestamp.isoformat(),
            },
        }
        self.websocket_manager.broadcast_message(message_data)
