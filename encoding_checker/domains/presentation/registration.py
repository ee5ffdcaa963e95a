# encoding_checker/domains/presentation/registration.py
import logging

from encoding_checker.core.events.event_bus import DomainEventBus
from encoding_checker.core.events.scan_events import (
    ScanFinishedEvent,
    ScanProgressEvent,
    ScanStartedEvent,
)
from encoding_checker.domains.presentation.event_handlers import PresentationEventHandlers


async def register_presentation_domain(event_bus: DomainEventBus, handlers: PresentationEventHandlers):
    """Subscribe the live view to the scan events."""
    logging.info("Subscribing 'Presentation' event handlers...")

    await event_bus.subscribe(ScanStartedEvent, handlers.handle_scan_started)
    await event_bus.subscribe(ScanProgressEvent, handlers.handle_scan_progress)
    await event_bus.subscribe(ScanFinishedEvent, handlers.handle_scan_finished)

    logging.info("Presentation domain registration complete.")
