# encoding_checker/core/events/scan_events.py
from dataclasses import dataclass

from encoding_checker.core.events.domain_event import DomainEvent
from encoding_checker.models import ScanOutcome, ScanProgress, ScanRequest


@dataclass(frozen=True)
class ScanStartedEvent(DomainEvent):
    """Event published when the controller has launched a new scan run."""
    run_id: str
    request: ScanRequest


@dataclass(frozen=True)
class ScanProgressEvent(DomainEvent):
    """Event published once for every file the engine has inspected."""
    progress: ScanProgress


@dataclass(frozen=True)
class ScanFinishedEvent(DomainEvent):
    """Event published exactly once per run, always as the last event of that run."""
    run_id: str
    outcome: ScanOutcome
