"""
Scanning Domain Commands
Commands that change the state of the scan controller.
"""
from dataclasses import dataclass

from encoding_checker.core.cqrs.command import Command
from encoding_checker.models import ScanRequest


@dataclass(frozen=True)
class StartScanCommand(Command):
    """Command to start a new scan run in the background."""
    request: ScanRequest


@dataclass(frozen=True)
class CancelScanCommand(Command):
    """Command to request cancellation of the active scan."""
    pass
