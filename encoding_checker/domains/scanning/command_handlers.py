"""
Scanning Command Handlers
Handles commands that start and cancel scans.
"""
from encoding_checker.core.cqrs.command import CommandHandler
from encoding_checker.domains.scanning.commands import CancelScanCommand, StartScanCommand
from encoding_checker.domains.scanning.scan_controller import ScanController
from encoding_checker.models import ScanRunInfo


class StartScanCommandHandler(CommandHandler[StartScanCommand, ScanRunInfo]):
    """Handles StartScanCommand by launching a scan on the controller."""

    def __init__(self, scan_controller: ScanController):
        self._scan_controller = scan_controller

    async def handle(self, command: StartScanCommand) -> ScanRunInfo:
        """Start the scan. Validation errors from the controller propagate to the caller."""
        return await self._scan_controller.start(command.request)


class CancelScanCommandHandler(CommandHandler[CancelScanCommand, bool]):
    """Handles CancelScanCommand by raising the cancellation flag of the active scan."""

    def __init__(self, scan_controller: ScanController):
        self._scan_controller = scan_controller

    async def handle(self, command: CancelScanCommand) -> bool:
        return self._scan_controller.cancel()
