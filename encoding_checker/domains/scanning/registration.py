# encoding_checker/domains/scanning/registration.py
import logging

from encoding_checker.core.cqrs.command_bus import CommandBus
from encoding_checker.core.cqrs.query_bus import QueryBus
from encoding_checker.domains.scanning.command_handlers import (
    CancelScanCommandHandler,
    StartScanCommandHandler,
)
from encoding_checker.domains.scanning.commands import CancelScanCommand, StartScanCommand
from encoding_checker.domains.scanning.queries import (
    GetKnownCharsetsQuery,
    GetScanResultsQuery,
    GetScanStatusQuery,
)
from encoding_checker.domains.scanning.query_handlers import (
    GetKnownCharsetsQueryHandler,
    GetScanResultsQueryHandler,
    GetScanStatusQueryHandler,
)
from encoding_checker.domains.scanning.scan_controller import ScanController


def register_scanning_handlers(
    command_bus: CommandBus,
    query_bus: QueryBus,
    scan_controller: ScanController,
):
    """
    Register all commands and queries of the 'scanning' domain.
    Called once at application startup.
    """
    logging.info("Registering 'Scanning' handlers...")

    command_bus.register(StartScanCommand, StartScanCommandHandler(scan_controller).handle)
    command_bus.register(CancelScanCommand, CancelScanCommandHandler(scan_controller).handle)

    query_bus.register(GetScanStatusQuery, GetScanStatusQueryHandler(scan_controller).handle)
    query_bus.register(GetScanResultsQuery, GetScanResultsQueryHandler(scan_controller).handle)
    query_bus.register(GetKnownCharsetsQuery, GetKnownCharsetsQueryHandler().handle)
