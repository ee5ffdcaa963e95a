from typing import List

from encoding_checker.core.cqrs.query import QueryHandler
from encoding_checker.domains.scanning.charset_detector import known_charsets
from encoding_checker.domains.scanning.queries import (
    GetKnownCharsetsQuery,
    GetScanResultsQuery,
    GetScanStatusQuery,
)
from encoding_checker.domains.scanning.scan_controller import ScanController
from encoding_checker.models import FileResult, ScanStatus


class GetScanStatusQueryHandler(QueryHandler[GetScanStatusQuery, ScanStatus]):
    def __init__(self, scan_controller: ScanController):
        self._scan_controller = scan_controller

    async def handle(self, query: GetScanStatusQuery) -> ScanStatus:
        return self._scan_controller.status()


class GetScanResultsQueryHandler(QueryHandler[GetScanResultsQuery, List[FileResult]]):
    def __init__(self, scan_controller: ScanController):
        self._scan_controller = scan_controller

    async def handle(self, query: GetScanResultsQuery) -> List[FileResult]:
        return self._scan_controller.results()


class GetKnownCharsetsQueryHandler(QueryHandler[GetKnownCharsetsQuery, List[str]]):
    async def handle(self, query: GetKnownCharsetsQuery) -> List[str]:
        return known_charsets()
