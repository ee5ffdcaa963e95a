"""
Scanning Domain
Contains the scan core (mask matching, directory walking, charset detection,
the scan engine) and the controller that runs one scan at a time.
"""
from .charset_detector import CharsetDetector, ChardetCharsetDetector, create_chardet_detector, known_charsets
from .commands import CancelScanCommand, StartScanCommand
from .directory_walker import DirectoryWalker
from .mask_matcher import MaskMatcher
from .queries import GetKnownCharsetsQuery, GetScanResultsQuery, GetScanStatusQuery
from .scan_controller import ScanController
from .scan_engine import ScanEngine

__all__ = [
    "CharsetDetector",
    "ChardetCharsetDetector",
    "create_chardet_detector",
    "known_charsets",
    "CancelScanCommand",
    "StartScanCommand",
    "DirectoryWalker",
    "MaskMatcher",
    "GetKnownCharsetsQuery",
    "GetScanResultsQuery",
    "GetScanStatusQuery",
    "ScanController",
    "ScanEngine",
]
