"""
Utilities package for Encoding Checker.

Pure functions that support the scan engine without side effects.
"""

from .progress_utils import (
    calculate_scan_percent,
    calculate_files_per_second,
    estimate_time_remaining,
    should_log_progress,
    create_simple_progress_bar,
)

__all__ = [
    "calculate_scan_percent",
    "calculate_files_per_second",
    "estimate_time_remaining",
    "should_log_progress",
    "create_simple_progress_bar",
]
