"""Progress calculation utilities for Encoding Checker scans."""


def calculate_scan_percent(completed_count: int, total_count: int) -> float:
    if total_count <= 0:
        return 100.0  # Nothing to scan is "complete"

    if completed_count >= total_count:
        return 100.0

    if completed_count <= 0:
        return 0.0

    return (completed_count / total_count) * 100.0


def calculate_files_per_second(completed_count: int, elapsed_seconds: float) -> float:
    if elapsed_seconds <= 0:
        return 0.0

    return completed_count / elapsed_seconds


def estimate_time_remaining(
    completed_count: int, total_count: int, files_per_second: float
) -> float:
    if completed_count >= total_count:
        return 0.0

    if files_per_second <= 0:
        return 0.0

    return (total_count - completed_count) / files_per_second


def should_log_progress(
    completed_count: int, total_count: int, log_interval_percent: int
) -> bool:
    """True when the count crosses a log_interval_percent boundary or finishes the scan."""
    if total_count <= 0 or completed_count <= 0:
        return False
    if completed_count >= total_count:
        return True
    if log_interval_percent <= 0:
        return True

    current = int(calculate_scan_percent(completed_count, total_count))
    previous = int(calculate_scan_percent(completed_count - 1, total_count))
    return current // log_interval_percent != previous // log_interval_percent


def create_simple_progress_bar(percent: float, width: int = 20) -> str:
    if percent < 0:
        percent = 0.0
    elif percent > 100:
        percent = 100.0

    filled = int((percent / 100.0) * width)
    empty = width - filled

    return f"[{'#' * filled}{' ' * empty}]"
