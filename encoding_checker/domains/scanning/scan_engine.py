import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import aiofiles

from encoding_checker.core.cancellation import CancellationToken
from encoding_checker.core.events.event_bus import DomainEventBus
from encoding_checker.core.events.scan_events import ScanProgressEvent
from encoding_checker.core.exceptions import InvalidTransitionError, RootEnumerationError
from encoding_checker.models import (
    UNKNOWN_CHARSET,
    FileResult,
    ScanMode,
    ScanOutcome,
    ScanOutcomeStatus,
    ScanProgress,
    ScanRequest,
    ScanState,
)
from encoding_checker.utils.progress_utils import (
    calculate_files_per_second,
    calculate_scan_percent,
    create_simple_progress_bar,
    estimate_time_remaining,
    should_log_progress,
)
from .charset_detector import CharsetDetectorFactory, is_charset_accepted
from .directory_walker import DirectoryWalker
from .mask_matcher import MaskMatcher

_OUTCOME_STATES: Dict[ScanOutcomeStatus, ScanState] = {
    ScanOutcomeStatus.COMPLETED: ScanState.COMPLETED,
    ScanOutcomeStatus.CANCELLED: ScanState.CANCELLED,
    ScanOutcomeStatus.FAILED: ScanState.FAILED,
}


class ScanEngine:
    """
    Runs one scan: enumerate, filter, detect, classify, report.

    Lifecycle: Idle -> Running -> Completed | Cancelled | Failed. An engine
    runs exactly once; the controller creates a new one for every request.

    For every file that passes the mask filter and is inspected, one
    ScanProgressEvent is published on the event bus and awaited before the
    next file is opened, so subscribers see completed_count strictly
    increasing. The terminal outcome is returned to the caller (the
    controller), which publishes it.

    Cancellation is cooperative. The token is checked before every directory
    listing of the upfront enumeration and before every candidate file. A
    file that is already being read is finished and reported before the
    next check.
    """

    def __init__(
        self,
        run_id: str,
        request: ScanRequest,
        cancellation_token: CancellationToken,
        detector_factory: CharsetDetectorFactory,
        event_bus: DomainEventBus,
        read_chunk_size: int = 64 * 1024,
        progress_log_interval_percent: int = 10,
    ):
        self._run_id = run_id
        self._request = request
        self._token = cancellation_token
        self._detector_factory = detector_factory
        self._event_bus = event_bus
        self._read_chunk_size = max(1, read_chunk_size)
        self._progress_log_interval_percent = progress_log_interval_percent
        self._matcher = MaskMatcher(request.mask_patterns)

        self._state = ScanState.IDLE
        self._transitions: Dict[ScanState, Set[ScanState]] = {
            ScanState.IDLE: {ScanState.RUNNING},
            ScanState.RUNNING: {
                ScanState.COMPLETED,
                ScanState.CANCELLED,
                ScanState.FAILED,
            },
        }

        self._total_count = 0
        self._completed_count = 0
        self._unreadable_files = 0
        self._skipped_directories = 0
        self._results: List[FileResult] = []
        self._started_at: Optional[datetime] = None

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def total_count(self) -> int:
        return self._total_count

    @property
    def completed_count(self) -> int:
        return self._completed_count

    @property
    def emitted_count(self) -> int:
        return len(self._results)

    @property
    def results(self) -> List[FileResult]:
        """Results emitted so far, in emission order."""
        return list(self._results)

    def _transition(self, new_state: ScanState) -> None:
        allowed = self._transitions.get(self._state, set())
        if new_state not in allowed:
            raise InvalidTransitionError(self._run_id, self._state.value, new_state.value)
        logging.debug(f"Scan {self._run_id[:8]}: {self._state.value} -> {new_state.value}")
        self._state = new_state

    async def run(self) -> ScanOutcome:
        """Execute the scan and return its terminal outcome. Never raises for scan failures."""
        self._transition(ScanState.RUNNING)
        self._started_at = datetime.now()
        request = self._request

        logging.info(
            f"Scan {self._run_id[:8]} started: {request.root_directory} "
            f"(mode={request.mode.value}, recursive={request.recursive}, "
            f"masks={list(request.mask_patterns)})"
        )

        reason: Optional[str] = None
        try:
            status = await self._execute()
        except RootEnumerationError as e:
            logging.error(f"Scan {self._run_id[:8]} failed: {e}")
            status, reason = ScanOutcomeStatus.FAILED, str(e)
        except Exception as e:
            logging.error(f"Scan {self._run_id[:8]} failed unexpectedly: {e}", exc_info=True)
            status, reason = ScanOutcomeStatus.FAILED, str(e)

        self._transition(_OUTCOME_STATES[status])
        outcome = self._build_outcome(status, reason)

        logging.info(
            f"Scan {self._run_id[:8]} {status.value}: "
            f"{outcome.completed_count}/{outcome.total_count} files inspected, "
            f"{outcome.emitted_count} reported, {outcome.unreadable_files} unreadable, "
            f"{outcome.skipped_directories} directories skipped "
            f"in {outcome.duration_seconds:.2f}s"
        )
        return outcome

    async def _execute(self) -> ScanOutcomeStatus:
        walker = DirectoryWalker(
            self._request.root_directory,
            self._request.recursive,
            self._token,
            report_error=self._on_directory_error,
        )

        candidates = await walker.collect_files()
        if self._token.is_cancelled():
            logging.info(f"Scan {self._run_id[:8]} cancelled during enumeration")
            return ScanOutcomeStatus.CANCELLED

        self._total_count = len(candidates)
        logging.info(f"Scan {self._run_id[:8]}: {self._total_count} candidate files under {walker.root}")

        if self._matcher.is_empty:
            logging.warning(f"Scan {self._run_id[:8]}: no file masks given, no files will be inspected")

        for file_path in candidates:
            if self._token.is_cancelled():
                logging.info(
                    f"Scan {self._run_id[:8]} cancelled after {self._completed_count} files"
                )
                return ScanOutcomeStatus.CANCELLED

            if not self._matcher.matches(file_path.name):
                continue

            result = await self._inspect_file(file_path)
            self._completed_count += 1
            if result is not None:
                self._results.append(result)

            progress = ScanProgress(
                run_id=self._run_id,
                result=result,
                completed_count=self._completed_count,
                total_count=self._total_count,
            )
            await self._event_bus.publish(ScanProgressEvent(progress=progress))
            self._log_progress()

        return ScanOutcomeStatus.COMPLETED

    async def _inspect_file(self, file_path: Path) -> Optional[FileResult]:
        charset, error = await self._detect_charset(file_path)

        if self._request.mode == ScanMode.VALIDATE:
            # Unknown is never treated as a violation
            if charset is None:
                return None
            if is_charset_accepted(charset, self._request.accepted_charsets):
                return None

        return FileResult(
            file_name=file_path.name,
            directory_path=str(file_path.parent),
            charset=charset or UNKNOWN_CHARSET,
            error=error,
        )

    async def _detect_charset(self, file_path: Path) -> Tuple[Optional[str], Optional[str]]:
        """Feed the file to a fresh detector until EOF or until it is done. Returns (charset, read_error)."""
        detector = self._detector_factory()
        try:
            async with aiofiles.open(file_path, "rb") as handle:
                while not getattr(detector, "done", False):
                    chunk = await handle.read(self._read_chunk_size)
                    if not chunk:
                        break
                    # Detection is CPU bound, keep it off the event loop
                    await asyncio.to_thread(detector.feed, chunk)
        except OSError as e:
            self._unreadable_files += 1
            logging.warning(f"Could not read {file_path}, charset unknown: {e}")
            return None, str(e)

        return detector.finish(), None

    def _on_directory_error(self, directory: Path, error: OSError) -> None:
        self._skipped_directories += 1

    def _log_progress(self) -> None:
        if not should_log_progress(
            self._completed_count, self._total_count, self._progress_log_interval_percent
        ):
            return
        percent = calculate_scan_percent(self._completed_count, self._total_count)
        elapsed = (datetime.now() - self._started_at).total_seconds() if self._started_at else 0.0
        rate = calculate_files_per_second(self._completed_count, elapsed)
        remaining = estimate_time_remaining(self._completed_count, self._total_count, rate)
        logging.info(
            f"Scan {self._run_id[:8]} {create_simple_progress_bar(percent)} {percent:.0f}% "
            f"({self._completed_count}/{self._total_count}, {rate:.1f} files/s, "
            f"~{remaining:.0f}s remaining)"
        )

    def _build_outcome(self, status: ScanOutcomeStatus, reason: Optional[str]) -> ScanOutcome:
        duration = (datetime.now() - self._started_at).total_seconds() if self._started_at else 0.0
        return ScanOutcome(
            status=status,
            reason=reason,
            completed_count=self._completed_count,
            total_count=self._total_count,
            emitted_count=len(self._results),
            unreadable_files=self._unreadable_files,
            skipped_directories=self._skipped_directories,
            duration_seconds=round(duration, 3),
        )
