import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional
from uuid import uuid4

import aiofiles.os

from encoding_checker.core.cancellation import CancellationToken
from encoding_checker.core.events.event_bus import DomainEventBus
from encoding_checker.core.events.scan_events import (
    ScanFinishedEvent,
    ScanProgressEvent,
    ScanStartedEvent,
)
from encoding_checker.core.exceptions import (
    EmptyAcceptedSetError,
    InvalidDirectoryError,
    ScanAlreadyRunningError,
    UnknownCharsetError,
)
from encoding_checker.models import (
    FileResult,
    ScanMode,
    ScanOutcome,
    ScanOutcomeStatus,
    ScanRequest,
    ScanRunInfo,
    ScanState,
    ScanStatus,
)
from .charset_detector import CharsetDetectorFactory, unknown_charsets
from .scan_engine import ScanEngine


class ScanController:
    """
    Owns the lifecycle of the single in-flight scan.

    - start() validates the request, launches a ScanEngine as a background
      task and returns immediately. At most one scan is active at a time.
    - cancel() raises the cancellation flag of the active scan and returns
      without waiting for the engine to stop.
    - Subscribers listen on the event bus: ScanStartedEvent, then one
      ScanProgressEvent per inspected file, then exactly one
      ScanFinishedEvent, which is always the last event of a run.
    """

    def __init__(
        self,
        event_bus: DomainEventBus,
        detector_factory: CharsetDetectorFactory,
        read_chunk_size: int = 64 * 1024,
        progress_log_interval_percent: int = 10,
    ):
        self._event_bus = event_bus
        self._detector_factory = detector_factory
        self._read_chunk_size = read_chunk_size
        self._progress_log_interval_percent = progress_log_interval_percent
        self._lock = asyncio.Lock()

        # Active run (None when idle)
        self._engine: Optional[ScanEngine] = None
        self._token: Optional[CancellationToken] = None
        self._task: Optional[asyncio.Task] = None

        # Most recent run, kept for status and results queries after it finished
        self._current_engine: Optional[ScanEngine] = None
        self._current_request: Optional[ScanRequest] = None
        self._current_started_at: Optional[datetime] = None
        self._last_outcome: Optional[ScanOutcome] = None

        logging.info("ScanController initialized")

    @property
    def event_bus(self) -> DomainEventBus:
        return self._event_bus

    def is_running(self) -> bool:
        return self._engine is not None

    async def subscribe_progress(self, handler: Callable[[ScanProgressEvent], Awaitable[None]]) -> None:
        await self._event_bus.subscribe(ScanProgressEvent, handler)

    async def subscribe_finished(self, handler: Callable[[ScanFinishedEvent], Awaitable[None]]) -> None:
        await self._event_bus.subscribe(ScanFinishedEvent, handler)

    async def start(self, request: ScanRequest) -> ScanRunInfo:
        """
        Start a scan in the background.

        Raises:
            ScanAlreadyRunningError: Another scan has not reached a terminal state yet.
            InvalidDirectoryError: The root directory is missing or not a directory.
            EmptyAcceptedSetError: Validate mode without accepted charsets.
            UnknownCharsetError: Validate mode with a charset outside known_charsets().
        """
        async with self._lock:
            if self._engine is not None:
                logging.warning(f"Rejected scan start, run {self._engine.run_id[:8]} is still active")
                raise ScanAlreadyRunningError(self._engine.run_id)

            await self._validate_request(request)

            run_id = str(uuid4())
            token = CancellationToken()
            engine = ScanEngine(
                run_id=run_id,
                request=request,
                cancellation_token=token,
                detector_factory=self._detector_factory,
                event_bus=self._event_bus,
                read_chunk_size=self._read_chunk_size,
                progress_log_interval_percent=self._progress_log_interval_percent,
            )
            started_at = datetime.now()

            # The token exists before the task, so an early cancel is always honoured
            self._engine = engine
            self._token = token
            self._current_engine = engine
            self._current_request = request
            self._current_started_at = started_at
            self._last_outcome = None

            # The engine waits until ScanStartedEvent has been delivered
            announced = asyncio.Event()
            self._task = asyncio.create_task(
                self._run(engine, announced), name=f"scan-{run_id[:8]}"
            )

        # Published outside the lock, a started-handler may call start() or cancel()
        try:
            await self._event_bus.publish(ScanStartedEvent(run_id=run_id, request=request))
        finally:
            announced.set()

        logging.info(f"Scan {run_id[:8]} launched as background task")
        return ScanRunInfo(run_id=run_id, request=request, started_at=started_at)

    def cancel(self) -> bool:
        """Request cancellation of the active scan. Returns False when no scan is active."""
        if self._token is None or self._engine is None:
            logging.debug("Cancel requested but no scan is running")
            return False

        self._token.cancel()
        logging.info(f"Cancellation requested for scan {self._engine.run_id[:8]}")
        return True

    def status(self) -> ScanStatus:
        engine = self._current_engine
        if engine is None:
            return ScanStatus(last_outcome=self._last_outcome)

        state = engine.state
        if engine is self._engine:
            if not state.is_terminal:
                # Accepted but the task may not have entered the engine yet
                state = ScanState.RUNNING
        elif self._last_outcome is not None:
            # A hard-cancelled task never finished its engine transition
            state = ScanState(self._last_outcome.status.value)

        return ScanStatus(
            state=state,
            run_id=engine.run_id,
            request=self._current_request,
            started_at=self._current_started_at,
            completed_count=engine.completed_count,
            total_count=engine.total_count,
            emitted_count=engine.emitted_count,
            last_outcome=self._last_outcome,
        )

    def results(self) -> List[FileResult]:
        """FileResults of the active scan, or of the last one when idle."""
        if self._current_engine is None:
            return []
        return self._current_engine.results

    async def wait_until_idle(self) -> Optional[ScanOutcome]:
        """Wait for the active scan (if any) to finish and return the latest outcome."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.shield(task)
        return self._last_outcome

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Cancel the active scan and wait for it; hard-cancel the task after timeout seconds."""
        task = self._task
        if task is None or task.done():
            return

        self.cancel()
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except asyncio.TimeoutError:
            logging.warning(f"Scan did not stop within {timeout}s, cancelling task")
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    async def _validate_request(self, request: ScanRequest) -> None:
        directory = request.root_directory
        if not directory or not directory.strip():
            raise InvalidDirectoryError(directory)
        if not await aiofiles.os.path.isdir(directory):
            logging.warning(f"Rejected scan start, directory does not exist: {directory}")
            raise InvalidDirectoryError(directory)
        if request.mode == ScanMode.VALIDATE and not request.accepted_charsets:
            logging.warning("Rejected scan start, validation requested without accepted charsets")
            raise EmptyAcceptedSetError()
        if request.mode == ScanMode.VALIDATE:
            unknown = unknown_charsets(request.accepted_charsets)
            if unknown:
                logging.warning(f"Rejected scan start, unknown accepted charsets: {unknown}")
                raise UnknownCharsetError(unknown)

    async def _run(self, engine: ScanEngine, announced: asyncio.Event) -> None:
        try:
            await announced.wait()
            outcome = await engine.run()
        except asyncio.CancelledError:
            logging.warning(f"Scan {engine.run_id[:8]} task was cancelled")
            await self._complete_run(engine, self._interrupted_outcome(engine, ScanOutcomeStatus.CANCELLED))
            raise
        except Exception as e:
            logging.error(f"Scan {engine.run_id[:8]} crashed: {e}", exc_info=True)
            outcome = self._interrupted_outcome(engine, ScanOutcomeStatus.FAILED, str(e))

        await self._complete_run(engine, outcome)

    async def _complete_run(self, engine: ScanEngine, outcome: ScanOutcome) -> None:
        # Idle before announcing, so a finished-handler may start the next scan right away
        if self._engine is engine:
            self._engine = None
            self._token = None
        self._last_outcome = outcome

        await self._event_bus.publish(ScanFinishedEvent(run_id=engine.run_id, outcome=outcome))

    @staticmethod
    def _interrupted_outcome(
        engine: ScanEngine, status: ScanOutcomeStatus, reason: Optional[str] = None
    ) -> ScanOutcome:
        return ScanOutcome(
            status=status,
            reason=reason,
            completed_count=engine.completed_count,
            total_count=engine.total_count,
            emitted_count=engine.emitted_count,
        )
