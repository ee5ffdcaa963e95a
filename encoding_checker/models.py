from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .utils.progress_utils import calculate_scan_percent

UNKNOWN_CHARSET = "Unknown"


class ScanMode(str, Enum):
    """
    What a scan reports.

    VIEW_ALL: every inspected file is reported with its detected charset.
    VALIDATE: only files whose detected charset is known and not accepted are reported.
    """

    VIEW_ALL = "ViewAll"
    VALIDATE = "Validate"


class ScanState(str, Enum):
    """
    Lifecycle of a single scan run.

    Workflow: Idle -> Running -> Completed | Cancelled | Failed
    Terminal states are final for that run.
    """

    IDLE = "Idle"
    RUNNING = "Running"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanState.COMPLETED, ScanState.CANCELLED, ScanState.FAILED)


class ScanOutcomeStatus(str, Enum):
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    FAILED = "Failed"


class ScanRequest(BaseModel):
    """
    Immutable parameters of one scan run.

    Created by the caller and handed to the ScanController. The engine only
    ever reads it.
    """

    model_config = ConfigDict(frozen=True)

    root_directory: str = Field(..., description="Directory to scan")
    recursive: bool = Field(default=True, description="Include all subdirectories")
    mask_patterns: Tuple[str, ...] = Field(
        default=(), description="Ordered filename glob patterns ('*' and '?')"
    )
    mode: ScanMode = Field(default=ScanMode.VIEW_ALL)
    accepted_charsets: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Charsets considered valid (only used in Validate mode)",
    )


class FileResult(BaseModel):
    """One reported file. Fire-and-forget: never modified after it is emitted."""

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(..., description="File name without directory")
    directory_path: str = Field(..., description="Absolute directory containing the file")
    charset: str = Field(default=UNKNOWN_CHARSET, description="Detected charset or 'Unknown'")
    error: Optional[str] = Field(
        default=None, description="Read error, when the file could not be inspected"
    )

    @property
    def is_unknown(self) -> bool:
        return self.charset == UNKNOWN_CHARSET


class ScanProgress(BaseModel):
    """Progress record published for every inspected file."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    result: Optional[FileResult] = Field(
        default=None, description="None when the inspected file was not reported"
    )
    completed_count: int = Field(..., ge=0)
    total_count: int = Field(..., ge=0)

    @computed_field
    @property
    def percent(self) -> float:
        return round(calculate_scan_percent(self.completed_count, self.total_count), 2)


class ScanOutcome(BaseModel):
    """Terminal result of a scan run, together with its statistics."""

    model_config = ConfigDict(frozen=True)

    status: ScanOutcomeStatus
    reason: Optional[str] = Field(default=None, description="Failure reason (Failed only)")
    completed_count: int = 0
    total_count: int = 0
    emitted_count: int = 0
    unreadable_files: int = 0
    skipped_directories: int = 0
    duration_seconds: float = 0.0


class ScanRunInfo(BaseModel):
    """Returned by a successful start command."""

    run_id: str
    request: ScanRequest
    started_at: datetime


class ScanStatus(BaseModel):
    """Snapshot of the controller, used by the status endpoint."""

    state: ScanState = ScanState.IDLE
    run_id: Optional[str] = None
    request: Optional[ScanRequest] = None
    started_at: Optional[datetime] = None
    completed_count: int = 0
    total_count: int = 0
    emitted_count: int = 0
    last_outcome: Optional[ScanOutcome] = None

    @computed_field
    @property
    def percent(self) -> float:
        # Idle, or still enumerating candidates
        if self.total_count == 0 and not self.state.is_terminal:
            return 0.0
        return round(calculate_scan_percent(self.completed_count, self.total_count), 2)

    @property
    def is_running(self) -> bool:
        return self.state == ScanState.RUNNING


class ScanStartRequest(BaseModel):
    """Body of the start command as sent by a client."""

    root_directory: str = Field(..., description="Directory to scan")
    recursive: bool = Field(default=True)
    file_masks: str = Field(default="", description="Newline separated filename masks")
    mode: ScanMode = Field(default=ScanMode.VIEW_ALL)
    accepted_charsets: List[str] = Field(default_factory=list)
