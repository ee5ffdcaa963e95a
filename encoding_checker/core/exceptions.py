# encoding_checker/core/exceptions.py


class ScanError(Exception):
    """Base class for all scan related errors."""


class InvalidDirectoryError(ScanError):
    """Raised when the requested root does not exist or is not a directory."""
    def __init__(self, directory: str):
        self.directory = directory
        super().__init__(f"The directory '{directory}' does not exist or is not a directory.")


class EmptyAcceptedSetError(ScanError):
    """Raised when validation is requested without any accepted charsets."""
    def __init__(self):
        super().__init__("Select one or more valid character sets to proceed with validation.")


class UnknownCharsetError(ScanError):
    """Raised when the accepted set names a charset the detector can never report."""
    def __init__(self, charsets):
        self.charsets = list(charsets)
        super().__init__(f"Unknown character sets: {', '.join(self.charsets)}")


class ScanAlreadyRunningError(ScanError):
    """Raised when a scan is started while another one is still active."""
    def __init__(self, run_id: str):
        self.run_id = run_id
        super().__init__(f"A scan is already running (run {run_id[:8]}).")


class RootEnumerationError(ScanError):
    """Raised when the scan root itself cannot be enumerated."""
    def __init__(self, directory: str, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"Could not enumerate root directory '{directory}': {reason}")


class InvalidTransitionError(Exception):
    """Raised when a scan engine state transition is not allowed."""
    def __init__(self, run_id: str, from_state: str, to_state: str):
        self.run_id = run_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition for scan {run_id}: "
            f"Cannot move from '{from_state}' to '{to_state}'."
        )
