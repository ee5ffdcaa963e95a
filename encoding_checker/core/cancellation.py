"""
Cooperative cancellation for long running scans.
"""
import threading


class CancellationToken:
    """
    Carries a cancellation request from the controller to a running scan.

    The token is only ever set by the controller and only read by the engine
    at its check points. It is backed by a threading.Event so a cancel request
    issued from another thread is visible to the event loop immediately.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()
