"""
Cancellation
Cooperative cancellation flag shared by one pipeline invocation
"""

import threading

from .errors import OperationCancelled


class CancellationToken:
    """Flag polled by the pipelines between units of work.

    Setting the flag never interrupts a host call in flight; the pipeline
    notices it at its next checkpoint. The flag stays set until reset() is
    called for a new invocation.
    """

    def __init__(self):
        self._event = threading.Event()

    def request(self):
        """Ask the running pipeline to stop at its next checkpoint."""
        self._event.set()

    def reset(self):
        self._event.clear()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise OperationCancelled("Cancelled by user.")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"
