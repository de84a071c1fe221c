"""
Cooperative cancellation for long-running pipeline stages.

A ``CancellationToken`` is passed by reference into every stage. Stages poll
it at page boundaries and every ``interval`` elements, and return the
``CANCELLED`` sentinel instead of raising.
"""

import threading
from typing import Optional


class Cancelled:
    """Result variant returned by a stage that stopped on cancellation."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CANCELLED"


CANCELLED = Cancelled()


class CancellationToken:
    """Thread-safe cancellation flag, safe to set from a signal handler."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def reset(self):
        self._event.clear()


class CancellationPoller:
    """Checks a token only every ``interval`` ticks to bound overhead."""

    def __init__(self, token: Optional[CancellationToken], interval: int = 200):
        self.token = token
        self.interval = max(1, interval)
        self._ticks = 0

    def tick(self) -> bool:
        """Count one element; return True if the stage should stop."""
        self._ticks += 1
        if self._ticks % self.interval == 0:
            return self.check()
        return False

    def check(self) -> bool:
        """Unconditional check, used at page boundaries."""
        return self.token is not None and self.token.cancelled
