"""
Request deadline shared by every blocking call in a single analysis.
"""

from __future__ import annotations

import time
from typing import Optional

from .errors import DeadlineExceeded


class Deadline:
    """
    Wall-clock budget for one analysis request.

    Every external process or oracle call asks the deadline for its timeout via
    ``clamp()`` so that no call can outlive the request envelope.
    """

    def __init__(self, seconds: Optional[float], clock=time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self._expires_at = None if seconds is None else clock() + seconds

    def remaining(self) -> Optional[float]:
        """Seconds left, or None for an unbounded deadline."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, label: str = "analysis") -> None:
        """Raise DeadlineExceeded if the budget is spent."""
        if self.expired:
            raise DeadlineExceeded(f"Deadline of {self.seconds}s exceeded before {label}")

    def clamp(self, timeout: float, label: str = "call") -> float:
        """Return min(timeout, remaining), raising if nothing is left."""
        self.check(label)
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return min(timeout, remaining)

    def __repr__(self) -> str:
        return f"Deadline(seconds={self.seconds!r}, remaining={self.remaining()!r})"


__all__ = ["Deadline"]
