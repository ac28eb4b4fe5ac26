"""Post-write window during which poll results are not surfaced."""
from __future__ import annotations

import time
from typing import Callable


class CooldownGate:
    """A single absolute deadline on a monotonic clock.

    ``arm`` overwrites the deadline, so a later dispatch restarts the window
    instead of extending it.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self.deadline: float = 0.0

    def arm(self, duration: float) -> None:
        self.deadline = self._clock() + duration

    def is_active(self) -> bool:
        return self._clock() < self.deadline

    def remaining(self) -> float:
        return max(0.0, self.deadline - self._clock())

    def clear(self) -> None:
        self.deadline = 0.0
