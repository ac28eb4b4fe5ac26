"""Consecutive-failure tracking for one account's batched poll."""
from __future__ import annotations

import logging
from typing import Callable, List

from .const import OFFLINE_THRESHOLD

_LOGGER = logging.getLogger(__name__)

ConnectivityListener = Callable[[bool], None]


class ConnectivityMonitor:
    """Online/offline state shared by every hood polled in the same call.

    The group goes offline when the failure counter reaches the threshold
    and back online on the first success after that. Listeners receive the
    new online flag only on a transition.
    """

    def __init__(self, threshold: int = OFFLINE_THRESHOLD) -> None:
        self.threshold = threshold
        self.failures = 0
        self.online = True
        self._listeners: List[ConnectivityListener] = []

    def add_listener(self, listener: ConnectivityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def record_success(self) -> bool:
        """Reset the counter; return True if this brought the group back online."""
        self.failures = 0
        if self.online:
            return False
        self.online = True
        _LOGGER.info("PGA cloud reachable again; marking hoods online")
        self._notify()
        return True

    def record_failure(self) -> bool:
        """Count a failed poll; return True if this took the group offline."""
        self.failures += 1
        if self.failures != self.threshold:
            return False
        self.online = False
        _LOGGER.error(
            "PGA cloud unreachable after %s consecutive failures; marking hoods offline",
            self.threshold,
        )
        self._notify()
        return True

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.online)
