"""Coalesce rapid capability writes into one outgoing command."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Mapping, Set

_LOGGER = logging.getLogger(__name__)

FlushHandler = Callable[[Dict[str, int]], Awaitable[None]]


class CommandDebouncer:
    """Collect patches and hand them to ``flush_handler`` after a quiet period.

    Every ``enqueue`` merges into the pending batch (last write wins per key)
    and restarts the quiescence timer. When the timer runs out the whole batch
    is sent as a single command and cleared.
    """

    def __init__(self, flush_handler: FlushHandler, delay: float, *, name: str = "") -> None:
        self.delay = delay
        self._flush_handler = flush_handler
        self._name = name
        self._pending: Dict[str, int] = {}
        self._task: asyncio.Task | None = None
        # Runners that left the window and are sending; held until the send completes
        self._flushing: Set[asyncio.Task] = set()
        # Sequence number to invalidate older runners that weren't canceled in time
        self._seq: int = 0

    @property
    def pending(self) -> Dict[str, int]:
        return dict(self._pending)

    def enqueue(self, patch: Mapping[str, int]) -> None:
        self._pending.update({key: int(value) for key, value in patch.items()})
        self._seq += 1
        my_seq = self._seq
        if self._task and not self._task.done():
            self._task.cancel()
        _LOGGER.debug("[%s] Debouncing %s (pending %s)", self._name, dict(patch), self._pending)

        async def runner():
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                return
            # A newer enqueue owns the window now
            if my_seq != self._seq:
                return
            task = asyncio.current_task()
            self._flushing.add(task)
            task.add_done_callback(self._flushing.discard)
            self._task = None
            try:
                await self.flush()
            except Exception:  # pylint: disable=broad-except
                _LOGGER.exception("[%s] Sending debounced batch failed", self._name)

        self._task = asyncio.create_task(runner())

    async def flush(self) -> None:
        """Send the pending batch now; no-op when nothing is pending."""
        if self._task and not self._task.done() and self._task is not asyncio.current_task():
            self._task.cancel()
        self._task = None
        if not self._pending:
            return
        batch, self._pending = self._pending, {}
        await self._flush_handler(batch)

    def cancel(self) -> None:
        """Drop the pending batch and stop the timer."""
        self._seq += 1
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None
        self._pending = {}
