"""Firmware quirks of Pando hoods and the compensator that undoes them.

Switching the hood fan on makes the firmware switch other features on by
itself. The integration cannot stop that from happening; it arms a flag when
it sends a triggering command and, once the command has landed, sends the
opposite value back unless the user asked for the feature in the meantime.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, Optional

from .const import (
    KEY_LIGHT_POWER,
    KEY_POWER,
    KEY_TIMER_ENABLE,
    QUIRK_AUTO_LIGHT,
    QUIRK_AUTO_TIMER,
)

_LOGGER = logging.getLogger(__name__)

CompensationAction = Callable[[], Awaitable[bool]]


@dataclass(frozen=True)
class Quirk:
    flag: str
    # Capability whose switch-on triggers the side effect
    trigger_key: str
    # Capability the firmware flips by itself
    affected_key: str
    # Session-scoped quirks stay flagged until the trigger session ends,
    # because the firmware re-asserts the side effect on every poll
    session_scoped: bool = False

    @property
    def compensation(self) -> Dict[str, int]:
        return {self.affected_key: 0}


_QUIRKS: Dict[str, Quirk] = {
    # Light comes on at default brightness whenever the fan starts
    QUIRK_AUTO_LIGHT: Quirk(QUIRK_AUTO_LIGHT, KEY_POWER, KEY_LIGHT_POWER),
    # Timer is enabled with the fan and reported enabled until the fan stops
    QUIRK_AUTO_TIMER: Quirk(QUIRK_AUTO_TIMER, KEY_POWER, KEY_TIMER_ENABLE, session_scoped=True),
}


def hood_quirks() -> Iterable[Quirk]:
    return _QUIRKS.values()


class QuirkState(Enum):
    IDLE = "idle"
    ARMED = "armed"
    COMPENSATED = "compensated"


class QuirkCompensator:
    """Per-device state machine for each quirk flag.

    ``Idle -> Armed`` on a triggering intent, ``Armed -> Idle`` on cancel or
    when a one-shot compensation succeeds, ``Armed -> Compensated`` when a
    session-scoped compensation succeeds, ``Compensated -> Idle`` only when
    the session ends. A failed compensation leaves the state untouched and is
    not retried.
    """

    def __init__(self, quirks: Iterable[Quirk], *, name: str = "") -> None:
        self._name = name
        self._quirks: Dict[str, Quirk] = {quirk.flag: quirk for quirk in quirks}
        self._states: Dict[str, QuirkState] = {flag: QuirkState.IDLE for flag in self._quirks}
        self._tasks: Dict[str, asyncio.Task] = {}
        # Bumped on every arm/cancel; a timer only acts if its token still matches
        self._tokens: Dict[str, int] = {flag: 0 for flag in self._quirks}

    @property
    def quirks(self) -> Iterable[Quirk]:
        return self._quirks.values()

    def quirk(self, flag: str) -> Optional[Quirk]:
        """Return the quirk definition for the flag if known."""
        return self._quirks.get(flag)

    def state(self, flag: str) -> QuirkState:
        return self._states[flag]

    def is_armed(self, flag: str) -> bool:
        return self._states[flag] is QuirkState.ARMED

    def is_suppressing(self, flag: str) -> bool:
        return self._states[flag] is not QuirkState.IDLE

    def arm(self, flag: str) -> None:
        """Flag a triggering intent without starting the timer yet."""
        self._tokens[flag] += 1
        self._states[flag] = QuirkState.ARMED
        _LOGGER.debug("[%s] Quirk %s armed", self._name, flag)

    def schedule_compensation(self, flag: str, delay: float, action: CompensationAction) -> None:
        """Arm ``flag`` and run ``action`` after ``delay`` if still armed."""
        self.arm(flag)
        token = self._tokens[flag]
        quirk = self._quirks[flag]
        previous = self._tasks.pop(flag, None)
        if previous and not previous.done():
            previous.cancel()

        async def runner():
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                return
            if token != self._tokens[flag] or self._states[flag] is not QuirkState.ARMED:
                _LOGGER.debug("[%s] Quirk %s compensation skipped", self._name, flag)
                return
            _LOGGER.info("[%s] Compensating %s: sending %s", self._name, flag, quirk.compensation)
            try:
                ok = await action()
            except Exception as ex:  # pylint: disable=broad-except
                _LOGGER.warning("[%s] Quirk %s compensation raised: %s", self._name, flag, ex)
                ok = False
            finally:
                if self._tasks.get(flag) is asyncio.current_task():
                    del self._tasks[flag]
            if not ok:
                _LOGGER.warning("[%s] Quirk %s compensation not delivered", self._name, flag)
                return
            # A cancel that arrived while the command was in flight wins
            if token != self._tokens[flag]:
                return
            self._states[flag] = QuirkState.COMPENSATED if quirk.session_scoped else QuirkState.IDLE

        self._tasks[flag] = asyncio.create_task(runner())

    def cancel(self, flag: str) -> None:
        """Drop the flag without firing; a genuine user intent overrides compensation."""
        if self._states[flag] is not QuirkState.IDLE:
            _LOGGER.debug("[%s] Quirk %s canceled", self._name, flag)
        self._tokens[flag] += 1
        self._states[flag] = QuirkState.IDLE

    def end_session(self) -> None:
        """The trigger feature stopped; clear every flag, session-scoped included."""
        for flag in self._quirks:
            self.cancel(flag)

    def shutdown(self) -> None:
        for task in self._tasks.values():
            if not task.done():
                task.cancel()
        self._tasks.clear()
