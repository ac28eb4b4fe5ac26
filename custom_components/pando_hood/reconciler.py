"""Per-hood reconciliation between local intents and polled cloud state.

Local intents update the shadow optimistically and go out through the
debouncer. Poll results always land in the shadow but are only surfaced to
listeners once the post-write cooldown has passed, so the cloud's cached
pre-write state cannot snap the UI back. Fan-on intents arm the firmware
quirk compensator.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set

from .api import PandoApiError, PandoClient
from .const import (
    CAPABILITY_DEFAULTS,
    CLEAN_AIR_INACTIVE,
    CLEAN_AIR_PURIFYING,
    COMPENSATION_DELAY,
    COOLDOWN_DURATION,
    DEBOUNCE_DELAY,
    DEFAULT_FAN_SPEED,
    KEY_CLEAN_AIR,
    KEY_FAN_SPEED,
    KEY_FILTER_REMAINING,
    KEY_FILTER_WORN,
    KEY_LIGHT_BRIGHTNESS,
    KEY_LIGHT_COLOR_TEMP,
    KEY_LIGHT_POWER,
    KEY_POWER,
    KEY_TIMER_ACTIVE,
    KEY_TIMER_ENABLE,
    KEY_TIMER_VALUE,
    PROP_CLEAN_AIR_ON,
    PROP_CLEAN_AIR_STATE,
    PROP_FAN_ON,
    PROP_FAN_PERCENTAGE,
    PROP_FAULT,
    PROP_FILTER_LIFE,
    PROP_FILTER_WORN,
    PROP_LIGHT_BRIGHTNESS,
    PROP_LIGHT_COLOR_TEMP,
    PROP_LIGHT_ON,
    PROP_TIMER_DURATION,
    PROP_TIMER_ON,
    PROP_TIMER_REMAINING,
    QUIRK_AUTO_TIMER,
    TIMER_MAX,
)
from .conversions import (
    clamp,
    clamp_brightness,
    clamp_color_temp,
    clamp_timer_duration,
    fan_speed_to_percent,
    filter_life_percent,
    percent_to_fan_speed,
)
from .cooldown import CooldownGate
from .debouncer import CommandDebouncer
from .models import PandoThing
from .quirks import Quirk, QuirkCompensator, hood_quirks
from .shadow import CapabilityShadow

_LOGGER = logging.getLogger(__name__)

PushListener = Callable[[Dict[str, Any]], None]

# Capabilities that only mean something while the fan runs
_FAN_SESSION_KEYS = (KEY_TIMER_ENABLE, KEY_TIMER_ACTIVE)


@dataclass(frozen=True)
class HoodProperty:
    """One exposed value: a pure read of the shadow and an optional write."""

    name: str
    read: Callable[[], Any]
    write: Optional[Callable[[Any], Dict[str, int]]] = None


class HoodReconciler:
    def __init__(
        self,
        client: PandoClient,
        thing: PandoThing,
        *,
        debounce_delay: float = DEBOUNCE_DELAY,
        cooldown_duration: float = COOLDOWN_DURATION,
        compensation_delay: float = COMPENSATION_DELAY,
        clock: Callable[[], float] = time.monotonic,
        quirks: Optional[Iterable[Quirk]] = None,
    ) -> None:
        self.uid = thing.uid
        self.thing = thing
        self._client = client
        self._cooldown_duration = cooldown_duration
        self._compensation_delay = compensation_delay

        self.shadow = CapabilityShadow(
            thing.capabilities,
            defaults=CAPABILITY_DEFAULTS,
            track_key=KEY_FAN_SPEED,
            track_default=DEFAULT_FAN_SPEED,
        )
        self.cooldown = CooldownGate(clock)
        self.compensator = QuirkCompensator(
            hood_quirks() if quirks is None else quirks, name=self.uid
        )
        self.debouncer = CommandDebouncer(self._dispatch_batch, debounce_delay, name=self.uid)

        self.online = True
        # Quirks armed by intents still waiting in the debouncer
        self._pending_quirks: Set[str] = set()
        self._listeners: List[PushListener] = []
        self.properties: Dict[str, HoodProperty] = {
            prop.name: prop for prop in self._build_properties()
        }

    # ---- Listeners -----------------------------------------------------

    def add_listener(self, listener: PushListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _push(self) -> None:
        values = self.snapshot()
        for listener in list(self._listeners):
            listener(values)

    def snapshot(self) -> Dict[str, Any]:
        return {name: prop.read() for name, prop in self.properties.items()}

    def read(self, name: str) -> Any:
        return self.properties[name].read()

    def write(self, name: str, value: Any) -> Dict[str, int]:
        prop = self.properties[name]
        if prop.write is None:
            raise ValueError(f"{name} is read-only")
        return prop.write(value)

    # ---- Inputs --------------------------------------------------------

    def apply_intent(self, patch: Mapping[str, int], *, local: Optional[Mapping[str, int]] = None) -> Dict[str, int]:
        """Apply a user write optimistically and queue it for the hood.

        ``local`` values only go into the shadow; they are never sent.
        """
        patch = {key: int(value) for key, value in patch.items()}
        _LOGGER.info("[%s] Intent %s", self.uid, patch)

        fan_was_on = bool(self.shadow.get(KEY_POWER))
        fan_on = patch.get(KEY_POWER)

        for quirk in self.compensator.quirks:
            # The user's explicit wish for the sub-feature beats compensation
            if patch.get(quirk.affected_key):
                self.compensator.cancel(quirk.flag)
                self._pending_quirks.discard(quirk.flag)
            elif (
                patch.get(quirk.trigger_key) == 1
                and not self._feature_on(quirk.trigger_key)
                and not self._feature_on(quirk.affected_key)
            ):
                _LOGGER.info("[%s] Suppressing %s (was off before %s)", self.uid, quirk.flag, quirk.trigger_key)
                self.compensator.arm(quirk.flag)
                self._pending_quirks.add(quirk.flag)

        self.shadow.merge(patch)
        if local:
            self.shadow.merge(local)

        if fan_on == 0:
            if fan_was_on:
                _LOGGER.debug("[%s] Fan session ended; clearing quirk flags", self.uid)
            self.compensator.end_session()
            self._pending_quirks.clear()
            # Timer state does not outlive the fan session
            for key in _FAN_SESSION_KEYS:
                self.shadow.set(key, 0)

        self.debouncer.enqueue(patch)
        self._push()
        return patch

    def apply_poll(self, thing: PandoThing) -> bool:
        """Merge a poll result; return True if it was pushed to listeners."""
        self.thing = thing
        self.shadow.merge(thing.capabilities)
        # Writes still waiting in the debouncer are newer than any poll
        pending = self.debouncer.pending
        if pending:
            self.shadow.merge(pending)

        if self.cooldown.is_active():
            _LOGGER.debug(
                "[%s] Poll during cooldown (%.1fs left); not pushing",
                self.uid,
                self.cooldown.remaining(),
            )
            return False

        if not self.shadow.get(KEY_POWER):
            self.compensator.end_session()
            self._pending_quirks.clear()
        self._push()
        return True

    def set_online(self, online: bool) -> None:
        if online == self.online:
            return
        self.online = online
        if online:
            _LOGGER.info("[%s] Hood is back online", self.uid)
        else:
            _LOGGER.warning("[%s] Hood marked offline; commands are held back", self.uid)
        self._push()

    def shutdown(self) -> None:
        self.debouncer.cancel()
        self.compensator.shutdown()
        self.cooldown.clear()
        self._listeners.clear()

    # ---- Outbound ------------------------------------------------------

    async def _dispatch_batch(self, batch: Dict[str, int]) -> None:
        quirks, self._pending_quirks = self._pending_quirks, set()
        if not await self._send(batch):
            return
        for flag in quirks:
            if not self.compensator.is_armed(flag):
                continue
            quirk = self.compensator.quirk(flag)
            self.compensator.schedule_compensation(
                flag, self._compensation_delay, partial(self._compensate, quirk)
            )

    async def _compensate(self, quirk: Quirk) -> bool:
        patch = quirk.compensation
        if not await self._send(patch):
            return False
        self.shadow.merge(patch)
        self._push()
        return True

    async def _send(self, patch: Dict[str, int]) -> bool:
        if not self.online:
            _LOGGER.info("[%s] Offline; not sending %s", self.uid, patch)
            return False
        self.cooldown.arm(self._cooldown_duration)
        try:
            await self._client.send_command(self.uid, patch)
        except PandoApiError as ex:
            _LOGGER.warning("[%s] Command %s failed: %s", self.uid, patch, ex)
            return False
        # Restart the window from the moment the write landed
        self.cooldown.arm(self._cooldown_duration)
        return True

    # ---- Derived values ------------------------------------------------

    def _feature_on(self, key: str) -> bool:
        if key == KEY_TIMER_ENABLE:
            return bool(self.shadow.get(KEY_TIMER_ENABLE) or self.shadow.get(KEY_TIMER_ACTIVE))
        return bool(self.shadow.get(key))

    def _timer_suppressed(self) -> bool:
        return self.compensator.is_suppressing(QUIRK_AUTO_TIMER)

    def _build_properties(self) -> List[HoodProperty]:
        shadow = self.shadow
        return [
            HoodProperty(PROP_FAN_ON, lambda: bool(shadow.get(KEY_POWER)), self._write_fan_on),
            HoodProperty(PROP_FAN_PERCENTAGE, self._read_fan_percentage, self._write_fan_percentage),
            HoodProperty(PROP_LIGHT_ON, lambda: shadow.get(KEY_LIGHT_POWER) == 1, self._write_light_on),
            HoodProperty(
                PROP_LIGHT_BRIGHTNESS,
                lambda: clamp_brightness(shadow.get(KEY_LIGHT_BRIGHTNESS)),
                self._write_brightness,
            ),
            HoodProperty(
                PROP_LIGHT_COLOR_TEMP,
                lambda: clamp_color_temp(shadow.get(KEY_LIGHT_COLOR_TEMP)),
                self._write_color_temp,
            ),
            HoodProperty(PROP_FILTER_WORN, lambda: shadow.get(KEY_FILTER_WORN) == 1),
            HoodProperty(PROP_FILTER_LIFE, lambda: filter_life_percent(shadow.get(KEY_FILTER_REMAINING))),
            HoodProperty(PROP_CLEAN_AIR_ON, lambda: shadow.get(KEY_CLEAN_AIR) == 1, self._write_clean_air),
            HoodProperty(
                PROP_CLEAN_AIR_STATE,
                lambda: CLEAN_AIR_PURIFYING if shadow.get(KEY_CLEAN_AIR) == 1 else CLEAN_AIR_INACTIVE,
            ),
            HoodProperty(PROP_TIMER_ON, self._read_timer_on, self._write_timer_on),
            HoodProperty(
                PROP_TIMER_DURATION,
                lambda: clamp_timer_duration(shadow.get(KEY_TIMER_VALUE)),
                self._write_timer_duration,
            ),
            HoodProperty(PROP_TIMER_REMAINING, self._read_timer_remaining),
            HoodProperty(PROP_FAULT, lambda: not self.online),
        ]

    def _read_fan_percentage(self) -> int:
        if not self.shadow.get(KEY_POWER):
            return 0
        return fan_speed_to_percent(self.shadow.get(KEY_FAN_SPEED))

    def _read_timer_on(self) -> bool:
        if self._timer_suppressed():
            return False
        return self._feature_on(KEY_TIMER_ENABLE)

    def _read_timer_remaining(self) -> int:
        if self._timer_suppressed() or self.shadow.get(KEY_TIMER_ACTIVE) != 1:
            return 0
        # While counting down, timerValue holds the remaining seconds
        return clamp(self.shadow.get(KEY_TIMER_VALUE, 0), 0, TIMER_MAX)

    # ---- Writes --------------------------------------------------------

    def _write_fan_on(self, value: Any) -> Dict[str, int]:
        if not value:
            return self.apply_intent({KEY_POWER: 0})
        return self.apply_intent({KEY_POWER: 1, KEY_FAN_SPEED: self.shadow.last_nonzero})

    def _write_fan_percentage(self, value: Any) -> Dict[str, int]:
        speed = percent_to_fan_speed(int(value))
        if speed == 0:
            return self._write_fan_on(False)
        patch = {KEY_FAN_SPEED: speed}
        if not self.shadow.get(KEY_POWER):
            patch[KEY_POWER] = 1
        return self.apply_intent(patch)

    def _write_light_on(self, value: Any) -> Dict[str, int]:
        return self.apply_intent({KEY_LIGHT_POWER: 1 if value else 0})

    def _write_brightness(self, value: Any) -> Dict[str, int]:
        return self.apply_intent({KEY_LIGHT_BRIGHTNESS: clamp_brightness(value)})

    def _write_color_temp(self, value: Any) -> Dict[str, int]:
        return self.apply_intent({KEY_LIGHT_COLOR_TEMP: clamp_color_temp(value)})

    def _write_clean_air(self, value: Any) -> Dict[str, int]:
        return self.apply_intent({KEY_CLEAN_AIR: 1 if value else 0})

    def _write_timer_on(self, value: Any) -> Dict[str, int]:
        if value:
            duration = clamp_timer_duration(self.shadow.get(KEY_TIMER_VALUE))
            return self.apply_intent({KEY_TIMER_ENABLE: 1, KEY_TIMER_VALUE: duration})
        return self.apply_intent({KEY_TIMER_ENABLE: 0}, local={KEY_TIMER_ACTIVE: 0})

    def _write_timer_duration(self, value: Any) -> Dict[str, int]:
        return self.apply_intent({KEY_TIMER_VALUE: clamp_timer_duration(int(value))})
