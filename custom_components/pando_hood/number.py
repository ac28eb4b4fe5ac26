"""Timer duration for Pando hoods."""
from __future__ import annotations

from homeassistant.components.number import NumberDeviceClass, NumberEntity, NumberMode
from homeassistant.const import UnitOfTime

from .const import PROP_TIMER_DURATION, TIMER_MAX, TIMER_MIN
from .entity import PandoHoodEntity, entry_reconcilers


async def async_setup_entry(hass, entry, async_add_entities):
    async_add_entities(PandoTimerDuration(reconciler) for reconciler in entry_reconcilers(hass, entry))


class PandoTimerDuration(PandoHoodEntity, NumberEntity):
    """Run time used the next time the timer is switched on."""

    _attr_device_class = NumberDeviceClass.DURATION
    _attr_native_unit_of_measurement = UnitOfTime.SECONDS
    _attr_native_min_value = TIMER_MIN
    _attr_native_max_value = TIMER_MAX
    _attr_native_step = 60
    _attr_mode = NumberMode.BOX
    _attr_icon = "mdi:timer-cog-outline"

    def __init__(self, reconciler):
        super().__init__(reconciler, PROP_TIMER_DURATION, "Timer duration")

    @property
    def native_value(self) -> int:
        return self._reconciler.read(PROP_TIMER_DURATION)

    async def async_set_native_value(self, value: float) -> None:
        self._reconciler.write(PROP_TIMER_DURATION, int(value))
