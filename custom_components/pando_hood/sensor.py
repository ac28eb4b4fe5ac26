"""Filter life, timer countdown and clean-air state sensors."""
from __future__ import annotations

from homeassistant.components.sensor import SensorDeviceClass, SensorEntity, SensorStateClass
from homeassistant.const import PERCENTAGE, UnitOfTime

from .const import (
    CLEAN_AIR_INACTIVE,
    CLEAN_AIR_PURIFYING,
    PROP_CLEAN_AIR_STATE,
    PROP_FILTER_LIFE,
    PROP_TIMER_REMAINING,
)
from .entity import PandoHoodEntity, entry_reconcilers


async def async_setup_entry(hass, entry, async_add_entities):
    entities = []
    for reconciler in entry_reconcilers(hass, entry):
        entities.extend(
            [
                PandoFilterLifeSensor(reconciler),
                PandoTimerRemainingSensor(reconciler),
                PandoCleanAirStateSensor(reconciler),
            ]
        )
    async_add_entities(entities)


class PandoFilterLifeSensor(PandoHoodEntity, SensorEntity):
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:air-filter"

    def __init__(self, reconciler):
        super().__init__(reconciler, PROP_FILTER_LIFE, "Filter life")

    @property
    def native_value(self):
        return self._reconciler.read(PROP_FILTER_LIFE)


class PandoTimerRemainingSensor(PandoHoodEntity, SensorEntity):
    _attr_device_class = SensorDeviceClass.DURATION
    _attr_native_unit_of_measurement = UnitOfTime.SECONDS
    _attr_icon = "mdi:timer-sand"

    def __init__(self, reconciler):
        super().__init__(reconciler, PROP_TIMER_REMAINING, "Timer remaining")

    @property
    def native_value(self):
        return self._reconciler.read(PROP_TIMER_REMAINING)


class PandoCleanAirStateSensor(PandoHoodEntity, SensorEntity):
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [CLEAN_AIR_INACTIVE, CLEAN_AIR_PURIFYING]
    _attr_translation_key = "clean_air_state"

    def __init__(self, reconciler):
        super().__init__(reconciler, PROP_CLEAN_AIR_STATE, "Clean air state")

    @property
    def native_value(self):
        return self._reconciler.read(PROP_CLEAN_AIR_STATE)
