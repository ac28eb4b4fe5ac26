"""Filter-worn and cloud-connectivity problem sensors."""
from __future__ import annotations

from homeassistant.components.binary_sensor import BinarySensorDeviceClass, BinarySensorEntity
from homeassistant.helpers.entity import EntityCategory

from .const import PROP_FAULT, PROP_FILTER_WORN
from .entity import PandoHoodEntity, entry_reconcilers


async def async_setup_entry(hass, entry, async_add_entities):
    entities = []
    for reconciler in entry_reconcilers(hass, entry):
        entities.append(PandoFilterWornSensor(reconciler))
        entities.append(PandoFaultSensor(reconciler))
    async_add_entities(entities)


class PandoFilterWornSensor(PandoHoodEntity, BinarySensorEntity):
    _attr_device_class = BinarySensorDeviceClass.PROBLEM
    _attr_icon = "mdi:air-filter"

    def __init__(self, reconciler):
        super().__init__(reconciler, PROP_FILTER_WORN, "Filter replacement")

    @property
    def is_on(self) -> bool:
        return self._reconciler.read(PROP_FILTER_WORN)


class PandoFaultSensor(PandoHoodEntity, BinarySensorEntity):
    """On while the PGA cloud has failed too many polls in a row."""

    _attr_device_class = BinarySensorDeviceClass.PROBLEM
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(self, reconciler):
        super().__init__(reconciler, PROP_FAULT, "Cloud connection")

    @property
    def available(self) -> bool:
        # Must keep reporting while the rest of the hood is unavailable
        return True

    @property
    def is_on(self) -> bool:
        return self._reconciler.read(PROP_FAULT)

    @property
    def extra_state_attributes(self):
        # The cloud's own view of whether the hood is connected to it
        return {"hood_reachable": self._reconciler.thing.online}
