"""Base entity shared by every Pando hood platform."""
from __future__ import annotations

from typing import Any, Dict, List

from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import Entity

from .const import DOMAIN, MANUFACTURER
from .reconciler import HoodReconciler


def entry_reconcilers(hass, entry) -> List[HoodReconciler]:
    entry_data = hass.data[DOMAIN][entry.entry_id]
    return list(entry_data["group"].reconcilers.values())


class PandoHoodEntity(Entity):
    """Reads and writes go through the hood's reconciler; pushes refresh state."""

    _attr_should_poll = False
    _attr_has_entity_name = True

    def __init__(self, reconciler: HoodReconciler, key: str, name: str | None):
        self._reconciler = reconciler
        self._attr_unique_id = f"{reconciler.uid}_{key}"
        self._attr_name = name

    async def async_added_to_hass(self):
        self.async_on_remove(self._reconciler.add_listener(self._handle_push))

    @callback
    def _handle_push(self, values: Dict[str, Any]) -> None:
        self.async_write_ha_state()

    @property
    def available(self) -> bool:
        return self._reconciler.online

    @property
    def device_info(self) -> DeviceInfo:
        thing = self._reconciler.thing
        return DeviceInfo(
            identifiers={(DOMAIN, thing.uid)},
            name=thing.display_name,
            manufacturer=MANUFACTURER,
            model=thing.model or thing.display_name,
            serial_number=thing.uid,
            sw_version=thing.firmware,
        )
