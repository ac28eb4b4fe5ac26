"""Clean-air and timer switches for Pando hoods."""
from __future__ import annotations

from homeassistant.components.switch import SwitchEntity

from .const import PROP_CLEAN_AIR_ON, PROP_TIMER_ON
from .entity import PandoHoodEntity, entry_reconcilers


async def async_setup_entry(hass, entry, async_add_entities):
    entities = []
    for reconciler in entry_reconcilers(hass, entry):
        entities.append(PandoHoodSwitch(reconciler, PROP_CLEAN_AIR_ON, "Clean air", "mdi:air-purifier"))
        entities.append(PandoHoodSwitch(reconciler, PROP_TIMER_ON, "Timer", "mdi:timer-outline"))
    async_add_entities(entities)


class PandoHoodSwitch(PandoHoodEntity, SwitchEntity):
    def __init__(self, reconciler, prop: str, name: str, icon: str):
        super().__init__(reconciler, prop, name)
        self._prop = prop
        self._attr_icon = icon

    @property
    def is_on(self) -> bool:
        return self._reconciler.read(self._prop)

    async def async_turn_on(self, **kwargs) -> None:
        self._reconciler.write(self._prop, True)

    async def async_turn_off(self, **kwargs) -> None:
        self._reconciler.write(self._prop, False)
