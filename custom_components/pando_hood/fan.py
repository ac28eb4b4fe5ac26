"""Pando hood fan platform."""
import logging

from homeassistant.components.fan import FanEntity, FanEntityFeature

from .const import FAN_SPEED_COUNT, PROP_FAN_ON, PROP_FAN_PERCENTAGE
from .entity import PandoHoodEntity, entry_reconcilers

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass, entry, async_add_entities):
    """Set up the hood fans."""
    entities = [PandoHoodFan(reconciler) for reconciler in entry_reconcilers(hass, entry)]
    _LOGGER.debug("Registering %s Pando fan entities", len(entities))
    async_add_entities(entities)


class PandoHoodFan(PandoHoodEntity, FanEntity):
    """Hood extraction fan with four speed levels."""

    _attr_speed_count = FAN_SPEED_COUNT
    _attr_supported_features = (
        FanEntityFeature.SET_SPEED | FanEntityFeature.TURN_ON | FanEntityFeature.TURN_OFF
    )

    def __init__(self, reconciler):
        super().__init__(reconciler, "fan", None)

    @property
    def is_on(self):
        return self._reconciler.read(PROP_FAN_ON)

    @property
    def percentage(self):
        return self._reconciler.read(PROP_FAN_PERCENTAGE)

    async def async_turn_on(self, percentage=None, preset_mode=None, **kwargs):
        if percentage is not None:
            self._reconciler.write(PROP_FAN_PERCENTAGE, percentage)
        else:
            self._reconciler.write(PROP_FAN_ON, True)

    async def async_turn_off(self, **kwargs):
        self._reconciler.write(PROP_FAN_ON, False)

    async def async_set_percentage(self, percentage: int) -> None:
        self._reconciler.write(PROP_FAN_PERCENTAGE, percentage)
