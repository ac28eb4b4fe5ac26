"""Pando hood light platform."""
import logging

from homeassistant.util.color import brightness_to_value, value_to_brightness
from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ATTR_COLOR_TEMP_KELVIN,
    ColorMode,
    LightEntity,
)

from .const import (
    BRIGHTNESS_MAX,
    COLOR_TEMP_KELVIN_MAX,
    COLOR_TEMP_KELVIN_MIN,
    PROP_LIGHT_BRIGHTNESS,
    PROP_LIGHT_COLOR_TEMP,
    PROP_LIGHT_ON,
)
from .entity import PandoHoodEntity, entry_reconcilers

_LOGGER = logging.getLogger(__name__)

# Hood brightness is a 1-100 percentage; HA uses 0-255
BRIGHTNESS_SCALE = (1, BRIGHTNESS_MAX)


async def async_setup_entry(hass, entry, async_add_entities):
    """Set up the hood lights."""
    entities = [PandoHoodLight(reconciler) for reconciler in entry_reconcilers(hass, entry)]
    _LOGGER.debug("Registering %s Pando light entities", len(entities))
    async_add_entities(entities)


class PandoHoodLight(PandoHoodEntity, LightEntity):
    """Hood work light with dimming and white tuning."""

    _attr_color_mode = ColorMode.COLOR_TEMP
    _attr_supported_color_modes = {ColorMode.COLOR_TEMP}
    _attr_min_color_temp_kelvin = COLOR_TEMP_KELVIN_MIN
    _attr_max_color_temp_kelvin = COLOR_TEMP_KELVIN_MAX

    def __init__(self, reconciler):
        super().__init__(reconciler, "light", "Light")

    @property
    def is_on(self):
        return self._reconciler.read(PROP_LIGHT_ON)

    @property
    def brightness(self):
        return value_to_brightness(BRIGHTNESS_SCALE, self._reconciler.read(PROP_LIGHT_BRIGHTNESS))

    @property
    def color_temp_kelvin(self):
        return self._reconciler.read(PROP_LIGHT_COLOR_TEMP)

    async def async_turn_on(self, **kwargs):
        # Each write lands in the same debounce window and goes out as one command
        if ATTR_BRIGHTNESS in kwargs:
            percent = round(brightness_to_value(BRIGHTNESS_SCALE, kwargs[ATTR_BRIGHTNESS]))
            self._reconciler.write(PROP_LIGHT_BRIGHTNESS, percent)
        if ATTR_COLOR_TEMP_KELVIN in kwargs:
            self._reconciler.write(PROP_LIGHT_COLOR_TEMP, int(kwargs[ATTR_COLOR_TEMP_KELVIN]))
        if not self.is_on:
            self._reconciler.write(PROP_LIGHT_ON, True)

    async def async_turn_off(self, **kwargs):
        self._reconciler.write(PROP_LIGHT_ON, False)
