"""Polling coordinator for Pando hoods."""
import logging
from datetime import timedelta

from homeassistant.core import CALLBACK_TYPE, callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import PandoApiError
from .const import DOMAIN, MIN_POLLING_INTERVAL
from .group import HoodGroup

_LOGGER = logging.getLogger(__name__)


def bounded_interval(seconds) -> timedelta:
    """Polling interval with the floor applied."""
    try:
        seconds = int(seconds)
    except (TypeError, ValueError):
        seconds = MIN_POLLING_INTERVAL
    return timedelta(seconds=max(seconds, MIN_POLLING_INTERVAL))


class PandoDataUpdateCoordinator(DataUpdateCoordinator):
    """Drives the batched poll of one account's hoods."""

    def __init__(self, hass, group: HoodGroup, polling_interval, *, config_entry):
        self.group = group
        update_interval = bounded_interval(polling_interval)
        _LOGGER.info("Polling for state updates every %ss", int(update_interval.total_seconds()))
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            update_interval=update_interval,
            update_method=self._async_update,
            config_entry=config_entry,
        )

    async def _async_update(self):
        """Fetch all hoods; failures are counted by the group and never stop polling."""
        try:
            return await self.group.async_poll()
        except PandoApiError as ex:
            raise UpdateFailed(f"Failed to poll hoods: {ex}") from ex

    @callback
    def async_keep_polling(self) -> CALLBACK_TYPE:
        """Keep the refresh timer running; entities only listen to reconciler pushes."""
        return self.async_add_listener(self._async_poll_done)

    @callback
    def _async_poll_done(self) -> None:
        _LOGGER.debug(
            "Poll finished (success=%s, group online=%s)",
            self.last_update_success,
            self.group.online,
        )

    async def async_shutdown(self) -> None:
        await super().async_shutdown()
        self.group.shutdown()
