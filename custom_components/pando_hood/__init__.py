"""The Pando hood integration."""
import logging

import homeassistant.helpers.config_validation as cv  # type: ignore
from homeassistant.config_entries import ConfigEntry  # type: ignore
from homeassistant.core import HomeAssistant  # type: ignore
from homeassistant.exceptions import ConfigEntryAuthFailed, ConfigEntryNotReady
from homeassistant.helpers import device_registry as dr

from .api import PandoApiError, PandoAuthError, PandoClient
from .const import (
    CONF_PASSWORD,
    CONF_POLLING_INTERVAL,
    CONF_USERNAME,
    DEFAULT_POLLING_INTERVAL,
    DOMAIN,
    PLATFORMS,
)
from .coordinator import PandoDataUpdateCoordinator
from .group import HoodGroup

_LOGGER = logging.getLogger(__name__)

# This integration is config-entry only (no YAML options)
CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)


async def async_setup(hass: HomeAssistant, config: dict):
    """Set up the Pando hood integration (YAML not supported)."""
    hass.data.setdefault(DOMAIN, {})
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    """Set up Pando hoods from a config entry."""
    hass.data.setdefault(DOMAIN, {})
    client = await PandoClient.create(
        entry.data[CONF_USERNAME], entry.data[CONF_PASSWORD], hass
    )
    group = HoodGroup(client)

    try:
        await group.async_discover()
    except PandoAuthError as ex:
        await client.close()
        raise ConfigEntryAuthFailed(str(ex)) from ex
    except PandoApiError as ex:
        await client.close()
        _LOGGER.error("Failed to discover hoods: %s", ex)
        raise ConfigEntryNotReady(str(ex)) from ex

    _async_cleanup_stale_devices(hass, entry, set(group.reconcilers))

    interval = entry.options.get(
        CONF_POLLING_INTERVAL,
        entry.data.get(CONF_POLLING_INTERVAL, DEFAULT_POLLING_INTERVAL),
    )
    coordinator = PandoDataUpdateCoordinator(hass, group, interval, config_entry=entry)
    # Poll once right away so entities never start from the discovery snapshot alone
    await coordinator.async_refresh()
    entry.async_on_unload(coordinator.async_keep_polling())

    hass.data[DOMAIN][entry.entry_id] = {
        "client": client,
        "group": group,
        "coordinator": coordinator,
    }

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        entry_data = hass.data[DOMAIN].pop(entry.entry_id, {})
        coordinator = entry_data.get("coordinator")
        if coordinator:
            await coordinator.async_shutdown()
        client = entry_data.get("client")
        if client:
            await client.close()

    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry):
    """Handle reload of a config entry."""
    await hass.config_entries.async_reload(entry.entry_id)


def _async_cleanup_stale_devices(hass: HomeAssistant, entry: ConfigEntry, known_uids) -> None:
    """Remove devices of hoods that are no longer on the account."""
    dev_reg = dr.async_get(hass)

    for device_entry in list(dev_reg.devices.values()):
        if entry.entry_id not in device_entry.config_entries:
            continue
        uids = {identifier for domain, identifier in device_entry.identifiers if domain == DOMAIN}
        if not uids or uids & known_uids:
            continue
        _LOGGER.info("Removing stale hood: %s", device_entry.name or next(iter(uids)))
        dev_reg.async_remove_device(device_entry.id)
