"""Config flow for Pando hood integration."""

import logging
import voluptuous as vol  # pyright: ignore[reportMissingImports]

from homeassistant import config_entries, exceptions  # type: ignore
import homeassistant.helpers.config_validation as cv  # type: ignore
from homeassistant.core import callback  # type: ignore

from .api import PandoApiError, PandoAuthError, PandoClient
from .const import (
    CONF_PASSWORD,
    CONF_POLLING_INTERVAL,
    CONF_USERNAME,
    DEFAULT_POLLING_INTERVAL,
    DOMAIN,
    MIN_POLLING_INTERVAL,
)

_LOGGER = logging.getLogger(__name__)

POLLING_INTERVAL_SCHEMA = vol.All(vol.Coerce(int), vol.Range(min=MIN_POLLING_INTERVAL))


async def validate_credentials(hass, username: str, password: str) -> None:
    """Log in once; raise InvalidAuth or CannotConnect on failure."""
    client = await PandoClient.create(username, password, hass)
    try:
        await client.login()
    except PandoAuthError as ex:
        raise InvalidAuth from ex
    except PandoApiError as ex:
        raise CannotConnect from ex
    finally:
        await client.close()


class PandoFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Pando hoods."""

    VERSION = 1
    CONNECTION_CLASS = config_entries.CONN_CLASS_CLOUD_POLL

    async def async_step_user(self, user_input=None):
        """Handle the initial step."""
        errors = {}
        if user_input is not None:
            username = user_input[CONF_USERNAME].strip()
            await self.async_set_unique_id(username.lower())
            self._abort_if_unique_id_configured()
            try:
                await validate_credentials(self.hass, username, user_input[CONF_PASSWORD])
            except InvalidAuth:
                errors["base"] = "invalid_auth"
            except CannotConnect:
                errors["base"] = "cannot_connect"
            except Exception as ex:  # pylint: disable=broad-except
                _LOGGER.exception("Unexpected exception: %s", ex)
                errors["base"] = "unknown"

            if not errors:
                data = {
                    CONF_USERNAME: username,
                    CONF_PASSWORD: user_input[CONF_PASSWORD],
                    CONF_POLLING_INTERVAL: user_input.get(CONF_POLLING_INTERVAL, DEFAULT_POLLING_INTERVAL),
                }
                return self.async_create_entry(title=username, data=data)

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_USERNAME, default=""): cv.string,
                    vol.Required(CONF_PASSWORD, default=""): cv.string,
                    vol.Optional(CONF_POLLING_INTERVAL, default=DEFAULT_POLLING_INTERVAL): POLLING_INTERVAL_SCHEMA,
                }
            ),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Get the options flow."""
        return PandoOptionsFlowHandler(config_entry)


class PandoOptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options."""

    def __init__(self, config_entry):
        # Do not assign to self.config_entry (deprecated in HA 2025.12)
        self._entry = config_entry

    @property
    def entry(self):
        # Prefer framework-provided property if available
        return getattr(self, "config_entry", self._entry)

    async def async_step_init(self, user_input=None):
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        current = self.entry.options.get(
            CONF_POLLING_INTERVAL,
            self.entry.data.get(CONF_POLLING_INTERVAL, DEFAULT_POLLING_INTERVAL),
        )
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {vol.Required(CONF_POLLING_INTERVAL, default=current): POLLING_INTERVAL_SCHEMA}
            ),
        )


class CannotConnect(exceptions.HomeAssistantError):
    """Error to indicate we cannot connect."""


class InvalidAuth(exceptions.HomeAssistantError):
    """Error to indicate the credentials were rejected."""
