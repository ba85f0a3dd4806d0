import voluptuous as vol

from homeassistant.config_entries import ConfigEntry, ConfigFlow, OptionsFlow

from .constants import (
    API_DEFAULTS,
    CONF_HOST,
    CONF_NAME,
    CONF_UPDATE_INTERVAL,
    DOMAIN,
)
from .exceptions import IZoneParseError, IZoneTransportError
from .izone_api import IZoneAPI
from .validators import validate_host, validate_update_interval


class IZoneConfigFlow(ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input=None):
        errors = {}

        if user_input is not None:
            host = user_input[CONF_HOST].strip()
            name = user_input.get(CONF_NAME, "").strip()
            is_valid, _ = validate_host(host)

            if not is_valid:
                errors[CONF_HOST] = "invalid_host"
            else:
                api = IZoneAPI(host)
                try:
                    system = await api.async_get_system()
                except IZoneParseError:
                    errors[CONF_HOST] = "invalid_response"
                except IZoneTransportError:
                    errors[CONF_HOST] = "cannot_connect"
                else:
                    await self.async_set_unique_id(system.device_uid)
                    self._abort_if_unique_id_configured()
                    return self.async_create_entry(
                        title=name or system.tag1 or f"iZone @ {host}",
                        data={CONF_HOST: host, CONF_NAME: name},
                    )
                finally:
                    await api.async_close()

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_HOST): str,
                    vol.Optional(CONF_NAME, default=""): str,
                }
            ),
            errors=errors,
        )

    @classmethod
    def async_get_options_flow(cls, entry: ConfigEntry):
        return IZoneOptionsFlow(entry)


class IZoneOptionsFlow(OptionsFlow):
    def __init__(self, entry):
        self.entry = entry

    async def async_step_init(self, user_input=None):
        errors = {}

        if user_input is not None:
            is_valid, _ = validate_update_interval(user_input[CONF_UPDATE_INTERVAL])
            if is_valid:
                return self.async_create_entry(title="", data=user_input)
            errors[CONF_UPDATE_INTERVAL] = "invalid_update_interval"

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_UPDATE_INTERVAL,
                        default=self.entry.options.get(CONF_UPDATE_INTERVAL, API_DEFAULTS.POLLING_INTERVAL),
                    ): vol.Coerce(int),
                }
            ),
            errors=errors,
        )
