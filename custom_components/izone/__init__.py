import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .constants import (
    API_DEFAULTS,
    CONF_HOST,
    CONF_UPDATE_INTERVAL,
    DOMAIN,
    PLATFORMS,
)
from .coordinator import IZoneCoordinator
from .izone_api import IZoneAPI

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    host = entry.data[CONF_HOST]
    update_interval = entry.options.get(CONF_UPDATE_INTERVAL, API_DEFAULTS.POLLING_INTERVAL)

    api = IZoneAPI(host, async_get_clientsession(hass), refresh_interval=update_interval)
    coordinator = IZoneCoordinator(hass, api, entry)

    system = await api.async_begin_background_refresh(coordinator.async_handle_system_refreshed)
    if system is None:
        await api.async_close()
        raise ConfigEntryNotReady(f"Unable to reach iZone controller at {host}")

    _LOGGER.debug("Finished initializing. Refresh rate: %ss.", update_interval)

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = {
        "api": api,
        "coordinator": coordinator,
    }

    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        data = hass.data[DOMAIN].pop(entry.entry_id)
        await data["api"].async_close()
    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry):
    await hass.config_entries.async_reload(entry.entry_id)
