import logging

from homeassistant.core import callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .izone_api import IZoneAPI
from .models import System

_LOGGER = logging.getLogger(__name__)


class IZoneCoordinator(DataUpdateCoordinator[System]):
    """Coordinator holding the latest iZone system snapshot.

    Has no polling interval of its own: the client's background refresh
    pushes every new snapshot in through ``async_handle_system_refreshed``.
    """

    def __init__(self, hass, api: IZoneAPI, config_entry=None):
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name="iZone System",
            update_interval=None,
        )
        self.api = api

    async def _async_update_data(self) -> System:
        system = await self.api.async_refresh(notify=False)
        if system is None:
            raise UpdateFailed("Unable to refresh iZone system")
        return system

    @callback
    def async_handle_system_refreshed(self, system: System) -> None:
        """Publish a snapshot obtained by the background refresh."""
        self.async_set_updated_data(system)
