import logging

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .constants import DOMAIN
from .entity_base import IZoneZoneEntity
from .models import ZoneMode, ZoneType

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
):
    data = hass.data[DOMAIN][entry.entry_id]
    api = data["api"]
    coordinator = data["coordinator"]

    known_zones: set[str] = set()

    @callback
    def _async_add_new_zones() -> None:
        system = coordinator.data
        if system is None:
            return
        switches = [
            IZoneZoneSwitch(coordinator, api, entry, zone)
            for zone in system.zones
            if zone.type is ZoneType.OPEN_CLOSE and zone.unique_key not in known_zones
        ]
        if switches:
            known_zones.update(switch.zone_key for switch in switches)
            _LOGGER.debug("Adding %d zone switches", len(switches))
            async_add_entities(switches)

    _async_add_new_zones()
    entry.async_on_unload(coordinator.async_add_listener(_async_add_new_zones))


class IZoneZoneSwitch(IZoneZoneEntity, SwitchEntity):
    """Damper of an open/close zone."""

    _attr_translation_key = "zone"

    @property
    def is_on(self) -> bool:
        system = self.system
        zone = self.zone
        if system is None or zone is None:
            return False
        return system.is_on and zone.mode is not ZoneMode.CLOSE

    async def async_turn_on(self, **kwargs) -> None:
        await self._async_run_command(
            f"open zone {self.zone_index + 1}",
            self._api.async_open_zone(self.zone_index),
        )

    async def async_turn_off(self, **kwargs) -> None:
        await self._async_run_command(
            f"close zone {self.zone_index + 1}",
            self._api.async_close_zone(self.zone_index),
        )
