"""Base entities shared by the iZone climate and switch platforms.

``IZoneBaseEntity`` ties an entity to the system device and the coordinator;
``IZoneZoneEntity`` additionally follows one zone of the system by index and
puts it on its own device, linked to the controller through ``via_device``.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .constants import CONF_NAME, DOMAIN, MANUFACTURER
from .coordinator import IZoneCoordinator
from .exceptions import IZoneError

if TYPE_CHECKING:
    from .izone_api import IZoneAPI
    from .models import System, Zone


class IZoneBaseEntity(CoordinatorEntity[IZoneCoordinator]):
    """Entity bound to the iZone controller device."""

    _attr_has_entity_name = True

    def __init__(self, coordinator: IZoneCoordinator, api: IZoneAPI, entry) -> None:
        super().__init__(coordinator)
        self._api = api
        self._entry = entry

    @property
    def system(self) -> System | None:
        return self.coordinator.data

    @property
    def available(self) -> bool:
        return super().available and self.system is not None

    @property
    def system_name(self) -> str:
        """Configured name, falling back to the name stored on the device."""
        configured = self._entry.data.get(CONF_NAME) if self._entry else None
        if configured:
            return configured
        if self.system is not None and self.system.tag1:
            return self.system.tag1
        return "iZone"

    @property
    def device_info(self) -> DeviceInfo | None:
        """Return device information for the entity registry."""
        if self.system is None:
            return None

        return DeviceInfo(
            identifiers={(DOMAIN, self.system.device_uid)},
            name=self.system_name,
            manufacturer=MANUFACTURER,
            model=self.system.unit_type or None,
            serial_number=self.system.device_uid,
        )

    async def _async_run_command(self, description: str, command: Awaitable[Any]) -> Any:
        """Await a device command and refresh the coordinator afterwards.

        Raises:
            HomeAssistantError: If the device rejects or does not confirm the command.
        """
        try:
            result = await command
        except IZoneError as err:
            raise HomeAssistantError(f"Unable to {description}: {err}") from err

        await self.coordinator.async_request_refresh()
        return result


class IZoneZoneEntity(IZoneBaseEntity):
    """Entity following one zone of the system."""

    _attr_name = None

    def __init__(self, coordinator: IZoneCoordinator, api: IZoneAPI, entry, zone: Zone) -> None:
        super().__init__(coordinator, api, entry)
        self.zone_index = zone.index
        self.zone_key = zone.unique_key
        self._device_uid = zone.device_uid
        self._attr_unique_id = zone.unique_key

    @property
    def zone(self) -> Zone | None:
        if self.system is None:
            return None
        return self.system.zone(self.zone_index)

    @property
    def available(self) -> bool:
        return super().available and self.zone is not None

    @property
    def device_info(self) -> DeviceInfo | None:
        zone = self.zone
        if zone is None:
            return None

        return DeviceInfo(
            identifiers={(DOMAIN, self.zone_key)},
            name=zone.name or f"Zone {self.zone_index + 1}",
            manufacturer=MANUFACTURER,
            model=f"{zone.type.value} zone",
            via_device=(DOMAIN, self._device_uid),
        )
