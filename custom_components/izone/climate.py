"""Climate platform for iZone integration."""
import logging
from typing import Any

from homeassistant.components.climate import (
    FAN_AUTO,
    FAN_HIGH,
    FAN_LOW,
    FAN_MEDIUM,
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .constants import API_DEFAULTS, DOMAIN
from .entity_base import IZoneBaseEntity, IZoneZoneEntity
from .models import FanSpeed, SystemMode, ZoneMode, ZoneTemperatureResult, ZoneType
from .validators import validate_target_temperature

_LOGGER = logging.getLogger(__name__)

HVAC_MODE_MAPPING = {
    SystemMode.COOL: HVACMode.COOL,
    SystemMode.HEAT: HVACMode.HEAT,
    SystemMode.VENT: HVACMode.FAN_ONLY,
    SystemMode.DRY: HVACMode.DRY,
    SystemMode.AUTO: HVACMode.HEAT_COOL,
}

HVAC_MODE_REVERSE_MAPPING = {v: k for k, v in HVAC_MODE_MAPPING.items()}

FAN_MODE_MAPPING = {
    FanSpeed.LOW: FAN_LOW,
    FanSpeed.MEDIUM: FAN_MEDIUM,
    FanSpeed.HIGH: FAN_HIGH,
    FanSpeed.AUTO: FAN_AUTO,
}

FAN_MODE_REVERSE_MAPPING = {v: k for k, v in FAN_MODE_MAPPING.items()}


def _mode_action(mode: SystemMode) -> HVACAction | None:
    """Action implied by a system mode, or None for auto."""
    return {
        SystemMode.COOL: HVACAction.COOLING,
        SystemMode.HEAT: HVACAction.HEATING,
        SystemMode.VENT: HVACAction.FAN,
        SystemMode.DRY: HVACAction.DRYING,
    }.get(mode)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the system climate entity and one climate entity per auto zone."""
    data = hass.data[DOMAIN][config_entry.entry_id]
    api = data["api"]
    coordinator = data["coordinator"]

    async_add_entities([IZoneSystemClimate(coordinator, api, config_entry)])

    known_zones: set[str] = set()

    @callback
    def _async_add_new_zones() -> None:
        system = coordinator.data
        if system is None:
            return
        new_entities = [
            IZoneZoneClimate(coordinator, api, config_entry, zone)
            for zone in system.zones
            if zone.type is ZoneType.AUTO and zone.unique_key not in known_zones
        ]
        if new_entities:
            known_zones.update(entity.zone_key for entity in new_entities)
            _LOGGER.debug("Adding %d zone climate entities", len(new_entities))
            async_add_entities(new_entities)

    _async_add_new_zones()
    config_entry.async_on_unload(coordinator.async_add_listener(_async_add_new_zones))


class IZoneSystemClimate(IZoneBaseEntity, ClimateEntity):
    """Climate entity for the whole air-conditioning unit."""

    _attr_name = None
    _attr_translation_key = "system"
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_precision = API_DEFAULTS.TEMPERATURE_STEP
    _attr_target_temperature_step = API_DEFAULTS.TEMPERATURE_STEP
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.FAN_MODE
        | ClimateEntityFeature.TURN_ON
        | ClimateEntityFeature.TURN_OFF
    )
    _attr_hvac_modes = [HVACMode.OFF, *HVAC_MODE_REVERSE_MAPPING]
    _attr_fan_modes = list(FAN_MODE_REVERSE_MAPPING)

    def __init__(self, coordinator, api, entry):
        super().__init__(coordinator, api, entry)
        self._attr_unique_id = coordinator.data.device_uid if coordinator.data else entry.entry_id

    @property
    def current_temperature(self) -> float | None:
        return self.system.actual_temp if self.system else None

    @property
    def target_temperature(self) -> float | None:
        return self.system.target_temp if self.system else None

    @property
    def min_temp(self) -> float:
        return self.system.min_settable_temp if self.system else API_DEFAULTS.MIN_TEMPERATURE

    @property
    def max_temp(self) -> float:
        return self.system.max_settable_temp if self.system else API_DEFAULTS.MAX_TEMPERATURE

    @property
    def hvac_mode(self) -> HVACMode:
        if self.system is None or not self.system.is_on:
            return HVACMode.OFF
        return HVAC_MODE_MAPPING[self.system.mode]

    @property
    def hvac_action(self) -> HVACAction:
        """Return the current action of the unit.

        In auto mode the unit heats while the supply air is warmer than the
        target and cools while it is colder.
        """
        system = self.system
        if system is None or not system.is_on:
            return HVACAction.OFF

        action = _mode_action(system.mode)
        if action is not None:
            return action

        if system.supply_temp > system.target_temp:
            return HVACAction.HEATING
        if system.supply_temp < system.target_temp:
            return HVACAction.COOLING
        return HVACAction.IDLE

    @property
    def fan_mode(self) -> str | None:
        return FAN_MODE_MAPPING[self.system.fan_speed] if self.system else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        system = self.system
        if system is None:
            return {}
        return {
            "supply_temperature": system.supply_temp,
            "control": system.control.value,
            "control_zone": system.control_zone,
            "economy_lock": system.economy_lock,
            "uses_system_setpoint": system.uses_system_setpoint,
        }

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        if hvac_mode == HVACMode.OFF:
            await self._async_run_command("turn off system", self._api.async_disable_system())
            return

        mode = HVAC_MODE_REVERSE_MAPPING.get(hvac_mode)
        if mode is None:
            raise HomeAssistantError(f"Unsupported HVAC mode: {hvac_mode}")

        await self._async_run_command(f"set mode to {mode.value}", self._api.async_set_system_mode(mode))
        await self._async_run_command("turn on system", self._api.async_enable_system())

    async def async_turn_on(self) -> None:
        await self._async_run_command("turn on system", self._api.async_enable_system())

    async def async_turn_off(self) -> None:
        await self._async_run_command("turn off system", self._api.async_disable_system())

    async def async_set_fan_mode(self, fan_mode: str) -> None:
        fan_speed = FAN_MODE_REVERSE_MAPPING.get(fan_mode)
        if fan_speed is None:
            raise HomeAssistantError(f"Unsupported fan mode: {fan_mode}")

        await self._async_run_command(f"set fan to {fan_speed.value}", self._api.async_set_fan_speed(fan_speed))

    async def async_set_temperature(self, **kwargs: Any) -> None:
        """Set the target temperature of the system.

        Systems without a central setpoint take the temperature on every
        zone; if any zone does not confirm it the call fails naming those
        zones, after the others have been changed.
        """
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            _LOGGER.warning("No temperature provided in kwargs")
            return

        is_valid, error = validate_target_temperature(temperature, self.min_temp, self.max_temp)
        if not is_valid:
            raise HomeAssistantError(error)

        result = await self._async_run_command(
            "set target temperature", self._api.async_set_target_temperature(temperature)
        )
        if isinstance(result, ZoneTemperatureResult) and not result.succeeded:
            names = ", ".join(self._zone_name(index, result) for index in result.failed_zones)
            raise HomeAssistantError(f"Target temperature {temperature}° not confirmed by zones: {names}")

    def _zone_name(self, index: int, result: ZoneTemperatureResult) -> str:
        zone = next((zone for zone in result.zones if zone.index == index), None)
        if zone is None and self.system is not None:
            zone = self.system.zone(index)
        return zone.name if zone is not None and zone.name else f"Zone {index + 1}"


class IZoneZoneClimate(IZoneZoneEntity, ClimateEntity):
    """Climate entity for a zone with its own thermostat."""

    _attr_translation_key = "zone"
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_precision = API_DEFAULTS.TEMPERATURE_STEP
    _attr_target_temperature_step = API_DEFAULTS.TEMPERATURE_STEP
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TURN_ON
        | ClimateEntityFeature.TURN_OFF
    )
    _attr_hvac_modes = [HVACMode.OFF, HVACMode.AUTO]

    @property
    def current_temperature(self) -> float | None:
        return self.zone.actual_temp if self.zone else None

    @property
    def target_temperature(self) -> float | None:
        """Return the zone setpoint.

        A closed zone reports its own temperature and an open zone follows
        the system setpoint.
        """
        zone = self.zone
        if zone is None:
            return None
        if zone.mode is ZoneMode.CLOSE:
            return zone.actual_temp
        if zone.mode is ZoneMode.OPEN:
            return self.system.target_temp
        return zone.target_temp

    @property
    def min_temp(self) -> float:
        return self.system.min_settable_temp if self.system else API_DEFAULTS.MIN_TEMPERATURE

    @property
    def max_temp(self) -> float:
        return self.system.max_settable_temp if self.system else API_DEFAULTS.MAX_TEMPERATURE

    @property
    def hvac_mode(self) -> HVACMode:
        zone = self.zone
        if zone is None or zone.mode is ZoneMode.CLOSE:
            return HVACMode.OFF
        return HVACMode.AUTO

    @property
    def hvac_action(self) -> HVACAction:
        system = self.system
        zone = self.zone
        if system is None or zone is None or not system.is_on or zone.mode is ZoneMode.CLOSE:
            return HVACAction.OFF

        action = _mode_action(system.mode)
        if action is not None:
            return action
        # auto: the unit heats until the return air reaches the setpoint
        if system.target_temp >= system.actual_temp:
            return HVACAction.HEATING
        return HVACAction.COOLING

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        zone = self.zone
        if zone is None:
            return {}
        return {
            "zone_index": zone.index,
            "zone_mode": zone.mode.value,
            "minimum_air": zone.minimum_air,
            "maximum_air": zone.maximum_air,
        }

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        if hvac_mode == HVACMode.OFF:
            await self.async_turn_off()
        elif hvac_mode == HVACMode.AUTO:
            await self.async_turn_on()
        else:
            raise HomeAssistantError(f"Unsupported HVAC mode: {hvac_mode}")

    async def async_turn_on(self) -> None:
        await self._async_run_command(
            f"set zone {self.zone_index + 1} to auto",
            self._api.async_set_zone_mode(self.zone_index, ZoneMode.AUTO),
        )

    async def async_turn_off(self) -> None:
        await self._async_run_command(
            f"close zone {self.zone_index + 1}",
            self._api.async_close_zone(self.zone_index),
        )

    async def async_set_temperature(self, **kwargs: Any) -> None:
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            _LOGGER.warning("No temperature provided in kwargs")
            return

        is_valid, error = validate_target_temperature(temperature, self.min_temp, self.max_temp)
        if not is_valid:
            raise HomeAssistantError(error)

        await self._async_run_command(
            f"set zone {self.zone_index + 1} target temperature",
            self._api.async_set_zone_target_temperature(self.zone_index, temperature),
        )
