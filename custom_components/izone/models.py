"""Data models for iZone integration.

This module provides Pydantic models for the snapshots read from the iZone
controller and for the results of state-changing commands. Snapshots are
frozen: every poll or read builds new values and the previous ones are
simply dropped.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .constants import API_DEFAULTS, WHOLE_SYSTEM_CONTROL_ZONE
from .exceptions import IZoneParseError


# Base model for all iZone data models
class IZoneModel(BaseModel):
    """Base model for all iZone data structures."""

    model_config = {"frozen": True, "populate_by_name": True}


class _WireEnum(str, Enum):
    """String enumeration with a strict parser for device values."""

    @classmethod
    def parse(cls, value: Any):
        """Parse a device value, failing on anything outside the vocabulary.

        Raises:
            IZoneParseError: If the value is not a member of the enumeration.
        """
        try:
            return cls(value)
        except ValueError as err:
            raise IZoneParseError(f"Unrecognized {cls.__name__} value: {value!r}") from err


class SystemMode(_WireEnum):
    """Operating mode of the air-conditioning unit."""

    COOL = "cool"
    HEAT = "heat"
    VENT = "vent"
    DRY = "dry"
    AUTO = "auto"


class FanSpeed(_WireEnum):
    """Fan speed of the air-conditioning unit."""

    LOW = "low"
    MEDIUM = "med"
    HIGH = "high"
    AUTO = "auto"


class SystemControl(_WireEnum):
    """Which sensor the unit's temperature control follows.

    - CENTRAL: the return-air sensor, one setpoint for the whole system
    - MAIN: the master controller or a nominated controlling zone
    - ZONES: every zone thermostat individually
    """

    CENTRAL = "RAS"
    MAIN = "master"
    ZONES = "zones"


class ZoneType(_WireEnum):
    """Kind of damper installed in a zone."""

    OPEN_CLOSE = "opcl"
    AUTO = "auto"
    CONSTANT = "const"


class ZoneMode(_WireEnum):
    """Current state of a zone damper."""

    OPEN = "open"
    CLOSE = "close"
    AUTO = "auto"


def temperatures_match(first: float, second: float) -> bool:
    """Return True when two temperatures are equal for command verification."""
    return math.isclose(first, second, abs_tol=API_DEFAULTS.TEMPERATURE_TOLERANCE)


def format_temperature(value: float) -> str:
    """Format a temperature the way the device expects it in command payloads.

    Example:
        >>> format_temperature(23.0)
        '23'
        >>> format_temperature(22.5)
        '22.5'
    """
    return f"{value:g}"


class Zone(IZoneModel):
    """Snapshot of a single zone.

    Attributes:
        device_uid: Identifier of the owning controller.
        index: Zero-based zone index assigned by the device (0-11).
        name: Display name.
        type: Damper type; constant zones are never independently controllable.
        mode: Current damper mode.
        target_temp: Zone setpoint in °C.
        actual_temp: Measured zone temperature in °C.
        minimum_air: Minimum airflow percentage.
        maximum_air: Maximum airflow percentage.
        constant: Constant-pressure level.
        constant_is_active: Whether the zone is currently open as a constant.
    """

    device_uid: str = Field(..., alias="AirStreamDeviceUId")
    index: int = Field(..., ge=0, le=11, alias="Index")
    name: str = Field(default="", alias="Name")
    type: ZoneType = Field(..., alias="Type")
    mode: ZoneMode = Field(..., alias="Mode")
    target_temp: float = Field(..., alias="SetPoint")
    actual_temp: float = Field(..., alias="Temp")
    minimum_air: int = Field(default=0, ge=0, le=100, alias="MinAir")
    maximum_air: int = Field(default=100, ge=0, le=100, alias="MaxAir")
    constant: int = Field(default=0, alias="Const")
    constant_is_active: bool = Field(default=False, alias="ConstA")

    @property
    def unique_key(self) -> str:
        """Durable key used to correlate this zone across snapshots."""
        return f"{self.device_uid}-{self.index}"

    @property
    def is_controllable(self) -> bool:
        """Whether the zone can be commanded on its own."""
        return self.type is not ZoneType.CONSTANT

    @classmethod
    def from_api(cls, data: Any) -> Zone:
        """Build a zone from one element of a ``ZonesX_Y`` response.

        Raises:
            IZoneParseError: If fields are missing or hold invalid values.
        """
        if not isinstance(data, dict):
            raise IZoneParseError(f"Zone entry is not an object: {data!r}")
        try:
            return cls(
                device_uid=data["AirStreamDeviceUId"],
                index=data["Index"],
                name=data.get("Name", ""),
                type=ZoneType.parse(data["Type"]),
                mode=ZoneMode.parse(data["Mode"]),
                target_temp=data["SetPoint"],
                actual_temp=data["Temp"],
                minimum_air=data.get("MinAir", 0),
                maximum_air=data.get("MaxAir", 100),
                constant=data.get("Const", 0),
                constant_is_active=data.get("ConstA") == "true",
            )
        except KeyError as err:
            raise IZoneParseError(f"Zone entry is missing field {err}") from err
        except ValidationError as err:
            raise IZoneParseError(f"Invalid zone entry: {err}") from err


class System(IZoneModel):
    """Snapshot of the whole controller, including its zones."""

    device_uid: str = Field(..., alias="AirStreamDeviceUId")
    unit_type: str = Field(default="", alias="UnitType")
    tag1: str = Field(default="", alias="Tag1")
    tag2: str = Field(default="", alias="Tag2")
    is_on: bool = Field(..., alias="SysOn")
    mode: SystemMode = Field(..., alias="SysMode")
    fan_speed: FanSpeed = Field(..., alias="SysFan")
    supply_temp: float = Field(..., alias="Supply")
    target_temp: float = Field(..., alias="Setpoint")
    actual_temp: float = Field(..., alias="Temp")
    control: SystemControl = Field(..., alias="RAS")
    control_zone: int = Field(default=0, ge=0, alias="CtrlZone")
    economy_lock: bool = Field(default=False, alias="EcoLock")
    economy_min_temp: float = Field(default=API_DEFAULTS.MIN_TEMPERATURE, alias="EcoMin")
    economy_max_temp: float = Field(default=API_DEFAULTS.MAX_TEMPERATURE, alias="EcoMax")
    number_of_constants: int = Field(default=0, ge=0, alias="NoOfConst")
    number_of_zones: int = Field(default=0, ge=0, alias="NoOfZones")
    zones: tuple[Zone, ...] = Field(default_factory=tuple, description="Zones owned by the system, in index order")

    @property
    def uses_system_setpoint(self) -> bool:
        """Whether a single central setpoint governs the whole system.

        True for central control, or for main control when the controlling
        zone index does not name a real zone.
        """
        return self.control is SystemControl.CENTRAL or (
            self.control is SystemControl.MAIN and self.control_zone >= WHOLE_SYSTEM_CONTROL_ZONE
        )

    @property
    def min_settable_temp(self) -> float:
        """Lowest target temperature the user may request."""
        return self.economy_min_temp if self.economy_lock else API_DEFAULTS.MIN_TEMPERATURE

    @property
    def max_settable_temp(self) -> float:
        """Highest target temperature the user may request."""
        return self.economy_max_temp if self.economy_lock else API_DEFAULTS.MAX_TEMPERATURE

    def zone(self, index: int) -> Zone | None:
        """Return the zone with the given index, if the snapshot has it."""
        return next((zone for zone in self.zones if zone.index == index), None)

    def with_zones(self, zones) -> System:
        """Return a copy of this snapshot owning the given zones."""
        return self.model_copy(update={"zones": tuple(zones)})

    @classmethod
    def from_api(cls, data: Any) -> System:
        """Build a system (without zones) from a ``SystemSettings`` response.

        Raises:
            IZoneParseError: If fields are missing or hold invalid values.
        """
        if not isinstance(data, dict):
            raise IZoneParseError(f"SystemSettings response is not an object: {data!r}")
        try:
            return cls(
                device_uid=data["AirStreamDeviceUId"],
                unit_type=data.get("UnitType", ""),
                tag1=data.get("Tag1", ""),
                tag2=data.get("Tag2", ""),
                is_on=data["SysOn"] == "on",
                mode=SystemMode.parse(data["SysMode"]),
                fan_speed=FanSpeed.parse(data["SysFan"]),
                supply_temp=data["Supply"],
                target_temp=data["Setpoint"],
                actual_temp=data["Temp"],
                control=SystemControl.parse(data["RAS"]),
                control_zone=data.get("CtrlZone", 0),
                economy_lock=data.get("EcoLock") == "true",
                economy_min_temp=data.get("EcoMin", API_DEFAULTS.MIN_TEMPERATURE),
                economy_max_temp=data.get("EcoMax", API_DEFAULTS.MAX_TEMPERATURE),
                number_of_constants=data.get("NoOfConst", 0),
                number_of_zones=data.get("NoOfZones", 0),
            )
        except KeyError as err:
            raise IZoneParseError(f"SystemSettings response is missing field {err}") from err
        except ValidationError as err:
            raise IZoneParseError(f"Invalid SystemSettings response: {err}") from err


class CommandOutcome(str, Enum):
    """How a command ended."""

    APPLIED = "applied"
    UNCHANGED = "unchanged"
    UNCONFIRMED = "unconfirmed"


class CommandResult(IZoneModel):
    """Result of a confirmed command.

    ``snapshot`` is the state read back by the command itself; callers should
    prefer it over the cached system, which may predate the command.
    """

    command: str
    outcome: CommandOutcome
    snapshot: System | Zone

    @property
    def succeeded(self) -> bool:
        return self.outcome is not CommandOutcome.UNCONFIRMED

    @property
    def changed(self) -> bool:
        return self.outcome is CommandOutcome.APPLIED


class ZoneTemperatureResult(IZoneModel):
    """Per-zone result of pushing one target temperature to every zone."""

    target_temp: float
    outcomes: dict[int, CommandOutcome] = Field(default_factory=dict)
    zones: tuple[Zone, ...] = Field(default_factory=tuple, description="Zones as read back after the writes")

    @property
    def failed_zones(self) -> list[int]:
        """Indexes of zones whose write was not confirmed."""
        return sorted(index for index, outcome in self.outcomes.items() if outcome is CommandOutcome.UNCONFIRMED)

    @property
    def applied_zones(self) -> list[int]:
        return sorted(index for index, outcome in self.outcomes.items() if outcome is CommandOutcome.APPLIED)

    @property
    def succeeded(self) -> bool:
        return not self.failed_zones
