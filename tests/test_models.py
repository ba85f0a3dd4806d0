"""Tests for data models in models.py"""

import pytest
from pydantic import ValidationError

from custom_components.izone.exceptions import IZoneParseError, IZoneTransportError
from custom_components.izone.models import (
    CommandOutcome,
    CommandResult,
    FanSpeed,
    System,
    SystemControl,
    SystemMode,
    Zone,
    ZoneMode,
    ZoneTemperatureResult,
    ZoneType,
    format_temperature,
    temperatures_match,
)

from conftest import zone_entry


class TestSystem:
    """Tests for System snapshot parsing."""

    def test_from_api(self, system_settings):
        """Test parsing a SystemSettings response."""
        system = System.from_api(system_settings)

        assert system.device_uid == "000013170"
        assert system.is_on is True
        assert system.mode is SystemMode.COOL
        assert system.fan_speed is FanSpeed.MEDIUM
        assert system.supply_temp == 14.5
        assert system.target_temp == 23.0
        assert system.actual_temp == 24.5
        assert system.control is SystemControl.ZONES
        assert system.control_zone == 13
        assert system.economy_lock is False
        assert system.number_of_zones == 3
        assert system.number_of_constants == 1
        assert system.zones == ()

    def test_system_off(self, system_settings):
        """Test any SysOn value other than "on" reads as off."""
        system_settings["SysOn"] = "off"
        assert System.from_api(system_settings).is_on is False

    def test_unknown_mode_raises_parse_error(self, system_settings):
        """Test unrecognized enumeration values are rejected."""
        system_settings["SysMode"] = "turbo"

        with pytest.raises(IZoneParseError, match="SystemMode"):
            System.from_api(system_settings)

    def test_unknown_fan_speed_raises_parse_error(self, system_settings):
        system_settings["SysFan"] = "max"

        with pytest.raises(IZoneParseError):
            System.from_api(system_settings)

    def test_missing_field_raises_parse_error(self, system_settings):
        """Test missing required fields are reported."""
        del system_settings["Setpoint"]

        with pytest.raises(IZoneParseError, match="Setpoint"):
            System.from_api(system_settings)

    def test_non_numeric_temperature_raises_parse_error(self, system_settings):
        system_settings["Temp"] = "warm"

        with pytest.raises(IZoneParseError):
            System.from_api(system_settings)

    def test_non_object_response(self):
        with pytest.raises(IZoneParseError):
            System.from_api(["not", "an", "object"])

    def test_parse_error_is_transport_error(self, system_settings):
        """Test parse failures can be handled as transport failures."""
        system_settings["RAS"] = "nobody"

        with pytest.raises(IZoneTransportError):
            System.from_api(system_settings)

    @pytest.mark.parametrize(
        ("control", "control_zone", "expected"),
        [
            ("RAS", 0, True),
            ("RAS", 11, True),
            ("RAS", 12, True),
            ("RAS", 13, True),
            ("master", 0, False),
            ("master", 11, False),
            ("master", 12, True),
            ("master", 13, True),
            ("zones", 0, False),
            ("zones", 11, False),
            ("zones", 12, False),
            ("zones", 13, False),
        ],
    )
    def test_uses_system_setpoint(self, system_settings, control, control_zone, expected):
        """Test which control settings select the central setpoint."""
        system_settings["RAS"] = control
        system_settings["CtrlZone"] = control_zone

        assert System.from_api(system_settings).uses_system_setpoint is expected

    def test_settable_range_without_economy_lock(self, system_settings):
        system_settings["EcoMin"] = 18
        system_settings["EcoMax"] = 26

        system = System.from_api(system_settings)

        assert system.min_settable_temp == 15.0
        assert system.max_settable_temp == 30.0

    def test_settable_range_with_economy_lock(self, system_settings):
        """Test economy lock narrows the settable range."""
        system_settings["EcoLock"] = "true"
        system_settings["EcoMin"] = 18
        system_settings["EcoMax"] = 26

        system = System.from_api(system_settings)

        assert system.economy_lock is True
        assert system.min_settable_temp == 18
        assert system.max_settable_temp == 26

    def test_zone_lookup(self, sample_system):
        assert sample_system.zone(1).name == "Kitchen"
        assert sample_system.zone(7) is None

    def test_snapshot_is_immutable(self, sample_system):
        """Test snapshots cannot be modified in place."""
        with pytest.raises(ValidationError):
            sample_system.target_temp = 18.0


class TestZone:
    """Tests for Zone snapshot parsing."""

    def test_from_api(self):
        zone = Zone.from_api(zone_entry(4, "Study", zone_type="opcl", mode="close", setpoint=22.5, temp=19.0))

        assert zone.index == 4
        assert zone.name == "Study"
        assert zone.type is ZoneType.OPEN_CLOSE
        assert zone.mode is ZoneMode.CLOSE
        assert zone.target_temp == 22.5
        assert zone.actual_temp == 19.0
        assert zone.unique_key == "000013170-4"
        assert zone.is_controllable is True

    def test_constant_zone_is_not_controllable(self):
        zone = Zone.from_api(zone_entry(2, zone_type="const"))

        assert zone.type is ZoneType.CONSTANT
        assert zone.is_controllable is False

    def test_constant_active_flag(self):
        entry = zone_entry(2, zone_type="const")
        entry["ConstA"] = "true"

        assert Zone.from_api(entry).constant_is_active is True

    def test_index_out_of_range(self):
        """Test zone indexes past 11 are rejected."""
        with pytest.raises(IZoneParseError):
            Zone.from_api(zone_entry(12))

    def test_unknown_zone_mode(self):
        entry = zone_entry(0)
        entry["Mode"] = "half"

        with pytest.raises(IZoneParseError, match="ZoneMode"):
            Zone.from_api(entry)

    def test_non_object_entry(self):
        with pytest.raises(IZoneParseError):
            Zone.from_api("zone")


class TestTemperatureHelpers:
    """Tests for temperature comparison and formatting."""

    def test_temperatures_match_within_tolerance(self):
        assert temperatures_match(23.0, 23.0)
        assert temperatures_match(23.0, 23.04)
        assert not temperatures_match(23.0, 23.5)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(23.0, "23"), (22.5, "22.5"), (18, "18")],
    )
    def test_format_temperature(self, value, expected):
        assert format_temperature(value) == expected


class TestResults:
    """Tests for command result models."""

    def test_command_result_flags(self, sample_system):
        applied = CommandResult(command="SystemON", outcome=CommandOutcome.APPLIED, snapshot=sample_system)
        unchanged = CommandResult(command="SystemON", outcome=CommandOutcome.UNCHANGED, snapshot=sample_system)

        assert applied.succeeded and applied.changed
        assert unchanged.succeeded and not unchanged.changed

    def test_zone_temperature_result(self):
        result = ZoneTemperatureResult(
            target_temp=23.0,
            outcomes={
                2: CommandOutcome.UNCONFIRMED,
                0: CommandOutcome.APPLIED,
                1: CommandOutcome.UNCHANGED,
            },
        )

        assert result.failed_zones == [2]
        assert result.applied_zones == [0]
        assert result.succeeded is False

    def test_zone_temperature_result_success(self):
        result = ZoneTemperatureResult(target_temp=23.0, outcomes={0: CommandOutcome.APPLIED})

        assert result.succeeded is True
        assert result.failed_zones == []
