"""Common fixtures for iZone tests."""
import copy
from unittest.mock import AsyncMock, MagicMock

import pytest
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from custom_components.izone.models import System, Zone

DEVICE_UID = "000013170"

SYSTEM_SETTINGS = {
    "AirStreamDeviceUId": DEVICE_UID,
    "DeviceType": "ASH",
    "SysOn": "on",
    "SysMode": "cool",
    "SysFan": "med",
    "SleepTimer": 0,
    "UnitType": "Daikin",
    "Supply": 14.5,
    "Setpoint": 23.0,
    "Temp": 24.5,
    "RAS": "zones",
    "CtrlZone": 13,
    "Tag1": "Home",
    "Tag2": "",
    "Warnings": "none",
    "ACError": " OK",
    "EcoLock": "false",
    "EcoMax": 30,
    "EcoMin": 15,
    "NoOfConst": 1,
    "NoOfZones": 3,
}


def zone_entry(index, name=None, zone_type="auto", mode="auto", setpoint=23.0, temp=24.0):
    """Build one element of a ZonesX_Y response."""
    return {
        "AirStreamDeviceUId": DEVICE_UID,
        "Index": index,
        "Name": name if name is not None else f"Zone {index + 1}",
        "Type": zone_type,
        "Mode": mode,
        "SetPoint": setpoint,
        "Temp": temp,
        "MaxAir": 100,
        "MinAir": 0,
        "Const": 1 if zone_type == "const" else 0,
        "ConstA": "false",
    }


ZONE_ENTRIES = [
    zone_entry(0, "Living", setpoint=21.0, temp=22.5),
    zone_entry(1, "Kitchen", zone_type="opcl", mode="open", setpoint=23.0, temp=24.0),
    zone_entry(2, "Bedroom", zone_type="const", mode="open", setpoint=23.0, temp=23.5),
]


@pytest.fixture
def system_settings():
    """Raw SystemSettings response."""
    return copy.deepcopy(SYSTEM_SETTINGS)


@pytest.fixture
def zone_entries():
    """Raw zone entries, as returned by Zones1_4."""
    return copy.deepcopy(ZONE_ENTRIES)


@pytest.fixture
def sample_system(system_settings, zone_entries):
    """Parsed system snapshot with three zones."""
    return System.from_api(system_settings).with_zones(Zone.from_api(entry) for entry in zone_entries)


@pytest.fixture
def mock_hass():
    """Create a mock Home Assistant instance."""
    hass = MagicMock(spec=HomeAssistant)
    hass.data = {}
    hass.loop = None
    hass.async_create_task = MagicMock()
    hass.add_job = MagicMock()
    return hass


@pytest.fixture
def mock_config_entry():
    """Create a mock config entry."""
    entry = MagicMock(spec=ConfigEntry)
    entry.entry_id = "test_entry_id"
    entry.data = {"host": "192.168.1.100", "name": ""}
    entry.options = {}
    entry.async_on_unload = MagicMock()
    entry.add_update_listener = MagicMock(return_value=lambda: None)
    return entry


@pytest.fixture
def mock_api(sample_system):
    """Create a mock IZoneAPI instance."""
    api = MagicMock()
    api.system = sample_system
    api.async_get_system = AsyncMock(return_value=sample_system)
    api.async_refresh = AsyncMock(return_value=sample_system)
    api.async_begin_background_refresh = AsyncMock(return_value=sample_system)
    api.end_background_refresh = MagicMock()
    api.async_close = AsyncMock()
    api.async_enable_system = AsyncMock()
    api.async_disable_system = AsyncMock()
    api.async_set_system_mode = AsyncMock()
    api.async_set_fan_speed = AsyncMock()
    api.async_set_target_temperature = AsyncMock()
    api.async_set_zone_mode = AsyncMock()
    api.async_open_zone = AsyncMock()
    api.async_close_zone = AsyncMock()
    api.async_set_zone_target_temperature = AsyncMock()
    return api


@pytest.fixture
def mock_coordinator(sample_system):
    """Create a mock coordinator holding the sample system."""
    coordinator = MagicMock()
    coordinator.data = sample_system
    coordinator.async_request_refresh = AsyncMock()
    coordinator.async_add_listener = MagicMock(return_value=lambda: None)
    coordinator.last_update_success = True
    return coordinator


def mock_session_with_responses(responses):
    """Build a mock aiohttp session answering GETs by URL suffix.

    ``responses`` maps an endpoint (e.g. ``"SystemSettings"``) to the JSON
    payload returned for it, or to an exception raised by ``raise_for_status``.
    """
    session = MagicMock()
    session.closed = False

    def _get(url, **kwargs):
        endpoint = url.rsplit("/", 1)[-1]
        payload = responses[endpoint]
        response = MagicMock()
        if isinstance(payload, Exception):
            response.raise_for_status = MagicMock(side_effect=payload)
        else:
            response.raise_for_status = MagicMock()
        response.json = AsyncMock(return_value=copy.deepcopy(payload))
        return MagicMock(
            __aenter__=AsyncMock(return_value=response),
            __aexit__=AsyncMock(return_value=None),
        )

    session.get = MagicMock(side_effect=_get)
    session.post = MagicMock(
        return_value=MagicMock(
            __aenter__=AsyncMock(return_value=MagicMock(status=200, raise_for_status=MagicMock())),
            __aexit__=AsyncMock(return_value=None),
        )
    )
    return session
