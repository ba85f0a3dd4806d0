"""Constants for the iZone integration."""

from __future__ import annotations

from pydantic import BaseModel, Field

# Integration Domain
DOMAIN = "izone"

# Supported Platforms
PLATFORMS = ["climate", "switch"]

MANUFACTURER = "iZone"

# Config entry keys
CONF_HOST = "host"
CONF_NAME = "name"
CONF_UPDATE_INTERVAL = "update_interval"

# Device endpoints (relative to http://<host>/)
ENDPOINT_SYSTEM_SETTINGS = "SystemSettings"
ENDPOINT_ZONE_PAGE = "Zones{first}_{last}"

# Command names double as endpoint and as the single key of the POST body
COMMAND_SYSTEM_ON = "SystemON"
COMMAND_SYSTEM_MODE = "SystemMODE"
COMMAND_SYSTEM_FAN = "SystemFAN"
COMMAND_UNIT_SETPOINT = "UnitSetpoint"
COMMAND_ZONE = "ZoneCommand"

# Zones are served in fixed pages: Zones1_4, Zones5_8, Zones9_12
ZONE_PAGE_SIZE = 4
MAX_ZONES = 12

# A controlling zone index at or above this means "no single zone"
WHOLE_SYSTEM_CONTROL_ZONE = 12


class APIDefaults(BaseModel):
    """Default values for API configuration.

    Immutable configuration values for request timeouts, polling and
    temperature limits. Timeouts and the polling interval can be overridden
    when instantiating IZoneAPI.
    """

    model_config = {"frozen": True}

    READ_TIMEOUT: int = Field(default=10, description="Timeout for read operations (GET) in seconds")
    WRITE_TIMEOUT: int = Field(default=10, description="Timeout for command operations (POST) in seconds")
    POLLING_INTERVAL: int = Field(default=60, description="Default background refresh interval in seconds")
    MIN_POLLING_INTERVAL: int = Field(default=5, description="Smallest interval accepted by the options flow")
    MIN_TEMPERATURE: float = Field(default=15.0, description="Lowest settable temperature without economy lock")
    MAX_TEMPERATURE: float = Field(default=30.0, description="Highest settable temperature without economy lock")
    TEMPERATURE_STEP: float = Field(default=0.5, description="Setpoint resolution of the controller")
    TEMPERATURE_TOLERANCE: float = Field(
        default=0.05,
        description="Two temperatures closer than this are considered equal when verifying commands",
    )


# Create a default instance for easy access
API_DEFAULTS = APIDefaults()
