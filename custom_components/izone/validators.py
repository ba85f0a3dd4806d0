"""Input validation functions for iZone integration.

This module provides validation functions used by the config flow, the
options flow and the climate entities:
- Hostnames and IP addresses of the controller
- Background refresh interval
- Requested target temperatures
"""

from __future__ import annotations

import ipaddress
import re

from .constants import API_DEFAULTS


def validate_host(host: str) -> tuple[bool, str | None]:
    """Validate a host string for safety and correctness.

    Rejects anything that is not a plain hostname or IP address, including
    URL schemes, shell metacharacters and loopback/link-local/multicast
    addresses.

    Args:
        host: Hostname or IP address to validate.

    Returns:
        Tuple of (is_valid, error_message).
        error_message is None if valid, otherwise contains description of the error.

    Example:
        >>> validate_host("192.168.1.50")
        (True, None)
        >>> validate_host("izone.local")
        (True, None)
        >>> validate_host("http://192.168.1.50")
        (False, "Host should not include URL scheme")
        >>> validate_host("127.0.0.1")
        (False, "Invalid IP address range")
    """
    host = host.strip()

    if not host:
        return False, "Host cannot be empty"

    if re.search(r"[;&|`$]", host):
        return False, "Invalid characters in hostname"

    if "://" in host:
        return False, "Host should not include URL scheme"

    try:
        ip = ipaddress.ip_address(host)
        if ip.is_loopback or ip.is_link_local or ip.is_multicast:
            return False, "Invalid IP address range"
        return True, None
    except ValueError:
        pass

    hostname_pattern = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.[A-Za-z0-9-]{1,63})*\.?$")
    if not hostname_pattern.match(host):
        return False, "Invalid hostname format"

    return True, None


def validate_update_interval(seconds: int | float) -> tuple[bool, str | None]:
    """Validate the background refresh interval.

    Example:
        >>> validate_update_interval(60)
        (True, None)
        >>> validate_update_interval(1)
        (False, "Update interval must be at least 5 seconds")
    """
    if seconds < API_DEFAULTS.MIN_POLLING_INTERVAL:
        return False, f"Update interval must be at least {API_DEFAULTS.MIN_POLLING_INTERVAL} seconds"

    return True, None


def validate_target_temperature(
    temperature: float,
    minimum: float = API_DEFAULTS.MIN_TEMPERATURE,
    maximum: float = API_DEFAULTS.MAX_TEMPERATURE,
) -> tuple[bool, str | None]:
    """Validate a requested target temperature against the settable range.

    Example:
        >>> validate_target_temperature(22.5)
        (True, None)
        >>> validate_target_temperature(35)
        (False, "Temperature must be between 15 and 30")
    """
    if not minimum <= temperature <= maximum:
        return False, f"Temperature must be between {minimum:g} and {maximum:g}"

    return True, None
