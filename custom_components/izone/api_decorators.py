"""Decorators for unified API method patterns.

These decorators provide a clean, consistent way to define iZone endpoints
by handling session management, URL building, JSON encoding and mapping of
transport failures to IZoneTransportError.

Requests are never retried; a failed request surfaces to the caller.

Usage:
    @api_get("SystemSettings")
    async def _async_get_system_settings(self, response_data):
        return System.from_api(response_data)

    @api_get("Zones{first}_{last}")
    async def _async_get_zone_page(self, response_data, first: int, last: int):
        return response_data

    @api_post("SystemMODE")
    async def _async_send_system_mode(self, mode: SystemMode) -> str:
        return mode.value
"""

import asyncio
import functools
import inspect
import logging
from collections.abc import Callable

import aiohttp

from .exceptions import IZoneTransportError

_LOGGER = logging.getLogger(__name__)


def _bind_url_kwargs(func: Callable, skip: int, args: tuple, kwargs: dict) -> dict:
    """Bind positional arguments to their parameter names for URL formatting."""
    params = list(inspect.signature(func).parameters.keys())
    url_kwargs = dict(kwargs)
    for i, arg in enumerate(args):
        if i + skip < len(params):
            url_kwargs[params[i + skip]] = arg
    return url_kwargs


def api_get(url_template: str):
    """Decorator for GET API endpoints.

    Handles:
    - Session management
    - URL building from the template and the call arguments
    - JSON decoding (the device does not always send a JSON content type)
    - Mapping of aiohttp errors, timeouts and malformed bodies to
      IZoneTransportError

    Args:
        url_template: Endpoint relative to the device root, with optional
                      placeholders named after the decorated function's
                      parameters (e.g., "Zones{first}_{last}").

    The decorated function receives the decoded response as its first
    argument after ``self`` and returns the parsed value.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            # Skip 'self' and 'response_data' (first two params)
            url_kwargs = _bind_url_kwargs(func, 2, args, kwargs)
            url = f"{self.base_url}/{url_template.format(**url_kwargs)}"

            try:
                timeout = aiohttp.ClientTimeout(total=self.read_timeout)
                session = await self._get_session()
                async with session.get(url, timeout=timeout) as response:
                    response.raise_for_status()
                    data = await response.json(content_type=None)
            except (asyncio.TimeoutError, aiohttp.ClientError, ValueError) as err:
                raise IZoneTransportError(f"GET {url} failed: {type(err).__name__}: {err}") from err

            _LOGGER.debug("API GET %s returned data: %s", url, data)
            return await func(self, data, *args, **kwargs)

        return wrapper

    return decorator


def api_post(command: str):
    """Decorator for iZone command endpoints.

    Every command is a POST to ``/<command>`` whose body is a single-key JSON
    object: ``{<command>: <payload>}``. The decorated function builds and
    returns the payload.

    Handles:
    - Session management
    - Wrapping the payload under the command name
    - Mapping of aiohttp errors and timeouts to IZoneTransportError

    Returns True once the device answered with a 2xx status. That answer only
    means the request was accepted, not that it was applied.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            payload = await func(self, *args, **kwargs)
            body = {command: payload}
            url = f"{self.base_url}/{command}"

            _LOGGER.debug("Sending command: %s", body)
            try:
                timeout = aiohttp.ClientTimeout(total=self.write_timeout)
                session = await self._get_session()
                async with session.post(
                    url,
                    json=body,
                    headers={"Content-Type": "application/json"},
                    timeout=timeout,
                ) as response:
                    response.raise_for_status()
                    _LOGGER.debug("Command %s accepted, status=%d", command, response.status)
                    return True
            except (asyncio.TimeoutError, aiohttp.ClientError) as err:
                raise IZoneTransportError(f"POST {url} failed: {type(err).__name__}: {err}") from err

        return wrapper

    return decorator
