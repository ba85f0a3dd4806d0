# izone_api.py
"""Client for the iZone local JSON/HTTP API.

The controller has no push channel and acknowledges writes with nothing but
an HTTP status, so every state change goes through the same cycle:

1. read the current state of the system or zone,
2. return early if it already matches the request,
3. send the command,
4. read the state again and only report success if it changed.

The client also owns the cached system snapshot and the background task
that keeps it fresh.
"""

import asyncio
import contextlib
import logging
import math
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp

from .api_decorators import api_get, api_post
from .constants import (
    API_DEFAULTS,
    COMMAND_SYSTEM_FAN,
    COMMAND_SYSTEM_MODE,
    COMMAND_SYSTEM_ON,
    COMMAND_UNIT_SETPOINT,
    COMMAND_ZONE,
    ENDPOINT_SYSTEM_SETTINGS,
    ENDPOINT_ZONE_PAGE,
    MAX_ZONES,
    ZONE_PAGE_SIZE,
)
from .exceptions import (
    IZoneError,
    IZoneInvalidArgumentError,
    IZoneParseError,
    IZoneUnconfirmedCommandError,
)
from .models import (
    CommandOutcome,
    CommandResult,
    FanSpeed,
    System,
    SystemMode,
    Zone,
    ZoneMode,
    ZoneTemperatureResult,
    format_temperature,
    temperatures_match,
)

_LOGGER = logging.getLogger(__name__)

RefreshHandler = Callable[[System], None]


def _no_op_handler(system: System) -> None:
    """Default refresh handler."""


class RefreshSession:
    """Cancellation token for one background refresh session.

    Cancelling wakes a pending wait but never interrupts a fetch that is
    already running.
    """

    def __init__(self) -> None:
        self._cancelled = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    async def async_wait(self, timeout: float) -> bool:
        """Wait ``timeout`` seconds.

        Returns:
            True if the session was cancelled before or during the wait.
        """
        if self.cancelled:
            return True
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


class IZoneAPI:
    """Device client for one iZone controller.

    Attributes:
        base_url: Root URL of the controller, e.g. ``http://192.168.1.50``.
        system: Last snapshot obtained by a background or explicit refresh.
            Only ``apply_refreshed_snapshot`` replaces it.
        refresh_interval: Seconds between the end of one background fetch and
            the start of the next.
    """

    def __init__(
        self,
        host: str,
        session: aiohttp.ClientSession | None = None,
        *,
        refresh_interval: float = API_DEFAULTS.POLLING_INTERVAL,
        read_timeout: int = API_DEFAULTS.READ_TIMEOUT,
        write_timeout: int = API_DEFAULTS.WRITE_TIMEOUT,
    ):
        base_url = host if "://" in host else f"http://{host}"
        self.base_url = base_url.rstrip("/")
        self.refresh_interval = refresh_interval
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.system: System | None = None
        self._session = session
        self._owns_session = session is None
        self._refresh_handler: RefreshHandler = _no_op_handler
        self._refresh_session: RefreshSession | None = None
        self._refresh_task: asyncio.Task | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session.

        Note: Timeouts are set per-request, not on the session level,
        to allow different timeouts for read vs write operations.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def async_close(self) -> None:
        """Stop background refresh and close the session if we created it."""
        task = self._refresh_task
        self._refresh_task = None
        self.end_background_refresh()
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    # -------------------------------------------------------------------------
    # Read path
    # -------------------------------------------------------------------------

    @api_get(ENDPOINT_SYSTEM_SETTINGS)
    async def _async_get_system_settings(self, response_data) -> System:
        return System.from_api(response_data)

    @api_get(ENDPOINT_ZONE_PAGE)
    async def _async_get_zone_page(self, response_data, first: int, last: int) -> list:
        if not isinstance(response_data, list):
            raise IZoneParseError(f"Zones{first}_{last} response is not a list: {response_data!r}")
        return response_data

    @staticmethod
    def _zone_page_bounds(page: int) -> tuple[int, int]:
        """Return the 1-based first and last zone number of a page."""
        first = page * ZONE_PAGE_SIZE + 1
        return first, first + ZONE_PAGE_SIZE - 1

    async def async_get_system(self) -> System:
        """Fetch the system settings and all of its zones.

        Raises:
            IZoneTransportError: If a request fails or a response cannot be parsed.
        """
        system = await self._async_get_system_settings()
        zones = await self.async_get_zones(system.number_of_zones)
        return system.with_zones(zones)

    async def async_get_zones(self, maximum: int) -> list[Zone]:
        """Fetch the first ``maximum`` zones, requesting only the pages needed.

        Pages are requested concurrently; results keep page order and are
        truncated to ``min(12, maximum)``.
        """
        count = max(0, min(MAX_ZONES, maximum))
        pages = math.ceil(count / ZONE_PAGE_SIZE)
        if pages == 0:
            return []

        results = await asyncio.gather(
            *(self._async_get_zone_page(*self._zone_page_bounds(page)) for page in range(pages))
        )
        entries = [entry for page_entries in results for entry in page_entries][:count]
        return [Zone.from_api(entry) for entry in entries]

    async def async_get_zone(self, index: int) -> Zone:
        """Fetch a single zone by its zero-based index.

        Raises:
            IZoneInvalidArgumentError: If the index is negative or past the
                last zone the device reports.
            IZoneTransportError: If the request fails.
        """
        if index < 0 or index >= MAX_ZONES:
            raise IZoneInvalidArgumentError(f"Invalid zone index: {index}")

        entries = await self._async_get_zone_page(*self._zone_page_bounds(index // ZONE_PAGE_SIZE))
        offset = index % ZONE_PAGE_SIZE
        if offset >= len(entries):
            raise IZoneInvalidArgumentError(f"Zone {index} not reported by device")
        return Zone.from_api(entries[offset])

    # -------------------------------------------------------------------------
    # Raw commands
    # -------------------------------------------------------------------------

    @api_post(COMMAND_SYSTEM_ON)
    async def _async_send_power(self, on: bool) -> str:
        return "on" if on else "off"

    @api_post(COMMAND_SYSTEM_MODE)
    async def _async_send_system_mode(self, mode: SystemMode) -> str:
        return mode.value

    @api_post(COMMAND_SYSTEM_FAN)
    async def _async_send_fan_speed(self, fan_speed: FanSpeed) -> str:
        return fan_speed.value

    @api_post(COMMAND_UNIT_SETPOINT)
    async def _async_send_setpoint(self, temperature: float) -> str:
        return format_temperature(temperature)

    @api_post(COMMAND_ZONE)
    async def _async_send_zone_command(self, index: int, command: str) -> dict:
        return {"ZoneNo": str(index + 1), "Command": command}

    # -------------------------------------------------------------------------
    # Command-verify protocol
    # -------------------------------------------------------------------------

    async def _async_command_verify(
        self,
        command: str,
        desired: Any,
        *,
        read: Callable[[], Awaitable[System | Zone]],
        state: Callable[[System | Zone], Any],
        write: Callable[[], Awaitable[Any]],
        same: Callable[[Any, Any], bool] = lambda actual, wanted: actual == wanted,
        current: System | Zone | None = None,
    ) -> CommandResult:
        """Run one read, compare, write, re-read cycle.

        Args:
            command: Command name, for results, errors and logs.
            desired: Requested value of the state being changed.
            read: Coroutine factory returning a fresh snapshot.
            state: Extracts the compared value from a snapshot.
            write: Coroutine factory sending the command.
            same: Equality used for both the no-op check and verification.
            current: A snapshot read moments ago by the caller, used instead
                of the first read.

        Raises:
            IZoneUnconfirmedCommandError: If the re-read state does not match.
            IZoneTransportError: If any request fails.
        """
        if current is None:
            current = await read()
        if same(state(current), desired):
            _LOGGER.debug("%s: already %s, nothing to send", command, desired)
            return CommandResult(command=command, outcome=CommandOutcome.UNCHANGED, snapshot=current)

        await write()

        confirmed = await read()
        if not same(state(confirmed), desired):
            _LOGGER.warning(
                "%s not applied by device: expected %s, read back %s", command, desired, state(confirmed)
            )
            raise IZoneUnconfirmedCommandError(command, desired, state(confirmed))
        return CommandResult(command=command, outcome=CommandOutcome.APPLIED, snapshot=confirmed)

    async def async_enable_system(self) -> CommandResult:
        """Turn the air-conditioning unit on."""
        return await self._async_set_power(True)

    async def async_disable_system(self) -> CommandResult:
        """Turn the air-conditioning unit off."""
        return await self._async_set_power(False)

    async def _async_set_power(self, on: bool) -> CommandResult:
        result = await self._async_command_verify(
            COMMAND_SYSTEM_ON,
            on,
            read=self.async_get_system,
            state=lambda system: system.is_on,
            write=lambda: self._async_send_power(on),
        )
        if result.changed:
            _LOGGER.info("System turned %s.", "on" if on else "off")
        return result

    async def async_set_system_mode(self, mode: SystemMode) -> CommandResult:
        """Change the operating mode of the unit."""
        result = await self._async_command_verify(
            COMMAND_SYSTEM_MODE,
            mode,
            read=self.async_get_system,
            state=lambda system: system.mode,
            write=lambda: self._async_send_system_mode(mode),
        )
        if result.changed:
            _LOGGER.info("System mode set to %s.", mode.value)
        return result

    async def async_set_fan_speed(self, fan_speed: FanSpeed) -> CommandResult:
        """Change the fan speed of the unit."""
        result = await self._async_command_verify(
            COMMAND_SYSTEM_FAN,
            fan_speed,
            read=self.async_get_system,
            state=lambda system: system.fan_speed,
            write=lambda: self._async_send_fan_speed(fan_speed),
        )
        if result.changed:
            _LOGGER.info("Fan speed set to %s.", fan_speed.value)
        return result

    async def async_set_target_temperature(self, temperature: float) -> CommandResult | ZoneTemperatureResult:
        """Set the target temperature of the whole system.

        Uses the central setpoint when the system has one; otherwise pushes
        the temperature to every controllable zone.

        Returns:
            A CommandResult for the central setpoint, or a
            ZoneTemperatureResult listing the outcome of every zone.
        """
        system = await self.async_get_system()
        if system.uses_system_setpoint:
            result = await self._async_command_verify(
                COMMAND_UNIT_SETPOINT,
                temperature,
                read=self.async_get_system,
                state=lambda snapshot: snapshot.target_temp,
                write=lambda: self._async_send_setpoint(temperature),
                same=temperatures_match,
                current=system,
            )
            if result.changed:
                _LOGGER.info("System target temperature set to %s°.", format_temperature(temperature))
            return result

        _LOGGER.debug(
            "System control is %s (zone %d), setting %s° on each zone",
            system.control.value,
            system.control_zone,
            format_temperature(temperature),
        )
        return await self._async_distribute_target_temperature(system, temperature)

    async def _async_distribute_target_temperature(self, system: System, temperature: float) -> ZoneTemperatureResult:
        """Write ``temperature`` to each zone not already at it, one zone at a time.

        Writes go out in ascending index order, each awaited before the next.
        All zones are read back once at the end and each written zone is
        verified on its own.
        """
        outcomes: dict[int, CommandOutcome] = {}
        pending: list[Zone] = []
        for zone in sorted(system.zones, key=lambda zone: zone.index):
            if not zone.is_controllable:
                continue
            if temperatures_match(zone.target_temp, temperature):
                outcomes[zone.index] = CommandOutcome.UNCHANGED
            else:
                pending.append(zone)

        if not pending:
            _LOGGER.debug("All zones already at %s°, nothing to send", format_temperature(temperature))
            return ZoneTemperatureResult(target_temp=temperature, outcomes=outcomes, zones=system.zones)

        command = format_temperature(temperature)
        for zone in pending:
            await self._async_send_zone_command(zone.index, command)

        zones = await self.async_get_zones(system.number_of_zones)
        confirmed_by_index = {zone.index: zone for zone in zones}
        for zone in pending:
            confirmed = confirmed_by_index.get(zone.index)
            if confirmed is not None and temperatures_match(confirmed.target_temp, temperature):
                outcomes[zone.index] = CommandOutcome.APPLIED
                _LOGGER.info("%s set to %s°.", confirmed.name, command)
            else:
                outcomes[zone.index] = CommandOutcome.UNCONFIRMED
                _LOGGER.warning(
                    "%s not set to %s°: device reports %s",
                    zone.name,
                    command,
                    confirmed.target_temp if confirmed is not None else "no zone",
                )

        return ZoneTemperatureResult(target_temp=temperature, outcomes=outcomes, zones=tuple(zones))

    def _check_zone_index(self, index: int) -> None:
        """Validate a zone index against the cached system."""
        if self.system is None:
            raise IZoneInvalidArgumentError("No system snapshot available, refresh before sending zone commands")
        if index < 0 or index >= min(MAX_ZONES, self.system.number_of_zones):
            raise IZoneInvalidArgumentError(
                f"Invalid zone index {index}, system has {self.system.number_of_zones} zones"
            )

    async def async_set_zone_mode(self, index: int, mode: ZoneMode) -> CommandResult:
        """Open, close or hand a zone over to its thermostat."""
        self._check_zone_index(index)
        result = await self._async_command_verify(
            COMMAND_ZONE,
            mode,
            read=lambda: self.async_get_zone(index),
            state=lambda zone: zone.mode,
            write=lambda: self._async_send_zone_command(index, mode.value),
        )
        if result.changed:
            _LOGGER.info("%s set to %s.", result.snapshot.name, mode.value)
        return result

    async def async_open_zone(self, index: int) -> CommandResult:
        return await self.async_set_zone_mode(index, ZoneMode.OPEN)

    async def async_close_zone(self, index: int) -> CommandResult:
        return await self.async_set_zone_mode(index, ZoneMode.CLOSE)

    async def async_set_zone_target_temperature(self, index: int, temperature: float) -> CommandResult:
        """Set the target temperature of a single zone."""
        self._check_zone_index(index)
        command = format_temperature(temperature)
        result = await self._async_command_verify(
            COMMAND_ZONE,
            temperature,
            read=lambda: self.async_get_zone(index),
            state=lambda zone: zone.target_temp,
            write=lambda: self._async_send_zone_command(index, command),
            same=temperatures_match,
        )
        if result.changed:
            _LOGGER.info("%s set to %s°.", result.snapshot.name, command)
        return result

    # -------------------------------------------------------------------------
    # Background refresh
    # -------------------------------------------------------------------------

    def apply_refreshed_snapshot(self, system: System) -> None:
        """Replace the cached snapshot.

        Only the background refresh and ``async_refresh`` call this.
        """
        self.system = system

    async def async_begin_background_refresh(self, handler: RefreshHandler) -> System | None:
        """Start polling, calling ``handler`` with every new snapshot.

        Performs the first fetch before returning.
        """
        self._refresh_handler = handler
        return await self.async_refresh()

    def end_background_refresh(self) -> None:
        """Cancel the pending tick. A fetch already running completes."""
        if self._refresh_session is not None:
            self._refresh_session.cancel()
            self._refresh_session = None

    async def async_refresh(self, *, notify: bool = True) -> System | None:
        """Fetch the system now, then resume background refresh.

        Not reentrant: callers must await one refresh before starting another.

        Args:
            notify: Whether to pass the new snapshot to the refresh handler.

        Returns:
            The new snapshot, or None if the fetch failed.
        """
        previous = self._refresh_task
        self._refresh_task = None
        self.end_background_refresh()
        if previous is not None and not previous.done():
            # the old session exits as soon as its in-flight fetch settles
            await previous

        session = RefreshSession()
        self._refresh_session = session
        system = await self._async_refresh_once(notify=notify)
        if not session.cancelled:
            self._refresh_task = asyncio.create_task(self._async_refresh_loop(session))
        return system

    async def _async_refresh_loop(self, session: RefreshSession) -> None:
        while not await session.async_wait(self.refresh_interval):
            await self._async_refresh_once(notify=True)

    async def _async_refresh_once(self, *, notify: bool) -> System | None:
        try:
            system = await self.async_get_system()
        except IZoneError as err:
            _LOGGER.error("Unable to refresh system: %s", err)
            return None

        self.apply_refreshed_snapshot(system)
        _LOGGER.debug("System refreshed.")
        if notify:
            try:
                self._refresh_handler(system)
            except Exception:
                _LOGGER.exception("System refresh handler failed")
        return system
