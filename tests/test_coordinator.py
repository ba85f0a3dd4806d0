"""Tests for the iZone coordinator."""

from unittest.mock import AsyncMock

import pytest
from homeassistant.helpers.update_coordinator import UpdateFailed

from custom_components.izone.coordinator import IZoneCoordinator


@pytest.fixture
def coordinator(mock_hass, mock_api, mock_config_entry):
    return IZoneCoordinator(mock_hass, mock_api, mock_config_entry)


def test_coordinator_has_no_polling_interval(coordinator):
    """Test the coordinator relies on the client's own refresh schedule."""
    assert coordinator.update_interval is None
    assert coordinator.data is None


def test_refreshed_snapshot_is_published(coordinator, sample_system):
    coordinator.async_handle_system_refreshed(sample_system)

    assert coordinator.data is sample_system
    assert coordinator.last_update_success is True


@pytest.mark.asyncio
async def test_update_data_refreshes_without_notifying(coordinator, mock_api, sample_system):
    """Test a coordinator refresh does not call back into the coordinator."""
    result = await coordinator._async_update_data()

    assert result is sample_system
    mock_api.async_refresh.assert_awaited_once_with(notify=False)


@pytest.mark.asyncio
async def test_update_data_failure(coordinator, mock_api):
    mock_api.async_refresh = AsyncMock(return_value=None)

    with pytest.raises(UpdateFailed):
        await coordinator._async_update_data()
