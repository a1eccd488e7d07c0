"""Tests for LuxorCoordinator polling in coordinator.py"""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest
from homeassistant.helpers.update_coordinator import UpdateFailed

from custom_components.luxor.coordinator import LuxorCoordinator, LuxorData
from custom_components.luxor.list_cache import ListCache
from custom_components.luxor.models import ColorEntry, GroupEntry, ThemeEntry


@pytest.fixture
def coordinator(controller):
    """A coordinator without the Home Assistant plumbing, for _async_update_data."""
    coordinator = LuxorCoordinator.__new__(LuxorCoordinator)
    coordinator.controller = controller
    coordinator._warned_groups = set()
    coordinator._first_refresh_lock = asyncio.Lock()
    coordinator.data = None
    return coordinator


class TestUpdate:
    """Test a single poll of the controller."""

    @pytest.mark.asyncio
    async def test_collects_groups_themes_and_colors(self, coordinator, session, group_list):
        session.reply("GroupListGet.json", GroupList=group_list)
        session.reply("ThemeListGet.json", ThemeList=[{"Name": "Party", "ThemeIndex": 0, "OnOff": 1}])
        session.reply("ColorListGet.json", ColorList=[{"C": 12, "Hue": 120, "Sat": 80}])

        data = await coordinator._async_update_data()

        assert sorted(data.groups) == [1, 2, 3]
        assert data.themes == {0: ThemeEntry(0, "Party", True)}
        assert data.colors == {12: ColorEntry(12, 120, 80)}

    @pytest.mark.asyncio
    async def test_group_failure_raises_update_failed(self, coordinator, session):
        session.fail("GroupListGet.json", ConnectionResetError())

        with pytest.raises(UpdateFailed):
            await coordinator._async_update_data()

    @pytest.mark.asyncio
    async def test_refused_group_list_raises_update_failed(self, coordinator, session):
        session.reply("GroupListGet.json", status=1)

        with pytest.raises(UpdateFailed, match="Unknown Method"):
            await coordinator._async_update_data()

    @pytest.mark.asyncio
    async def test_missing_themes_are_tolerated(self, coordinator, session):
        session.reply("GroupListGet.json", GroupList=[{"Name": "Deck", "GroupNumber": 1, "Intensity": 10}])
        session.reply("ThemeListGet.json", status=1)

        data = await coordinator._async_update_data()

        assert list(data.groups) == [1]
        assert data.themes == {}
        assert session.calls_to("ColorListGet.json") == []

    @pytest.mark.asyncio
    async def test_missing_color_is_created(self, coordinator, session):
        session.reply("GroupListGet.json", GroupList=[{"Name": "Deck", "GroupNumber": 1, "Intensity": 10, "Color": 7}])
        session.reply("ThemeListGet.json", ThemeList=[])
        session.reply("ColorListGet.json", ColorList=[])
        session.reply("ColorListSet.json")

        data = await coordinator._async_update_data()

        assert data.colors == {7: ColorEntry(7, 360, 100)}
        assert session.calls_to("ColorListSet.json") == [{"C": 7, "Hue": 360, "Sat": 100}]

    @pytest.mark.asyncio
    async def test_uncontrollable_color_warns_once(self, coordinator, session, group_list, caplog):
        session.reply("GroupListGet.json", GroupList=group_list)
        session.reply("ThemeListGet.json", ThemeList=[])
        session.reply("ColorListGet.json", ColorList=[{"C": 12, "Hue": 120, "Sat": 80}])

        with caplog.at_level(logging.WARNING):
            await coordinator._async_update_data()
            coordinator.controller.group_cache.invalidate()
            await coordinator._async_update_data()

        warnings = [r for r in caplog.records if "A color value of 255" in r.getMessage()]
        assert len(warnings) == 1


class TestOverlappingPolls:
    """Test polls that start while another poll's group fetch is still out."""

    @pytest.fixture
    def slow_controller(self, coordinator, session, group_list):
        controller = coordinator.controller
        controller._group_cache = ListCache("GroupListGet", settle=0.01)
        session.reply("GroupListGet.json", delay=0.05, GroupList=group_list)
        session.reply("ThemeListGet.json", ThemeList=[])
        session.reply("ColorListGet.json", ColorList=[{"C": 12, "Hue": 120, "Sat": 80}])
        return controller

    @pytest.mark.asyncio
    async def test_second_first_poll_fails_instead_of_emptying_groups(self, coordinator, slow_controller):
        first, second = await asyncio.gather(
            coordinator._async_update_data(),
            coordinator._async_update_data(),
            return_exceptions=True,
        )

        assert sorted(first.groups) == [1, 2, 3]
        assert isinstance(second, UpdateFailed)

    @pytest.mark.asyncio
    async def test_overlapping_poll_keeps_previous_data(self, coordinator, slow_controller):
        previous = LuxorData(groups={1: GroupEntry(number=1, name="Garden", intensity=0)})
        coordinator.data = previous

        first, second = await asyncio.gather(
            coordinator._async_update_data(),
            coordinator._async_update_data(),
        )

        assert sorted(first.groups) == [1, 2, 3]
        assert second is previous


class TestEnsureData:
    """Test the shared first refresh used by platform setup."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_refresh(self, coordinator):
        async def refresh():
            await asyncio.sleep(0.01)
            coordinator.data = LuxorData()

        coordinator.async_refresh = AsyncMock(side_effect=refresh)

        results = await asyncio.gather(coordinator.async_ensure_data(), coordinator.async_ensure_data())

        assert results == [True, True]
        assert coordinator.async_refresh.await_count == 1

    @pytest.mark.asyncio
    async def test_failed_refresh(self, coordinator):
        coordinator.async_refresh = AsyncMock()

        assert await coordinator.async_ensure_data() is False

    @pytest.mark.asyncio
    async def test_existing_data_skips_refresh(self, coordinator):
        coordinator.data = LuxorData()
        coordinator.async_refresh = AsyncMock()

        assert await coordinator.async_ensure_data() is True
        coordinator.async_refresh.assert_not_awaited()
