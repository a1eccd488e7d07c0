import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Set

from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .const import UPDATE_INTERVAL
from .luxor_api import LuxorController
from .models import ColorEntry, GroupEntry, ThemeEntry

_LOGGER = logging.getLogger(__name__)


@dataclass
class LuxorData:
    """Snapshot of a controller's groups, themes and group colors."""

    groups: Dict[int, GroupEntry] = field(default_factory=dict)
    themes: Dict[int, ThemeEntry] = field(default_factory=dict)
    colors: Dict[int, ColorEntry] = field(default_factory=dict)


class LuxorCoordinator(DataUpdateCoordinator[LuxorData]):
    """Manages fetching data from a single Luxor controller."""

    def __init__(self, hass: HomeAssistant, controller: LuxorController):
        """Initialize coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=f"Luxor controller {controller.ip_address}",
            update_interval=UPDATE_INTERVAL,
        )
        self.controller = controller
        self._warned_groups: Set[int] = set()
        self._first_refresh_lock = asyncio.Lock()

    async def async_ensure_data(self) -> bool:
        """Run the first refresh once, however many platforms ask for it at the same time."""
        async with self._first_refresh_lock:
            if self.data is None:
                await self.async_refresh()
        return self.data is not None

    async def _async_update_data(self) -> LuxorData:
        """Fetch data from controller."""
        _LOGGER.debug(f"Polling controller {self.controller.ip_address} for group state...")
        result = await self.controller.async_group_list_get()
        if not result.ok:
            raise UpdateFailed(
                f"Failed to get group list from {self.controller.ip_address}: {result.message}"
            )
        if result.cached and self.controller.group_cache.data is None:
            # Another poll's fetch is still out; its empty stand-in is not the group list
            if self.data is not None:
                return self.data
            raise UpdateFailed(f"Group list from {self.controller.ip_address} has not arrived yet")

        data = LuxorData(groups={group.number: group for group in result.data})
        for group in data.groups.values():
            self._warn_uncontrollable_color(group)

        theme_result = await self.controller.async_theme_list_get()
        if theme_result.cached and self.controller.theme_cache.data is None:
            data.themes = dict(self.data.themes) if self.data is not None else {}
        elif theme_result.ok:
            data.themes = {theme.index: theme for theme in theme_result.data}
        else:
            # ZD controllers have no themes; groups are still usable
            _LOGGER.debug(f"No themes from {self.controller.ip_address}: {theme_result.message}")

        for color in {group.color for group in data.groups.values() if group.has_preset_color}:
            color_result = await self.controller.async_color_list_get(color)
            if not color_result.ok:
                _LOGGER.warning(
                    f"Could not read color {color} from {self.controller.ip_address}: {color_result.message}"
                )
                break
            if color_result.data is not None:
                data.colors[color] = color_result.data
            elif self.data is not None and color in self.data.colors:
                data.colors[color] = self.data.colors[color]

        _LOGGER.debug(
            f"Fetched {len(data.groups)} groups, {len(data.themes)} themes and "
            f"{len(data.colors)} colors from {self.controller.ip_address}"
        )
        return data

    def _warn_uncontrollable_color(self, group: GroupEntry) -> None:
        if group.number in self._warned_groups:
            return
        if group.is_color_wheel or group.is_dmx:
            self._warned_groups.add(group.number)
            _LOGGER.warning(
                f"A color value of {group.color} was found for light group {group.number}. "
                "Values of 251-260 are color wheels and 65535 means the group is under DMX control. "
                "Select a color 0-250 for this group to control its color from Home Assistant."
            )
