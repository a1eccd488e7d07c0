import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Type

import aiohttp

from .const import (
    DEFAULT_HUE,
    DEFAULT_SATURATION,
    ENDPOINT_COLOR_LIST_GET,
    ENDPOINT_COLOR_LIST_SET,
    ENDPOINT_CONTROLLER_NAME,
    ENDPOINT_EXTINGUISH_ALL,
    ENDPOINT_GROUP_LIST_EDIT,
    ENDPOINT_GROUP_LIST_GET,
    ENDPOINT_ILLUMINATE_ALL,
    ENDPOINT_ILLUMINATE_GROUP,
    ENDPOINT_ILLUMINATE_THEME,
    ENDPOINT_THEME_LIST_GET,
    REQUEST_TIMEOUT,
)
from .list_cache import ListCache
from .models import ColorEntry, GroupEntry, LuxorResult, LuxorStatus, ThemeEntry

_LOGGER = logging.getLogger(__name__)

HEADERS = {
    "cache-control": "no-cache",
    "content-type": "application/json",
}


class LuxorController:
    """Represents a Luxor ZD/ZDC/ZDTWO controller and handles its HTTP API.

    Every call returns a LuxorResult and never raises for network or device
    failures. Callers decide whether a failed result is worth surfacing.
    """

    def __init__(
        self,
        ip_address: str,
        session: aiohttp.ClientSession,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self._ip_address = ip_address
        self._session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._controller_name: Optional[str] = None
        self._group_cache = ListCache(f"GroupListGet@{ip_address}")
        self._color_cache = ListCache(f"ColorListGet@{ip_address}")
        self._theme_cache = ListCache(f"ThemeListGet@{ip_address}")

    @property
    def ip_address(self) -> str:
        return self._ip_address

    @property
    def controller_name(self) -> Optional[str]:
        return self._controller_name

    @property
    def group_cache(self) -> ListCache:
        return self._group_cache

    @property
    def color_cache(self) -> ListCache:
        return self._color_cache

    @property
    def theme_cache(self) -> ListCache:
        return self._theme_cache

    async def _post(self, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> LuxorResult:
        """Posts to an endpoint and decodes the JSON body and its Status field."""
        url = f"http://{self._ip_address}/{endpoint}"
        data = json.dumps(payload) if payload is not None else None
        _LOGGER.debug(f"Sending to {url}: {data}")

        try:
            async with self._session.post(
                url, data=data, headers=HEADERS, timeout=self._timeout
            ) as response:
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as err:
            result = LuxorResult(error=err)
            if result.connection_reset:
                _LOGGER.debug(f"Ignoring connection reset from {self._ip_address} on {endpoint}: {err}")
            else:
                _LOGGER.error(f"Communication error with {self._ip_address} on {endpoint}: {err!r}")
            return result

        _LOGGER.debug(f"Received from {url}: {body!r}")
        try:
            info = json.loads(body)
            status = LuxorStatus(int(info["Status"]))
        except (ValueError, KeyError, TypeError) as err:
            _LOGGER.warning(f"Error decoding response from {self._ip_address} on {endpoint}: {err} - Data: {body!r}")
            return LuxorResult(error=err)

        return LuxorResult(status=status, data=info)

    def _parse_list(self, endpoint: str, result: LuxorResult, key: str, entry_type: Type[Any]) -> LuxorResult:
        """Turns the list under ``key`` into entries, or an error result if an item is malformed."""
        try:
            result.data = [entry_type.from_json(item) for item in result.data.get(key, [])]
        except (ValueError, KeyError, TypeError, AttributeError) as err:
            _LOGGER.warning(f"Malformed {key} from {self._ip_address} on {endpoint}: {err!r}")
            return LuxorResult(status=result.status, error=err)
        return result

    async def async_controller_name(self) -> LuxorResult:
        """Fetches the controller's name; used to check the controller is reachable."""
        result = await self._post(ENDPOINT_CONTROLLER_NAME)
        if result.ok:
            self._controller_name = result.data.get("Controller")
            _LOGGER.info(f"Found Luxor controller '{self._controller_name}' at {self._ip_address}")
            result.data = self._controller_name
        return result

    async def async_illuminate_all(self) -> LuxorResult:
        """Turns on all lights."""
        _LOGGER.debug(f"Turning on all lights on {self._ip_address}")
        result = await self._post(ENDPOINT_ILLUMINATE_ALL)
        if result.ok:
            self._group_cache.invalidate()
        return result

    async def async_extinguish_all(self) -> LuxorResult:
        """Turns off all lights."""
        _LOGGER.debug(f"Turning off all lights on {self._ip_address}")
        result = await self._post(ENDPOINT_EXTINGUISH_ALL)
        if result.ok:
            self._group_cache.invalidate()
        return result

    async def async_group_list_get(self) -> LuxorResult:
        """Returns the controller's light groups as a list of GroupEntry.

        ZDC supports groups 1-250, intensity 0-100, color 0-260.
        ZDTWO additionally reports color 65535 for groups under DMX control.
        """
        return await self._group_cache.async_get(self._async_fetch_group_list)

    async def _async_fetch_group_list(self) -> LuxorResult:
        _LOGGER.debug(f"Retrieving light groups from {self._ip_address}")
        result = await self._post(ENDPOINT_GROUP_LIST_GET)
        if result.ok:
            return self._parse_list(ENDPOINT_GROUP_LIST_GET, result, "GroupList", GroupEntry)
        return result

    async def async_group_list_edit(self, name: str, group_number: int, color: int) -> LuxorResult:
        """Renames a group and assigns its color."""
        result = await self._post(
            ENDPOINT_GROUP_LIST_EDIT,
            {"Name": name, "GroupNumber": group_number, "Color": color},
        )
        if result.ok:
            self._group_cache.invalidate()
        return result

    async def async_illuminate_group(self, group_number: int, intensity: int) -> LuxorResult:
        """Sets a group's intensity (0-100). Range checks are left to the controller."""
        _LOGGER.debug(f"Setting group {group_number} on {self._ip_address} to intensity {intensity}")
        result = await self._post(
            ENDPOINT_ILLUMINATE_GROUP,
            {"GroupNumber": group_number, "Intensity": intensity},
        )
        if result.ok and self._group_cache.data is not None:
            for group in self._group_cache.data:
                if group.number == group_number:
                    group.intensity = intensity
        return result

    async def async_color_list_get(self, color: int) -> LuxorResult:
        """Returns the ColorEntry for a color code, creating it if the controller lacks it.

        Missing colors are written with a hue of 360 and a saturation of 100.
        Data is None while the first color list fetch is still in flight.
        """
        result = await self._color_cache.async_get(self._async_fetch_color_list)
        if not result.ok:
            return result
        if result.cached and self._color_cache.data is None:
            # The first fetch has not answered yet, so a miss proves nothing
            return LuxorResult(status=result.status, cached=True)

        for entry in result.data:
            if entry.color == color:
                return LuxorResult(status=result.status, data=entry, cached=result.cached)

        _LOGGER.debug(f"Color {color} not defined on {self._ip_address}, creating it")
        set_result = await self.async_color_list_set(color, DEFAULT_HUE, DEFAULT_SATURATION)
        if not set_result.ok:
            return set_result
        return LuxorResult(
            status=LuxorStatus.OK,
            data=ColorEntry(color=color, hue=DEFAULT_HUE, saturation=DEFAULT_SATURATION),
        )

    async def _async_fetch_color_list(self) -> LuxorResult:
        result = await self._post(ENDPOINT_COLOR_LIST_GET)
        if result.ok:
            return self._parse_list(ENDPOINT_COLOR_LIST_GET, result, "ColorList", ColorEntry)
        return result

    async def async_color_list_set(self, color: int, hue: float, saturation: float) -> LuxorResult:
        """Defines the hue and saturation of a color code."""
        result = await self._post(
            ENDPOINT_COLOR_LIST_SET,
            {"C": color, "Hue": hue, "Sat": saturation},
        )
        if result.ok:
            self._store_color(ColorEntry(color=color, hue=hue, saturation=saturation))
        return result

    def _store_color(self, entry: ColorEntry) -> None:
        colors: List[ColorEntry] = [c for c in (self._color_cache.data or []) if c.color != entry.color]
        colors.append(entry)
        self._color_cache.update(colors)

    async def async_theme_list_get(self) -> LuxorResult:
        """Returns the controller's themes as a list of ThemeEntry.

        ZDC supports theme indexes 0-25, ZDTWO 0-39.
        """
        return await self._theme_cache.async_get(self._async_fetch_theme_list)

    async def _async_fetch_theme_list(self) -> LuxorResult:
        result = await self._post(ENDPOINT_THEME_LIST_GET)
        if result.ok:
            return self._parse_list(ENDPOINT_THEME_LIST_GET, result, "ThemeList", ThemeEntry)
        return result

    async def async_illuminate_theme(self, theme_index: int, on: bool) -> LuxorResult:
        """Turns a theme on or off."""
        result = await self._post(
            ENDPOINT_ILLUMINATE_THEME,
            {"ThemeIndex": theme_index, "OnOff": 1 if on else 0},
        )
        if result.ok:
            # Themes change group intensities too
            self._group_cache.invalidate()
            self._theme_cache.invalidate()
        return result
