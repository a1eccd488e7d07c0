import logging
from typing import Any, List, Optional, Set, Tuple

import voluptuous as vol

from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ATTR_HS_COLOR,
    PLATFORM_SCHEMA as LIGHT_PLATFORM_SCHEMA,
    ColorMode,
    LightEntity,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_IP_ADDRESS, CONF_NAME
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError, PlatformNotReady
import homeassistant.helpers.config_validation as cv
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.typing import ConfigType, DiscoveryInfoType
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from . import DATA_YAML_ADDRESSES, async_get_coordinator
from .const import (
    CONF_GROUP_NAME,
    CONF_GROUP_NUMBER,
    CONF_SERVICE,
    DEFAULT_GROUP_NUMBER,
    DEFAULT_ON_INTENSITY,
    DEFAULT_SERVICE,
    DOMAIN,
)
from .coordinator import LuxorCoordinator
from .models import ColorEntry, GroupEntry, LuxorResult, ThemeEntry

_LOGGER = logging.getLogger(__name__)

PLATFORM_SCHEMA = LIGHT_PLATFORM_SCHEMA.extend(
    {
        vol.Required(CONF_IP_ADDRESS): cv.string,
        vol.Optional(CONF_NAME): cv.string,
        vol.Optional(CONF_GROUP_NAME): cv.string,
        vol.Optional(CONF_GROUP_NUMBER, default=DEFAULT_GROUP_NUMBER): cv.positive_int,
        vol.Optional(CONF_SERVICE, default=DEFAULT_SERVICE): cv.string,
    }
)


def intensity_to_brightness(intensity: int) -> int:
    """Luxor intensity 0..100 to Home Assistant brightness 0..255."""
    return round(intensity * 255 / 100)


def brightness_to_intensity(brightness: int) -> int:
    """Home Assistant brightness 0..255 to Luxor intensity 0..100."""
    if brightness <= 0:
        return 0
    # Any visible brightness must stay on
    return max(1, min(100, round(brightness * 100 / 255)))


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
):
    """Set up a light for every group and theme on the controller."""
    coordinator: LuxorCoordinator = hass.data[DOMAIN][config_entry.entry_id]

    entities: List[LightEntity] = [
        LuxorGroupLight(coordinator, number) for number in sorted(coordinator.data.groups)
    ]
    entities.extend(
        LuxorThemeLight(coordinator, index) for index in sorted(coordinator.data.themes)
    )
    _LOGGER.debug(
        f"Adding {len(coordinator.data.groups)} group and {len(coordinator.data.themes)} "
        f"theme lights for {coordinator.controller.ip_address}"
    )
    async_add_entities(entities)


async def async_setup_platform(
    hass: HomeAssistant,
    config: ConfigType,
    async_add_entities: AddEntitiesCallback,
    discovery_info: Optional[DiscoveryInfoType] = None,
):
    """Set up a single group light from YAML."""
    ip_address = config[CONF_IP_ADDRESS]
    group_number = config[CONF_GROUP_NUMBER]
    name = config.get(CONF_GROUP_NAME) or config.get(CONF_NAME)

    _LOGGER.info(f"Starting a Luxor light for group {group_number} on {ip_address}")
    coordinator = await async_get_coordinator(hass, ip_address)
    hass.data.setdefault(DATA_YAML_ADDRESSES, set()).add(ip_address)
    if not await coordinator.async_ensure_data():
        raise PlatformNotReady(
            f"Was not able to connect to the Luxor controller at {ip_address}. Check the IP address."
        )

    if group_number not in coordinator.data.groups:
        raise HomeAssistantError(
            f"Could not match group number {group_number} in the configuration to the groups "
            f"of the Luxor controller at {ip_address}"
        )

    async_add_entities([LuxorGroupLight(coordinator, group_number, name=name, service=config[CONF_SERVICE])])


class LuxorEntity(CoordinatorEntity[LuxorCoordinator], LightEntity):
    """Common base for lights backed by a Luxor controller."""

    @property
    def device_info(self) -> DeviceInfo:
        """Return the device info."""
        controller = self.coordinator.controller
        return DeviceInfo(
            identifiers={(DOMAIN, controller.ip_address)},
            name=controller.controller_name or f"Luxor {controller.ip_address}",
            manufacturer="FX Luminaire",
            model="Luxor",
        )

    def _log_failure(self, action: str, result: LuxorResult) -> None:
        if result.connection_reset:
            _LOGGER.debug(f"Ignoring connection reset while trying to {action} on {self.name}")
        else:
            _LOGGER.warning(f"Something went wrong! Request to {action} on {self.name}: {result.message}")

    @callback
    def _handle_coordinator_update(self) -> None:
        """Handle updated data from the coordinator."""
        self.async_write_ha_state()


class LuxorGroupLight(LuxorEntity):
    """A Luxor light group, dimmable and optionally colored."""

    def __init__(
        self,
        coordinator: LuxorCoordinator,
        group_number: int,
        name: Optional[str] = None,
        service: Optional[str] = None,
    ):
        """Initialize the group light."""
        super().__init__(coordinator)
        self._group_number = group_number
        self._name_override = name
        self._attr_unique_id = f"{coordinator.controller.ip_address}_group_{group_number}"
        if service:
            self._attr_extra_state_attributes = {CONF_SERVICE: service}

    @property
    def group_number(self) -> int:
        return self._group_number

    @property
    def _group(self) -> Optional[GroupEntry]:
        if self.coordinator.data is None:
            return None
        return self.coordinator.data.groups.get(self._group_number)

    @property
    def name(self) -> str:
        """Configured name, else the name the controller reports for the group."""
        if self._name_override:
            return self._name_override
        group = self._group
        return group.name if group else f"Luxor group {self._group_number}"

    @property
    def available(self) -> bool:
        return super().available and self._group is not None

    @property
    def is_on(self) -> Optional[bool]:
        """Return true if light is on."""
        group = self._group
        return group.is_on if group else None

    @property
    def brightness(self) -> Optional[int]:
        """Return the brightness of this light between 0..255."""
        group = self._group
        if group is None:
            return None
        return intensity_to_brightness(group.intensity)

    @property
    def supported_color_modes(self) -> Set[ColorMode]:
        group = self._group
        if group is not None and group.has_preset_color:
            return {ColorMode.HS}
        return {ColorMode.BRIGHTNESS}

    @property
    def color_mode(self) -> ColorMode:
        return next(iter(self.supported_color_modes))

    @property
    def hs_color(self) -> Optional[Tuple[float, float]]:
        """Return the hue and saturation of the group's color."""
        group = self._group
        if group is None or not group.has_preset_color:
            return None
        entry = self.coordinator.data.colors.get(group.color)
        if entry is None:
            return None
        # Controller hue runs 0-360 inclusive
        return (float(entry.hue) % 360, float(entry.saturation))

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Turn the light on."""
        group = self._group
        if ATTR_HS_COLOR in kwargs and group is not None and group.has_preset_color:
            await self._async_set_color(group.color, *kwargs[ATTR_HS_COLOR])

        if ATTR_BRIGHTNESS in kwargs:
            intensity = brightness_to_intensity(kwargs[ATTR_BRIGHTNESS])
        elif ATTR_HS_COLOR in kwargs and group is not None and group.is_on:
            # Color change only
            return
        else:
            intensity = DEFAULT_ON_INTENSITY

        await self.async_set_intensity(intensity)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Turn the light off."""
        await self.async_set_intensity(0)

    async def async_set_intensity(self, intensity: int) -> bool:
        """Illuminate the group at an intensity of 0..100; 0 turns it off."""
        result = await self.coordinator.controller.async_illuminate_group(self._group_number, intensity)
        if not result.ok:
            self._log_failure(f"set intensity to {intensity}", result)
            return False

        _LOGGER.debug(f"Set intensity of {self.name} to {intensity}")
        group = self._group
        if group is not None:
            group.intensity = intensity
        self.async_write_ha_state()
        return True

    async def _async_set_color(self, color: int, hue: float, saturation: float) -> None:
        hue, saturation = round(hue), round(saturation)
        result = await self.coordinator.controller.async_color_list_set(color, hue, saturation)
        if not result.ok:
            self._log_failure(f"set color {color} to hue {hue}, saturation {saturation}", result)
            return
        self.coordinator.data.colors[color] = ColorEntry(color=color, hue=hue, saturation=saturation)


class LuxorThemeLight(LuxorEntity):
    """A theme stored on the controller, switched on and off as a whole."""

    _attr_color_mode = ColorMode.ONOFF
    _attr_supported_color_modes = {ColorMode.ONOFF}

    def __init__(self, coordinator: LuxorCoordinator, theme_index: int):
        """Initialize the theme light."""
        super().__init__(coordinator)
        self._theme_index = theme_index
        self._attr_unique_id = f"{coordinator.controller.ip_address}_theme_{theme_index}"

    @property
    def _theme(self) -> Optional[ThemeEntry]:
        if self.coordinator.data is None:
            return None
        return self.coordinator.data.themes.get(self._theme_index)

    @property
    def name(self) -> str:
        theme = self._theme
        return theme.name if theme else f"Luxor theme {self._theme_index}"

    @property
    def available(self) -> bool:
        return super().available and self._theme is not None

    @property
    def is_on(self) -> Optional[bool]:
        theme = self._theme
        return theme.on if theme else None

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._async_illuminate(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self._async_illuminate(False)

    async def _async_illuminate(self, on: bool) -> None:
        result = await self.coordinator.controller.async_illuminate_theme(self._theme_index, on)
        if not result.ok:
            self._log_failure(f"turn {'on' if on else 'off'} theme {self._theme_index}", result)
            return

        theme = self._theme
        if theme is not None:
            theme.on = on
        self.async_write_ha_state()
        # Themes drive group intensities, so fetch fresh group state
        await self.coordinator.async_request_refresh()
