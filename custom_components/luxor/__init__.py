"""The Luxor lighting controller integration."""
import logging
from typing import Awaitable, Callable, Dict, List, Set

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_IP_ADDRESS
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ConfigEntryNotReady, HomeAssistantError
from homeassistant.helpers.aiohttp_client import async_get_clientsession
import homeassistant.helpers.config_validation as cv
from homeassistant.helpers.typing import ConfigType

from .const import (
    ATTR_COLOR,
    ATTR_GROUP_NUMBER,
    ATTR_NAME,
    ATTR_ON,
    ATTR_THEME_INDEX,
    DOMAIN,
    PLATFORMS,
    SERVICE_EDIT_GROUP,
    SERVICE_EXTINGUISH_ALL,
    SERVICE_ILLUMINATE_ALL,
    SERVICE_ILLUMINATE_THEME,
)
from .coordinator import LuxorCoordinator
from .luxor_api import LuxorController
from .models import LuxorResult

_LOGGER = logging.getLogger(__name__)

DATA_COORDINATORS = f"{DOMAIN}_coordinators"
DATA_YAML_ADDRESSES = f"{DOMAIN}_yaml_addresses"

CONFIG_SCHEMA = cv.platform_only_config_schema(DOMAIN)

TARGET_SCHEMA = vol.Schema({vol.Optional(CONF_IP_ADDRESS): cv.string})

EDIT_GROUP_SCHEMA = TARGET_SCHEMA.extend(
    {
        vol.Required(ATTR_NAME): cv.string,
        vol.Required(ATTR_GROUP_NUMBER): cv.positive_int,
        vol.Required(ATTR_COLOR): vol.Coerce(int),
    }
)

ILLUMINATE_THEME_SCHEMA = TARGET_SCHEMA.extend(
    {
        vol.Required(ATTR_THEME_INDEX): vol.Coerce(int),
        vol.Optional(ATTR_ON, default=True): cv.boolean,
    }
)


async def async_get_coordinator(hass: HomeAssistant, ip_address: str) -> LuxorCoordinator:
    """Return the coordinator for a controller, creating it on first use.

    Config entries and YAML lights pointing at the same address share one
    controller, and therefore one set of list caches.
    """
    coordinators: Dict[str, LuxorCoordinator] = hass.data.setdefault(DATA_COORDINATORS, {})
    coordinator = coordinators.get(ip_address)
    if coordinator is None:
        controller = LuxorController(ip_address, async_get_clientsession(hass))
        coordinator = LuxorCoordinator(hass, controller)
        coordinators[ip_address] = coordinator
    return coordinator


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Register the controller-wide services."""
    hass.data.setdefault(DOMAIN, {})

    def _targets(call: ServiceCall) -> List[LuxorCoordinator]:
        coordinators: Dict[str, LuxorCoordinator] = hass.data.get(DATA_COORDINATORS, {})
        ip_address = call.data.get(CONF_IP_ADDRESS)
        if ip_address is None:
            return list(coordinators.values())
        if ip_address not in coordinators:
            raise HomeAssistantError(f"No Luxor controller configured at {ip_address}")
        return [coordinators[ip_address]]

    async def _async_run(
        call: ServiceCall, action: Callable[[LuxorController], Awaitable[LuxorResult]]
    ) -> None:
        for coordinator in _targets(call):
            result = await action(coordinator.controller)
            if not result.ok:
                raise HomeAssistantError(
                    f"Luxor controller {coordinator.controller.ip_address} refused {call.service}: {result.message}"
                )
            await coordinator.async_request_refresh()

    async def async_illuminate_all(call: ServiceCall) -> None:
        await _async_run(call, lambda controller: controller.async_illuminate_all())

    async def async_extinguish_all(call: ServiceCall) -> None:
        await _async_run(call, lambda controller: controller.async_extinguish_all())

    async def async_edit_group(call: ServiceCall) -> None:
        await _async_run(
            call,
            lambda controller: controller.async_group_list_edit(
                call.data[ATTR_NAME], call.data[ATTR_GROUP_NUMBER], call.data[ATTR_COLOR]
            ),
        )

    async def async_illuminate_theme(call: ServiceCall) -> None:
        await _async_run(
            call,
            lambda controller: controller.async_illuminate_theme(
                call.data[ATTR_THEME_INDEX], call.data[ATTR_ON]
            ),
        )

    hass.services.async_register(DOMAIN, SERVICE_ILLUMINATE_ALL, async_illuminate_all, schema=TARGET_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_EXTINGUISH_ALL, async_extinguish_all, schema=TARGET_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_EDIT_GROUP, async_edit_group, schema=EDIT_GROUP_SCHEMA)
    hass.services.async_register(
        DOMAIN, SERVICE_ILLUMINATE_THEME, async_illuminate_theme, schema=ILLUMINATE_THEME_SCHEMA
    )
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Luxor from a config entry."""
    hass.data.setdefault(DOMAIN, {})

    ip_address = entry.data[CONF_IP_ADDRESS]
    coordinator = await async_get_coordinator(hass, ip_address)

    if coordinator.controller.controller_name is None:
        result = await coordinator.controller.async_controller_name()
        if not result.ok:
            raise ConfigEntryNotReady(
                f"Was not able to connect to the Luxor controller at {ip_address}: {result.message}"
            )

    # Fetch initial data so we have something to work with
    await coordinator.async_refresh()
    if not coordinator.last_update_success:
        raise ConfigEntryNotReady(f"Failed to get light groups from the Luxor controller at {ip_address}")

    hass.data[DOMAIN][entry.entry_id] = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        coordinator: LuxorCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
        _release_coordinator(hass, coordinator.controller.ip_address)

    return unload_ok


def _release_coordinator(hass: HomeAssistant, ip_address: str) -> None:
    """Forget a controller once no config entry or YAML light uses its address."""
    yaml_addresses: Set[str] = hass.data.get(DATA_YAML_ADDRESSES, set())
    if ip_address in yaml_addresses:
        return
    for coordinator in hass.data.get(DOMAIN, {}).values():
        if coordinator.controller.ip_address == ip_address:
            return
    _LOGGER.debug(f"Dropping the Luxor controller at {ip_address}")
    hass.data.get(DATA_COORDINATORS, {}).pop(ip_address, None)
