import logging
import ipaddress
from typing import Any, Dict, Optional

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.const import CONF_IP_ADDRESS, CONF_NAME
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import DOMAIN
from .luxor_api import LuxorController

_LOGGER = logging.getLogger(__name__)

USER_SCHEMA = vol.Schema({
    vol.Required(CONF_IP_ADDRESS): str,
    vol.Optional(CONF_NAME): str,
})


def _is_valid_host(host: str) -> bool:
    """Accepts an IPv4/IPv6 address or a bare hostname."""
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        return bool(host) and " " not in host and "/" not in host


class LuxorConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for a Luxor controller."""

    VERSION = 1
    CONNECTION_CLASS = config_entries.CONN_CLASS_LOCAL_POLL

    async def async_step_user(self, user_input: Optional[Dict[str, Any]] = None) -> FlowResult:
        """Ask for the controller address and check that it answers."""
        errors: Dict[str, str] = {}

        if user_input is not None:
            ip_address = user_input[CONF_IP_ADDRESS].strip()
            if not _is_valid_host(ip_address):
                errors["base"] = "invalid_host"
            else:
                await self.async_set_unique_id(ip_address)
                self._abort_if_unique_id_configured()

                controller = LuxorController(ip_address, async_get_clientsession(self.hass))
                result = await controller.async_controller_name()
                if result.ok:
                    return self.async_create_entry(
                        title=user_input.get(CONF_NAME) or result.data or f"Luxor {ip_address}",
                        data={CONF_IP_ADDRESS: ip_address},
                    )
                _LOGGER.warning(f"Luxor controller at {ip_address} did not answer: {result.message}")
                errors["base"] = "cannot_connect"

        return self.async_show_form(
            step_id="user", data_schema=USER_SCHEMA, errors=errors
        )
