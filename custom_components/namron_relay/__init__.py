"""Integration entry point for the Namron 4512785 relay custom component."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .config import (
    CONFIG_SCHEMA,
    REFRESH_FIELD_SERVICE_SCHEMA,
    SET_FIELD_SERVICE_SCHEMA,
    AdapterConfig,
)
from .const import DOMAIN

_LOGGER = logging.getLogger(__name__)

SERVICE_SET_FIELD = "set_field"
SERVICE_REFRESH_FIELD = "refresh_field"

__all__ = [
    "CONFIG_SCHEMA",
    "DOMAIN",
    "async_setup",
    "async_setup_entry",
    "async_unload_entry",
]


def _get_coordinator_class() -> type[Any]:
    from .coordinator import NamronRelayCoordinator

    return NamronRelayCoordinator


async def async_setup(hass: Any, _config: dict[str, Any]) -> bool:
    """Initialise the integration namespace on host startup."""

    hass.data.setdefault(DOMAIN, {})
    return True


async def async_setup_entry(hass: Any, entry: Any) -> bool:
    """Set up a config entry for the integration."""

    domain_data = hass.data.setdefault(DOMAIN, {})
    config = AdapterConfig.from_options(getattr(entry, "options", None))

    data = getattr(entry, "data", {}) or {}
    coordinator_class = _get_coordinator_class()
    coordinator = coordinator_class(
        hass=hass,
        config=config,
        coordinator_endpoint=data.get("coordinator_endpoint"),
        listener=data.get("state_listener"),
    )
    domain_data[entry.entry_id] = {"coordinator": coordinator, "config": config}

    await _async_register_services(hass)
    _LOGGER.debug(
        "Set up entry %s (poll interval %s, polling %s)",
        entry.entry_id,
        config.poll_interval,
        "enabled" if config.polling_enabled else "disabled",
    )
    return True


async def async_unload_entry(hass: Any, entry: Any) -> bool:
    """Handle unloading of a config entry."""

    domain_data = hass.data.get(DOMAIN, {})
    entry_data = domain_data.pop(entry.entry_id, None)

    if entry_data is not None:
        coordinator = entry_data.get("coordinator")
        if coordinator is not None:
            await coordinator.async_shutdown()

    if not domain_data:
        hass.data.pop(DOMAIN, None)
    return True


def _find_coordinator(hass: Any, device_id: str) -> Any:
    """Return the coordinator owning ``device_id``."""

    for entry_data in hass.data.get(DOMAIN, {}).values():
        coordinator = entry_data.get("coordinator")
        if coordinator is not None and device_id in coordinator.devices:
            return coordinator
    raise KeyError(device_id)


async def _async_register_services(hass: Any) -> None:
    """Register the set/refresh services once per host."""

    services = getattr(hass, "services", None)
    if services is None:
        return

    has_service = getattr(services, "has_service", None)
    if callable(has_service) and has_service(DOMAIN, SERVICE_SET_FIELD):
        return

    register = getattr(services, "async_register", None)
    if register is None:
        return

    async def _handle_set_field(call: Any) -> None:
        data = SET_FIELD_SERVICE_SCHEMA(dict(getattr(call, "data", {}) or {}))
        coordinator = _find_coordinator(hass, data["device_id"])
        await coordinator.async_set_field(
            data["device_id"], data["field"], data["value"]
        )

    async def _handle_refresh_field(call: Any) -> None:
        data = REFRESH_FIELD_SERVICE_SCHEMA(dict(getattr(call, "data", {}) or {}))
        coordinator = _find_coordinator(hass, data["device_id"])
        await coordinator.async_refresh_field(data["device_id"], data["field"])

    for name, handler in (
        (SERVICE_SET_FIELD, _handle_set_field),
        (SERVICE_REFRESH_FIELD, _handle_refresh_field),
    ):
        result = register(DOMAIN, name, handler)
        if asyncio.iscoroutine(result):
            await result
