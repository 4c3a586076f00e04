"""Option and service schemas for the Namron relay integration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import voluptuous as vol

from .const import (
    CONF_POLL_INTERVAL,
    CONF_POLLING_ENABLED,
    CONF_SCALE_OVERRIDES,
    DEFAULT_POLL_INTERVAL,
    DOMAIN,
    MAX_POLL_INTERVAL_SECONDS,
    MIN_POLL_INTERVAL_SECONDS,
)

CONFIG_SCHEMA = vol.Schema({DOMAIN: vol.Schema({})}, extra=vol.ALLOW_EXTRA)

OPTIONS_SCHEMA = vol.Schema(
    {
        vol.Optional(
            CONF_POLL_INTERVAL,
            default=int(DEFAULT_POLL_INTERVAL.total_seconds()),
        ): vol.All(
            vol.Coerce(int),
            vol.Range(min=MIN_POLL_INTERVAL_SECONDS, max=MAX_POLL_INTERVAL_SECONDS),
        ),
        vol.Optional(CONF_POLLING_ENABLED, default=True): bool,
        vol.Optional(CONF_SCALE_OVERRIDES, default=dict): {
            str: vol.All(vol.Coerce(int), vol.Range(min=1))
        },
    }
)

SET_FIELD_SERVICE_SCHEMA = vol.Schema(
    {
        vol.Required("device_id"): vol.All(str, vol.Length(min=1)),
        vol.Required("field"): vol.All(str, vol.Length(min=1)),
        vol.Required("value"): vol.Any(bool, int, float, str),
    }
)

REFRESH_FIELD_SERVICE_SCHEMA = vol.Schema(
    {
        vol.Required("device_id"): vol.All(str, vol.Length(min=1)),
        vol.Required("field"): vol.All(str, vol.Length(min=1)),
    }
)


@dataclass(frozen=True, slots=True)
class AdapterConfig:
    """Validated runtime options."""

    poll_interval: timedelta = DEFAULT_POLL_INTERVAL
    polling_enabled: bool = True
    scale_overrides: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None) -> AdapterConfig:
        """Validate ``options`` and build a config; raises ``vol.Invalid``."""

        data = OPTIONS_SCHEMA(dict(options or {}))
        return cls(
            poll_interval=timedelta(seconds=data[CONF_POLL_INTERVAL]),
            polling_enabled=data[CONF_POLLING_ENABLED],
            scale_overrides=dict(data[CONF_SCALE_OVERRIDES]),
        )
