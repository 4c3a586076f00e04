"""Namron 4512785 30A relay with NTC probes, water sensor and metering."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..catalog import Access, EnumMapping
from ..const import ON_OFF_CLUSTER_ID
from ..endpoint import ZigbeeEndpoint
from ..exceptions import InvalidValue, TransportFailure, UnsupportedField
from ..translator import NormalizedState, StateTranslator
from .base import BaseDevice

_LOGGER = logging.getLogger(__name__)

STATE_FIELD = "state"
TOGGLE_LABEL = "TOGGLE"

# Relay switching goes through genOnOff commands, not attribute writes.
_SWITCH_COMMANDS: dict[str, str] = {
    "ON": "on",
    "OFF": "off",
    TOGGLE_LABEL: "toggle",
}


def _switch_label(value: Any, mapping: EnumMapping) -> str:
    """Resolve ``value`` to an on/off label or ``TOGGLE``.

    Labels are matched exactly; integer codes go through ``mapping``.
    """

    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, str):
        label = value.strip()
        if label == TOGGLE_LABEL or mapping.code_for(label) is not None:
            return label
    elif isinstance(value, int | float) and float(value).is_integer():
        label = mapping.label_for(int(value))
        if label is not None:
            return label
    raise InvalidValue(
        STATE_FIELD, value, f"expected one of {', '.join(mapping.labels)} or TOGGLE"
    )


class NamronRelayDevice(BaseDevice):
    """Expose the relay's catalog fields and route reads and writes."""

    def __init__(
        self,
        identity: str,
        endpoint: ZigbeeEndpoint,
        translator: StateTranslator | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        """Register every catalog field against ``endpoint``."""

        super().__init__(identity, translator or StateTranslator())
        self.endpoint = endpoint
        self._logger = logger or _LOGGER

        for descriptor in self.translator.catalog.attributes:
            access = descriptor.access
            if descriptor.name == STATE_FIELD:
                access |= Access.SET
            self.expose_field(descriptor, access=access)

    def handle_report(
        self, cluster: int | str | None, payload: Mapping[Any, Any] | None
    ) -> NormalizedState | None:
        """Translate an inbound report and publish the resulting delta."""

        delta = self.translator.translate(cluster, payload)
        if delta is None:
            self._logger.debug(
                "Ignoring report for %s on cluster %s: %s",
                self.identity,
                cluster,
                payload,
            )
            return None
        self.publish(delta)
        return delta

    async def async_set_field(self, field: str, value: Any) -> NormalizedState:
        """Write ``value`` to ``field`` and return the optimistic delta.

        Raises ``UnsupportedField`` or ``InvalidValue`` before any transport
        call and ``TransportFailure`` when the device rejects the request.
        """

        if field == STATE_FIELD:
            return await self._async_switch(value)

        request = self.translator.encode_write(field, value)
        try:
            await self.endpoint.write(request.cluster_id, request.as_payload())
        except Exception as exc:
            raise TransportFailure("write", field) from exc
        self._logger.debug(
            "Wrote %s=%r (raw %s) to %s", field, value, request.value, self.identity
        )
        delta = request.as_state()
        self.publish(delta)
        return delta

    async def _async_switch(self, value: Any) -> NormalizedState:
        descriptor = self.translator.descriptor(STATE_FIELD)
        mapping = self.translator.catalog.enum_mapping(descriptor.enum)
        label = _switch_label(value, mapping)
        try:
            await self.endpoint.command(ON_OFF_CLUSTER_ID, _SWITCH_COMMANDS[label])
        except Exception as exc:
            raise TransportFailure(_SWITCH_COMMANDS[label], STATE_FIELD) from exc
        if label == TOGGLE_LABEL:
            # The resulting state is unknown until the device reports it.
            return {}
        delta: NormalizedState = {STATE_FIELD: label}
        self.publish(delta)
        return delta

    async def async_refresh(self, field: str) -> NormalizedState:
        """Read the attribute behind ``field`` and return the decoded delta."""

        descriptor = self.translator.descriptor(field)
        if not descriptor.readable:
            raise UnsupportedField(field)
        merged: NormalizedState = {}
        for cluster, attribute_ids in self.translator.read_plan([field]).items():
            try:
                response = await self.endpoint.read(cluster, attribute_ids)
            except Exception as exc:
                raise TransportFailure("read", field) from exc
            merged.update(self.translator.translate(cluster, response) or {})
        self.publish(merged)
        return merged
