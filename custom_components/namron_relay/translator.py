"""Translate between wire attribute sets and normalized device state."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from . import codec
from .catalog import (
    AttributeCatalog,
    AttributeDescriptor,
    AttributeKind,
    EnumMapping,
    default_catalog,
)
from .exceptions import UnsupportedField
from .resolver import resolve_cluster, resolve_value

_LOGGER = logging.getLogger(__name__)

NormalizedState = dict[str, codec.StateValue]


@dataclass(frozen=True, slots=True)
class WriteRequest:
    """Encoded write for a single attribute plus the value to echo."""

    field: str
    cluster_id: int
    attribute_id: int
    value: int
    wire_type: type[Any] | None
    echo: codec.StateValue

    def as_payload(self) -> dict[int, dict[str, Any]]:
        """Return the transport write mapping for this request."""

        return {self.attribute_id: {"value": self.value, "type": self.wire_type}}

    def as_state(self) -> NormalizedState:
        """Return the optimistic state delta shown before the device confirms."""

        return {self.field: self.echo}


class StateTranslator:
    """Apply the attribute catalog to inbound reports and outbound writes."""

    def __init__(self, catalog: AttributeCatalog | None = None) -> None:
        """Bind the translator to ``catalog`` (the bundled one by default)."""

        self._catalog = catalog or default_catalog()

    @property
    def catalog(self) -> AttributeCatalog:
        """Return the catalog backing this translator."""

        return self._catalog

    def descriptor(self, field: str) -> AttributeDescriptor:
        """Return the descriptor for ``field`` or raise ``UnsupportedField``."""

        try:
            return self._catalog.get(field)
        except KeyError as exc:
            raise UnsupportedField(field) from exc

    def descriptors_for(
        self, cluster: int | str | None
    ) -> tuple[AttributeDescriptor, ...]:
        """Return descriptors registered on ``cluster`` in any spelling."""

        cluster_id = resolve_cluster(cluster)
        if cluster_id is None:
            return ()
        return self._catalog.for_cluster(cluster_id)

    def _mapping_for(self, descriptor: AttributeDescriptor) -> EnumMapping | None:
        if descriptor.kind is AttributeKind.ENUMERATION and descriptor.enum:
            return self._catalog.enum_mapping(descriptor.enum)
        return None

    def decode(
        self, descriptor: AttributeDescriptor, raw: Any
    ) -> codec.StateValue | None:
        """Decode ``raw`` for ``descriptor`` using its enum mapping if any."""

        return codec.decode(descriptor, raw, self._mapping_for(descriptor))

    def translate(
        self, cluster: int | str | None, payload: Mapping[Any, Any] | None
    ) -> NormalizedState | None:
        """Return the state delta carried by ``payload``.

        ``None`` signals an irrelevant report: unknown cluster, empty payload,
        or no registered attribute produced a reading.
        """

        descriptors = self.descriptors_for(cluster)
        if not descriptors or not payload:
            return None
        state: NormalizedState = {}
        for descriptor in descriptors:
            found, raw = resolve_value(payload, descriptor.keys)
            if not found:
                continue
            value = self.decode(descriptor, raw)
            if value is None:
                _LOGGER.debug(
                    "No reading for %s in %s (raw=%r)", descriptor.name, payload, raw
                )
                continue
            state[descriptor.name] = value
        return state or None

    def encode_write(self, field: str, value: Any) -> WriteRequest:
        """Validate and encode ``value`` for ``field``.

        Raises ``UnsupportedField`` when the field is unknown or read-only and
        ``InvalidValue`` when the input cannot be encoded.
        """

        descriptor = self.descriptor(field)
        if not descriptor.writable:
            raise UnsupportedField(field)
        raw, echo = codec.encode(descriptor, value, self._mapping_for(descriptor))
        return WriteRequest(
            field=descriptor.name,
            cluster_id=descriptor.cluster,
            attribute_id=descriptor.attribute_id,
            value=raw,
            wire_type=descriptor.zcl_type,
            echo=echo,
        )

    def read_plan(self, fields: Iterable[str]) -> dict[int, tuple[int, ...]]:
        """Group the attribute ids backing ``fields`` by cluster."""

        plan: dict[int, list[int]] = {}
        for field in fields:
            descriptor = self.descriptor(field)
            attribute_ids = plan.setdefault(descriptor.cluster, [])
            if descriptor.attribute_id not in attribute_ids:
                attribute_ids.append(descriptor.attribute_id)
        return {cluster_id: tuple(ids) for cluster_id, ids in plan.items()}
