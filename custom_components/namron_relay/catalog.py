"""Data models for the Namron relay attribute catalog."""

from __future__ import annotations

import json
from enum import Enum, IntFlag
from functools import cache
from pathlib import Path
from typing import Annotated, Any

import zigpy.types as zigpy_types
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainValidator,
    ValidationError,
    field_validator,
    model_validator,
)

from .exceptions import CatalogError
from .resolver import resolve_cluster

_DEFAULT_DATA_PATH = Path(__file__).parent / "data" / "attribute_catalog.json"


class AttributeKind(str, Enum):
    """Decode/encode rule applied to an attribute."""

    RAW_INTEGER = "raw_integer"
    SCALED_TEMPERATURE = "scaled_temperature"
    SCALED_ELECTRICAL = "scaled_electrical"
    ENUMERATION = "enumeration"
    BOOLEAN = "boolean"


class Access(IntFlag):
    """Host access rights for an exposed field."""

    STATE = 1
    SET = 2
    GET = 4
    ALL = STATE | SET | GET

    @classmethod
    def parse(cls, value: Any) -> Access:
        """Build flags from an int, a flag name or a list of flag names."""

        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            value = [value]
        flags = cls(0)
        for name in value:
            try:
                flags |= cls[str(name).upper()]
            except KeyError as exc:
                raise ValueError(f"Unknown access flag: {name!r}") from exc
        return flags


def _parse_int(value: Any) -> Any:
    """Accept ``0x``-prefixed strings wherever an integer id is expected."""

    if isinstance(value, str):
        return int(value, 0)
    return value


def _parse_cluster(value: Any) -> int:
    """Resolve any cluster spelling to its numeric id."""

    cluster_id = resolve_cluster(value)
    if cluster_id is None:
        raise ValueError(f"Unknown cluster: {value!r}")
    return cluster_id


class EnumMapping(BaseModel):
    """Bidirectional mapping between labels and wire codes."""

    model_config = ConfigDict(frozen=True)

    name: str
    codes: dict[str, int]

    @model_validator(mode="after")
    def _check_bijection(self) -> EnumMapping:
        values = list(self.codes.values())
        if len(set(values)) != len(values):
            raise ValueError(f"Enum mapping {self.name} reuses a wire code")
        return self

    @property
    def labels(self) -> tuple[str, ...]:
        """Return labels in declaration order."""

        return tuple(self.codes)

    def label_for(self, code: int) -> str | None:
        """Return the label for ``code`` or ``None`` when unknown."""

        for label, value in self.codes.items():
            if value == code:
                return label
        return None

    def code_for(self, label: str) -> int | None:
        """Return the code for ``label`` or ``None`` when unknown."""

        return self.codes.get(label)


class AttributeDescriptor(BaseModel):
    """Describe one device attribute and how it maps to a semantic field."""

    model_config = ConfigDict(frozen=True)

    name: str
    cluster: int
    attribute_id: int
    aliases: tuple[str, ...] = ()
    kind: AttributeKind
    scale: int = Field(default=1, gt=0)
    precision: int = Field(default=0, ge=0)
    enum: str | None = None
    inverted: bool = False
    wire_type: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    unit: str | None = None
    access: Annotated[Access, PlainValidator(Access.parse)] = Access.STATE
    platform: str = "sensor"
    entity_category: str | None = None
    description: str = ""

    @field_validator("cluster", mode="before")
    @classmethod
    def _resolve_cluster(cls, value: Any) -> int:
        return _parse_cluster(value)

    @field_validator("attribute_id", mode="before")
    @classmethod
    def _resolve_attribute_id(cls, value: Any) -> Any:
        return _parse_int(value)

    @field_validator("wire_type")
    @classmethod
    def _check_wire_type(cls, value: str | None) -> str | None:
        if value is not None and not hasattr(zigpy_types, value):
            raise ValueError(f"Unknown ZCL data type: {value}")
        return value

    @property
    def keys(self) -> tuple[int | str, ...]:
        """Return lookup keys: numeric id first, then the string aliases."""

        return (self.attribute_id, *self.aliases)

    @property
    def writable(self) -> bool:
        """Return True when the host may set this field."""

        return Access.SET in self.access

    @property
    def readable(self) -> bool:
        """Return True when the host may request a fresh read."""

        return Access.GET in self.access

    @property
    def zcl_type(self) -> type[Any] | None:
        """Return the zigpy type class used when writing this attribute."""

        if self.wire_type is None:
            return None
        return getattr(zigpy_types, self.wire_type)


class ReportingSpec(BaseModel):
    """Reporting configuration requested for one attribute."""

    model_config = ConfigDict(frozen=True)

    cluster: int
    attribute_id: int
    min_interval: int = Field(ge=0)
    max_interval: int = Field(ge=0)
    reportable_change: int = Field(default=1, ge=0)

    @field_validator("cluster", mode="before")
    @classmethod
    def _resolve_cluster(cls, value: Any) -> int:
        return _parse_cluster(value)

    @field_validator("attribute_id", mode="before")
    @classmethod
    def _resolve_attribute_id(cls, value: Any) -> Any:
        return _parse_int(value)


class AttributeCatalog(BaseModel):
    """Complete attribute table for the device."""

    model_config = ConfigDict(frozen=True)

    enums: tuple[EnumMapping, ...] = ()
    attributes: tuple[AttributeDescriptor, ...]
    reporting: tuple[ReportingSpec, ...] = ()

    @model_validator(mode="after")
    def _check_invariants(self) -> AttributeCatalog:
        enum_names = {mapping.name for mapping in self.enums}
        seen_ids: set[tuple[int, int]] = set()
        seen_names: set[str] = set()
        for descriptor in self.attributes:
            wire_key = (descriptor.cluster, descriptor.attribute_id)
            if wire_key in seen_ids:
                raise ValueError(
                    f"Attribute 0x{descriptor.attribute_id:04X} declared twice "
                    f"on cluster 0x{descriptor.cluster:04X}"
                )
            if descriptor.name in seen_names:
                raise ValueError(f"Field {descriptor.name} declared twice")
            seen_ids.add(wire_key)
            seen_names.add(descriptor.name)
            if (
                descriptor.kind is AttributeKind.ENUMERATION
                and descriptor.enum not in enum_names
            ):
                raise ValueError(
                    f"Field {descriptor.name} references unknown enum "
                    f"{descriptor.enum!r}"
                )
            if descriptor.writable and descriptor.wire_type is None:
                raise ValueError(f"Writable field {descriptor.name} has no wire_type")
        return self

    def get(self, name: str) -> AttributeDescriptor:
        """Return the descriptor for field ``name``."""

        for descriptor in self.attributes:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)

    def for_cluster(self, cluster_id: int) -> tuple[AttributeDescriptor, ...]:
        """Return descriptors registered against ``cluster_id``."""

        return tuple(
            descriptor
            for descriptor in self.attributes
            if descriptor.cluster == cluster_id
        )

    def enum_mapping(self, name: str) -> EnumMapping:
        """Return the enum mapping called ``name``."""

        for mapping in self.enums:
            if mapping.name == name:
                return mapping
        raise KeyError(name)

    def reporting_for(self, cluster_id: int) -> tuple[ReportingSpec, ...]:
        """Return reporting specs for ``cluster_id``."""

        return tuple(spec for spec in self.reporting if spec.cluster == cluster_id)

    @property
    def reporting_clusters(self) -> tuple[int, ...]:
        """Return clusters with reporting specs, in declaration order."""

        return tuple(dict.fromkeys(spec.cluster for spec in self.reporting))

    def with_scale_overrides(self, overrides: dict[str, int]) -> AttributeCatalog:
        """Return a copy with per-field scale factors replaced."""

        if not overrides:
            return self
        known = {descriptor.name for descriptor in self.attributes}
        unknown = set(overrides) - known
        if unknown:
            raise CatalogError(f"Scale override for unknown fields: {sorted(unknown)}")
        attributes = tuple(
            descriptor.model_copy(update={"scale": overrides[descriptor.name]})
            if descriptor.name in overrides
            else descriptor
            for descriptor in self.attributes
        )
        return self.model_copy(update={"attributes": attributes})


def load_attribute_catalog(path: Path | None = None) -> AttributeCatalog:
    """Load and validate the attribute catalog from JSON."""

    data_path = path or _DEFAULT_DATA_PATH
    with data_path.open("r", encoding="utf-8") as fp:
        payload = json.load(fp)
    return parse_attribute_catalog(payload, source=str(data_path))


def parse_attribute_catalog(
    payload: dict[str, Any], *, source: str = "<memory>"
) -> AttributeCatalog:
    """Validate a decoded catalog payload."""

    try:
        return AttributeCatalog.model_validate(payload)
    except ValidationError as exc:
        raise CatalogError(f"Invalid attribute catalog {source}: {exc}") from exc


@cache
def default_catalog() -> AttributeCatalog:
    """Return the bundled catalog, loaded once per process."""

    return load_attribute_catalog()
