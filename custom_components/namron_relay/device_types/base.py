"""Device model helpers used by the custom component."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from ..catalog import Access, AttributeDescriptor, AttributeKind
from ..translator import NormalizedState, StateTranslator

DeviceListener = Callable[[NormalizedState], None]


class EntityCategory(str, Enum):
    """Subset of Home Assistant entity categories used for metadata."""

    CONFIG = "config"
    DIAGNOSTIC = "diagnostic"


@dataclass(frozen=True)
class ExposedField:
    """Describe a field the host may display, set or refresh."""

    name: str
    platform: str
    access: Access
    unit: str | None = None
    options: tuple[str, ...] = ()
    minimum: float | None = None
    maximum: float | None = None
    description: str = ""
    entity_category: EntityCategory | None = None

    @property
    def settable(self) -> bool:
        """Return True when the host may change the field."""

        return Access.SET in self.access


class BaseDevice:
    """Field table and listener fan-out shared by device types."""

    def __init__(self, identity: str, translator: StateTranslator) -> None:
        """Initialise the container for the device called ``identity``."""

        self.identity = identity
        self.translator = translator
        self._fields: dict[str, ExposedField] = {}
        self._listeners: list[DeviceListener] = []

    def expose_field(
        self,
        descriptor: AttributeDescriptor,
        *,
        access: Access | None = None,
    ) -> ExposedField:
        """Expose ``descriptor`` to the host, optionally widening its access."""

        options: tuple[str, ...] = ()
        if descriptor.kind is AttributeKind.ENUMERATION and descriptor.enum:
            options = self.translator.catalog.enum_mapping(descriptor.enum).labels
        exposed = ExposedField(
            name=descriptor.name,
            platform=descriptor.platform,
            access=access if access is not None else descriptor.access,
            unit=descriptor.unit,
            options=options,
            minimum=descriptor.minimum,
            maximum=descriptor.maximum,
            description=descriptor.description,
            entity_category=(
                EntityCategory(descriptor.entity_category)
                if descriptor.entity_category
                else None
            ),
        )
        self._fields[descriptor.name] = exposed
        return exposed

    @property
    def exposed_fields(self) -> dict[str, ExposedField]:
        """Return a mapping of field name to exposed field."""

        return dict(MappingProxyType(self._fields))

    def add_listener(self, listener: DeviceListener) -> Callable[[], None]:
        """Register ``listener`` for state deltas; returns an unsubscribe hook."""

        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def publish(self, delta: NormalizedState | None) -> None:
        """Deliver ``delta`` to every listener when it carries any field."""

        if not delta:
            return
        for listener in list(self._listeners):
            listener(dict(delta))
