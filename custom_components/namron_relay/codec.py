"""Scaling and enumeration codec for raw Zigbee attribute values."""

from __future__ import annotations

import math
from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .catalog import AttributeDescriptor, AttributeKind, EnumMapping
from .const import TEMPERATURE_SENTINELS
from .exceptions import InvalidValue

StateValue = bool | int | float | str

_TRUE_WORDS = frozenset({"true", "on", "1", "yes"})
_FALSE_WORDS = frozenset({"false", "off", "0", "no"})


def _is_number(value: Any) -> bool:
    """Return True for real numbers, excluding booleans."""

    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_reading(value: Any) -> bool:
    """Return True for finite numbers a decoder can scale."""

    if not _is_number(value):
        return False
    return isinstance(value, int) or math.isfinite(value)


def _to_decimal(value: int | float) -> Decimal:
    """Convert a wire or user number to an exact decimal."""

    if isinstance(value, int):
        return Decimal(int(value))
    return Decimal(str(float(value)))


def _quantize(value: Decimal, precision: int) -> Decimal:
    """Round ``value`` to ``precision`` decimals, halves away from zero."""

    return value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)


def round_half_away(value: float | int, precision: int = 0) -> float | int:
    """Round like the device firmware: halves move away from zero."""

    rounded = _quantize(_to_decimal(value), precision)
    if precision == 0:
        return int(rounded)
    return float(rounded)


def scale_decimals(descriptor: AttributeDescriptor) -> int:
    """Return the decimals a scaled value can carry at wire resolution."""

    return max(descriptor.precision, round(math.log10(descriptor.scale)))


def _unscale(raw: int | float, scale: int, precision: int) -> float | int:
    """Divide ``raw`` by ``scale`` and round to ``precision`` decimals."""

    value = _quantize(_to_decimal(raw) / Decimal(scale), precision)
    if scale == 1 and precision == 0:
        return int(value)
    return float(value)


def _decode_scaled_temperature(
    descriptor: AttributeDescriptor, raw: Any, _mapping: EnumMapping | None
) -> StateValue | None:
    if not _is_reading(raw) or raw in TEMPERATURE_SENTINELS:
        return None
    return _unscale(raw, descriptor.scale, descriptor.precision)


def _decode_scaled_electrical(
    descriptor: AttributeDescriptor, raw: Any, _mapping: EnumMapping | None
) -> StateValue | None:
    if not _is_reading(raw):
        return None
    return _unscale(raw, descriptor.scale, descriptor.precision)


def _decode_raw_integer(
    descriptor: AttributeDescriptor, raw: Any, _mapping: EnumMapping | None
) -> StateValue | None:
    if not _is_reading(raw):
        return None
    return int(raw)


def _decode_enumeration(
    descriptor: AttributeDescriptor, raw: Any, mapping: EnumMapping | None
) -> StateValue | None:
    if raw is None or mapping is None:
        return None
    if isinstance(raw, str):
        return raw if mapping.code_for(raw) is not None else None
    try:
        code = int(raw)
    except (OverflowError, TypeError, ValueError):
        return None
    label = mapping.label_for(code)
    # Unknown codes still reach the host so the UI can show something.
    return label if label is not None else code


def _decode_boolean(
    descriptor: AttributeDescriptor, raw: Any, _mapping: EnumMapping | None
) -> StateValue | None:
    if raw is None:
        return None
    value = bool(raw)
    return not value if descriptor.inverted else value


_DECODERS: dict[
    AttributeKind,
    Callable[[AttributeDescriptor, Any, EnumMapping | None], StateValue | None],
] = {
    AttributeKind.SCALED_TEMPERATURE: _decode_scaled_temperature,
    AttributeKind.SCALED_ELECTRICAL: _decode_scaled_electrical,
    AttributeKind.RAW_INTEGER: _decode_raw_integer,
    AttributeKind.ENUMERATION: _decode_enumeration,
    AttributeKind.BOOLEAN: _decode_boolean,
}


def decode(
    descriptor: AttributeDescriptor,
    raw: Any,
    mapping: EnumMapping | None = None,
) -> StateValue | None:
    """Convert a raw wire value to its normalized form.

    ``None`` means "no reading": the attribute carried a sentinel, a null, or
    a value of the wrong shape. It is never turned into a numeric zero.
    """

    return _DECODERS[descriptor.kind](descriptor, raw, mapping)


def _parse_number(descriptor: AttributeDescriptor, value: Any) -> float:
    """Parse ``value`` as a finite number within the descriptor bounds."""

    if value is None or isinstance(value, bool):
        raise InvalidValue(descriptor.name, value, "expected a number")
    if isinstance(value, str):
        text = value.strip()
        try:
            number = float(Decimal(text))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidValue(descriptor.name, value, "expected a number") from exc
    elif _is_number(value):
        number = float(value)
    else:
        raise InvalidValue(descriptor.name, value, "expected a number")
    if not math.isfinite(number):
        raise InvalidValue(descriptor.name, value, "must be finite")
    if descriptor.minimum is not None and number < descriptor.minimum:
        raise InvalidValue(
            descriptor.name, value, f"below minimum {descriptor.minimum:g}"
        )
    if descriptor.maximum is not None and number > descriptor.maximum:
        raise InvalidValue(
            descriptor.name, value, f"above maximum {descriptor.maximum:g}"
        )
    return number


def _encode_numeric(
    descriptor: AttributeDescriptor, value: Any, _mapping: EnumMapping | None
) -> tuple[int, StateValue]:
    number = _parse_number(descriptor, value)
    raw = int(_quantize(_to_decimal(number) * descriptor.scale, 0))
    if descriptor.scale == 1:
        return raw, raw
    return raw, _unscale(raw, descriptor.scale, scale_decimals(descriptor))


def _encode_enumeration(
    descriptor: AttributeDescriptor, value: Any, mapping: EnumMapping | None
) -> tuple[int, StateValue]:
    if mapping is None:
        raise InvalidValue(descriptor.name, value, "no enum mapping")
    if isinstance(value, str):
        label = value.strip()
        code = mapping.code_for(label)
        if code is not None:
            return code, label
    elif _is_number(value) and float(value).is_integer():
        label = mapping.label_for(int(value))
        if label is not None:
            return int(value), label
    raise InvalidValue(
        descriptor.name, value, f"expected one of {', '.join(mapping.labels)}"
    )


def _encode_boolean(
    descriptor: AttributeDescriptor, value: Any, _mapping: EnumMapping | None
) -> tuple[int, StateValue]:
    if isinstance(value, bool):
        semantic = value
    elif _is_number(value) and value in (0, 1):
        semantic = bool(value)
    elif isinstance(value, str) and value.strip().lower() in _TRUE_WORDS:
        semantic = True
    elif isinstance(value, str) and value.strip().lower() in _FALSE_WORDS:
        semantic = False
    else:
        raise InvalidValue(descriptor.name, value, "expected a boolean")
    wire = not semantic if descriptor.inverted else semantic
    return int(wire), semantic


_ENCODERS: dict[
    AttributeKind,
    Callable[[AttributeDescriptor, Any, EnumMapping | None], tuple[int, StateValue]],
] = {
    AttributeKind.SCALED_TEMPERATURE: _encode_numeric,
    AttributeKind.SCALED_ELECTRICAL: _encode_numeric,
    AttributeKind.RAW_INTEGER: _encode_numeric,
    AttributeKind.ENUMERATION: _encode_enumeration,
    AttributeKind.BOOLEAN: _encode_boolean,
}


def encode(
    descriptor: AttributeDescriptor,
    value: Any,
    mapping: EnumMapping | None = None,
) -> tuple[int, StateValue]:
    """Convert a normalized value to ``(raw, echo)``.

    ``echo`` is the human-readable value the device will hold once the write
    lands. Invalid input raises :class:`InvalidValue`; nothing is clamped.
    """

    return _ENCODERS[descriptor.kind](descriptor, value, mapping)
