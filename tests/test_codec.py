"""Tests for the scaling and enumeration codec."""

from __future__ import annotations

import math

import pytest

from custom_components.namron_relay import codec
from custom_components.namron_relay.catalog import default_catalog
from custom_components.namron_relay.exceptions import InvalidValue


def _descriptor(name: str):
    return default_catalog().get(name)


def _mapping(name: str):
    descriptor = _descriptor(name)
    return default_catalog().enum_mapping(descriptor.enum)


def test_round_half_away_from_zero() -> None:
    """Halves round away from zero in both directions."""

    assert codec.round_half_away(2.5) == 3
    assert codec.round_half_away(-2.5) == -3
    assert codec.round_half_away(0.125, 2) == 0.13
    assert codec.round_half_away(-0.125, 2) == -0.13


def test_voltage_decodes_with_one_decimal() -> None:
    """Voltage is reported in decivolts."""

    assert codec.decode(_descriptor("voltage"), 2319) == 231.9


def test_current_decodes_with_two_decimals() -> None:
    """Current is reported in milliamperes and kept to two decimals."""

    assert codec.decode(_descriptor("current"), 3290) == 3.29
    assert codec.decode(_descriptor("current"), 1234) == 1.23


def test_power_decodes_to_integer_watts() -> None:
    """Active power is already in watts."""

    value = codec.decode(_descriptor("power"), 742)

    assert value == 742
    assert isinstance(value, int)


def test_energy_decodes_with_scale_100() -> None:
    """Energy summation is divided by 100."""

    assert codec.decode(_descriptor("energy"), 28427) == 284.27


@pytest.mark.parametrize("raw", [-32768, 0x8000, None, "n/a", True])
def test_temperature_sentinels_mean_no_reading(raw: object) -> None:
    """Sentinel and malformed temperatures never decode to a number."""

    assert codec.decode(_descriptor("ntc1_temperature"), raw) is None


@pytest.mark.parametrize("raw", [math.nan, math.inf, -math.inf])
@pytest.mark.parametrize(
    "field", ["ntc1_temperature", "power", "current", "ntc1_calibration"]
)
def test_non_finite_raw_values_mean_no_reading(field: str, raw: float) -> None:
    """NaN and infinities decode to no reading instead of raising."""

    assert codec.decode(_descriptor(field), raw) is None


def test_non_finite_enumeration_code_means_no_reading() -> None:
    """An infinite enum code is dropped rather than passed through."""

    descriptor = _descriptor("ntc1_sensor_type")

    assert codec.decode(descriptor, math.inf, _mapping("ntc1_sensor_type")) is None


def test_temperatures_round_to_one_decimal() -> None:
    """Probe temperatures keep one decimal place."""

    assert codec.decode(_descriptor("ntc1_temperature"), 2156) == 21.6
    assert codec.decode(_descriptor("ntc2_temperature"), -525) == -5.3
    assert codec.decode(_descriptor("device_temperature"), 412) == 41.2


def test_enumeration_decodes_known_and_unknown_codes() -> None:
    """Known codes decode to labels; unknown codes pass through."""

    descriptor = _descriptor("ntc1_sensor_type")
    mapping = _mapping("ntc1_sensor_type")

    assert codec.decode(descriptor, 1, mapping) == "NTC-10K"
    assert codec.decode(descriptor, 42, mapping) == 42
    assert codec.decode(descriptor, "NTC-22K", mapping) == "NTC-22K"
    assert codec.decode(descriptor, None, mapping) is None


def test_boolean_polarity_is_declared_on_descriptor() -> None:
    """Inverted booleans flip; plain booleans are a truthiness cast."""

    water = _descriptor("water_sensor")
    alarm = _descriptor("water_condition_alarm")

    assert codec.decode(water, 0) is True
    assert codec.decode(water, 1) is False
    assert codec.decode(alarm, 1) is True
    assert codec.decode(alarm, 0) is False


def test_encode_scaled_temperature_rounds_half_away() -> None:
    """Thresholds encode to hundredths and echo the engineering value."""

    descriptor = _descriptor("ntc1_relay_auto_temp")

    assert codec.encode(descriptor, 25.5) == (2550, 25.5)
    assert codec.encode(descriptor, "42.125") == (4213, 42.13)
    assert codec.encode(descriptor, 0) == (0, 0.0)


def test_encode_raw_integer_within_bounds() -> None:
    """Calibration offsets encode as signed integers."""

    descriptor = _descriptor("ntc1_calibration")

    assert codec.encode(descriptor, -3) == (-3, -3)
    assert codec.encode(descriptor, 2.5) == (3, 3)
    assert codec.encode(descriptor, -2.5) == (-3, -3)


@pytest.mark.parametrize("value", [11, -11, 10.6])
def test_out_of_range_input_is_never_clamped(value: float) -> None:
    """Values outside the declared bounds are rejected."""

    with pytest.raises(InvalidValue) as excinfo:
        codec.encode(_descriptor("ntc1_calibration"), value)

    assert excinfo.value.field == "ntc1_calibration"
    assert excinfo.value.value == value


@pytest.mark.parametrize("value", [math.nan, math.inf, "warm", None, True, [1]])
def test_unparseable_numeric_input_is_rejected(value: object) -> None:
    """Non-finite, non-numeric and boolean input fails to encode."""

    with pytest.raises(InvalidValue):
        codec.encode(_descriptor("ntc1_relay_auto_temp"), value)


def test_encode_enumeration_accepts_label_or_code() -> None:
    """Labels and already-valid codes both encode."""

    descriptor = _descriptor("ntc1_sensor_type")
    mapping = _mapping("ntc1_sensor_type")

    assert codec.encode(descriptor, "NTC-10K", mapping) == (1, "NTC-10K")
    assert codec.encode(descriptor, " NTC-47K ", mapping) == (6, "NTC-47K")
    assert codec.encode(descriptor, 3, mapping) == (3, "NTC-15K")


@pytest.mark.parametrize("value", ["NTC-99K", 7, 1.5, None])
def test_encode_enumeration_rejects_unknown_input(value: object) -> None:
    """Unknown labels and codes raise InvalidValue."""

    descriptor = _descriptor("ntc1_sensor_type")

    with pytest.raises(InvalidValue, match="expected one of"):
        codec.encode(descriptor, value, _mapping("ntc1_sensor_type"))


def test_encode_boolean_applies_polarity() -> None:
    """Semantic booleans map back through the declared polarity."""

    water = _descriptor("water_sensor")
    alarm = _descriptor("water_condition_alarm")

    assert codec.encode(water, True) == (0, True)
    assert codec.encode(water, "off") == (1, False)
    assert codec.encode(alarm, "yes") == (1, True)
    with pytest.raises(InvalidValue):
        codec.encode(alarm, "maybe")


def test_scaled_round_trip_holds_at_wire_resolution() -> None:
    """Decoding an encoded value returns the echo for representable input."""

    descriptor = _descriptor("ntc2_relay_auto_temp")
    raw, echo = codec.encode(descriptor, 37.4)

    assert codec.decode(descriptor, raw) == echo == 37.4
