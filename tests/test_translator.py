"""Tests for the state translator read and write paths."""

from __future__ import annotations

import pytest
import zigpy.types as t

from custom_components.namron_relay.exceptions import InvalidValue, UnsupportedField
from custom_components.namron_relay.translator import StateTranslator


def test_electrical_report_translates_to_engineering_units(
    translator: StateTranslator,
) -> None:
    """Voltage, current and power decode in one delta."""

    delta = translator.translate(
        "haElectricalMeasurement", {0x0505: 2319, 0x0508: 3290, 0x050B: 742}
    )

    assert delta == {"voltage": 231.9, "current": 3.29, "power": 742}


def test_energy_report_uses_summation_aliases(translator: StateTranslator) -> None:
    """Either summation spelling yields the same energy reading."""

    assert translator.translate("seMetering", {"currentSummDelivered": 28427}) == {
        "energy": 284.27
    }
    assert translator.translate(0x0702, {0: 28427}) == {"energy": 284.27}


def test_numeric_id_and_alias_reports_are_equivalent(
    translator: StateTranslator,
) -> None:
    """A report keyed by id matches the same report keyed by name."""

    by_id = translator.translate(0x04E0, {0x0000: 1875, 0x0003: 0})
    by_name = translator.translate(
        "manuSpecificNamron", {"measuredValue2": 1875, "waterSensorValue": 0}
    )

    assert by_id == by_name == {"ntc2_temperature": 18.8, "water_sensor": True}


def test_irrelevant_reports_produce_no_delta(translator: StateTranslator) -> None:
    """Unknown clusters, empty payloads and unmatched keys yield None."""

    assert translator.translate("genBasic", {0: 1}) is None
    assert translator.translate(0x0006, {}) is None
    assert translator.translate(0x0006, None) is None
    assert translator.translate(0x0006, {"unrelated": 1}) is None


def test_sentinel_only_report_produces_no_delta(translator: StateTranslator) -> None:
    """A report carrying only 'no reading' markers is not a delta."""

    assert translator.translate("msTemperatureMeasurement", {0: -32768}) is None
    assert translator.translate(
        "msTemperatureMeasurement", {"measuredValue": 2210}
    ) == {"ntc1_temperature": 22.1}


def test_non_finite_power_report_produces_no_delta(
    translator: StateTranslator,
) -> None:
    """A NaN power reading is dropped while voltage still decodes."""

    assert translator.translate(0x0B04, {0x050B: float("nan")}) is None
    assert translator.translate(0x0B04, {0x050B: float("inf"), 0x0505: 2300}) == {
        "voltage": 230.0
    }


def test_mixed_report_keeps_readable_fields(translator: StateTranslator) -> None:
    """Sentinel fields are dropped while siblings still decode."""

    delta = translator.translate(0x04E0, {0: 0x8000, 1: 4, 3: 1, 0x000E: 1})

    assert delta == {
        "ntc1_sensor_type": "NTC-22K",
        "water_sensor": False,
        "water_condition_alarm": True,
    }


def test_on_off_report_decodes_to_label(translator: StateTranslator) -> None:
    """Relay state and power-on behavior decode to labels."""

    assert translator.translate("genOnOff", {"onOff": 1, "startUpOnOff": 255}) == {
        "state": "ON",
        "power_on_behavior": "previous",
    }


def test_write_ntc_sensor_type_by_label(translator: StateTranslator) -> None:
    """Selecting a probe type writes its enum8 code and echoes the label."""

    request = translator.encode_write("ntc1_sensor_type", "NTC-10K")

    assert (request.cluster_id, request.attribute_id) == (0x04E0, 0x0001)
    assert request.value == 1
    assert request.echo == "NTC-10K"
    assert request.as_payload() == {0x0001: {"value": 1, "type": t.enum8}}
    assert request.as_state() == {"ntc1_sensor_type": "NTC-10K"}


def test_write_power_on_behavior_previous(translator: StateTranslator) -> None:
    """The 'previous' behavior is encoded as 255."""

    request = translator.encode_write("power_on_behavior", "previous")

    assert (request.cluster_id, request.attribute_id, request.value) == (
        0x0006,
        0x4003,
        255,
    )


def test_write_threshold_encodes_hundredths(translator: StateTranslator) -> None:
    """Relay thresholds encode as int16s hundredths of a degree."""

    request = translator.encode_write("ntc2_relay_auto_temp", 55.5)

    assert request.value == 5550
    assert request.wire_type is t.int16s
    assert request.echo == 55.5


def test_write_rejects_unknown_and_read_only_fields(
    translator: StateTranslator,
) -> None:
    """Unknown or read-only fields raise UnsupportedField."""

    with pytest.raises(UnsupportedField) as excinfo:
        translator.encode_write("frequency", 50)
    assert excinfo.value.field == "frequency"

    with pytest.raises(UnsupportedField):
        translator.encode_write("voltage", 230)

    with pytest.raises(KeyError):
        translator.encode_write("water_sensor", True)


def test_write_rejects_invalid_values(translator: StateTranslator) -> None:
    """Validation failures surface as InvalidValue naming the field."""

    with pytest.raises(InvalidValue) as excinfo:
        translator.encode_write("ntc1_relay_auto_temp", 150)

    assert excinfo.value.field == "ntc1_relay_auto_temp"
    assert isinstance(excinfo.value, ValueError)


def test_decoded_values_encode_back_to_the_same_raw(
    translator: StateTranslator,
) -> None:
    """Writable fields survive a decode then encode at wire resolution."""

    samples = {
        "ntc1_sensor_type": 5,
        "water_alarm_relay_action": 3,
        "ntc2_operation_mode": 4,
        "override_option": 2,
        "ntc1_relay_auto_temp": 2250,
        "ntc2_calibration": -7,
        "ntc1_temp_hysteresis": 2,
        "power_on_behavior": 255,
    }
    for field, raw in samples.items():
        decoded = translator.decode(translator.descriptor(field), raw)
        assert translator.encode_write(field, decoded).value == raw, field


def test_read_plan_groups_attribute_ids(translator: StateTranslator) -> None:
    """On-demand reads are grouped per cluster without duplicates."""

    plan = translator.read_plan(
        ["voltage", "ntc2_temperature", "current", "water_sensor", "voltage"]
    )

    assert plan == {0x0B04: (0x0505, 0x0508), 0x04E0: (0x0000, 0x0003)}


def test_descriptors_for_accepts_cluster_names(translator: StateTranslator) -> None:
    """Descriptors are listed for any spelling of a cluster."""

    names = [d.name for d in translator.descriptors_for("genOnOff")]

    assert names == ["state", "power_on_behavior"]
    assert translator.descriptors_for("bogus") == ()
