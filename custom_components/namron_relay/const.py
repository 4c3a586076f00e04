"""Constants for the Namron 4512785 relay integration."""

from __future__ import annotations

from datetime import timedelta
from typing import Final

from zigpy.zcl.clusters.general import DeviceTemperature, OnOff
from zigpy.zcl.clusters.homeautomation import ElectricalMeasurement
from zigpy.zcl.clusters.measurement import TemperatureMeasurement
from zigpy.zcl.clusters.smartenergy import Metering

DOMAIN: Final = "namron_relay"

ADAPTER_VERSION: Final = "1.4.0"
ADAPTER_BUILD: Final = "2025-11-28-012"

MODEL: Final = "4512785"
MANUFACTURER: Final = "Namron AS"

ON_OFF_CLUSTER_ID: Final[int] = OnOff.cluster_id
DEVICE_TEMPERATURE_CLUSTER_ID: Final[int] = DeviceTemperature.cluster_id
TEMPERATURE_CLUSTER_ID: Final[int] = TemperatureMeasurement.cluster_id
ELECTRICAL_CLUSTER_ID: Final[int] = ElectricalMeasurement.cluster_id
METERING_CLUSTER_ID: Final[int] = Metering.cluster_id
PRIVATE_CLUSTER_ID: Final[int] = 0x04E0

# Spellings observed for each cluster across stack versions, besides the id.
CLUSTER_NAMES: Final[dict[int, tuple[str, ...]]] = {
    ON_OFF_CLUSTER_ID: ("genOnOff", OnOff.ep_attribute),
    DEVICE_TEMPERATURE_CLUSTER_ID: (
        "genDeviceTempCfg",
        DeviceTemperature.ep_attribute,
    ),
    TEMPERATURE_CLUSTER_ID: (
        "msTemperatureMeasurement",
        TemperatureMeasurement.ep_attribute,
    ),
    ELECTRICAL_CLUSTER_ID: (
        "haElectricalMeasurement",
        ElectricalMeasurement.ep_attribute,
    ),
    METERING_CLUSTER_ID: ("seMetering", Metering.ep_attribute),
    PRIVATE_CLUSTER_ID: ("manuSpecificNamron",),
}

# Standard clusters routed to the coordinator. The private cluster reports
# without a binding.
BOUND_CLUSTERS: Final[tuple[int, ...]] = (
    ON_OFF_CLUSTER_ID,
    DEVICE_TEMPERATURE_CLUSTER_ID,
    TEMPERATURE_CLUSTER_ID,
    ELECTRICAL_CLUSTER_ID,
    METERING_CLUSTER_ID,
)

# The device stops reporting these clusters once reporting is reconfigured.
REPORTING_EXCLUDED_CLUSTERS: Final[tuple[int, ...]] = (TEMPERATURE_CLUSTER_ID,)

# Endpoint selection prefers the first endpoint serving any of these.
PREFERRED_ENDPOINT_CLUSTERS: Final[tuple[int, ...]] = (
    ON_OFF_CLUSTER_ID,
    DEVICE_TEMPERATURE_CLUSTER_ID,
    TEMPERATURE_CLUSTER_ID,
    ELECTRICAL_CLUSTER_ID,
    METERING_CLUSTER_ID,
)
DEFAULT_ENDPOINT_ID: Final = 1

# Attributes read on setup to seed state before the first report.
INITIAL_READS: Final[tuple[tuple[int, tuple[int, ...]], ...]] = (
    (ON_OFF_CLUSTER_ID, (0x0000,)),
    (DEVICE_TEMPERATURE_CLUSTER_ID, (0x0000,)),
    (TEMPERATURE_CLUSTER_ID, (0x0000,)),
    (ELECTRICAL_CLUSTER_ID, (0x0505, 0x0508, 0x050B)),
    (METERING_CLUSTER_ID, (0x0000,)),
    (PRIVATE_CLUSTER_ID, (0x0000, 0x0003)),
    (PRIVATE_CLUSTER_ID, (0x0001, 0x0002)),
    (PRIVATE_CLUSTER_ID, (0x0007, 0x0008)),
)

# Attributes whose push reporting is unreliable and must be polled.
POLLED_READS: Final[tuple[tuple[int, tuple[int, ...]], ...]] = (
    (TEMPERATURE_CLUSTER_ID, (0x0000,)),
    (PRIVATE_CLUSTER_ID, (0x0000, 0x0003)),
)

DEFAULT_POLL_INTERVAL: Final = timedelta(seconds=60)
MIN_POLL_INTERVAL_SECONDS: Final = 10
MAX_POLL_INTERVAL_SECONDS: Final = 3600

# Raw values the device uses for "no reading" on signed 16-bit temperatures.
TEMPERATURE_SENTINELS: Final[frozenset[int]] = frozenset({-32768, 0x8000})

REPORT_KINDS: Final[frozenset[str]] = frozenset({"attributeReport", "readResponse"})

CONF_POLL_INTERVAL: Final = "poll_interval"
CONF_POLLING_ENABLED: Final = "polling_enabled"
CONF_SCALE_OVERRIDES: Final = "scale_overrides"
