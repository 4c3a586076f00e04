"""One-time device setup: binding, reporting configuration and initial reads."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .catalog import ReportingSpec
from .const import (
    ADAPTER_BUILD,
    ADAPTER_VERSION,
    BOUND_CLUSTERS,
    CLUSTER_NAMES,
    INITIAL_READS,
    REPORTING_EXCLUDED_CLUSTERS,
)
from .endpoint import ZigbeeEndpoint, describe_endpoints, endpoint_id, select_endpoint
from .translator import NormalizedState, StateTranslator

_LOGGER = logging.getLogger(__name__)


def cluster_label(cluster_id: int) -> str:
    """Return a readable name for ``cluster_id``."""

    names = CLUSTER_NAMES.get(cluster_id)
    if names:
        return names[0]
    return f"0x{cluster_id:04X}"


@dataclass(slots=True)
class SetupReport:
    """Outcome of a setup run; failed steps are recorded, never raised."""

    endpoint_id: int | None = None
    failed_binds: list[int] = field(default_factory=list)
    failed_reporting: list[int] = field(default_factory=list)
    failed_reads: list[tuple[int, tuple[int, ...]]] = field(default_factory=list)
    state: NormalizedState = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Return True when every step succeeded."""

        return not (self.failed_binds or self.failed_reporting or self.failed_reads)

    @property
    def failed_steps(self) -> list[str]:
        """Return failed steps as ``step:cluster`` labels."""

        steps = [f"bind:{cluster_label(c)}" for c in self.failed_binds]
        steps.extend(f"reporting:{cluster_label(c)}" for c in self.failed_reporting)
        steps.extend(f"read:{cluster_label(c)}" for c, _ids in self.failed_reads)
        return steps


def reporting_payload(specs: Sequence[ReportingSpec]) -> list[dict[str, int]]:
    """Convert reporting specs to transport configuration entries."""

    return [
        {
            "attribute": spec.attribute_id,
            "minimum_report_interval": spec.min_interval,
            "maximum_report_interval": spec.max_interval,
            "reportable_change": spec.reportable_change,
        }
        for spec in specs
    ]


class DeviceSetupOrchestrator:
    """Run the bind, reporting and seed-read sequence for a relay."""

    def __init__(
        self,
        translator: StateTranslator,
        *,
        listener: Callable[[NormalizedState], None] | None = None,
        bound_clusters: Sequence[int] = BOUND_CLUSTERS,
        initial_reads: Sequence[tuple[int, Sequence[int]]] = INITIAL_READS,
        logger: logging.Logger | None = None,
    ) -> None:
        """Store collaborators; ``listener`` receives each seed-read delta."""

        self._translator = translator
        self._listener = listener
        self._bound_clusters = tuple(bound_clusters)
        self._initial_reads = tuple(
            (cluster, tuple(ids)) for cluster, ids in initial_reads
        )
        self._logger = logger or _LOGGER

    async def async_configure(
        self, device: Any, coordinator_endpoint: Any
    ) -> SetupReport | None:
        """Select the device endpoint and configure it.

        Returns ``None`` when the device has no usable endpoint.
        """

        self._log_banner(device)
        endpoint = select_endpoint(device)
        if endpoint is None:
            self._logger.error(
                "No endpoint found on %s; skipping configuration",
                getattr(device, "ieee", device),
            )
            return None
        report = await self.async_configure_endpoint(endpoint, coordinator_endpoint)
        self._logger.info(
            "Configuration finished for %s; select the NTC sensor types so the "
            "probes start reporting",
            getattr(device, "ieee", device),
        )
        return report

    async def async_configure_endpoint(
        self, endpoint: ZigbeeEndpoint, coordinator_endpoint: Any
    ) -> SetupReport:
        """Bind, configure reporting and seed state on ``endpoint``."""

        report = SetupReport(endpoint_id=endpoint_id(endpoint))
        self._logger.debug("Using endpoint %s", report.endpoint_id)
        await self._async_bind(endpoint, coordinator_endpoint, report)
        await self._async_configure_reporting(endpoint, report)
        await self._async_initial_reads(endpoint, report)
        if not report.ok:
            self._logger.warning(
                "Setup finished with failures: %s", ", ".join(report.failed_steps)
            )
        return report

    def _log_banner(self, device: Any) -> None:
        self._logger.info(
            "Namron relay adapter v%s (build %s)", ADAPTER_VERSION, ADAPTER_BUILD
        )
        self._logger.info(
            "Configuring %s %s (%s), endpoints %s",
            getattr(device, "manufacturer", None),
            getattr(device, "model", None),
            getattr(device, "ieee", None),
            describe_endpoints(device),
        )

    async def _async_bind(
        self, endpoint: ZigbeeEndpoint, target: Any, report: SetupReport
    ) -> None:
        for cluster in self._bound_clusters:
            try:
                await endpoint.bind(cluster, target)
            except Exception as exc:  # noqa: BLE001 - continue with other clusters
                self._logger.warning(
                    "Binding %s failed: %s", cluster_label(cluster), exc
                )
                report.failed_binds.append(cluster)
            else:
                self._logger.debug("Bound %s", cluster_label(cluster))

    async def _async_configure_reporting(
        self, endpoint: ZigbeeEndpoint, report: SetupReport
    ) -> None:
        catalog = self._translator.catalog
        for cluster in catalog.reporting_clusters:
            if cluster in REPORTING_EXCLUDED_CLUSTERS:
                continue
            items = reporting_payload(catalog.reporting_for(cluster))
            try:
                await endpoint.configure_reporting(cluster, items)
            except Exception as exc:  # noqa: BLE001 - continue with other clusters
                self._logger.warning(
                    "Reporting configuration for %s failed: %s",
                    cluster_label(cluster),
                    exc,
                )
                report.failed_reporting.append(cluster)
            else:
                self._logger.debug(
                    "Configured reporting for %s: %s", cluster_label(cluster), items
                )

    async def _async_initial_reads(
        self, endpoint: ZigbeeEndpoint, report: SetupReport
    ) -> None:
        for cluster, attribute_ids in self._initial_reads:
            try:
                response = await endpoint.read(cluster, attribute_ids)
            except Exception as exc:  # noqa: BLE001 - continue with other reads
                self._logger.warning(
                    "Initial read of %s %s failed: %s",
                    cluster_label(cluster),
                    list(attribute_ids),
                    exc,
                )
                report.failed_reads.append((cluster, attribute_ids))
                continue
            delta = self._translator.translate(cluster, response)
            if delta is None:
                continue
            report.state.update(delta)
            if self._listener is not None:
                self._listener(delta)
