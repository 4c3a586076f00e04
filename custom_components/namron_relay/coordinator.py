"""Coordinator owning relay devices, their poll sessions and inbound events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from .catalog import default_catalog
from .config import AdapterConfig
from .configure import DeviceSetupOrchestrator, SetupReport
from .const import REPORT_KINDS
from .device_types import NamronRelayDevice
from .endpoint import select_endpoint
from .polling import PollingDriver, PollSessionStore
from .translator import NormalizedState, StateTranslator

HostListener = Callable[[str, NormalizedState], None]


class NamronRelayCoordinator:
    """Own device instances and orchestrate setup, polling and events."""

    def __init__(
        self,
        *,
        hass: Any,
        config: AdapterConfig | None = None,
        coordinator_endpoint: Any = None,
        translator: StateTranslator | None = None,
        session_store: PollSessionStore | None = None,
        listener: HostListener | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialise the coordinator with integration dependencies."""

        coordinator_logger = logger or logging.getLogger(__name__)
        self.hass = hass
        self.config = config or AdapterConfig()
        self._coordinator_endpoint = coordinator_endpoint
        self._listener = listener
        self._logger = coordinator_logger
        self.translator = translator or StateTranslator(
            default_catalog().with_scale_overrides(self.config.scale_overrides)
        )
        hass_loop = getattr(hass, "loop", None)
        self._loop = loop or hass_loop or asyncio.get_running_loop()
        self.sessions = session_store or PollSessionStore()
        self.poller = PollingDriver(
            self.sessions,
            self.translator,
            self._handle_polled_state,
            loop=self._loop,
            interval=self.config.poll_interval,
            logger=coordinator_logger.getChild("poll"),
        )
        self.orchestrator = DeviceSetupOrchestrator(
            self.translator, logger=coordinator_logger.getChild("setup")
        )
        self.devices: dict[str, NamronRelayDevice] = {}
        self.setup_reports: dict[str, SetupReport] = {}

    def _device(self, identity: str) -> NamronRelayDevice:
        device = self.devices.get(identity)
        if device is None:
            raise KeyError(identity)
        return device

    def _handle_polled_state(self, identity: str, delta: NormalizedState) -> None:
        device = self.devices.get(identity)
        if device is not None:
            device.publish(delta)

    def _forward(self, identity: str) -> Callable[[NormalizedState], None]:
        def _deliver(delta: NormalizedState) -> None:
            if self._listener is not None:
                self._listener(identity, delta)

        return _deliver

    async def async_device_joined(
        self, identity: str, zigbee_device: Any, coordinator_endpoint: Any = None
    ) -> NamronRelayDevice | None:
        """Configure a newly paired relay and start polling it."""

        endpoint = select_endpoint(zigbee_device)
        target = coordinator_endpoint or self._coordinator_endpoint
        report = await self.orchestrator.async_configure(zigbee_device, target)
        if endpoint is None or report is None:
            return None

        device = self.devices.get(identity)
        if device is None:
            device = NamronRelayDevice(
                identity,
                endpoint,
                self.translator,
                logger=self._logger.getChild("device"),
            )
            device.add_listener(self._forward(identity))
            self.devices[identity] = device
        elif endpoint is not device.endpoint:
            self.poller.stop(identity)
            device.endpoint = endpoint
        self.setup_reports[identity] = report
        device.publish(report.state)
        self._start_polling(device)
        return device

    async def async_device_rediscovered(
        self, identity: str, zigbee_device: Any
    ) -> NamronRelayDevice | None:
        """Resume polling for a known relay after a restart or re-announce."""

        device = self.devices.get(identity)
        if device is None:
            return await self.async_device_joined(identity, zigbee_device)
        endpoint = select_endpoint(zigbee_device)
        if endpoint is not None and endpoint is not device.endpoint:
            # The session holds the old endpoint, so restart it.
            self.poller.stop(identity)
            device.endpoint = endpoint
        self._start_polling(device)
        return device

    async def async_device_removed(self, identity: str) -> None:
        """Stop polling and forget ``identity``."""

        self.poller.stop(identity)
        self.setup_reports.pop(identity, None)
        if self.devices.pop(identity, None) is not None:
            self._logger.info("Removed device %s", identity)

    def _start_polling(self, device: NamronRelayDevice) -> None:
        if not self.config.polling_enabled:
            return
        self.poller.start(device.identity, device.endpoint)

    async def async_handle_event(
        self,
        identity: str,
        cluster: int | str | None,
        payload: Mapping[Any, Any] | None,
        kind: str,
    ) -> NormalizedState | None:
        """Route an inbound report or read response to its device."""

        if kind not in REPORT_KINDS:
            return None
        device = self.devices.get(identity)
        if device is None:
            self._logger.debug("Event for unknown device %s ignored", identity)
            return None
        return device.handle_report(cluster, payload)

    async def async_set_field(
        self, identity: str, field: str, value: Any
    ) -> NormalizedState:
        """Write ``value`` to ``field`` on ``identity``."""

        return await self._device(identity).async_set_field(field, value)

    async def async_refresh_field(self, identity: str, field: str) -> NormalizedState:
        """Read ``field`` from ``identity`` on demand."""

        return await self._device(identity).async_refresh(field)

    async def async_shutdown(self) -> None:
        """Stop every poll session owned by this coordinator."""

        self.poller.stop_all()
