"""Pytest configuration for the Namron relay integration tests."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

root_path = Path(__file__).resolve().parent.parent
if str(root_path) not in sys.path:
    sys.path.insert(0, str(root_path))

from custom_components.namron_relay.translator import StateTranslator  # noqa: E402


class FakeEndpoint:
    """Transport double recording every request it receives."""

    def __init__(
        self,
        endpoint_id: int = 1,
        in_clusters: Iterable[int] = (0x0006, 0x0002, 0x0402, 0x0B04, 0x0702),
        responses: Mapping[int, Mapping[int | str, Any]] | None = None,
    ) -> None:
        """Serve canned ``responses`` keyed by cluster then attribute id."""

        self.endpoint_id = endpoint_id
        self.in_clusters = {cluster: None for cluster in in_clusters}
        self.responses = {k: dict(v) for k, v in (responses or {}).items()}
        self.failures: set[tuple[str, int | None]] = set()
        self.reads: list[tuple[int | str, tuple[int, ...]]] = []
        self.writes: list[tuple[int | str, dict[int, dict[str, Any]]]] = []
        self.binds: list[tuple[int | str, Any]] = []
        self.reporting: list[tuple[int | str, list[dict[str, int]]]] = []
        self.commands: list[tuple[int | str, str]] = []

    def fail(self, operation: str, cluster: int | None = None) -> None:
        """Make ``operation`` raise for ``cluster`` (or every cluster)."""

        self.failures.add((operation, cluster))

    def _check(self, operation: str, cluster: int | str) -> None:
        if (operation, cluster) in self.failures or (operation, None) in self.failures:
            raise RuntimeError(f"{operation} rejected for {cluster}")

    async def read(
        self, cluster: int | str, attributes: Sequence[int]
    ) -> dict[int | str, Any]:
        self.reads.append((cluster, tuple(attributes)))
        self._check("read", cluster)
        served = self.responses.get(cluster, {})  # type: ignore[arg-type]
        return {attr: served[attr] for attr in attributes if attr in served}

    async def write(
        self, cluster: int | str, attributes: Mapping[int, Mapping[str, Any]]
    ) -> None:
        self.writes.append((cluster, {k: dict(v) for k, v in attributes.items()}))
        self._check("write", cluster)

    async def bind(self, cluster: int | str, target: Any) -> None:
        self.binds.append((cluster, target))
        self._check("bind", cluster)

    async def configure_reporting(
        self, cluster: int | str, items: Sequence[Mapping[str, int]]
    ) -> None:
        self.reporting.append((cluster, [dict(item) for item in items]))
        self._check("configure_reporting", cluster)

    async def command(self, cluster: int | str, command: str) -> None:
        self.commands.append((cluster, command))
        self._check("command", cluster)


class FakeTimerHandle:
    """Timer handle double exposing cancellation state."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Event loop double recording ``call_later`` requests."""

    def __init__(self) -> None:
        self.handles: list[FakeTimerHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimerHandle:
        handle = FakeTimerHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> list[FakeTimerHandle]:
        """Return handles that have not been cancelled."""

        return [handle for handle in self.handles if not handle.cancelled]


@pytest.fixture
def translator() -> StateTranslator:
    """Return a translator backed by the bundled catalog."""

    return StateTranslator()


@pytest.fixture
def endpoint() -> FakeEndpoint:
    """Return a transport double on endpoint 1."""

    return FakeEndpoint()


@pytest.fixture
def fake_loop() -> FakeLoop:
    """Return a loop double for timer assertions."""

    return FakeLoop()


def pytest_configure(config: pytest.Config) -> None:
    """Register markers used throughout the test suite."""

    config.addinivalue_line(
        "markers", "asyncio: mark coroutine tests to execute via asyncio loop"
    )


def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute coroutine tests within a dedicated event loop."""

    test_function = pyfuncitem.obj
    if not asyncio.iscoroutinefunction(test_function):
        return None

    # funcargs also carries fixtures pulled in indirectly, such as ``request``.
    kwargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(test_function(**kwargs))
    finally:
        asyncio.set_event_loop(None)
        loop.close()
    return True
