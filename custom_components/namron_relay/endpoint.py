"""Transport endpoint protocol and endpoint selection."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from .const import DEFAULT_ENDPOINT_ID, PREFERRED_ENDPOINT_CLUSTERS


class ZigbeeEndpoint(Protocol):
    """Subset of a radio stack endpoint used by the adapter.

    Every method may raise; any exception counts as a transport failure.
    """

    async def read(
        self, cluster: int | str, attributes: Sequence[int]
    ) -> Mapping[int | str, Any]:
        """Read ``attributes`` from ``cluster`` and return the raw values."""

    async def write(
        self, cluster: int | str, attributes: Mapping[int, Mapping[str, Any]]
    ) -> None:
        """Write ``{attribute_id: {"value": v, "type": t}}`` to ``cluster``."""

    async def bind(self, cluster: int | str, target: Any) -> None:
        """Route reports for ``cluster`` to ``target``."""

    async def configure_reporting(
        self, cluster: int | str, items: Sequence[Mapping[str, int]]
    ) -> None:
        """Apply reporting configuration entries to ``cluster``."""

    async def command(self, cluster: int | str, command: str) -> None:
        """Send a cluster command without arguments."""


def endpoint_id(endpoint: Any) -> int | None:
    """Return the numeric id of ``endpoint`` for logging and lookups."""

    for attribute in ("endpoint_id", "ID", "id"):
        value = getattr(endpoint, attribute, None)
        if isinstance(value, int):
            return value
    return None


def _iter_endpoints(device: Any) -> list[Any]:
    """Return endpoint objects from a mapping- or list-shaped container."""

    endpoints = getattr(device, "endpoints", None) or []
    if isinstance(endpoints, Mapping):
        # zigpy keeps the ZDO endpoint under id 0.
        return [ep for key, ep in endpoints.items() if key != 0]
    return list(endpoints)


def _input_clusters(endpoint: Any) -> set[int]:
    """Return the server cluster ids served by ``endpoint``."""

    clusters: Iterable[Any] = (
        getattr(endpoint, "in_clusters", None)
        or getattr(endpoint, "input_clusters", None)
        or getattr(endpoint, "inputClusters", None)
        or ()
    )
    resolved: set[int] = set()
    for cluster in clusters:
        try:
            resolved.add(int(cluster))
        except (TypeError, ValueError):
            continue
    return resolved


def describe_endpoints(device: Any) -> list[int]:
    """Return the ids of the device's application endpoints."""

    return [
        ep_id
        for ep_id in (endpoint_id(ep) for ep in _iter_endpoints(device))
        if ep_id is not None
    ]


def select_endpoint(
    device: Any, preferred: Sequence[int] = PREFERRED_ENDPOINT_CLUSTERS
) -> Any | None:
    """Pick the endpoint serving the consumed clusters.

    Falls back to endpoint 1, then to the first endpoint. ``None`` when the
    device exposes no endpoints at all.
    """

    endpoints = _iter_endpoints(device)
    for endpoint in endpoints:
        if _input_clusters(endpoint).intersection(preferred):
            return endpoint
    for endpoint in endpoints:
        if endpoint_id(endpoint) == DEFAULT_ENDPOINT_ID:
            return endpoint
    return endpoints[0] if endpoints else None
