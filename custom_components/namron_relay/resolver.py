"""Resolve attribute and cluster keys across historical spellings."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .const import CLUSTER_NAMES

AttributeKey = int | str

_CLUSTER_LOOKUP: dict[str, int] = {
    name.lower(): cluster_id
    for cluster_id, names in CLUSTER_NAMES.items()
    for name in names
}


def resolve_key(
    payload: Mapping[Any, Any] | None, keys: Iterable[AttributeKey]
) -> AttributeKey | None:
    """Return the first of ``keys`` present in ``payload``.

    Keys are tried in the given order and compared exactly, so a numeric id
    listed first always wins over a string alias for the same attribute.
    ``None`` means the attribute is absent from this payload.
    """

    if not payload:
        return None
    for key in keys:
        if key in payload:
            return key
    return None


def resolve_value(
    payload: Mapping[Any, Any] | None, keys: Iterable[AttributeKey]
) -> tuple[bool, Any]:
    """Return ``(found, raw_value)`` for the first matching key."""

    key = resolve_key(payload, keys)
    if key is None:
        return False, None
    return True, payload[key]  # type: ignore[index]


def resolve_cluster(cluster: int | str | None) -> int | None:
    """Return the numeric cluster id for any known cluster spelling."""

    if cluster is None or isinstance(cluster, bool):
        return None
    if isinstance(cluster, int):
        return cluster
    text = str(cluster).strip()
    if not text:
        return None
    lookup = _CLUSTER_LOOKUP.get(text.lower())
    if lookup is not None:
        return lookup
    try:
        return int(text, 0)
    except ValueError:
        return None
