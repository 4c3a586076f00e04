"""Periodic polling of attributes whose reports cannot be relied upon."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from .const import DEFAULT_POLL_INTERVAL, POLLED_READS
from .endpoint import ZigbeeEndpoint
from .translator import NormalizedState, StateTranslator

_LOGGER = logging.getLogger(__name__)

StateListener = Callable[[str, NormalizedState], None]


@dataclass(slots=True)
class PollSession:
    """Timer state for one polled device."""

    identity: str
    endpoint: ZigbeeEndpoint
    handle: asyncio.TimerHandle | None = None
    cycles: int = 0
    tasks: set[asyncio.Task[Any]] = field(default_factory=set)

    def cancel(self) -> None:
        """Cancel the pending timer and any in-flight cycle."""

        if self.handle is not None:
            self.handle.cancel()
            self.handle = None
        for task in list(self.tasks):
            task.cancel()
        self.tasks.clear()


class PollSessionStore:
    """Hold poll sessions keyed by device identity."""

    def __init__(self) -> None:
        """Initialise an empty store."""

        self._sessions: dict[str, PollSession] = {}

    def get(self, identity: str) -> PollSession | None:
        """Return the session for ``identity`` if one is active."""

        return self._sessions.get(identity)

    def add(self, session: PollSession) -> None:
        """Register ``session`` under its identity."""

        self._sessions[session.identity] = session

    def pop(self, identity: str) -> PollSession | None:
        """Remove and return the session for ``identity``."""

        return self._sessions.pop(identity, None)

    def identities(self) -> list[str]:
        """Return the identities currently being polled."""

        return list(self._sessions)

    def __contains__(self, identity: object) -> bool:
        return identity in self._sessions

    def __iter__(self) -> Iterator[PollSession]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)


class PollingDriver:
    """Schedule read cycles per device on the event loop."""

    def __init__(
        self,
        store: PollSessionStore,
        translator: StateTranslator,
        listener: StateListener,
        *,
        loop: asyncio.AbstractEventLoop,
        interval: timedelta | None = None,
        reads: Sequence[tuple[int, Sequence[int]]] = POLLED_READS,
        logger: logging.Logger | None = None,
    ) -> None:
        """Bind the driver to its session store and state listener."""

        self._store = store
        self._translator = translator
        self._listener = listener
        self._loop = loop
        self._interval = interval or DEFAULT_POLL_INTERVAL
        self._reads = tuple((cluster, tuple(ids)) for cluster, ids in reads)
        self._logger = logger or _LOGGER

    @property
    def interval(self) -> timedelta:
        """Return the delay between poll cycles."""

        return self._interval

    def is_polling(self, identity: str) -> bool:
        """Return True when ``identity`` has an active session."""

        return identity in self._store

    def start(self, identity: str, endpoint: ZigbeeEndpoint) -> bool:
        """Begin polling ``identity``; returns False if it was already polled."""

        if identity in self._store:
            self._logger.debug("Polling already active for %s", identity)
            return False
        session = PollSession(identity=identity, endpoint=endpoint)
        self._store.add(session)
        self._schedule(session)
        self._logger.info(
            "Started polling %s every %s seconds",
            identity,
            self._interval.total_seconds(),
        )
        return True

    def stop(self, identity: str) -> bool:
        """Stop polling ``identity``; returns False if nothing was running."""

        session = self._store.pop(identity)
        if session is None:
            return False
        session.cancel()
        self._logger.info("Stopped polling %s", identity)
        return True

    def stop_all(self) -> None:
        """Stop every active session."""

        for identity in self._store.identities():
            self.stop(identity)

    def _schedule(self, session: PollSession) -> None:
        """Arm the timer for the next cycle of ``session``."""

        def _finished(task: asyncio.Task[Any]) -> None:
            session.tasks.discard(task)
            if self._store.get(session.identity) is not session:
                return
            if not task.cancelled() and task.exception() is not None:
                self._logger.error(
                    "Poll cycle for %s failed",
                    session.identity,
                    exc_info=task.exception(),
                )
            # The next cycle is armed only once this one has finished.
            self._schedule(session)

        def _wrapper() -> None:
            if self._store.get(session.identity) is not session:
                return
            session.handle = None
            task = asyncio.create_task(self.async_poll(session.identity))
            session.tasks.add(task)
            task.add_done_callback(_finished)

        session.handle = self._loop.call_later(
            self._interval.total_seconds(), _wrapper
        )

    async def async_poll(self, identity: str) -> NormalizedState:
        """Run one read cycle for ``identity`` and return the merged delta."""

        session = self._store.get(identity)
        if session is None:
            return {}
        session.cycles += 1
        merged: NormalizedState = {}
        for cluster, attribute_ids in self._reads:
            try:
                response = await session.endpoint.read(cluster, attribute_ids)
            except Exception as exc:  # noqa: BLE001 - polling must not stop
                self._logger.warning(
                    "Poll read of cluster 0x%04X %s failed for %s: %s",
                    cluster,
                    list(attribute_ids),
                    identity,
                    exc,
                )
                continue
            delta = self._translator.translate(cluster, response)
            if delta is None:
                continue
            merged.update(delta)
            self._listener(identity, delta)
        return merged
