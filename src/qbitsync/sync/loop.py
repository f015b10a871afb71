"""Cooperative polling loop shared by the sync managers.

Owns:
- one fetch-reconcile-notify cycle (``run_once``), single-flighted so
  concurrent callers share one in-flight request
- the background task that sleeps ``_interval(last_duration)`` between cycles
- stop handling: a stop request never interrupts a cycle in progress
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic

from qbitsync.state.store import SnapshotStore, TDelta, TSnapshot

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyncResult:
    """Outcome of one sync cycle."""

    fetched: bool
    duration: float
    error: Exception | None = None


class PollLoop(Generic[TSnapshot, TDelta]):
    """Base class for a store fed by a polled sync endpoint."""

    def __init__(
        self,
        store: SnapshotStore[TSnapshot, TDelta],
        *,
        auto_start: bool,
        on_update: Callable[[Any], None] | None,
        on_error: Callable[[Exception], None] | None,
        name: str,
    ) -> None:
        self._store = store
        self._auto_start = auto_start
        self._on_update = on_update
        self._on_error = on_error
        self._name = name
        self._inflight: asyncio.Future[SyncResult] | None = None
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    async def _fetch(self, cursor: int) -> Any:
        raise NotImplementedError

    def _parse(self, raw: Any) -> TDelta:
        raise NotImplementedError

    def _interval(self, last_duration: float) -> float:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    async def _cycle(self) -> SyncResult:
        loop = asyncio.get_running_loop()
        cursor = self._store.rid
        started = time.monotonic()
        duration: float | None = None
        try:
            raw = await self._fetch(cursor)
            duration = time.monotonic() - started
            delta = self._parse(raw)
            await loop.run_in_executor(None, functools.partial(self._store.apply, delta, duration=duration))
        except Exception as exc:
            if duration is None:
                duration = time.monotonic() - started
            _logger.debug("%s sync failed after %.3fs (rid=%s)", self._name, duration, cursor, exc_info=True)
            await loop.run_in_executor(None, functools.partial(self._store.record_failure, exc, duration=duration))
            self._notify(self._on_error, exc)
            return SyncResult(fetched=False, duration=duration, error=exc)

        _logger.debug("%s sync rid=%s -> %s in %.3fs", self._name, cursor, delta.rid, duration)
        if self._on_update is not None:
            self._notify(self._on_update, self._store.snapshot())
        return SyncResult(fetched=True, duration=duration)

    def _notify(self, callback: Callable[[Any], None] | None, value: Any) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            _logger.warning("%s sync callback failed", self._name, exc_info=True)

    def _clear_inflight(self, future: asyncio.Future[SyncResult]) -> None:
        if self._inflight is future:
            self._inflight = None

    async def run_once(self) -> SyncResult:
        """Run one cycle, or join the cycle already in flight.

        Failures are reported through ``on_error`` and the returned result;
        they are never raised.
        """
        future = self._inflight
        if future is None:
            future = asyncio.ensure_future(self._cycle())
            self._inflight = future
            future.add_done_callback(self._clear_inflight)
        return await asyncio.shield(future)

    async def sync(self) -> None:
        """Run (or join) one cycle and raise its error, if any."""
        result = await self.run_once()
        if result.error is not None:
            raise result.error

    # ------------------------------------------------------------------
    # Background loop
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Perform the initial sync, then start polling when ``auto_start`` is set."""
        await self.sync()
        if self._auto_start:
            self.start_polling()

    def start_polling(self) -> None:
        """Start the background loop.  No-op when it is already running."""
        if self.is_running:
            return
        stop_event = asyncio.Event()
        self._stop_event = stop_event
        self._task = asyncio.get_running_loop().create_task(self._poll(stop_event), name=f"{self._name}-poll")

    async def stop(self) -> None:
        """Stop polling after the cycle in progress, if any, completes.

        Safe to call before ``start`` and more than once.  A restart issued
        while this call is waiting gets its own worker and stop signal.
        """
        self._stop_event.set()
        task = self._task
        self._task = None
        if task is None or task is asyncio.current_task():
            return
        await task

    @staticmethod
    async def _wait_for_stop(stop_event: asyncio.Event, timeout: float) -> bool:
        try:
            await asyncio.wait_for(stop_event.wait(), timeout)
        except TimeoutError:
            return False
        return True

    async def _poll(self, stop_event: asyncio.Event) -> None:
        _logger.debug("%s polling started", self._name)
        last_duration = self._store.last_sync_duration
        while not stop_event.is_set():
            interval = self._interval(last_duration)
            if await self._wait_for_stop(stop_event, interval):
                break
            result = await self.run_once()
            last_duration = result.duration
        _logger.debug("%s polling stopped", self._name)

    async def __aenter__(self) -> PollLoop[TSnapshot, TDelta]:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
