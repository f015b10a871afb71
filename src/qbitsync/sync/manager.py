"""Main data synchronization manager."""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Any

from qbitsync.config import SyncOptions
from qbitsync.ingestion.delta import MainDataDelta
from qbitsync.models.category import Category
from qbitsync.models.maindata import MainData
from qbitsync.models.server_state import ServerState
from qbitsync.models.torrent import Torrent
from qbitsync.state.filter import TorrentFilterOptions
from qbitsync.state.store import EntityKind, MainDataStore
from qbitsync.sync.interval import next_interval, stale_threshold
from qbitsync.sync.loop import PollLoop
from qbitsync.transport import Transport

_logger = logging.getLogger(__name__)


class SyncManager(PollLoop[MainData, MainDataDelta]):
    """Keeps a consistent view of the client state across partial updates.

    Usage::

        async with aiohttp.ClientSession() as session:
            # session must already carry a valid WebUI SID cookie
            transport = HttpTransport(TransportConfig(base_url=url), session)
            manager = SyncManager(transport, SyncOptions(auto_start=True))
            async with manager:
                torrents = manager.torrents()

    All accessors are thread-safe and return deep copies.
    """

    def __init__(
        self,
        transport: Transport,
        options: SyncOptions | None = None,
        *,
        rng: random.Random | None = None,
        store: MainDataStore | None = None,
    ) -> None:
        self._options = options or SyncOptions()
        self._maindata_store = store or MainDataStore(retain_removed=self._options.retain_removed_data)
        super().__init__(
            self._maindata_store,
            auto_start=self._options.auto_start,
            on_update=self._options.on_update,
            on_error=self._options.on_error,
            name="maindata",
        )
        self._transport = transport
        self._rng = rng or random.Random()

    @property
    def options(self) -> SyncOptions:
        return self._options

    @property
    def store(self) -> MainDataStore:
        return self._maindata_store

    async def _fetch(self, cursor: int) -> Any:
        return await self._transport.fetch_maindata(cursor)

    def _parse(self, raw: Any) -> MainDataDelta:
        return MainDataDelta.from_raw(raw)

    def _interval(self, last_duration: float) -> float:
        return self.next_interval(last_duration)

    def next_interval(self, last_duration: float) -> float:
        """Wait before the next cycle given the last round trip in seconds."""
        return next_interval(last_duration, self._options, self._rng)

    async def ensure_fresh(self) -> None:
        """Sync now if there is no data yet or the data is stale.

        Concurrent callers share a single request.  Errors are reported the
        same way as for polled cycles and are not raised.
        """
        store = self._maindata_store
        last_sync = store.last_sync
        if last_sync is not None:
            age = (datetime.now(last_sync.tzinfo) - last_sync).total_seconds()
            if age < stale_threshold(store.last_sync_duration, self._options):
                return
        _logger.debug("maindata stale (last_sync=%s), syncing", last_sync)
        await self.run_once()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def snapshot(self) -> MainData | None:
        return self._maindata_store.snapshot()

    @property
    def rid(self) -> int:
        return self._maindata_store.rid

    def torrent(self, torrent_hash: str) -> Torrent | None:
        return self._maindata_store.torrent(torrent_hash)

    def torrents(self, options: TorrentFilterOptions | None = None) -> list[Torrent]:
        return self._maindata_store.torrents(options)

    def torrent_map(self, options: TorrentFilterOptions | None = None) -> dict[str, Torrent]:
        return self._maindata_store.torrent_map(options)

    def categories(self) -> dict[str, Category]:
        return self._maindata_store.categories()

    def tags(self) -> list[str]:
        return self._maindata_store.tags()

    def trackers(self) -> dict[str, list[str]]:
        return self._maindata_store.trackers()

    def server_state(self) -> ServerState:
        return self._maindata_store.server_state()

    def entity(self, kind: EntityKind | str, key: str) -> Any | None:
        return self._maindata_store.entity(kind, key)

    def entities(self, kind: EntityKind | str) -> dict[str, Any]:
        return self._maindata_store.entities(kind)

    @property
    def last_sync(self) -> datetime | None:
        return self._maindata_store.last_sync

    @property
    def last_sync_duration(self) -> float:
        return self._maindata_store.last_sync_duration

    @property
    def last_error(self) -> Exception | None:
        return self._maindata_store.last_error
