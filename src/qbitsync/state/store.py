"""Snapshot stores.

A store is the only owner of the canonical snapshot.  Reconciliation runs
under the write lock, so readers observe either the pre-delta or the
post-delta snapshot in full.  Every accessor returns an independent deep
copy; callers may mutate what they get back freely.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Generic, TypeVar

from qbitsync.ingestion.delta import MainDataDelta, TorrentPeersDelta
from qbitsync.models.category import Category
from qbitsync.models.maindata import MainData
from qbitsync.models.peer import TorrentPeer, TorrentPeers
from qbitsync.models.server_state import ServerState
from qbitsync.models.torrent import Torrent
from qbitsync.state.filter import TorrentFilterOptions, select_torrents
from qbitsync.state.lock import ReadWriteLock
from qbitsync.state.reconcile import reconcile_maindata, reconcile_peers

TSnapshot = TypeVar("TSnapshot", MainData, TorrentPeers)
TDelta = TypeVar("TDelta", MainDataDelta, TorrentPeersDelta)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EntityKind(StrEnum):
    """Keyed collections of :class:`MainData`."""

    TORRENTS = "torrents"
    CATEGORIES = "categories"
    TRACKERS = "trackers"


class SnapshotStore(Generic[TSnapshot, TDelta]):
    """Lock-guarded snapshot plus sync bookkeeping."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = ReadWriteLock()
        self._data: TSnapshot | None = None
        self._last_sync: datetime | None = None
        self._last_sync_duration: float = 0.0
        self._last_error: Exception | None = None

    def _reconcile(self, current: TSnapshot | None, delta: TDelta) -> TSnapshot:
        raise NotImplementedError

    def apply(self, delta: TDelta, *, duration: float | None = None) -> None:
        """Reconcile *delta* and publish the result atomically."""
        with self._lock.write():
            self._data = self._reconcile(self._data, delta)
            self._last_sync = self._clock()
            if duration is not None:
                self._last_sync_duration = duration
            self._last_error = None

    def record_failure(self, error: Exception, *, duration: float) -> None:
        """Remember a failed cycle; the snapshot itself is left untouched."""
        with self._lock.write():
            self._last_sync_duration = duration
            self._last_error = error

    def snapshot(self) -> TSnapshot | None:
        """Deep copy of the current snapshot, ``None`` before the first sync."""
        with self._lock.read():
            return copy.deepcopy(self._data)

    @property
    def has_data(self) -> bool:
        with self._lock.read():
            return self._data is not None

    @property
    def rid(self) -> int:
        with self._lock.read():
            return self._data.rid if self._data is not None else 0

    @property
    def last_sync(self) -> datetime | None:
        """Time of the last successful sync."""
        with self._lock.read():
            return self._last_sync

    @property
    def last_sync_duration(self) -> float:
        """Round-trip seconds of the last sync attempt, successful or not."""
        with self._lock.read():
            return self._last_sync_duration

    @property
    def last_error(self) -> Exception | None:
        """Error of the last sync attempt, ``None`` when it succeeded."""
        with self._lock.read():
            return self._last_error


class MainDataStore(SnapshotStore[MainData, MainDataDelta]):
    """Store for the ``sync/maindata`` snapshot.

    When ``retain_removed`` is set, deletion lists are recorded on the
    snapshot but the listed entries are kept.
    """

    def __init__(self, *, retain_removed: bool = False, clock: Callable[[], datetime] = _utcnow) -> None:
        super().__init__(clock=clock)
        self._retain_removed = retain_removed

    def _reconcile(self, current: MainData | None, delta: MainDataDelta) -> MainData:
        return reconcile_maindata(current, delta, retain_removed=self._retain_removed)

    def torrent(self, torrent_hash: str) -> Torrent | None:
        with self._lock.read():
            if self._data is None:
                return None
            return copy.deepcopy(self._data.torrents.get(torrent_hash))

    def torrents(self, options: TorrentFilterOptions | None = None) -> list[Torrent]:
        with self._lock.read():
            if self._data is None:
                return []
            selected = select_torrents(self._data.torrents.values(), options or TorrentFilterOptions())
            return copy.deepcopy(selected)

    def torrent_map(self, options: TorrentFilterOptions | None = None) -> dict[str, Torrent]:
        return {torrent.hash: torrent for torrent in self.torrents(options)}

    def categories(self) -> dict[str, Category]:
        with self._lock.read():
            if self._data is None:
                return {}
            return copy.deepcopy(self._data.categories)

    def tags(self) -> list[str]:
        with self._lock.read():
            if self._data is None:
                return []
            return list(self._data.tags)

    def trackers(self) -> dict[str, list[str]]:
        with self._lock.read():
            if self._data is None:
                return {}
            return copy.deepcopy(self._data.trackers)

    def server_state(self) -> ServerState:
        with self._lock.read():
            if self._data is None:
                return ServerState()
            return self._data.server_state.model_copy(deep=True)

    @staticmethod
    def _collection(data: MainData, kind: EntityKind) -> dict[str, Any]:
        collections: dict[EntityKind, dict[str, Any]] = {
            EntityKind.TORRENTS: data.torrents,
            EntityKind.CATEGORIES: data.categories,
            EntityKind.TRACKERS: data.trackers,
        }
        return collections[kind]

    def entity(self, kind: EntityKind | str, key: str) -> Any | None:
        """Deep copy of one entry of a keyed collection, or ``None``."""
        with self._lock.read():
            if self._data is None:
                return None
            return copy.deepcopy(self._collection(self._data, EntityKind(kind)).get(key))

    def entities(self, kind: EntityKind | str) -> dict[str, Any]:
        """Deep copy of a whole keyed collection."""
        with self._lock.read():
            if self._data is None:
                return {}
            return copy.deepcopy(self._collection(self._data, EntityKind(kind)))


class PeerStore(SnapshotStore[TorrentPeers, TorrentPeersDelta]):
    """Store for one torrent's ``sync/torrentPeers`` snapshot."""

    def _reconcile(self, current: TorrentPeers | None, delta: TorrentPeersDelta) -> TorrentPeers:
        return reconcile_peers(current, delta)

    def peers(self) -> dict[str, TorrentPeer]:
        with self._lock.read():
            if self._data is None:
                return {}
            return copy.deepcopy(self._data.peers)

    def peer(self, key: str) -> TorrentPeer | None:
        with self._lock.read():
            if self._data is None:
                return None
            return copy.deepcopy(self._data.peers.get(key))

    def peer_count(self) -> int:
        with self._lock.read():
            return len(self._data.peers) if self._data is not None else 0


def apply_delta(store: SnapshotStore[Any, Any], delta: MainDataDelta | TorrentPeersDelta) -> None:
    """Apply *delta* to *store* atomically."""
    store.apply(delta)
