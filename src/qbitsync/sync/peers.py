"""Peer synchronization for a single torrent."""

from __future__ import annotations

from typing import Any

from qbitsync.config import PeerSyncOptions
from qbitsync.ingestion.delta import TorrentPeersDelta
from qbitsync.models.peer import TorrentPeer, TorrentPeers
from qbitsync.state.store import PeerStore
from qbitsync.sync.loop import PollLoop
from qbitsync.transport import Transport


class PeerSyncManager(PollLoop[TorrentPeers, TorrentPeersDelta]):
    """Polls ``sync/torrentPeers`` for one torrent on a fixed interval."""

    def __init__(
        self,
        transport: Transport,
        torrent_hash: str,
        options: PeerSyncOptions | None = None,
    ) -> None:
        self._options = options or PeerSyncOptions()
        self._peer_store = PeerStore()
        super().__init__(
            self._peer_store,
            auto_start=self._options.auto_start,
            on_update=self._options.on_update,
            on_error=self._options.on_error,
            name=f"peers[{torrent_hash}]",
        )
        self._transport = transport
        self._hash = torrent_hash

    @property
    def torrent_hash(self) -> str:
        return self._hash

    @property
    def store(self) -> PeerStore:
        return self._peer_store

    async def _fetch(self, cursor: int) -> Any:
        return await self._transport.fetch_torrent_peers(self._hash, cursor)

    def _parse(self, raw: Any) -> TorrentPeersDelta:
        return TorrentPeersDelta.from_raw(raw)

    def _interval(self, last_duration: float) -> float:
        return self._options.sync_interval

    def snapshot(self) -> TorrentPeers | None:
        return self._peer_store.snapshot()

    def peers(self) -> dict[str, TorrentPeer]:
        return self._peer_store.peers()

    def peer(self, key: str) -> TorrentPeer | None:
        return self._peer_store.peer(key)

    def peer_count(self) -> int:
        return self._peer_store.peer_count()
