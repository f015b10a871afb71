from __future__ import annotations

import asyncio
from typing import Any

import pytest

from qbitsync.config import PeerSyncOptions
from qbitsync.exceptions import QbitTransportError
from qbitsync.models.peer import TorrentPeers
from qbitsync.sync.peers import PeerSyncManager


class _PeerTransport:
    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, int]] = []

    async def fetch_maindata(self, rid: int) -> Any:  # pragma: no cover
        raise NotImplementedError

    async def fetch_torrent_peers(self, torrent_hash: str, rid: int) -> Any:
        self.calls.append((torrent_hash, rid))
        item = self.responses.pop(0) if self.responses else {"rid": rid + 1}
        if isinstance(item, Exception):
            raise item
        return item


@pytest.mark.asyncio
async def test_peer_sync_passes_hash_and_cursor() -> None:
    transport = _PeerTransport(
        [
            {
                "rid": 3,
                "full_update": True,
                "show_flags": True,
                "peers": {"10.0.0.1:6881": {"ip": "10.0.0.1", "port": 6881, "client": "qBittorrent", "dl_speed": 10}},
            },
            {"rid": 4, "peers": {"10.0.0.1:6881": {"dl_speed": 20}}},
        ]
    )
    manager = PeerSyncManager(transport, "abc")

    await manager.sync()
    await manager.sync()

    assert transport.calls == [("abc", 0), ("abc", 3)]
    peer = manager.peer("10.0.0.1:6881")
    assert peer is not None
    assert peer.dl_speed == 20
    assert peer.client == "qBittorrent"
    assert manager.peer_count() == 1
    assert manager.torrent_hash == "abc"


@pytest.mark.asyncio
async def test_peer_update_callback_and_removal() -> None:
    updates: list[TorrentPeers] = []
    transport = _PeerTransport(
        [
            {"rid": 1, "full_update": True, "peers": {"a:1": {"ip": "a"}, "b:2": {"ip": "b"}}},
            {"rid": 2, "peers_removed": ["a:1"]},
        ]
    )
    manager = PeerSyncManager(transport, "abc", PeerSyncOptions(on_update=updates.append))

    await manager.run_once()
    await manager.run_once()

    assert list(manager.peers()) == ["b:2"]
    assert [u.rid for u in updates] == [1, 2]
    assert updates[-1].peers_removed == ["a:1"]


@pytest.mark.asyncio
async def test_peer_errors_are_reported() -> None:
    errors: list[Exception] = []
    transport = _PeerTransport([QbitTransportError("HTTP 404", status_code=404)])
    manager = PeerSyncManager(transport, "missing", PeerSyncOptions(on_error=errors.append))

    result = await manager.run_once()

    assert result.fetched is False
    assert isinstance(errors[0], QbitTransportError)
    assert manager.snapshot() is None
    assert manager.peers() == {}


@pytest.mark.asyncio
async def test_peer_polling_uses_fixed_interval() -> None:
    transport = _PeerTransport([])
    manager = PeerSyncManager(transport, "abc", PeerSyncOptions(sync_interval=0.01))

    assert manager._interval(100.0) == 0.01

    manager.start_polling()
    while len(transport.calls) < 2:
        await asyncio.sleep(0.005)
    await manager.stop()

    assert not manager.is_running
    assert transport.calls[:2] == [("abc", 0), ("abc", 1)]
