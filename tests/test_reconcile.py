"""Tests for delta parsing and reconciliation."""

from __future__ import annotations

from typing import Any

import pytest

from qbitsync.exceptions import QbitDeltaError
from qbitsync.ingestion.delta import MainDataDelta, TorrentPeersDelta
from qbitsync.models.maindata import MainData
from qbitsync.models.torrent import Torrent, TorrentState
from qbitsync.state.reconcile import reconcile_maindata, reconcile_peers
from qbitsync.state.store import MainDataStore, apply_delta


def _apply(current: MainData | None, raw: dict[str, Any], **kwargs: Any) -> MainData:
    return reconcile_maindata(current, MainDataDelta.from_raw(raw), **kwargs)


FULL: dict[str, Any] = {
    "rid": 1,
    "full_update": True,
    "torrents": {
        "aaa": {"name": "Alpha", "progress": 0.5, "size": 100, "state": "downloading", "category": "linux"},
        "bbb": {"name": "Bravo", "progress": 1, "size": 200, "state": "uploading", "tags": "x, y"},
    },
    "categories": {"linux": {"name": "linux", "savePath": "/data/linux"}},
    "tags": ["y", "x", "x"],
    "trackers": {"udp://t.example:1337": ["aaa", "bbb"]},
    "server_state": {"connection_status": "connected", "dht_nodes": 300, "dl_info_speed": 1024},
}


# ------------------------------------------------------------------
# Delta parsing
# ------------------------------------------------------------------


class TestDeltaParsing:
    def test_absent_collections_are_none(self) -> None:
        delta = MainDataDelta.from_raw({"rid": 5})

        assert delta.torrents is None
        assert delta.categories is None
        assert delta.tags is None
        assert delta.trackers is None
        assert delta.server_state is None
        assert delta.torrents_removed == []
        assert delta.full_update is False

    def test_empty_collection_is_not_absent(self) -> None:
        assert MainDataDelta.from_raw({"rid": 5, "torrents": {}}).torrents == {}

    def test_patch_holds_only_present_fields(self) -> None:
        delta = MainDataDelta.from_raw({"rid": 2, "torrents": {"aaa": {"progress": 0.75, "junk": 1}}})

        assert delta.torrents == {"aaa": {"progress": 0.75}}

    def test_non_object_record_is_skipped(self) -> None:
        delta = MainDataDelta.from_raw({"rid": 2, "torrents": {"aaa": "oops", "bbb": {"size": 1}}})

        assert delta.torrents == {"bbb": {"size": 1}}

    def test_non_object_payload_raises(self) -> None:
        with pytest.raises(QbitDeltaError):
            MainDataDelta.from_raw(["rid", 1])

    @pytest.mark.parametrize("raw", [{}, {"rid": "abc"}, {"rid": None}])
    def test_unusable_rid_raises(self, raw: dict[str, Any]) -> None:
        with pytest.raises(QbitDeltaError):
            MainDataDelta.from_raw(raw)

    def test_removed_lists_ignore_non_strings(self) -> None:
        delta = MainDataDelta.from_raw({"rid": 3, "torrents_removed": ["aaa", 7], "tags_removed": "x"})

        assert delta.torrents_removed == ["aaa"]
        assert delta.tags_removed == []


# ------------------------------------------------------------------
# Reconciliation
# ------------------------------------------------------------------


class TestReconcileMainData:
    def test_scenario_full_then_partial(self) -> None:
        store = MainDataStore()

        apply_delta(
            store,
            MainDataDelta.from_raw(
                {"rid": 1, "full_update": True, "torrents": {"abc": {"name": "T", "progress": 0.5}}}
            ),
        )
        snapshot = store.snapshot()
        assert snapshot is not None
        assert list(snapshot.torrents) == ["abc"]
        assert snapshot.torrents["abc"].name == "T"
        assert snapshot.torrents["abc"].progress == 0.5
        assert snapshot.rid == 1

        apply_delta(
            store,
            MainDataDelta.from_raw({"rid": 2, "full_update": False, "torrents": {"abc": {"progress": 0.75}}}),
        )
        snapshot = store.snapshot()
        assert snapshot is not None
        assert snapshot.torrents["abc"].progress == 0.75
        assert snapshot.torrents["abc"].name == "T"
        assert snapshot.rid == 2

    def test_full_replacement_is_idempotent(self) -> None:
        store = MainDataStore()
        delta = MainDataDelta.from_raw(FULL)

        store.apply(delta)
        first = store.snapshot()
        store.apply(delta)
        second = store.snapshot()

        assert first == second

    def test_full_update_seeds_from_delta(self) -> None:
        data = _apply(None, FULL)

        assert data.full_update is True
        assert data.torrents["aaa"] == Torrent(
            hash="aaa", name="Alpha", progress=0.5, size=100, state=TorrentState.DOWNLOADING, category="linux"
        )
        assert data.tags == ["x", "y"]
        assert data.categories["linux"].save_path == "/data/linux"
        assert data.trackers == {"udp://t.example:1337": ["aaa", "bbb"]}
        assert data.server_state.dht_nodes == 300

    def test_full_update_discards_previous_state(self) -> None:
        data = _apply(None, FULL)
        data = _apply(data, {"rid": 9, "full_update": True, "torrents": {"ccc": {"name": "Charlie"}}})

        assert list(data.torrents) == ["ccc"]
        assert data.categories == {}
        assert data.tags == []
        assert data.server_state.dht_nodes == 0

    def test_full_update_resets_deletion_bookkeeping(self) -> None:
        data = _apply(_apply(None, FULL), {"rid": 2, "torrents_removed": ["aaa"]})
        assert data.torrents_removed == ["aaa"]

        data = _apply(data, FULL)

        assert data.torrents_removed == []

    def test_new_entity_gets_defaults_for_unmentioned_fields(self) -> None:
        data = _apply(_apply(None, FULL), {"rid": 2, "torrents": {"new": {"name": "Fresh", "dlspeed": 10}}})

        torrent = data.torrents["new"]
        assert torrent == Torrent(hash="new", name="Fresh", dl_speed=10)

    def test_partial_delta_on_empty_store(self) -> None:
        data = _apply(None, {"rid": 4, "torrents": {"abc": {"progress": 0.1}}})

        assert data.torrents["abc"].progress == 0.1
        assert data.torrents["abc"].hash == "abc"
        assert data.categories == {}

    def test_identity_field_follows_key(self) -> None:
        data = _apply(None, {"rid": 1, "full_update": True, "torrents": {"abc": {"hash": "zzz"}}})

        assert data.torrents["abc"].hash == "abc"

    def test_absent_collection_leaves_state_unchanged(self) -> None:
        before = _apply(None, FULL)
        after = _apply(before, {"rid": 2})

        assert after.torrents == before.torrents
        assert after.categories == before.categories
        assert after.tags == before.tags
        assert after.server_state == before.server_state

    def test_previous_snapshot_is_not_modified(self) -> None:
        before = _apply(None, FULL)
        _apply(before, {"rid": 2, "torrents": {"aaa": {"progress": 0.9}}, "torrents_removed": ["bbb"]})

        assert before.torrents["aaa"].progress == 0.5
        assert "bbb" in before.torrents

    def test_deletion_is_idempotent(self) -> None:
        data = _apply(None, FULL)
        once = _apply(data, {"rid": 2, "torrents_removed": ["aaa"]})
        twice = _apply(once, {"rid": 3, "torrents_removed": ["aaa", "does-not-exist"]})

        assert list(once.torrents) == ["bbb"]
        assert twice.torrents == once.torrents

    def test_category_and_tracker_removal(self) -> None:
        data = _apply(
            _apply(None, FULL),
            {"rid": 2, "categories_removed": ["linux", "missing"], "trackers_removed": ["udp://t.example:1337"]},
        )

        assert data.categories == {}
        assert data.trackers == {}

    def test_tags_are_merged_as_sorted_set(self) -> None:
        data = _apply(_apply(None, FULL), {"rid": 2, "tags": ["a", "y", "b"]})

        assert data.tags == ["a", "b", "x", "y"]

    def test_tags_removed(self) -> None:
        data = _apply(_apply(None, FULL), {"rid": 2, "tags_removed": ["x", "nope"]})

        assert data.tags == ["y"]

    def test_tracker_entry_is_replaced(self) -> None:
        data = _apply(_apply(None, FULL), {"rid": 2, "trackers": {"udp://t.example:1337": ["bbb"]}})

        assert data.trackers == {"udp://t.example:1337": ["bbb"]}

    def test_server_state_is_merged_field_by_field(self) -> None:
        data = _apply(_apply(None, FULL), {"rid": 2, "server_state": {"dl_info_speed": 0}})

        assert data.server_state.dl_info_speed == 0
        assert data.server_state.dht_nodes == 300
        assert data.server_state.connection_status == "connected"

    def test_rid_is_taken_unconditionally(self) -> None:
        data = _apply(_apply(None, {"rid": 10, "full_update": True}), {"rid": 3})

        assert data.rid == 3

    def test_retain_removed_records_without_applying(self) -> None:
        data = _apply(
            _apply(None, FULL),
            {"rid": 2, "torrents_removed": ["aaa"], "tags_removed": ["x"], "categories_removed": ["linux"]},
            retain_removed=True,
        )

        assert "aaa" in data.torrents
        assert data.tags == ["x", "y"]
        assert "linux" in data.categories
        assert data.torrents_removed == ["aaa"]
        assert data.tags_removed == ["x"]
        assert data.categories_removed == ["linux"]

    def test_category_key_wins_over_wire_name(self) -> None:
        data = _apply(None, {"rid": 1, "categories": {"tv": {"savePath": "/tv"}}})

        assert data.categories["tv"].name == "tv"
        assert data.categories["tv"].save_path == "/tv"


class TestReconcilePeers:
    FULL_PEERS: dict[str, Any] = {
        "rid": 1,
        "full_update": True,
        "show_flags": True,
        "peers": {
            "10.0.0.1:6881": {"ip": "10.0.0.1", "port": 6881, "client": "qBittorrent", "progress": 0.4},
            "10.0.0.2:6881": {"ip": "10.0.0.2", "port": 6881, "client": "Transmission", "progress": 1.0},
        },
    }

    def test_partial_update_merges_fields(self) -> None:
        peers = reconcile_peers(None, TorrentPeersDelta.from_raw(self.FULL_PEERS))
        peers = reconcile_peers(
            peers,
            TorrentPeersDelta.from_raw({"rid": 2, "peers": {"10.0.0.1:6881": {"dl_speed": 0, "progress": 0.6}}}),
        )

        peer = peers.peers["10.0.0.1:6881"]
        assert peer.progress == 0.6
        assert peer.dl_speed == 0
        assert peer.client == "qBittorrent"
        assert peers.show_flags is True
        assert peers.rid == 2

    def test_peers_removed(self) -> None:
        peers = reconcile_peers(None, TorrentPeersDelta.from_raw(self.FULL_PEERS))
        peers = reconcile_peers(peers, TorrentPeersDelta.from_raw({"rid": 2, "peers_removed": ["10.0.0.2:6881"]}))

        assert list(peers.peers) == ["10.0.0.1:6881"]
        assert peers.peers_removed == ["10.0.0.2:6881"]

    def test_full_update_replaces_peers(self) -> None:
        peers = reconcile_peers(None, TorrentPeersDelta.from_raw(self.FULL_PEERS))
        peers = reconcile_peers(
            peers,
            TorrentPeersDelta.from_raw({"rid": 7, "full_update": True, "peers": {"10.0.0.3:1": {"ip": "10.0.0.3"}}}),
        )

        assert list(peers.peers) == ["10.0.0.3:1"]
        assert peers.full_update is True
