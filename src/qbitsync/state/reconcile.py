"""Delta reconciliation.

Pure functions turning ``(current snapshot, delta)`` into the next snapshot.
The current snapshot is never modified: containers are copied and changed
records are replaced, so a reader holding the previous snapshot keeps a
consistent view.  Atomic publication is the store's job.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from qbitsync.ingestion.delta import MainDataDelta, TorrentPeersDelta
from qbitsync.models._base import QbitBaseModel
from qbitsync.models.category import Category
from qbitsync.models.maindata import MainData
from qbitsync.models.peer import TorrentPeer, TorrentPeers
from qbitsync.models.torrent import Torrent
from qbitsync.state.merge import Patch, TRecord, merge_record


def _new_torrent(key: str) -> Torrent:
    return Torrent(hash=key)


def _new_category(key: str) -> Category:
    return Category(name=key)


def _new_peer(_key: str) -> TorrentPeer:
    return TorrentPeer()


def _merge_collection(
    target: dict[str, TRecord],
    patches: dict[str, Patch],
    factory: Callable[[str], TRecord],
    identity: str | None,
) -> None:
    for key, patch in patches.items():
        existing = target.get(key)
        if existing is None:
            existing = factory(key)
        merged = merge_record(existing, patch)
        if identity is not None and getattr(merged, identity) != key:
            merged = merged.model_copy(update={identity: key})
        target[key] = merged


def _remove_keys(target: dict[str, QbitBaseModel] | dict[str, list[str]], keys: Iterable[str]) -> None:
    for key in keys:
        target.pop(key, None)


def _merge_tags(current: Iterable[str], added: Iterable[str]) -> list[str]:
    return sorted(set(current) | set(added))


def reconcile_maindata(
    current: MainData | None,
    delta: MainDataDelta,
    *,
    retain_removed: bool = False,
) -> MainData:
    """Return the snapshot that results from applying *delta* to *current*.

    A full update builds a fresh snapshot from the delta alone.  Otherwise
    each present collection is merged record by record, deletion lists are
    applied (unless *retain_removed*), and ``rid`` is taken from the delta
    unconditionally.
    """
    if delta.full_update or current is None:
        base = MainData()
    else:
        base = current

    torrents = dict(base.torrents)
    categories = dict(base.categories)
    trackers = dict(base.trackers)
    tags = list(base.tags)
    server_state = base.server_state

    if delta.torrents is not None:
        _merge_collection(torrents, delta.torrents, _new_torrent, "hash")
    if delta.categories is not None:
        _merge_collection(categories, delta.categories, _new_category, "name")
    if delta.trackers is not None:
        for url, hashes in delta.trackers.items():
            trackers[url] = list(hashes)
    if delta.tags is not None:
        tags = _merge_tags(tags, delta.tags)
    if delta.server_state is not None:
        server_state = merge_record(server_state, delta.server_state)

    if delta.full_update:
        # Deletion bookkeeping starts over with a full replacement.
        removed: dict[str, list[str]] = {
            "torrents_removed": [],
            "categories_removed": [],
            "tags_removed": [],
            "trackers_removed": [],
        }
    else:
        removed = {
            "torrents_removed": list(delta.torrents_removed),
            "categories_removed": list(delta.categories_removed),
            "tags_removed": list(delta.tags_removed),
            "trackers_removed": list(delta.trackers_removed),
        }
        if not retain_removed:
            _remove_keys(torrents, delta.torrents_removed)
            _remove_keys(categories, delta.categories_removed)
            _remove_keys(trackers, delta.trackers_removed)
            if delta.tags_removed:
                dropped = set(delta.tags_removed)
                tags = [tag for tag in tags if tag not in dropped]

    return MainData(
        rid=delta.rid,
        full_update=delta.full_update,
        torrents=torrents,
        categories=categories,
        tags=tags,
        trackers=trackers,
        server_state=server_state,
        **removed,
    )


def reconcile_peers(current: TorrentPeers | None, delta: TorrentPeersDelta) -> TorrentPeers:
    """Return the peers snapshot that results from applying *delta*."""
    if delta.full_update or current is None:
        base = TorrentPeers()
    else:
        base = current

    peers = dict(base.peers)
    if delta.peers is not None:
        _merge_collection(peers, delta.peers, _new_peer, None)

    peers_removed: list[str] = []
    if not delta.full_update:
        peers_removed = list(delta.peers_removed)
        _remove_keys(peers, delta.peers_removed)

    show_flags = base.show_flags if delta.show_flags is None else delta.show_flags

    return TorrentPeers(
        rid=delta.rid,
        full_update=delta.full_update,
        show_flags=show_flags,
        peers=peers,
        peers_removed=peers_removed,
    )
