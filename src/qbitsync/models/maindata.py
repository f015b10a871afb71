"""The reconstructed ``sync/maindata`` snapshot."""

from __future__ import annotations

from pydantic import Field

from qbitsync.models._base import QbitBaseModel
from qbitsync.models.category import Category
from qbitsync.models.server_state import ServerState
from qbitsync.models.torrent import Torrent


class MainData(QbitBaseModel):
    """Full client state rebuilt from a stream of maindata deltas.

    Parameters
    ----------
    rid : int
        Response id of the last applied delta; the cursor for the next fetch.
    full_update : bool
        Whether the last applied delta replaced the whole state.
    torrents : dict
        Torrents keyed by info-hash.
    categories : dict
        Categories keyed by name.
    tags : list
        Sorted, unique tag names.
    trackers : dict
        Tracker URL to the hashes of torrents using it.
    server_state : ServerState
        Global transfer state.
    torrents_removed, categories_removed, tags_removed, trackers_removed : list
        Deletion lists carried by the last applied delta.
    """

    rid: int = 0
    full_update: bool = False
    torrents: dict[str, Torrent] = Field(default_factory=dict)
    categories: dict[str, Category] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    trackers: dict[str, list[str]] = Field(default_factory=dict)
    server_state: ServerState = Field(default_factory=ServerState)
    torrents_removed: list[str] = Field(default_factory=list)
    categories_removed: list[str] = Field(default_factory=list)
    tags_removed: list[str] = Field(default_factory=list)
    trackers_removed: list[str] = Field(default_factory=list)
