"""Data models for qBittorrent sync state."""

from qbitsync.models._base import QbitBaseModel, QbitEnum
from qbitsync.models.category import Category
from qbitsync.models.maindata import MainData
from qbitsync.models.peer import TorrentPeer, TorrentPeers
from qbitsync.models.server_state import ServerState
from qbitsync.models.torrent import Torrent, TorrentState, TorrentTracker

__all__ = [
    "Category",
    "MainData",
    "QbitBaseModel",
    "QbitEnum",
    "ServerState",
    "Torrent",
    "TorrentPeer",
    "TorrentPeers",
    "TorrentState",
    "TorrentTracker",
]
