"""qbitsync - Incremental state synchronization for the qBittorrent WebUI sync API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("qbitsync")
except PackageNotFoundError:
    __version__ = "0+local"
from qbitsync.config import PeerSyncOptions, SyncOptions, TransportConfig
from qbitsync.exceptions import QbitConfigError, QbitDeltaError, QbitSyncError, QbitTransportError
from qbitsync.ingestion.delta import MainDataDelta, TorrentPeersDelta
from qbitsync.models import (
    Category,
    MainData,
    ServerState,
    Torrent,
    TorrentPeer,
    TorrentPeers,
    TorrentState,
    TorrentTracker,
)
from qbitsync.state.filter import TorrentFilter, TorrentFilterOptions
from qbitsync.state.store import EntityKind, MainDataStore, PeerStore, apply_delta
from qbitsync.sync.loop import SyncResult
from qbitsync.sync.manager import SyncManager
from qbitsync.sync.peers import PeerSyncManager
from qbitsync.transport import HttpTransport, Transport

__all__ = [
    "__version__",
    "Category",
    "EntityKind",
    "HttpTransport",
    "MainData",
    "MainDataDelta",
    "MainDataStore",
    "PeerStore",
    "PeerSyncManager",
    "PeerSyncOptions",
    "QbitConfigError",
    "QbitDeltaError",
    "QbitSyncError",
    "QbitTransportError",
    "ServerState",
    "SyncManager",
    "SyncOptions",
    "SyncResult",
    "Torrent",
    "TorrentFilter",
    "TorrentFilterOptions",
    "TorrentPeer",
    "TorrentPeers",
    "TorrentPeersDelta",
    "TorrentState",
    "TorrentTracker",
    "Transport",
    "TransportConfig",
    "apply_delta",
]
