"""Torrent peer records and the peers snapshot."""

from __future__ import annotations

from pydantic import Field

from qbitsync.models._base import QbitBaseModel


class TorrentPeer(QbitBaseModel):
    """A peer connected for a torrent, keyed by ``"ip:port"``."""

    ip: str = ""
    port: int = 0
    connection: str = ""
    flags: str = ""
    flags_desc: str = ""
    client: str = ""
    peer_id_client: str = ""
    files: str = ""
    country: str = ""
    country_code: str = ""
    dl_speed: int = 0
    up_speed: int = 0
    progress: float = 0.0
    relevance: float = 0.0
    downloaded: int = 0
    uploaded: int = 0


class TorrentPeers(QbitBaseModel):
    """Reconstructed ``sync/torrentPeers`` state for one torrent."""

    rid: int = 0
    full_update: bool = False
    show_flags: bool = False
    peers: dict[str, TorrentPeer] = Field(default_factory=dict)
    peers_removed: list[str] = Field(default_factory=list)
