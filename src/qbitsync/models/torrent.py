"""Torrent records."""

from __future__ import annotations

from pydantic import Field

from qbitsync.models._base import QbitBaseModel, QbitEnum


class TorrentState(QbitEnum):
    """Torrent state as reported by the WebUI."""

    ERROR = "error"
    MISSING_FILES = "missingFiles"
    UPLOADING = "uploading"
    PAUSED_UP = "pausedUP"
    STOPPED_UP = "stoppedUP"
    QUEUED_UP = "queuedUP"
    STALLED_UP = "stalledUP"
    CHECKING_UP = "checkingUP"
    FORCED_UP = "forcedUP"
    ALLOCATING = "allocating"
    DOWNLOADING = "downloading"
    META_DL = "metaDL"
    PAUSED_DL = "pausedDL"
    STOPPED_DL = "stoppedDL"
    QUEUED_DL = "queuedDL"
    STALLED_DL = "stalledDL"
    CHECKING_DL = "checkingDL"
    FORCED_DL = "forcedDL"
    CHECKING_RESUME_DATA = "checkingResumeData"
    MOVING = "moving"
    UNKNOWN = "unknown"


class TorrentTracker(QbitBaseModel):
    """One tracker entry embedded in a torrent (WebUI 5.1+)."""

    url: str = ""
    # 0 disabled, 1 not contacted, 2 working, 3 updating, 4 not working
    status: int = 0
    num_peers: int = 0
    num_seeds: int = 0
    num_leechers: int = 0
    num_downloaded: int = 0
    message: str = ""


class Torrent(QbitBaseModel):
    """A torrent as held in the synchronized snapshot.

    ``hash`` always equals the key the torrent is stored under.
    """

    added_on: int = 0
    amount_left: int = 0
    auto_managed: bool = False
    availability: float = 0.0
    category: str = ""
    completed: int = 0
    completion_on: int = 0
    content_path: str = ""
    dl_limit: int = 0
    dl_speed: int = 0
    download_path: str = ""
    downloaded: int = 0
    downloaded_session: int = 0
    eta: int = 0
    first_last_piece_prio: bool = False
    force_start: bool = False
    hash: str = ""
    infohash_v1: str = ""
    infohash_v2: str = ""
    last_activity: int = 0
    magnet_uri: str = ""
    max_ratio: float = 0.0
    max_seeding_time: int = 0
    name: str = ""
    num_complete: int = 0
    num_incomplete: int = 0
    num_leechs: int = 0
    num_seeds: int = 0
    priority: int = 0
    progress: float = 0.0
    ratio: float = 0.0
    ratio_limit: float = 0.0
    save_path: str = ""
    seeding_time: int = 0
    seeding_time_limit: int = 0
    seen_complete: int = 0
    sequential_download: bool = False
    size: int = 0
    state: TorrentState = TorrentState.UNKNOWN
    super_seeding: bool = False
    tags: str = ""
    time_active: int = 0
    total_size: int = 0
    tracker: str = ""
    trackers_count: int = 0
    up_limit: int = 0
    uploaded: int = 0
    uploaded_session: int = 0
    up_speed: int = 0
    trackers: list[TorrentTracker] = Field(default_factory=list)
