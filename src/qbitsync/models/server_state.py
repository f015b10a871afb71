"""Global transfer / connection state."""

from __future__ import annotations

from qbitsync.models._base import QbitBaseModel


class ServerState(QbitBaseModel):
    """Aggregate server state carried in ``server_state``.

    Rates are bytes/s, totals are bytes.  Cache figures arrive as
    preformatted strings and are kept verbatim.
    """

    alltime_dl: int = 0
    alltime_ul: int = 0
    average_time_queue: int = 0
    connection_status: str = ""
    dht_nodes: int = 0
    dl_info_data: int = 0
    dl_info_speed: int = 0
    dl_rate_limit: int = 0
    free_space_on_disk: int = 0
    global_ratio: str = ""
    queued_io_jobs: int = 0
    queueing: bool = False
    read_cache_hits: str = ""
    read_cache_overload: str = ""
    refresh_interval: int = 0
    total_buffers_size: int = 0
    total_peer_connections: int = 0
    total_queued_size: int = 0
    total_wasted_session: int = 0
    up_info_data: int = 0
    up_info_speed: int = 0
    up_rate_limit: int = 0
    use_alt_speed_limits: bool = False
    write_cache_overload: str = ""
