"""Torrent filtering, sorting and paging over a snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Any, get_origin

from pydantic import BaseModel, ConfigDict, Field

from qbitsync.models.torrent import Torrent, TorrentState
from qbitsync.state.merge import TORRENT_RULES


class TorrentFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"
    RESUMED = "resumed"
    PAUSED = "paused"
    STOPPED = "stopped"
    STALLED = "stalled"
    UPLOADING = "uploading"
    STALLED_UPLOADING = "stalled_uploading"
    DOWNLOADING = "downloading"
    STALLED_DOWNLOADING = "stalled_downloading"
    ERRORED = "errored"


_S = TorrentState

_ACTIVE = frozenset(
    {_S.DOWNLOADING, _S.UPLOADING, _S.META_DL, _S.CHECKING_DL, _S.CHECKING_UP, _S.FORCED_DL, _S.FORCED_UP, _S.ALLOCATING}
)
_PAUSED = frozenset({_S.PAUSED_DL, _S.PAUSED_UP, _S.STOPPED_DL, _S.STOPPED_UP})

_STATES_BY_FILTER: dict[TorrentFilter, frozenset[TorrentState]] = {
    TorrentFilter.DOWNLOADING: frozenset(
        {_S.DOWNLOADING, _S.META_DL, _S.STALLED_DL, _S.CHECKING_DL, _S.FORCED_DL, _S.ALLOCATING, _S.QUEUED_DL}
    ),
    TorrentFilter.UPLOADING: frozenset({_S.UPLOADING, _S.STALLED_UP, _S.CHECKING_UP, _S.FORCED_UP, _S.QUEUED_UP}),
    TorrentFilter.COMPLETED: frozenset(
        {_S.PAUSED_UP, _S.STOPPED_UP, _S.QUEUED_UP, _S.STALLED_UP, _S.CHECKING_UP, _S.FORCED_UP}
    ),
    TorrentFilter.PAUSED: _PAUSED,
    TorrentFilter.STOPPED: _PAUSED,
    TorrentFilter.ACTIVE: _ACTIVE,
    TorrentFilter.RESUMED: _ACTIVE,
    TorrentFilter.INACTIVE: _PAUSED | {_S.QUEUED_DL, _S.QUEUED_UP, _S.STALLED_DL, _S.STALLED_UP},
    TorrentFilter.STALLED: frozenset({_S.STALLED_DL, _S.STALLED_UP}),
    TorrentFilter.STALLED_DOWNLOADING: frozenset({_S.STALLED_DL}),
    TorrentFilter.STALLED_UPLOADING: frozenset({_S.STALLED_UP}),
    TorrentFilter.ERRORED: frozenset({_S.ERROR, _S.MISSING_FILES}),
}

_DEFAULT_SORT = "name"
_SORTABLE = frozenset(name for name, info in Torrent.model_fields.items() if get_origin(info.annotation) is not list)


class TorrentFilterOptions(BaseModel):
    """Selection applied by :meth:`MainDataStore.torrents`.

    ``sort`` accepts a model attribute (``"dl_speed"``) or its wire name
    (``"dlspeed"``); unknown names fall back to sorting by name.  Ties are
    broken by hash so the order is stable.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    filter: TorrentFilter | None = None
    category: str | None = None
    tag: str | None = None
    hashes: list[str] = Field(default_factory=list)
    sort: str | None = None
    reverse: bool = False
    limit: int = Field(default=0, ge=0)
    offset: int = Field(default=0, ge=0)


def contains_exact_tag(tags: str, target: str) -> bool:
    """Whether the comma separated *tags* string holds *target* exactly."""
    wanted = target.strip()
    if not wanted:
        return False
    return any(tag.strip() == wanted for tag in tags.split(","))


def matches_state_filter(state: TorrentState, torrent_filter: TorrentFilter) -> bool:
    states = _STATES_BY_FILTER.get(torrent_filter)
    if states is None:
        return True
    return state in states


def matches_torrent_filter(torrent: Torrent, options: TorrentFilterOptions) -> bool:
    if options.hashes and torrent.hash not in options.hashes:
        return False
    if options.category is not None and torrent.category != options.category:
        return False
    if options.tag is not None and not contains_exact_tag(torrent.tags, options.tag):
        return False
    return options.filter is None or matches_state_filter(torrent.state, options.filter)


def _sort_attr(sort: str | None) -> str:
    if sort is None:
        return _DEFAULT_SORT
    rule = TORRENT_RULES.get(sort)
    attr = rule.attr if rule is not None else sort
    return attr if attr in _SORTABLE else _DEFAULT_SORT


def sort_torrents(torrents: list[Torrent], sort: str | None, reverse: bool = False) -> list[Torrent]:
    attr = _sort_attr(sort)

    def key(torrent: Torrent) -> tuple[Any, str]:
        return getattr(torrent, attr), torrent.hash

    return sorted(torrents, key=key, reverse=reverse)


def select_torrents(torrents: Iterable[Torrent], options: TorrentFilterOptions) -> list[Torrent]:
    """Filter, sort and page *torrents* according to *options*."""
    selected = [torrent for torrent in torrents if matches_torrent_filter(torrent, options)]
    selected = sort_torrents(selected, options.sort, options.reverse)
    if options.offset or options.limit:
        end = options.offset + options.limit if options.limit else None
        selected = selected[options.offset : end]
    return selected
