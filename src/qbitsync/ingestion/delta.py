"""Typed sync deltas.

A raw sync payload is a loosely-typed JSON object where every field is
optional.  This module converts it once, at the ingestion boundary, into a
delta whose presence information is explicit:

- a collection is ``None`` when the key was absent from the payload
  (absent means "unchanged", which is different from an empty mapping)
- every record is a patch holding only the fields that were present and
  could be coerced to their declared type
- deletion lists default to empty

Only the reconciler consumes these deltas; they are never retained.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from qbitsync.exceptions import QbitDeltaError
from qbitsync.ingestion.normalize import to_bool, to_int, to_str_list
from qbitsync.state.merge import (
    CATEGORY_RULES,
    PEER_RULES,
    SERVER_STATE_RULES,
    TORRENT_RULES,
    Patch,
    RuleTable,
    build_patch,
)

_logger = logging.getLogger(__name__)


def _require_object(raw: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise QbitDeltaError(f"{what} payload is not a JSON object: {type(raw).__name__}")
    return raw


def _parse_rid(raw: Mapping[str, Any], what: str) -> int:
    rid = to_int(raw.get("rid"))
    if rid is None:
        raise QbitDeltaError(f"{what} payload has no usable rid: {raw.get('rid')!r}")
    return rid


def _patches(raw: Mapping[str, Any], key: str, rules: RuleTable) -> dict[str, Patch] | None:
    if key not in raw:
        return None
    records = raw[key]
    if not isinstance(records, Mapping):
        _logger.debug("Ignoring non-object %s collection: %r", key, records)
        return None
    patches: dict[str, Patch] = {}
    for record_key, record in records.items():
        if not isinstance(record, Mapping):
            _logger.debug("Ignoring non-object %s entry %s: %r", key, record_key, record)
            continue
        patches[str(record_key)] = build_patch(record, rules, kind=key)
    return patches


def _removed(raw: Mapping[str, Any], key: str) -> list[str]:
    if key not in raw:
        return []
    names = to_str_list(raw[key])
    if names is None:
        _logger.debug("Ignoring non-list %s: %r", key, raw[key])
        return []
    return names


class MainDataDelta(BaseModel):
    """One ``sync/maindata`` response, normalized."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rid: int
    full_update: bool = False
    torrents: dict[str, Patch] | None = None
    torrents_removed: list[str] = Field(default_factory=list)
    categories: dict[str, Patch] | None = None
    categories_removed: list[str] = Field(default_factory=list)
    tags: list[str] | None = None
    tags_removed: list[str] = Field(default_factory=list)
    trackers: dict[str, list[str]] | None = None
    trackers_removed: list[str] = Field(default_factory=list)
    server_state: Patch | None = None

    @classmethod
    def from_raw(cls, raw: Any) -> MainDataDelta:
        """Normalize a decoded ``sync/maindata`` JSON payload."""
        payload = _require_object(raw, "maindata")

        tags: list[str] | None = None
        if "tags" in payload:
            tags = to_str_list(payload["tags"])

        trackers: dict[str, list[str]] | None = None
        raw_trackers = payload.get("trackers")
        if isinstance(raw_trackers, Mapping):
            trackers = {}
            for url, hashes in raw_trackers.items():
                parsed = to_str_list(hashes)
                if parsed is None:
                    _logger.debug("Ignoring non-list tracker entry %s: %r", url, hashes)
                    continue
                trackers[str(url)] = parsed

        server_state: Patch | None = None
        if "server_state" in payload:
            server_state = build_patch(payload["server_state"], SERVER_STATE_RULES, kind="server_state")

        return cls(
            rid=_parse_rid(payload, "maindata"),
            full_update=bool(to_bool(payload.get("full_update"))),
            torrents=_patches(payload, "torrents", TORRENT_RULES),
            torrents_removed=_removed(payload, "torrents_removed"),
            categories=_patches(payload, "categories", CATEGORY_RULES),
            categories_removed=_removed(payload, "categories_removed"),
            tags=tags,
            tags_removed=_removed(payload, "tags_removed"),
            trackers=trackers,
            trackers_removed=_removed(payload, "trackers_removed"),
            server_state=server_state,
        )


class TorrentPeersDelta(BaseModel):
    """One ``sync/torrentPeers`` response, normalized."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rid: int
    full_update: bool = False
    show_flags: bool | None = None
    peers: dict[str, Patch] | None = None
    peers_removed: list[str] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Any) -> TorrentPeersDelta:
        """Normalize a decoded ``sync/torrentPeers`` JSON payload."""
        payload = _require_object(raw, "torrentPeers")
        return cls(
            rid=_parse_rid(payload, "torrentPeers"),
            full_update=bool(to_bool(payload.get("full_update"))),
            show_flags=to_bool(payload.get("show_flags")),
            peers=_patches(payload, "peers", PEER_RULES),
            peers_removed=_removed(payload, "peers_removed"),
        )
