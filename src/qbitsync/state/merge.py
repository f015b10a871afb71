"""Per-field partial-update merging.

Each entity type has an explicit rule table mapping a wire key to the model
attribute it updates and the coercer that produces the typed value.  The
tables are total over the model fields; :func:`verify_rule_coverage` fails
when a field is added to a model without a matching rule.

Merge semantics:

- fields absent from the wire record keep their previous value
- fields whose value cannot be coerced are logged and skipped
- unknown wire keys are ignored
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from qbitsync.exceptions import QbitSyncError
from qbitsync.ingestion.normalize import to_bool, to_enum, to_float, to_int, to_str
from qbitsync.models._base import QbitBaseModel
from qbitsync.models.category import Category
from qbitsync.models.peer import TorrentPeer
from qbitsync.models.server_state import ServerState
from qbitsync.models.torrent import Torrent, TorrentState, TorrentTracker

_logger = logging.getLogger(__name__)

TRecord = TypeVar("TRecord", bound=QbitBaseModel)

Patch = dict[str, Any]
"""Attribute name -> already-coerced value, for fields present on the wire."""


@dataclass(frozen=True, slots=True)
class FieldRule:
    attr: str
    coerce: Callable[[Any], Any]


RuleTable = Mapping[str, FieldRule]


def _rules(coercer: Callable[[Any], Any], *pairs: str | tuple[str, str]) -> dict[str, FieldRule]:
    """Build rules sharing one coercer; plain names use the same wire key and attr."""
    table: dict[str, FieldRule] = {}
    for pair in pairs:
        wire, attr = (pair, pair) if isinstance(pair, str) else pair
        table[wire] = FieldRule(attr=attr, coerce=coercer)
    return table


def build_patch(raw: Any, rules: RuleTable, *, kind: str = "record") -> Patch:
    """Coerce the known fields of a raw wire record into a patch."""
    if not isinstance(raw, Mapping):
        _logger.debug("Ignoring non-object %s payload: %r", kind, raw)
        return {}
    patch: Patch = {}
    for wire_key, raw_value in raw.items():
        rule = rules.get(wire_key)
        if rule is None:
            continue
        value = rule.coerce(raw_value)
        if value is None:
            _logger.debug("Skipping unparsable %s field %s=%r", kind, wire_key, raw_value)
            continue
        patch[rule.attr] = value
    return patch


def merge_record(existing: TRecord, patch: Patch) -> TRecord:
    """Return a copy of *existing* with the patch fields overwritten."""
    if not patch:
        return existing
    return existing.model_copy(update=patch)


def merge_field(existing: TRecord, wire_key: str, raw_value: Any, rules: RuleTable) -> TRecord:
    """Merge a single wire field onto *existing*."""
    return merge_record(existing, build_patch({wire_key: raw_value}, rules, kind=type(existing).__name__))


def _to_trackers(value: Any) -> list[TorrentTracker] | None:
    if not isinstance(value, list):
        return None
    return [
        merge_record(TorrentTracker(), build_patch(item, TORRENT_TRACKER_RULES, kind="tracker"))
        for item in value
        if isinstance(item, Mapping)
    ]


def _to_torrent_state(value: Any) -> TorrentState | None:
    return to_enum(TorrentState, value)


TORRENT_TRACKER_RULES: dict[str, FieldRule] = {
    **_rules(to_str, "url", ("msg", "message")),
    **_rules(to_int, "status", "num_peers", "num_seeds", "num_leechers", "num_downloaded"),
}

TORRENT_RULES: dict[str, FieldRule] = {
    **_rules(
        to_int,
        "added_on",
        "amount_left",
        "completed",
        "completion_on",
        "dl_limit",
        ("dlspeed", "dl_speed"),
        "downloaded",
        "downloaded_session",
        "eta",
        "last_activity",
        "max_seeding_time",
        "num_complete",
        "num_incomplete",
        "num_leechs",
        "num_seeds",
        "priority",
        "seeding_time",
        "seeding_time_limit",
        "seen_complete",
        "size",
        "time_active",
        "total_size",
        "trackers_count",
        "up_limit",
        "uploaded",
        "uploaded_session",
        ("upspeed", "up_speed"),
    ),
    **_rules(to_float, "availability", "max_ratio", "progress", "ratio", "ratio_limit"),
    **_rules(
        to_str,
        "category",
        "content_path",
        "download_path",
        "hash",
        "infohash_v1",
        "infohash_v2",
        "magnet_uri",
        "name",
        "save_path",
        "tags",
        "tracker",
    ),
    **_rules(
        to_bool,
        ("auto_tmm", "auto_managed"),
        ("f_l_piece_prio", "first_last_piece_prio"),
        "force_start",
        ("seq_dl", "sequential_download"),
        "super_seeding",
    ),
    **_rules(_to_torrent_state, "state"),
    **_rules(_to_trackers, "trackers"),
}

CATEGORY_RULES: dict[str, FieldRule] = _rules(to_str, "name", ("savePath", "save_path"))

SERVER_STATE_RULES: dict[str, FieldRule] = {
    **_rules(
        to_int,
        "alltime_dl",
        "alltime_ul",
        "average_time_queue",
        "dht_nodes",
        "dl_info_data",
        "dl_info_speed",
        "dl_rate_limit",
        "free_space_on_disk",
        "queued_io_jobs",
        "refresh_interval",
        "total_buffers_size",
        "total_peer_connections",
        "total_queued_size",
        "total_wasted_session",
        "up_info_data",
        "up_info_speed",
        "up_rate_limit",
    ),
    **_rules(
        to_str,
        "connection_status",
        "global_ratio",
        "read_cache_hits",
        "read_cache_overload",
        "write_cache_overload",
    ),
    **_rules(to_bool, "queueing", "use_alt_speed_limits"),
}

PEER_RULES: dict[str, FieldRule] = {
    **_rules(
        to_str,
        "ip",
        "connection",
        "flags",
        "flags_desc",
        "client",
        "peer_id_client",
        "files",
        "country",
        "country_code",
    ),
    **_rules(to_int, "port", "dl_speed", "up_speed", "downloaded", "uploaded"),
    **_rules(to_float, "progress", "relevance"),
}

RULES_BY_MODEL: dict[type[QbitBaseModel], dict[str, FieldRule]] = {
    Torrent: TORRENT_RULES,
    TorrentTracker: TORRENT_TRACKER_RULES,
    Category: CATEGORY_RULES,
    ServerState: SERVER_STATE_RULES,
    TorrentPeer: PEER_RULES,
}


def verify_rule_coverage() -> None:
    """Raise when a model field has no merge rule, or a rule has no field."""
    problems: list[str] = []
    for model, rules in RULES_BY_MODEL.items():
        fields = set(model.model_fields)
        targets = [rule.attr for rule in rules.values()]
        missing = fields - set(targets)
        unknown = set(targets) - fields
        duplicated = {attr for attr in targets if targets.count(attr) > 1}
        if missing:
            problems.append(f"{model.__name__}: no rule for {sorted(missing)}")
        if unknown:
            problems.append(f"{model.__name__}: rules target unknown fields {sorted(unknown)}")
        if duplicated:
            problems.append(f"{model.__name__}: several rules target {sorted(duplicated)}")
    if problems:
        raise QbitSyncError("Incomplete merge rules: " + "; ".join(problems))
