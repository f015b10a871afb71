"""Base model and enum for qBittorrent sync records.

Every entity record inherits from :class:`QbitBaseModel`, which gives each
field a zero-value default so a record can always be created from nothing
but its key.  Records are never mutated in place by the merger; each
update produces a new instance via ``model_copy(update=...)``.

String enums inherit from :class:`QbitEnum`, which resolves any value
without a mapped member to ``UNKNOWN`` instead of raising ``ValueError``.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict


class QbitEnum(enum.StrEnum):
    """Base for qBittorrent string enums.

    Every subclass **must** define ``UNKNOWN``.
    """

    @classmethod
    def _missing_(cls, value: object) -> QbitEnum:
        # pylint: disable=no-member
        if hasattr(cls, "UNKNOWN"):
            unknown: QbitEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))


class QbitBaseModel(BaseModel):
    """Base for entity records held in a snapshot."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )
