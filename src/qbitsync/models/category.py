"""Category records."""

from __future__ import annotations

from qbitsync.models._base import QbitBaseModel


class Category(QbitBaseModel):
    """A torrent category.  ``name`` always equals its map key."""

    name: str = ""
    save_path: str = ""
