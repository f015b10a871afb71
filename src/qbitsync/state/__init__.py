"""State/store layer.

This package is the single source of truth for how sync deltas are merged
into a consistent snapshot: per-field merge rules, reconciliation, the
lock-guarded stores and read-side filtering.
"""
