"""Ingestion layer.

Converts loosely-typed sync payloads into typed deltas before they reach
the state/store layer.
"""

__all__: list[str] = []
