"""Poll interval policy."""

from __future__ import annotations

import random

from qbitsync.config import SyncOptions


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(value, maximum))


def next_interval(last_duration: float, options: SyncOptions, rng: random.Random | None = None) -> float:
    """Seconds to wait before the next sync cycle.

    Fixed mode returns ``sync_interval``.  Dynamic mode doubles the last
    round trip, clamps it to ``[min_sync_interval, max_sync_interval]`` and
    applies symmetric multiplicative jitter of up to ``jitter_percent``.
    Jitter may push the result above the maximum, never below the minimum.
    """
    if not options.dynamic_sync:
        return options.sync_interval

    interval = _clamp(2 * last_duration, options.min_sync_interval, options.max_sync_interval)
    if options.jitter_percent > 0:
        spread = options.jitter_percent / 100.0
        interval *= 1.0 + (rng or random).uniform(-spread, spread)
        interval = max(interval, options.min_sync_interval)
    return interval


def stale_threshold(last_duration: float, options: SyncOptions) -> float:
    """Age after which a snapshot is considered stale by ``ensure_fresh``."""
    if not options.dynamic_sync:
        return options.sync_interval
    if last_duration > 0:
        return _clamp(2 * last_duration, options.min_sync_interval, options.max_sync_interval)
    return options.min_sync_interval or options.sync_interval
