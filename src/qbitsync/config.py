"""Configuration for qbitsync."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable, Mapping
from typing import Any

from qbitsync.exceptions import QbitConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _read_env(
    env: Mapping[str, str],
    mapping: dict[str, tuple[str, Callable[[str], Any]]],
    overrides: dict[str, Any],
) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    for env_key, (field_name, convert) in mapping.items():
        val = env.get(env_key)
        if val is None or field_name in overrides:
            continue
        try:
            kwargs[field_name] = convert(val)
        except ValueError as exc:
            raise QbitConfigError(f"Invalid value for {env_key}: {val!r}") from exc
    return kwargs


@dataclasses.dataclass(frozen=True)
class TransportConfig:
    """Settings for :class:`qbitsync.transport.HttpTransport`.

    Parameters
    ----------
    base_url : str
        WebUI root, e.g. ``"http://localhost:8080"``.
    basic_user, basic_password : str or None
        Optional HTTP basic-auth credentials for reverse proxies.  WebUI
        login itself is handled by whoever owns the ``aiohttp`` session.
    request_timeout : float
        Total timeout in seconds for one sync request.
    """

    base_url: str = "http://localhost:8080"
    basic_user: str | None = None
    basic_password: str | None = None
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        if not self.base_url:
            raise QbitConfigError("base_url must be non-empty")
        if self.request_timeout <= 0:
            raise QbitConfigError("request_timeout must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> TransportConfig:
        """Create configuration from ``QBIT_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        kwargs = _read_env(
            os.environ,
            {
                "QBIT_BASE_URL": ("base_url", str),
                "QBIT_USERNAME": ("basic_user", str),
                "QBIT_PASSWORD": ("basic_password", str),
                "QBIT_REQUEST_TIMEOUT": ("request_timeout", float),
            },
            overrides,
        )
        kwargs.update(overrides)
        return cls(**kwargs)


@dataclasses.dataclass(frozen=True)
class SyncOptions:
    """Behaviour of :class:`qbitsync.sync.manager.SyncManager`.

    Parameters
    ----------
    auto_start : bool
        Start the background polling loop from :meth:`SyncManager.start`.
        When ``False`` the caller starts it with ``start_polling()``.
    sync_interval : float
        Seconds between cycles when ``dynamic_sync`` is off.
    dynamic_sync : bool
        Derive the interval from the last round trip (``2 x duration``).
    min_sync_interval, max_sync_interval : float
        Clamp bounds for the dynamic interval.  Jitter may exceed the
        maximum but never goes below the minimum.
    jitter_percent : int
        Symmetric multiplicative jitter, ``0``-``100``.
    retain_removed_data : bool
        Record deletion lists on the snapshot without applying them.
    on_update : callable or None
        Called with a deep copy of the snapshot after every successful cycle.
    on_error : callable or None
        Called with the exception after every failed cycle.
    """

    auto_start: bool = False
    sync_interval: float = 2.0
    dynamic_sync: bool = True
    min_sync_interval: float = 1.0
    max_sync_interval: float = 30.0
    jitter_percent: int = 10
    retain_removed_data: bool = False
    on_update: Callable[[Any], None] | None = None
    on_error: Callable[[Exception], None] | None = None

    def __post_init__(self) -> None:
        if self.sync_interval <= 0:
            raise QbitConfigError("sync_interval must be positive")
        if self.min_sync_interval < 0:
            raise QbitConfigError("min_sync_interval must not be negative")
        if self.max_sync_interval < self.min_sync_interval:
            raise QbitConfigError("max_sync_interval must be >= min_sync_interval")
        if not 0 <= self.jitter_percent <= 100:
            raise QbitConfigError("jitter_percent must be within 0..100")

    @classmethod
    def from_env(cls, **overrides: Any) -> SyncOptions:
        """Create options from ``QBIT_*`` environment variables.

        Explicit keyword arguments (including callbacks) override
        environment values.
        """
        kwargs = _read_env(
            os.environ,
            {
                "QBIT_AUTO_START": ("auto_start", lambda v: _env_bool(v, False)),
                "QBIT_SYNC_INTERVAL": ("sync_interval", float),
                "QBIT_DYNAMIC_SYNC": ("dynamic_sync", lambda v: _env_bool(v, True)),
                "QBIT_MIN_SYNC_INTERVAL": ("min_sync_interval", float),
                "QBIT_MAX_SYNC_INTERVAL": ("max_sync_interval", float),
                "QBIT_JITTER_PERCENT": ("jitter_percent", int),
                "QBIT_RETAIN_REMOVED_DATA": ("retain_removed_data", lambda v: _env_bool(v, False)),
            },
            overrides,
        )
        kwargs.update(overrides)
        return cls(**kwargs)


@dataclasses.dataclass(frozen=True)
class PeerSyncOptions:
    """Behaviour of :class:`qbitsync.sync.peers.PeerSyncManager`.

    Peer polling always runs on a fixed ``sync_interval``.
    """

    auto_start: bool = False
    sync_interval: float = 5.0
    on_update: Callable[[Any], None] | None = None
    on_error: Callable[[Exception], None] | None = None

    def __post_init__(self) -> None:
        if self.sync_interval <= 0:
            raise QbitConfigError("sync_interval must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> PeerSyncOptions:
        kwargs = _read_env(
            os.environ,
            {
                "QBIT_AUTO_START": ("auto_start", lambda v: _env_bool(v, False)),
                "QBIT_PEER_SYNC_INTERVAL": ("sync_interval", float),
            },
            overrides,
        )
        kwargs.update(overrides)
        return cls(**kwargs)
