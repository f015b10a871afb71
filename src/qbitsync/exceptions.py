"""Custom exception hierarchy for qbitsync."""

from __future__ import annotations


class QbitSyncError(Exception):
    """Base exception for all qbitsync errors."""


class QbitConfigError(QbitSyncError):
    """Invalid or missing configuration."""


class QbitTransportError(QbitSyncError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class QbitDeltaError(QbitSyncError):
    """Sync payload could not be interpreted as a delta.

    Raised only for structural problems with the payload as a whole (not a
    JSON object, unusable ``rid``).  Malformed individual fields are skipped
    by the merger instead.
    """
