"""Sync endpoint transport."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from qbitsync.config import TransportConfig
from qbitsync.exceptions import QbitTransportError

_logger = logging.getLogger(__name__)

MAINDATA_ENDPOINT = "/api/v2/sync/maindata"
TORRENT_PEERS_ENDPOINT = "/api/v2/sync/torrentPeers"


class Transport(Protocol):
    """Structural transport interface used by the sync managers.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.  Implementations
    own authentication, timeouts and any retry policy.
    """

    async def fetch_maindata(self, rid: int) -> dict[str, Any]:
        ...

    async def fetch_torrent_peers(self, torrent_hash: str, rid: int) -> dict[str, Any]:
        ...


class HttpTransport:
    """Plain ``GET`` against the WebUI sync endpoints.

    The ``aiohttp`` session is owned by the caller and must already be
    authenticated (carry the ``SID`` cookie).  No login and no retries
    happen here.
    """

    def __init__(self, config: TransportConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._auth: aiohttp.BasicAuth | None = None
        if config.basic_user and config.basic_password:
            self._auth = aiohttp.BasicAuth(config.basic_user, config.basic_password)
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def fetch_maindata(self, rid: int) -> dict[str, Any]:
        return await self._get_json(MAINDATA_ENDPOINT, {"rid": str(rid)})

    async def fetch_torrent_peers(self, torrent_hash: str, rid: int) -> dict[str, Any]:
        return await self._get_json(TORRENT_PEERS_ENDPOINT, {"hash": torrent_hash, "rid": str(rid)})

    async def _get_json(self, endpoint: str, params: Mapping[str, str]) -> dict[str, Any]:
        url = f"{self._config.base_url.rstrip('/')}{endpoint}"
        _logger.debug("GET %s params=%s", url, dict(params))

        try:
            async with self._http.get(url, params=params, auth=self._auth, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise QbitTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except QbitTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise QbitTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise QbitTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if not isinstance(body, dict):
            raise QbitTransportError(
                f"Expected a JSON object from {endpoint}, got {type(body).__name__}",
                endpoint=endpoint,
            )
        return body
