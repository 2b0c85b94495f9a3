from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from domain.errors import DecodingError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 8.0


class AiohttpRemoteClient:
    """
    `RemoteClient` implementation talking to the dealer service over aiohttp.

    The underlying `ClientSession` is created lazily, inside the running
    event loop, unless one is passed in. A session passed in is owned by the
    caller and is not closed by `close()`.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "AiohttpRemoteClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def client_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        query = {key: str(value) for key, value in (params or {}).items()}
        logger.debug("%s %s %s", method, url, query)

        try:
            async with self.client_session().request(
                method, url, params=query, timeout=self._timeout
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise TransportError(
                        await _failure_message(method, path, resp),
                        status=resp.status,
                    )
                body = await resp.read()
        except asyncio.TimeoutError as exc:
            raise TransportError(f"{method} {path} timed out") from exc
        except ClientError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        try:
            return json.loads(body)
        except ValueError as exc:
            raise DecodingError(f"{method} {path} returned invalid JSON") from exc


async def _failure_message(method: str, path: str, resp: ClientResponse) -> str:
    """
    Build a readable message for a non-2xx response.

    The dealer reports user errors as `{"description": ...}`; anything else
    is summarised by the status line.
    """

    message = f"{method} {path} failed with status {resp.status}"
    try:
        body = await resp.json(content_type=None)
    except (ClientError, ValueError):
        return message
    if isinstance(body, dict) and isinstance(body.get("description"), str):
        return f"{message}: {body['description']}"
    if isinstance(body, str) and body:
        return f"{message}: {body}"
    return message
