from __future__ import annotations

from typing import Any, Dict, Optional, Protocol


class RemoteClient(Protocol):
    """
    Abstraction over the dealer service's HTTP API.

    Implementations are responsible for:
    - Resolving `path` against the service base URL.
    - Returning the decoded JSON body of a 2xx response.
    - Raising `TransportError` for non-2xx responses and connection problems,
      and `DecodingError` when the body is not valid JSON.
    """

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        ...
