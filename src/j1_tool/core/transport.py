"""HTTP transport for the JupiterOne API.

The client only needs ``send(method, url, headers, body) -> (status, json)``.
Network failures raise TransportError; HTTP status handling is left to
the caller so it can attach query-specific context.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import httpx

from j1_tool.core.exceptions import TransportError


@runtime_checkable
class Transport(Protocol):
    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any = None,
    ) -> tuple[int, Any]: ...

    def close(self) -> None: ...


class HttpxTransport:
    """Synchronous transport backed by a shared httpx.Client."""

    def __init__(
        self, timeout: float = 30.0, client: httpx.Client | None = None
    ) -> None:
        self._client = client or httpx.Client(timeout=timeout)

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any = None,
    ) -> tuple[int, Any]:
        try:
            response = self._client.request(method, url, headers=headers, json=body)
        except httpx.TimeoutException as e:
            raise TransportError(f"{method} {url} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = response.text
        return response.status_code, payload

    def close(self) -> None:
        self._client.close()
