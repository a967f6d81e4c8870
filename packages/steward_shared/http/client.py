"""Async HTTP client used by Steward adapters.

Wraps ``httpx.AsyncClient`` so that callers only ever see
``HttpRequestError`` (no response) or ``HttpStatusError`` (error response).
Callers that classify statuses themselves pass ``raise_for_status=False``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from .errors import HttpRequestError, HttpStatusError

USER_AGENT = "steward/0.1"


class AsyncHttpClient:
    """``httpx.AsyncClient`` with typed failures.

    A client passed in through ``client`` is borrowed and left open by
    ``aclose``.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._borrowed = client is not None
        if client is None:
            merged = {"User-Agent": USER_AGENT, **dict(headers or {})}
            client = httpx.AsyncClient(
                base_url=base_url,
                timeout=timeout_seconds,
                headers=merged,
                follow_redirects=follow_redirects,
                transport=transport,
            )
        self._client = client

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if not self._borrowed:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request; ``kwargs`` go straight to httpx."""
        method = method.upper()
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            target = str(exc.request.url) if _has_request(exc) else url
            raise HttpRequestError(
                message=f"{method} {target} failed: {exc}",
                method=method,
                url=target,
                retryable=True,
                cause=exc,
                timed_out=isinstance(exc, httpx.TimeoutException),
            ) from exc

        if raise_for_status and response.is_error:
            status = response.status_code
            raise HttpStatusError(
                message=f"{method} {response.request.url} returned HTTP {status}",
                method=method,
                url=str(response.request.url),
                retryable=status == 429 or status >= 500,
                status_code=status,
                response_body=response.text,
                response_headers=dict(response.headers),
            )
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)


def _has_request(exc: httpx.RequestError) -> bool:
    # httpx raises RuntimeError when no request was attached.
    try:
        exc.request
    except RuntimeError:
        return False
    return True
