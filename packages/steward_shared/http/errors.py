"""Exceptions raised by ``AsyncHttpClient``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class HttpClientError(Exception):
    """An outbound request that did not produce a usable response."""

    message: str
    method: str
    url: str
    retryable: bool = False

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class HttpRequestError(HttpClientError):
    """No response arrived: connect failure, reset, or timeout."""

    cause: Exception | None = None
    timed_out: bool = False


@dataclass(frozen=True)
class HttpStatusError(HttpClientError):
    """A response arrived with a 4xx or 5xx status."""

    status_code: int = 0
    response_body: str = ""
    response_headers: Mapping[str, str] = field(default_factory=dict)
