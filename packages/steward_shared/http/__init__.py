"""Shared async HTTP client for Steward adapters."""

from .client import AsyncHttpClient
from .errors import HttpClientError, HttpRequestError, HttpStatusError

__all__ = [
    "AsyncHttpClient",
    "HttpClientError",
    "HttpRequestError",
    "HttpStatusError",
]
