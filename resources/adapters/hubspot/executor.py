"""Rate-governed request execution with classified failures and bounded retry.

One call to :meth:`RequestExecutor.execute` is one logical request. Each
attempt first asks the shared :class:`RateBudget` for admission, then sends,
then feeds the authoritative rate headers back into the budget. Remote
throttling (HTTP 429) and transport failures are retried with exponential
backoff up to ``max_retries``; every other failure is classified by status
family and returned immediately.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from packages.steward_shared.http import AsyncHttpClient, HttpRequestError
from packages.steward_shared.logging import fields, get_logger, log_context
from resources.adapters.hubspot.backoff import BackoffPolicy
from resources.adapters.hubspot.failures import (
    CmsFailure,
    FailureKind,
    RemoteErrorItem,
    RequestResult,
    failed,
    success,
)
from resources.adapters.hubspot.rate_budget import RateBudget

_LOGGER = get_logger(__name__)

HEADER_BURST_REMAINING = "X-HubSpot-RateLimit-Remaining"
HEADER_BURST_MAX = "X-HubSpot-RateLimit-Max"
HEADER_DAILY_REMAINING = "X-HubSpot-RateLimit-Daily-Remaining"
HEADER_DAILY_MAX = "X-HubSpot-RateLimit-Daily"
HEADER_CORRELATION_ID = "X-HubSpot-Correlation-Id"
HEADER_RETRY_AFTER = "Retry-After"

# Longest server-requested wait honored before retrying.
MAX_RETRY_AFTER_MS = 60_000.0

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RequestSpec:
    """Everything needed to send one request, independent of attempt."""

    method: str
    endpoint: str
    json_body: Any = None
    params: Mapping[str, str] | None = None
    files: Mapping[str, Any] | None = None
    data: Mapping[str, str] | None = None

    def httpx_kwargs(self) -> dict[str, Any]:
        """Return keyword arguments for ``httpx.AsyncClient.request``."""
        kwargs: dict[str, Any] = {}
        if self.json_body is not None:
            kwargs["json"] = self.json_body
        if self.params:
            kwargs["params"] = dict(self.params)
        if self.files:
            kwargs["files"] = dict(self.files)
        if self.data:
            kwargs["data"] = dict(self.data)
        return kwargs


class RequestExecutor:
    """Send requests through the rate budget with retry and classification."""

    def __init__(
        self,
        *,
        client: AsyncHttpClient,
        budget: RateBudget,
        backoff: BackoffPolicy,
        max_retries: int = 4,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._client = client
        self._budget = budget
        self._backoff = backoff
        self._max_retries = max_retries
        self._sleep = sleep

    @property
    def budget(self) -> RateBudget:
        """Shared rate budget consulted before every attempt."""
        return self._budget

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def execute(self, spec: RequestSpec) -> RequestResult[Any]:
        """Execute one logical request and return its payload or failure."""
        last_failure: CmsFailure | None = None
        attempt = 0
        while True:
            with log_context(
                {
                    fields.METHOD: spec.method,
                    fields.ENDPOINT: spec.endpoint,
                    fields.ATTEMPT: attempt,
                }
            ):
                if not self._budget.try_reserve():
                    return failed(self._local_throttle_failure(), attempts=attempt)
                # Reserve and decrement with no suspension in between.
                self._budget.commit_reservation()

                _LOGGER.debug("Sending request")
                retry_after_ms: float | None = None
                try:
                    response = await self._client.request(
                        spec.method,
                        spec.endpoint,
                        raise_for_status=False,
                        **spec.httpx_kwargs(),
                    )
                except HttpRequestError as exc:
                    last_failure = CmsFailure(
                        kind=FailureKind.NETWORK_TRANSIENT,
                        message=f"Network error: {exc.cause or exc}",
                    )
                else:
                    self._observe(response.headers)
                    if response.status_code == 429:
                        last_failure = _classify_error(response)
                        retry_after_ms = _retry_after_ms(response.headers)
                    elif response.is_error:
                        failure = _classify_error(response)
                        _LOGGER.error(
                            "API request failed: %s",
                            failure.message,
                            extra={
                                fields.STATUS_CODE: response.status_code,
                                fields.FAILURE_KIND: failure.kind,
                                fields.CORRELATION_ID: failure.correlation_id or None,
                            },
                        )
                        return failed(failure, attempts=attempt + 1)
                    else:
                        _LOGGER.debug(
                            "Request successful",
                            extra={fields.STATUS_CODE: response.status_code},
                        )
                        return _decode(response, attempts=attempt + 1)

                if attempt >= self._max_retries:
                    break

                delay_ms = (
                    retry_after_ms
                    if retry_after_ms is not None
                    else self._backoff.delay_ms(attempt)
                )
                _LOGGER.warning(
                    "Retrying request",
                    extra={
                        fields.FAILURE_KIND: last_failure.kind,
                        fields.DELAY_MS: round(delay_ms),
                    },
                )
            await self._sleep(delay_ms / 1000.0)
            attempt += 1

        assert last_failure is not None
        _LOGGER.error(
            "Request failed after %d attempts: %s", attempt + 1, last_failure.kind
        )
        return failed(
            last_failure.with_details(attempts=attempt + 1, retries_exhausted=True),
            attempts=attempt + 1,
        )

    def _observe(self, headers: httpx.Headers) -> None:
        self._budget.observe(
            burst_remaining=_int_header(headers, HEADER_BURST_REMAINING),
            daily_remaining=_int_header(headers, HEADER_DAILY_REMAINING),
            burst_capacity=_int_header(headers, HEADER_BURST_MAX),
            daily_capacity=_int_header(headers, HEADER_DAILY_MAX),
        )

    def _local_throttle_failure(self) -> CmsFailure:
        budget = self._budget
        _LOGGER.warning(
            "Approaching rate limit (burst=%d/%d daily=%d/%d)",
            budget.burst_remaining,
            budget.burst_threshold,
            budget.daily_remaining,
            budget.daily_threshold,
        )
        return CmsFailure(
            kind=FailureKind.THROTTLED_LOCALLY,
            message=(
                "Approaching rate limit threshold. "
                "Request blocked by safety margin."
            ),
            details={
                "burst_remaining": budget.burst_remaining,
                "burst_threshold": budget.burst_threshold,
                "daily_remaining": budget.daily_remaining,
                "daily_threshold": budget.daily_threshold,
            },
        )


def _decode(response: httpx.Response, *, attempts: int) -> RequestResult[Any]:
    """Decode a successful response body; empty bodies decode to ``{}``."""
    if not response.content:
        return success({}, attempts=attempts)
    try:
        return success(response.json(), attempts=attempts)
    except ValueError:
        return failed(
            CmsFailure(
                kind=FailureKind.INVALID_RESPONSE,
                message="Remote service returned a body that is not valid JSON.",
                status_code=response.status_code,
                correlation_id=response.headers.get(HEADER_CORRELATION_ID, ""),
            ),
            attempts=attempts,
        )


def _classify_error(response: httpx.Response) -> CmsFailure:
    """Map one non-success response and its error envelope to a failure."""
    status = response.status_code
    envelope = _error_envelope(response)
    remote_message = envelope.get("message")
    message = (
        remote_message
        if isinstance(remote_message, str) and remote_message.strip()
        else "Unknown error occurred"
    )
    correlation_id = envelope.get("correlationId") or response.headers.get(
        HEADER_CORRELATION_ID, ""
    )
    return CmsFailure(
        kind=_kind_for_status(status),
        message=_friendly_message(status, message),
        status_code=status,
        correlation_id=str(correlation_id),
        remote_status=str(envelope.get("status") or response.reason_phrase or ""),
        category=str(envelope.get("category") or ""),
        sub_category=str(envelope.get("subCategory") or ""),
        errors=_error_items(envelope.get("errors")),
    )


def _kind_for_status(status: int) -> FailureKind:
    if status == 429:
        return FailureKind.THROTTLED_REMOTELY
    if status == 401:
        return FailureKind.AUTHENTICATION_FAILED
    if status == 403:
        return FailureKind.AUTHORIZATION_DENIED
    if status == 404:
        return FailureKind.NOT_FOUND
    if status in {400, 409, 422}:
        return FailureKind.REMOTE_VALIDATION_FAILED
    if status >= 500:
        return FailureKind.SERVER_ERROR
    return FailureKind.UNEXPECTED_STATUS


def _friendly_message(status: int, message: str) -> str:
    if status == 401:
        return (
            "Authentication failed. Please check your access token is valid "
            "and not expired."
        )
    if status == 403:
        return (
            "Permission denied. Your access token may be missing required "
            f"scopes. Original error: {message}"
        )
    if status == 404:
        return (
            "Resource not found. The requested content may have been deleted "
            f"or the ID is incorrect. Original error: {message}"
        )
    if status == 429:
        return "Rate limit exceeded. Please wait before making more requests."
    if status in {500, 502, 503}:
        return f"HubSpot service error. Please try again later. Original error: {message}"
    return message


def _error_envelope(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _error_items(value: object) -> tuple[RemoteErrorItem, ...]:
    if not isinstance(value, list):
        return ()
    items: list[RemoteErrorItem] = []
    for item in value:
        if not isinstance(item, Mapping):
            continue
        items.append(
            RemoteErrorItem(
                message=str(item.get("message", "")),
                location=str(item.get("in", "")),
            )
        )
    return tuple(items)


def _int_header(headers: httpx.Headers, name: str) -> int | None:
    raw = headers.get(name)
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _retry_after_ms(headers: httpx.Headers) -> float | None:
    raw = headers.get(HEADER_RETRY_AFTER)
    if raw is None:
        return None
    try:
        seconds = float(raw.strip())
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return min(seconds * 1000.0, MAX_RETRY_AFTER_MS)
