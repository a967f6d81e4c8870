"""Unit tests for rate-governed request execution and failure classification."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Callable

import httpx
import pytest

from packages.steward_shared.http import AsyncHttpClient
from resources.adapters.hubspot.backoff import BackoffPolicy
from resources.adapters.hubspot.executor import RequestExecutor, RequestSpec
from resources.adapters.hubspot.failures import FailureKind
from resources.adapters.hubspot.rate_budget import RateBudget

Handler = Callable[[httpx.Request], httpx.Response]


class _RecordingSleep:
    """Async sleep fake that records requested durations in seconds."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _executor(
    handler: Handler,
    *,
    budget: RateBudget | None = None,
    sleep: _RecordingSleep | None = None,
    max_retries: int = 4,
) -> RequestExecutor:
    client = AsyncHttpClient(
        base_url="https://api.example.test",
        headers={"Authorization": "Bearer token-1"},
        transport=httpx.MockTransport(handler),
    )
    return RequestExecutor(
        client=client,
        budget=budget or RateBudget(clock=lambda: 0.0),
        backoff=BackoffPolicy(rng=random.Random(3)),
        max_retries=max_retries,
        sleep=sleep or _RecordingSleep(),
    )


def _run(executor: RequestExecutor, spec: RequestSpec):
    async def _go():
        try:
            return await executor.execute(spec)
        finally:
            await executor.aclose()

    return asyncio.run(_go())


def test_success_decodes_payload_and_sends_bearer_token() -> None:
    """Successful responses decode JSON and carry the Authorization header."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "42"})

    result = _run(_executor(handler), RequestSpec(method="GET", endpoint="/x"))

    assert result.ok
    assert result.payload == {"id": "42"}
    assert result.attempts == 1
    assert seen[0].headers["Authorization"] == "Bearer token-1"
    assert str(seen[0].url) == "https://api.example.test/x"


def test_rate_headers_overwrite_local_estimate() -> None:
    """Authoritative rate headers replace the decremented local counters."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={},
            headers={
                "X-HubSpot-RateLimit-Remaining": "57",
                "X-HubSpot-RateLimit-Daily-Remaining": "1234",
            },
        )

    budget = RateBudget(clock=lambda: 0.0)
    _run(_executor(handler, budget=budget), RequestSpec(method="GET", endpoint="/x"))

    assert budget.burst_remaining == 57
    assert budget.daily_remaining == 1234


def test_refusal_at_threshold_makes_no_network_call() -> None:
    """A budget at its safety threshold fails locally without sending."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    budget = RateBudget(clock=lambda: 0.0, burst_remaining=10)
    sleep = _RecordingSleep()
    result = _run(
        _executor(handler, budget=budget, sleep=sleep),
        RequestSpec(method="GET", endpoint="/x"),
    )

    assert result.failure is not None
    assert result.failure.kind is FailureKind.THROTTLED_LOCALLY
    assert result.attempts == 0
    assert calls == []
    assert sleep.calls == []


def test_remote_throttle_retries_with_backoff_then_succeeds() -> None:
    """Two 429 responses are retried with delays in the backoff bands."""
    responses = [
        httpx.Response(429, json={"message": "slow down"}),
        httpx.Response(429, json={"message": "slow down"}),
        httpx.Response(200, json={"ok": True}),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    sleep = _RecordingSleep()
    result = _run(
        _executor(handler, sleep=sleep), RequestSpec(method="GET", endpoint="/x")
    )

    assert result.ok
    assert result.payload == {"ok": True}
    assert result.attempts == 3
    assert len(sleep.calls) == 2
    assert 2.0 <= sleep.calls[0] < 3.0
    assert 4.0 <= sleep.calls[1] < 5.0


def test_retry_after_header_takes_precedence() -> None:
    """Server Retry-After seconds replace the computed backoff delay."""
    responses = [
        httpx.Response(429, headers={"Retry-After": "7"}),
        httpx.Response(200, json={}),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    sleep = _RecordingSleep()
    result = _run(
        _executor(handler, sleep=sleep), RequestSpec(method="GET", endpoint="/x")
    )

    assert result.ok
    assert sleep.calls == [7.0]


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("inf", 2.0),
        ("nan", 2.0),
        ("-1", 2.0),
        ("86400", 60.0),
    ],
)
def test_unusable_retry_after_values_are_bounded(header: str, expected: float) -> None:
    """Non-finite or negative waits fall back to backoff; long waits are capped."""
    responses = [
        httpx.Response(429, headers={"Retry-After": header}),
        httpx.Response(200, json={}),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    sleep = _RecordingSleep()
    result = _run(
        _executor(handler, sleep=sleep), RequestSpec(method="GET", endpoint="/x")
    )

    assert result.ok
    assert len(sleep.calls) == 1
    assert expected <= sleep.calls[0] < expected + 1.0


def test_remote_throttle_exhaustion_reports_attempts() -> None:
    """After max_retries the last throttling classification is returned."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(
            429,
            json={"message": "limit", "correlationId": "corr-429"},
        )

    sleep = _RecordingSleep()
    result = _run(
        _executor(handler, sleep=sleep), RequestSpec(method="GET", endpoint="/x")
    )

    assert result.failure is not None
    assert result.failure.kind is FailureKind.THROTTLED_REMOTELY
    assert result.failure.correlation_id == "corr-429"
    assert result.failure.details["attempts"] == 5
    assert result.attempts == 5
    assert len(calls) == 5
    assert len(sleep.calls) == 4


def test_network_failure_is_retried_like_throttling() -> None:
    """Transport errors retry under the same bounded loop."""
    state = {"calls": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        state["calls"] += 1
        if state["calls"] == 1:
            raise httpx.ConnectError("boom", request=request)
        return httpx.Response(200, json={"ok": 1})

    sleep = _RecordingSleep()
    result = _run(
        _executor(handler, sleep=sleep), RequestSpec(method="GET", endpoint="/x")
    )

    assert result.ok
    assert result.attempts == 2
    assert len(sleep.calls) == 1


def test_network_failure_exhaustion_is_network_transient() -> None:
    """Persistent transport failure ends as NETWORK_TRANSIENT."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    result = _run(
        _executor(handler, max_retries=1), RequestSpec(method="GET", endpoint="/x")
    )

    assert result.failure is not None
    assert result.failure.kind is FailureKind.NETWORK_TRANSIENT
    assert result.attempts == 2


def test_not_found_preserves_correlation_id_without_retry() -> None:
    """A 404 is classified once and carries the remote correlation id."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(
            404,
            json={
                "status": "error",
                "message": "Object not found",
                "correlationId": "abc-123",
                "category": "OBJECT_NOT_FOUND",
            },
        )

    result = _run(_executor(handler), RequestSpec(method="GET", endpoint="/x"))

    failure = result.failure
    assert failure is not None
    assert failure.kind is FailureKind.NOT_FOUND
    assert failure.correlation_id == "abc-123"
    assert failure.category == "OBJECT_NOT_FOUND"
    assert failure.status_code == 404
    assert "Object not found" in failure.message
    assert len(calls) == 1


def test_correlation_id_falls_back_to_response_header() -> None:
    """The correlation header is used when the body carries none."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            403,
            text="nope",
            headers={"X-HubSpot-Correlation-Id": "hdr-9"},
        )

    result = _run(_executor(handler), RequestSpec(method="GET", endpoint="/x"))

    assert result.failure is not None
    assert result.failure.kind is FailureKind.AUTHORIZATION_DENIED
    assert result.failure.correlation_id == "hdr-9"


def test_status_families_are_classified_without_retry() -> None:
    """Each non-throttling error status maps to one failure kind."""
    expected = {
        400: FailureKind.REMOTE_VALIDATION_FAILED,
        401: FailureKind.AUTHENTICATION_FAILED,
        409: FailureKind.REMOTE_VALIDATION_FAILED,
        422: FailureKind.REMOTE_VALIDATION_FAILED,
        418: FailureKind.UNEXPECTED_STATUS,
        500: FailureKind.SERVER_ERROR,
        503: FailureKind.SERVER_ERROR,
    }
    for status, kind in expected.items():
        sleep = _RecordingSleep()

        def handler(request: httpx.Request, status: int = status) -> httpx.Response:
            return httpx.Response(
                status,
                json={
                    "message": "bad",
                    "errors": [{"message": "field x", "in": "name"}],
                },
            )

        result = _run(
            _executor(handler, sleep=sleep), RequestSpec(method="GET", endpoint="/x")
        )

        assert result.failure is not None
        assert result.failure.kind is kind, status
        assert result.attempts == 1
        assert sleep.calls == []
        assert result.failure.errors[0].location == "name"


def test_empty_success_body_decodes_to_empty_mapping() -> None:
    """A 204-style empty body is a successful empty payload."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    result = _run(
        _executor(handler),
        RequestSpec(method="POST", endpoint="/x", json_body={}),
    )

    assert result.ok
    assert result.payload == {}


def test_undecodable_success_body_is_invalid_response() -> None:
    """A 200 with non-JSON content is an INVALID_RESPONSE failure."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    result = _run(_executor(handler), RequestSpec(method="GET", endpoint="/x"))

    assert result.failure is not None
    assert result.failure.kind is FailureKind.INVALID_RESPONSE


def test_concurrent_executions_share_one_budget() -> None:
    """Two in-flight operations cannot both spend the last unit above the threshold."""
    seen: list[httpx.Request] = []
    budget = RateBudget(clock=lambda: 0.0, burst_remaining=11)
    spec = RequestSpec(method="GET", endpoint="/x")

    async def _go():
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            await release.wait()
            return httpx.Response(200, json={"id": "1"})

        executor = _executor(handler, budget=budget)

        async def second():
            await asyncio.sleep(0)
            result = await executor.execute(spec)
            release.set()
            return result

        try:
            return await asyncio.gather(executor.execute(spec), second())
        finally:
            await executor.aclose()

    first, second = asyncio.run(_go())

    assert first.ok
    assert second.failure is not None
    assert second.failure.kind is FailureKind.THROTTLED_LOCALLY
    assert len(seen) == 1
    assert budget.burst_remaining == budget.burst_threshold


def test_cancellation_during_backoff_propagates() -> None:
    """Cancelling an operation while it waits to retry is not turned into a failure."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(429, json={"message": "slow down"})

    async def _go() -> None:
        sleeping = asyncio.Event()

        async def blocking_sleep(seconds: float) -> None:
            sleeping.set()
            await asyncio.Event().wait()

        executor = _executor(handler, sleep=blocking_sleep)
        task = asyncio.create_task(
            executor.execute(RequestSpec(method="GET", endpoint="/x"))
        )
        await sleeping.wait()
        task.cancel()
        try:
            with pytest.raises(asyncio.CancelledError):
                await task
        finally:
            await executor.aclose()

    asyncio.run(_go())

    assert len(calls) == 1
