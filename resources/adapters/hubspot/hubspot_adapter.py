"""HubSpot CMS v3 adapter over the rate-governed request executor."""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import re
from typing import Any
from urllib.parse import quote

import httpx

from packages.steward_shared.http import (
    AsyncHttpClient,
    HttpRequestError,
    HttpStatusError,
)
from packages.steward_shared.logging import get_logger
from resources.adapters.hubspot.adapter import (
    ContentType,
    FileUpload,
    PostListFilter,
)
from resources.adapters.hubspot.backoff import BackoffPolicy
from resources.adapters.hubspot.config import HubSpotAdapterSettings
from resources.adapters.hubspot.executor import RequestExecutor, RequestSpec, Sleep
from resources.adapters.hubspot.failures import (
    CmsFailure,
    FailureKind,
    RequestResult,
    failed,
)
from resources.adapters.hubspot.rate_budget import RateBudget, RateBudgetStatus

_LOGGER = get_logger(__name__)

MAX_PAGE_LIMIT = 100
_DATA_URI_PREFIX = re.compile(r"^data:[^;]+;base64,")


class HubSpotCmsAdapter:
    """CMS adapter backed by HubSpot's REST API."""

    def __init__(
        self,
        *,
        executor: RequestExecutor,
        fetch_client: AsyncHttpClient | None = None,
    ) -> None:
        self._executor = executor
        self._fetch_client = fetch_client or AsyncHttpClient(follow_redirects=True)

    @classmethod
    def from_settings(
        cls,
        settings: HubSpotAdapterSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Any = None,
    ) -> HubSpotCmsAdapter:
        """Build an adapter with its own budget, backoff and HTTP clients."""
        client = AsyncHttpClient(
            base_url=settings.base_url.rstrip("/"),
            timeout_seconds=settings.timeout_seconds,
            headers={"Authorization": f"Bearer {settings.access_token}"},
            transport=transport,
        )
        budget_kwargs: dict[str, Any] = {}
        if clock is not None:
            budget_kwargs["clock"] = clock
        budget = RateBudget(
            burst_capacity=settings.burst_capacity,
            daily_capacity=settings.daily_capacity,
            burst_window_ms=settings.burst_window_ms,
            safety_margin=settings.safety_margin,
            **budget_kwargs,
        )
        executor = RequestExecutor(
            client=client,
            budget=budget,
            backoff=BackoffPolicy(
                base_delay_ms=settings.base_delay_ms,
                jitter_ceiling_ms=settings.jitter_ceiling_ms,
            ),
            max_retries=settings.max_retries,
            sleep=sleep,
        )
        fetch_client = AsyncHttpClient(
            timeout_seconds=settings.timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )
        return cls(executor=executor, fetch_client=fetch_client)

    @property
    def budget(self) -> RateBudget:
        """Rate budget shared by every request issued through this adapter."""
        return self._executor.budget

    async def aclose(self) -> None:
        """Close both HTTP clients."""
        await self._executor.aclose()
        await self._fetch_client.aclose()

    async def validate_token(self) -> RequestResult[dict[str, Any]]:
        """Validate the access token against the account details endpoint."""
        return await self._executor.execute(
            RequestSpec(method="GET", endpoint="/integrations/v1/me")
        )

    async def list_posts(
        self, *, filters: PostListFilter
    ) -> RequestResult[dict[str, Any]]:
        """List blog posts using the double-underscore filter syntax."""
        params: dict[str, str] = {"limit": str(min(filters.limit, MAX_PAGE_LIMIT))}
        if filters.offset:
            params["offset"] = str(filters.offset)
        if filters.state:
            params["state"] = filters.state
        if filters.author_name:
            params["authorName__icontains"] = filters.author_name
        if filters.name:
            params["name__icontains"] = filters.name
        if filters.created_after:
            params["created__gt"] = filters.created_after
        if filters.updated_after:
            params["updated__gt"] = filters.updated_after
        if filters.archived_in_dashboard is not None:
            params["archivedInDashboard"] = str(filters.archived_in_dashboard).lower()
        return await self._executor.execute(
            RequestSpec(
                method="GET",
                endpoint=ContentType.BLOG_POST.collection_path,
                params=params,
            )
        )

    async def get_object(
        self, *, content_type: ContentType, content_id: str
    ) -> RequestResult[dict[str, Any]]:
        """Fetch the complete current state of one object."""
        return await self._executor.execute(
            RequestSpec(method="GET", endpoint=_object_path(content_type, content_id))
        )

    async def write_draft(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        body: dict[str, Any],
    ) -> RequestResult[dict[str, Any]]:
        """PATCH the draft endpoint with the entire object."""
        return await self._executor.execute(
            RequestSpec(
                method="PATCH",
                endpoint=f"{_object_path(content_type, content_id)}/draft",
                json_body=body,
            )
        )

    async def push_live(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        publish_date: str | None = None,
    ) -> RequestResult[dict[str, Any]]:
        """Push the current draft live, optionally at ``publish_date``."""
        body: dict[str, Any] = {}
        if publish_date:
            body["publishDate"] = publish_date
        return await self._executor.execute(
            RequestSpec(
                method="POST",
                endpoint=f"{_object_path(content_type, content_id)}/draft/push-live",
                json_body=body,
            )
        )

    async def create_post(
        self, *, body: dict[str, Any]
    ) -> RequestResult[dict[str, Any]]:
        """Create one blog post; the remote always receives ``DRAFT`` state."""
        payload = {**body, "state": "DRAFT"}
        return await self._executor.execute(
            RequestSpec(
                method="POST",
                endpoint=ContentType.BLOG_POST.collection_path,
                json_body=payload,
            )
        )

    async def list_tags(
        self, *, search_term: str | None = None, limit: int = MAX_PAGE_LIMIT
    ) -> RequestResult[dict[str, Any]]:
        """List blog tags, optionally filtered by a name substring."""
        params = {"limit": str(max(1, min(limit, MAX_PAGE_LIMIT)))}
        if search_term:
            params["name__icontains"] = search_term
        return await self._executor.execute(
            RequestSpec(method="GET", endpoint="/cms/v3/blogs/tags", params=params)
        )

    async def upload_file(
        self, *, upload: FileUpload
    ) -> RequestResult[dict[str, Any]]:
        """Upload one file from a base64 string, data URI or http(s) URL."""
        if upload.file_content.startswith(("http://", "https://")):
            content = await self._fetch_source(upload.file_content)
        else:
            content = _decode_base64(upload.file_content)
        if isinstance(content, CmsFailure):
            return failed(content)

        options: dict[str, Any] = {
            "access": str(upload.access),
            "duplicateValidationStrategy": "NONE",
        }
        if upload.ttl:
            options["ttl"] = upload.ttl
        data = {"options": json.dumps(options)}
        if upload.folder_path:
            data["folderPath"] = upload.folder_path

        _LOGGER.info("Uploading file %s (%d bytes)", upload.file_name, len(content))
        return await self._executor.execute(
            RequestSpec(
                method="POST",
                endpoint="/files/v3/files",
                files={"file": (upload.file_name, content)},
                data=data,
            )
        )

    def rate_limit_status(self) -> RateBudgetStatus:
        """Return the current rate budget snapshot."""
        return self._executor.budget.status()

    async def _fetch_source(self, url: str) -> bytes | CmsFailure:
        try:
            response = await self._fetch_client.get(url)
        except HttpRequestError as exc:
            _LOGGER.error("Failed to fetch file from URL %s", url)
            return CmsFailure(
                kind=FailureKind.NETWORK_TRANSIENT,
                message=f"Failed to fetch file from URL: {exc.cause or exc}",
                details={"source_url": url},
            )
        except HttpStatusError as exc:
            _LOGGER.error("Failed to fetch file from URL %s (status=%s)", url, exc.status_code)
            return CmsFailure(
                kind=FailureKind.INVALID_REQUEST,
                message=f"Failed to fetch file from URL: HTTP {exc.status_code}",
                details={"source_url": url, "source_status": exc.status_code},
            )
        return response.content


def _object_path(content_type: ContentType, content_id: str) -> str:
    return f"{content_type.collection_path}/{quote(content_id, safe='')}"


def _decode_base64(value: str) -> bytes | CmsFailure:
    encoded = _DATA_URI_PREFIX.sub("", value.strip(), count=1)
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return CmsFailure(
            kind=FailureKind.INVALID_REQUEST,
            message="File content is neither an http(s) URL nor valid base64 data.",
        )
