"""Transport-agnostic CMS adapter contract and request DTOs."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from resources.adapters.hubspot.failures import RequestResult
from resources.adapters.hubspot.rate_budget import RateBudgetStatus


class ContentType(StrEnum):
    """Remote content object families with their collection endpoints."""

    BLOG_POST = "blog-post"
    SITE_PAGE = "site-page"
    LANDING_PAGE = "landing-page"

    @property
    def collection_path(self) -> str:
        """Return the CMS v3 collection path for this content type."""
        return _COLLECTION_PATHS[self]


_COLLECTION_PATHS = {
    ContentType.BLOG_POST: "/cms/v3/blogs/posts",
    ContentType.SITE_PAGE: "/cms/v3/pages/site-pages",
    ContentType.LANDING_PAGE: "/cms/v3/pages/landing-pages",
}


class FileAccess(StrEnum):
    """Visibility level applied to uploaded files."""

    PUBLIC_INDEXABLE = "PUBLIC_INDEXABLE"
    PUBLIC_NOT_INDEXABLE = "PUBLIC_NOT_INDEXABLE"
    PRIVATE = "PRIVATE"


class PostListFilter(BaseModel):
    """Filters and pagination for listing blog posts."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)
    state: str | None = None
    author_name: str | None = None
    name: str | None = None
    created_after: str | None = None
    updated_after: str | None = None
    archived_in_dashboard: bool | None = None


class FileUpload(BaseModel):
    """One file upload request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    file_content: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    folder_path: str | None = None
    access: FileAccess = FileAccess.PUBLIC_INDEXABLE
    ttl: str | None = None


class CmsAdapter(Protocol):
    """Protocol for rate-governed CMS content access."""

    async def validate_token(self) -> RequestResult[dict[str, Any]]:
        """Validate the configured access token."""

    async def list_posts(
        self, *, filters: PostListFilter
    ) -> RequestResult[dict[str, Any]]:
        """List blog posts matching ``filters``."""

    async def get_object(
        self, *, content_type: ContentType, content_id: str
    ) -> RequestResult[dict[str, Any]]:
        """Fetch one complete content object."""

    async def write_draft(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        body: dict[str, Any],
    ) -> RequestResult[dict[str, Any]]:
        """Replace the draft of one object with ``body``."""

    async def push_live(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        publish_date: str | None = None,
    ) -> RequestResult[dict[str, Any]]:
        """Publish the current draft, optionally scheduled."""

    async def create_post(
        self, *, body: dict[str, Any]
    ) -> RequestResult[dict[str, Any]]:
        """Create one blog post draft."""

    async def list_tags(
        self, *, search_term: str | None = None, limit: int = 100
    ) -> RequestResult[dict[str, Any]]:
        """List blog tags, optionally filtered by name."""

    async def upload_file(
        self, *, upload: FileUpload
    ) -> RequestResult[dict[str, Any]]:
        """Upload one file to the file manager."""

    def rate_limit_status(self) -> RateBudgetStatus:
        """Return the current rate budget snapshot."""

    async def aclose(self) -> None:
        """Release transport resources."""
