"""Authoritative in-process Python API for Content Authority Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Mapping, TypeVar

from resources.adapters.hubspot import CmsFailure, ContentType, RateBudgetStatus
from services.content.content_authority.audit import OperationRecord
from services.content.content_authority.domain import RemoteObject, TreeAddress

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Payload or failure of one service call plus the budget afterwards."""

    payload: T | None = None
    failure: CmsFailure | None = None
    record: OperationRecord | None = None
    warnings: tuple[str, ...] = ()
    rate_limit: RateBudgetStatus | None = None

    @property
    def ok(self) -> bool:
        """Return True when no failure is present."""
        return self.failure is None


class ContentAuthorityService(ABC):
    """Public API for reading and safely mutating remote CMS content."""

    @abstractmethod
    async def authenticate(self) -> ServiceResult[dict[str, Any]]:
        """Validate the configured access token."""

    @abstractmethod
    async def list_posts(
        self,
        *,
        limit: int | None = None,
        offset: int = 0,
        state: str | None = None,
        author_name: str | None = None,
        name: str | None = None,
        created_after: str | None = None,
        updated_after: str | None = None,
        archived_in_dashboard: bool | None = None,
    ) -> ServiceResult[dict[str, Any]]:
        """List blog posts with filtering and pagination."""

    @abstractmethod
    async def get_object(
        self, *, content_type: ContentType, content_id: str
    ) -> ServiceResult[RemoteObject]:
        """Fetch one complete content object."""

    @abstractmethod
    async def list_tags(
        self, *, search_term: str | None = None
    ) -> ServiceResult[dict[str, Any]]:
        """List blog tags, optionally filtered by name."""

    @abstractmethod
    async def preview_url(
        self, *, content_type: ContentType, content_id: str
    ) -> ServiceResult[str]:
        """Build the draft preview URL of one object."""

    @abstractmethod
    async def create_post(
        self, *, post: Mapping[str, Any]
    ) -> ServiceResult[RemoteObject]:
        """Create one blog post in draft state."""

    @abstractmethod
    async def update_metadata(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        metadata: Mapping[str, Any],
        if_updated: str | None = None,
    ) -> ServiceResult[RemoteObject]:
        """Merge flat metadata fields without touching body or layout."""

    @abstractmethod
    async def update_content(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        post_body: str,
        post_summary: str | None = None,
        if_updated: str | None = None,
    ) -> ServiceResult[RemoteObject]:
        """Replace the post body and optionally the summary."""

    @abstractmethod
    async def update_widget(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        address: TreeAddress,
        html: str | None = None,
        params: Mapping[str, Any] | None = None,
        styles: Mapping[str, Any] | None = None,
        if_updated: str | None = None,
    ) -> ServiceResult[RemoteObject]:
        """Update the content of one widget by address."""

    @abstractmethod
    async def insert_widget(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        cell: TreeAddress,
        widget: Mapping[str, Any],
        if_updated: str | None = None,
    ) -> ServiceResult[TreeAddress]:
        """Append one widget to a cell and return its address."""

    @abstractmethod
    async def remove_widget(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        address: TreeAddress,
        if_updated: str | None = None,
    ) -> ServiceResult[dict[str, Any]]:
        """Remove one widget and return it."""

    @abstractmethod
    async def publish(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        publish_date: str | None = None,
    ) -> ServiceResult[dict[str, Any]]:
        """Push the current draft live, optionally scheduled."""

    @abstractmethod
    async def upload_file(
        self,
        *,
        file_content: str,
        file_name: str,
        folder_path: str | None = None,
        access: str | None = None,
        ttl: str | None = None,
    ) -> ServiceResult[dict[str, Any]]:
        """Upload one file and return its remote metadata including URL."""

    @abstractmethod
    def rate_limit_status(self) -> RateBudgetStatus:
        """Return the current rate budget snapshot."""

    @abstractmethod
    async def restore_snapshot(
        self, *, record: OperationRecord
    ) -> ServiceResult[RemoteObject]:
        """Write a record's before snapshot back through the pipeline."""

    @abstractmethod
    async def aclose(self) -> None:
        """Release transport resources."""
