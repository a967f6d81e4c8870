"""Concrete Content Authority Service implementation."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping

import httpx
from pydantic import BaseModel, ValidationError

from packages.steward_shared.config import StewardSettings
from packages.steward_shared.logging import get_logger
from resources.adapters.hubspot import (
    CmsAdapter,
    CmsFailure,
    ContentType,
    FailureKind,
    FileUpload,
    HubSpotCmsAdapter,
    PostListFilter,
    RateBudgetStatus,
    resolve_hubspot_adapter_settings,
)
from resources.adapters.hubspot.executor import Sleep
from services.content.content_authority.audit import (
    AuditSink,
    FanOutAuditSink,
    JsonlAuditSink,
    LoggingAuditSink,
    OperationIdSource,
    OperationRecord,
    read_records,
)
from services.content.content_authority.config import (
    SERVICE_COMPONENT_ID,
    ContentAuthoritySettings,
    resolve_content_authority_settings,
)
from services.content.content_authority.domain import RemoteObject, TreeAddress
from services.content.content_authority.mutations import (
    insert_widget,
    merge_metadata,
    remove_widget,
    replace_content_body,
    restore_snapshot,
    update_widget_content,
)
from services.content.content_authority.pipeline import PipelineOutcome, UpdatePipeline
from services.content.content_authority.service import (
    ContentAuthorityService,
    ServiceResult,
)
from services.content.content_authority.validation import (
    ContentRefRequest,
    CreatePostRequest,
    InsertWidgetRequest,
    ListPostsRequest,
    ListTagsRequest,
    PublishRequest,
    UpdateContentRequest,
    UpdateMetadataRequest,
    UpdateWidgetRequest,
    UploadFileRequest,
    WidgetAddressRequest,
    payload_without_none,
)

_LOGGER = get_logger(__name__)


class DefaultContentAuthorityService(ContentAuthorityService):
    """Default implementation backed by the HubSpot CMS adapter."""

    def __init__(
        self,
        *,
        settings: ContentAuthoritySettings,
        adapter: CmsAdapter,
        audit_sink: AuditSink,
        ids: OperationIdSource | None = None,
    ) -> None:
        self._settings = settings
        self._adapter = adapter
        self._pipeline = UpdatePipeline(
            adapter=adapter, audit_sink=audit_sink, ids=ids
        )

    @classmethod
    def from_settings(
        cls,
        settings: StewardSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
        audit_sink: AuditSink | None = None,
    ) -> "DefaultContentAuthorityService":
        """Build the service and its owned adapter from typed root settings."""
        service_settings = resolve_content_authority_settings(settings)
        adapter_settings = resolve_hubspot_adapter_settings(settings)
        sinks: list[AuditSink] = [audit_sink or LoggingAuditSink()]
        next_id = 1
        if service_settings.audit_log_path:
            jsonl_sink = JsonlAuditSink(service_settings.audit_log_path)
            sinks.append(jsonl_sink)
            existing = read_records(jsonl_sink.path)
            if existing:
                next_id = max(record.operation_id for record in existing) + 1
        return cls(
            settings=service_settings,
            adapter=HubSpotCmsAdapter.from_settings(
                adapter_settings, transport=transport, sleep=sleep
            ),
            audit_sink=sinks[0] if len(sinks) == 1 else FanOutAuditSink(*sinks),
            ids=OperationIdSource(start=next_id),
        )

    async def aclose(self) -> None:
        """Release adapter transport resources."""
        await self._adapter.aclose()

    def rate_limit_status(self) -> RateBudgetStatus:
        """Return the current rate budget snapshot."""
        return self._adapter.rate_limit_status()

    async def authenticate(self) -> ServiceResult[dict[str, Any]]:
        """Validate the configured access token."""
        result = await self._adapter.validate_token()
        if result.failure is not None:
            return self._failure(result.failure)
        return self._success({"valid": True, "account": result.payload or {}})

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
        request, failure = self._validate_request(
            model=ListPostsRequest,
            payload=payload_without_none(
                limit=limit,
                offset=offset,
                state=state,
                author_name=author_name,
                name=name,
                created_after=created_after,
                updated_after=updated_after,
                archived_in_dashboard=archived_in_dashboard,
            ),
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, ListPostsRequest)

        resolved_limit = min(
            request.limit or self._settings.default_list_limit,
            self._settings.max_list_limit,
        )
        result = await self._adapter.list_posts(
            filters=PostListFilter(
                limit=resolved_limit,
                offset=request.offset,
                state=request.state,
                author_name=request.author_name,
                name=request.name,
                created_after=request.created_after,
                updated_after=request.updated_after,
                archived_in_dashboard=request.archived_in_dashboard,
            )
        )
        if result.failure is not None:
            return self._failure(result.failure)
        return self._success(result.payload or {})

    async def get_object(
        self, *, content_type: ContentType, content_id: str
    ) -> ServiceResult[RemoteObject]:
        """Fetch one complete content object."""
        request, failure = self._validate_request(
            model=ContentRefRequest,
            payload={"content_type": content_type, "content_id": content_id},
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, ContentRefRequest)

        fetched = await self._pipeline.fetch(request.content_type, request.content_id)
        if isinstance(fetched, CmsFailure):
            return self._failure(fetched)
        return self._success(fetched)

    async def list_tags(
        self, *, search_term: str | None = None
    ) -> ServiceResult[dict[str, Any]]:
        """List blog tags, optionally filtered by name."""
        request, failure = self._validate_request(
            model=ListTagsRequest,
            payload=payload_without_none(search_term=search_term),
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, ListTagsRequest)

        result = await self._adapter.list_tags(
            search_term=request.search_term,
            limit=self._settings.tag_list_limit,
        )
        if result.failure is not None:
            return self._failure(result.failure)
        return self._success(result.payload or {})

    async def preview_url(
        self, *, content_type: ContentType, content_id: str
    ) -> ServiceResult[str]:
        """Build ``url?hs_preview=<key>`` or ``url?hsPreview=true``."""
        request, failure = self._validate_request(
            model=ContentRefRequest,
            payload={"content_type": content_type, "content_id": content_id},
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, ContentRefRequest)

        fetched = await self._pipeline.fetch(request.content_type, request.content_id)
        if isinstance(fetched, CmsFailure):
            return self._failure(fetched)
        if not fetched.url:
            return self._failure(
                CmsFailure(
                    kind=FailureKind.NOT_FOUND,
                    message=(
                        "Content does not have a URL yet. Save the content "
                        "first to generate a URL."
                    ),
                    details={"content_id": request.content_id},
                )
            )
        if fetched.preview_key:
            return self._success(f"{fetched.url}?hs_preview={fetched.preview_key}")
        return self._success(f"{fetched.url}?hsPreview=true")

    async def create_post(
        self, *, post: Mapping[str, Any]
    ) -> ServiceResult[RemoteObject]:
        """Create one blog post in draft state."""
        request, failure = self._validate_request(
            model=CreatePostRequest, payload={"post": dict(post)}
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, CreatePostRequest)

        outcome = await self._pipeline.create(
            body=request.post.to_wire(),
            input_parameters=request.post.model_dump(exclude_none=True),
        )
        return self._from_outcome(outcome, outcome.object)

    async def update_metadata(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        metadata: Mapping[str, Any],
        if_updated: str | None = None,
    ) -> ServiceResult[RemoteObject]:
        """Merge flat metadata fields without touching body or layout."""
        request, failure = self._validate_request(
            model=UpdateMetadataRequest,
            payload={
                "content_type": content_type,
                "content_id": content_id,
                "metadata": dict(metadata),
                "if_updated": if_updated,
            },
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, UpdateMetadataRequest)

        changes = request.metadata.changes()
        if not changes:
            return self._failure(
                CmsFailure(
                    kind=FailureKind.INVALID_REQUEST,
                    message="At least one metadata field must be provided.",
                )
            )
        outcome = await self._pipeline.run(
            operation_kind="update_metadata",
            content_type=request.content_type,
            content_id=request.content_id,
            input_parameters={"metadata": changes},
            mutate=merge_metadata(request.metadata),
            if_updated=request.if_updated,
        )
        return self._from_outcome(outcome, outcome.object)

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
        request, failure = self._validate_request(
            model=UpdateContentRequest,
            payload={
                "content_type": content_type,
                "content_id": content_id,
                "content": payload_without_none(
                    post_body=post_body, post_summary=post_summary
                ),
                "if_updated": if_updated,
            },
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, UpdateContentRequest)

        outcome = await self._pipeline.run(
            operation_kind="update_content",
            content_type=request.content_type,
            content_id=request.content_id,
            input_parameters={
                "content_length": len(request.content.post_body),
                "summary_provided": request.content.post_summary is not None,
            },
            mutate=replace_content_body(request.content),
            if_updated=request.if_updated,
        )
        return self._from_outcome(outcome, outcome.object)

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
        update = payload_without_none(
            html=html,
            params=dict(params) if params is not None else None,
            styles=dict(styles) if styles is not None else None,
        )
        request, failure = self._validate_request(
            model=UpdateWidgetRequest,
            payload={
                "content_type": content_type,
                "content_id": content_id,
                "section": address.section,
                "row": address.row,
                "column": address.column,
                "widget": address.widget,
                "update": update,
                "if_updated": if_updated,
            },
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, UpdateWidgetRequest)
        if not update:
            return self._failure(
                CmsFailure(
                    kind=FailureKind.INVALID_REQUEST,
                    message="Provide at least one of html, params or styles.",
                )
            )

        outcome = await self._pipeline.run(
            operation_kind="update_widget",
            content_type=request.content_type,
            content_id=request.content_id,
            input_parameters={
                "address": request.address().as_dict(),
                "fields": sorted(update),
            },
            mutate=update_widget_content(request.address(), request.update),
            if_updated=request.if_updated,
        )
        return self._from_outcome(outcome, outcome.object)

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
        request, failure = self._validate_request(
            model=InsertWidgetRequest,
            payload={
                "content_type": content_type,
                "content_id": content_id,
                "section": cell.section,
                "row": cell.row,
                "column": cell.column,
                "widget": dict(widget),
                "if_updated": if_updated,
            },
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, InsertWidgetRequest)

        outcome = await self._pipeline.run(
            operation_kind="insert_widget",
            content_type=request.content_type,
            content_id=request.content_id,
            input_parameters={
                "cell": request.address().as_dict(),
                "widget": request.widget.model_dump(exclude_none=True),
            },
            mutate=insert_widget(request.address(), request.widget),
            expected_widget_delta=1,
            if_updated=request.if_updated,
        )
        return self._from_outcome(outcome, outcome.detail)

    async def remove_widget(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        address: TreeAddress,
        if_updated: str | None = None,
    ) -> ServiceResult[dict[str, Any]]:
        """Remove one widget and return it."""
        request, failure = self._validate_request(
            model=WidgetAddressRequest,
            payload={
                "content_type": content_type,
                "content_id": content_id,
                "section": address.section,
                "row": address.row,
                "column": address.column,
                "widget": address.widget,
                "if_updated": if_updated,
            },
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, WidgetAddressRequest)

        outcome = await self._pipeline.run(
            operation_kind="remove_widget",
            content_type=request.content_type,
            content_id=request.content_id,
            input_parameters={"address": request.address().as_dict()},
            mutate=remove_widget(request.address()),
            expected_widget_delta=-1,
            if_updated=request.if_updated,
        )
        removed = outcome.detail.to_wire() if outcome.ok and outcome.detail else None
        return self._from_outcome(outcome, removed)

    async def publish(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        publish_date: str | None = None,
    ) -> ServiceResult[dict[str, Any]]:
        """Push the current draft live, optionally scheduled."""
        request, failure = self._validate_request(
            model=PublishRequest,
            payload={
                "content_type": content_type,
                "content_id": content_id,
                "publish_date": publish_date,
            },
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, PublishRequest)

        outcome = await self._pipeline.publish(
            content_type=request.content_type,
            content_id=request.content_id,
            publish_date=request.publish_date,
        )
        return self._from_outcome(outcome, outcome.record.after_snapshot)

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
        request, failure = self._validate_request(
            model=UploadFileRequest,
            payload=payload_without_none(
                file_content=file_content,
                file_name=file_name,
                folder_path=folder_path,
                access=access,
                ttl=ttl,
            ),
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, UploadFileRequest)

        result = await self._adapter.upload_file(
            upload=FileUpload(
                file_content=request.file_content,
                file_name=request.file_name,
                folder_path=request.folder_path,
                access=request.access,
                ttl=request.ttl,
            )
        )
        if result.failure is not None:
            return self._failure(result.failure)
        payload = result.payload or {}
        _LOGGER.info("File uploaded: %s", payload.get("url", ""))
        return self._success(payload)

    async def restore_snapshot(
        self, *, record: OperationRecord
    ) -> ServiceResult[RemoteObject]:
        """Write a record's before snapshot back through the pipeline."""
        if record.before_snapshot is None:
            return self._failure(
                CmsFailure(
                    kind=FailureKind.INVALID_REQUEST,
                    message=(
                        f"Operation {record.operation_id} has no before snapshot "
                        "to restore."
                    ),
                )
            )
        request, failure = self._validate_request(
            model=ContentRefRequest,
            payload={
                "content_type": record.content_type,
                "content_id": record.content_id,
            },
        )
        if failure is not None:
            return self._failure(failure)
        assert isinstance(request, ContentRefRequest)

        outcome = await self._pipeline.run(
            operation_kind="restore_snapshot",
            content_type=request.content_type,
            content_id=request.content_id,
            input_parameters={"restored_operation_id": record.operation_id},
            mutate=restore_snapshot(record.before_snapshot),
        )
        return self._from_outcome(outcome, outcome.object)

    def _validate_request(
        self,
        *,
        model: type[BaseModel],
        payload: dict[str, object],
    ) -> tuple[BaseModel | None, CmsFailure | None]:
        """Validate one operation's request payload."""
        try:
            return model.model_validate(payload), None
        except ValidationError as exc:
            first_error = exc.errors()[0]
            location = ".".join(str(item) for item in first_error.get("loc", ()))
            message = str(first_error.get("msg", "invalid request"))
            return None, CmsFailure(
                kind=FailureKind.INVALID_REQUEST,
                message=f"{location}: {message}" if location else message,
                details={"service": SERVICE_COMPONENT_ID},
            )

    def _success(self, payload: Any) -> ServiceResult[Any]:
        return ServiceResult(payload=payload, rate_limit=self.rate_limit_status())

    def _failure(self, failure: CmsFailure) -> ServiceResult[Any]:
        return ServiceResult(failure=failure, rate_limit=self.rate_limit_status())

    def _from_outcome(self, outcome: PipelineOutcome, payload: Any) -> ServiceResult[Any]:
        warnings = outcome.validation.warnings if outcome.validation else ()
        return ServiceResult(
            payload=payload if outcome.ok else None,
            failure=outcome.failure,
            record=outcome.record,
            warnings=warnings,
            rate_limit=self.rate_limit_status(),
        )
