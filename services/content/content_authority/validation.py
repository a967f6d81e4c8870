"""Request validation models for Content Authority Service public API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resources.adapters.hubspot import ContentType, FileAccess
from services.content.content_authority.domain import (
    ContentBodyUpdate,
    MetadataUpdate,
    NewPost,
    NewWidget,
    TreeAddress,
    WidgetContentUpdate,
)


def _strip_text(value: object) -> object:
    """Normalize surrounding whitespace for textual request fields."""
    if isinstance(value, str):
        return value.strip()
    return value


def _none_if_blank(value: object) -> object:
    """Treat blank optional strings as absent."""
    if isinstance(value, str) and not value.strip():
        return None
    return _strip_text(value)


class ContentRefRequest(BaseModel):
    """Validate one content object reference."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    content_type: ContentType
    content_id: str = Field(min_length=1, pattern=r"^[A-Za-z0-9_-]+$")

    @field_validator("content_id", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        """Normalize surrounding whitespace for content id."""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return _strip_text(value)


class MutationRequest(ContentRefRequest):
    """Content reference plus the optional optimistic precondition."""

    if_updated: str | None = None

    @field_validator("if_updated", mode="before")
    @classmethod
    def _blank_precondition(cls, value: object) -> object:
        """Blank precondition means no precondition."""
        return _none_if_blank(value)


class ListPostsRequest(BaseModel):
    """Validate one list-posts request payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    limit: int | None = Field(default=None, gt=0)
    offset: int = Field(default=0, ge=0)
    state: str | None = None
    author_name: str | None = None
    name: str | None = None
    created_after: str | None = None
    updated_after: str | None = None
    archived_in_dashboard: bool | None = None

    @field_validator(
        "state", "author_name", "name", "created_after", "updated_after", mode="before"
    )
    @classmethod
    def _blank_filters(cls, value: object) -> object:
        """Ignore blank filter values."""
        return _none_if_blank(value)

    @field_validator("state")
    @classmethod
    def _upper_state(cls, value: str | None) -> str | None:
        """Remote state values are upper case."""
        return value.upper() if value else value


class ListTagsRequest(BaseModel):
    """Validate one list-tags request payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    search_term: str | None = None

    @field_validator("search_term", mode="before")
    @classmethod
    def _blank_search(cls, value: object) -> object:
        """Blank search terms list every tag."""
        return _none_if_blank(value)


class UpdateMetadataRequest(MutationRequest):
    """Validate one metadata update."""

    metadata: MetadataUpdate


class UpdateContentRequest(MutationRequest):
    """Validate one post body replacement."""

    content: ContentBodyUpdate


class WidgetAddressRequest(MutationRequest):
    """Validate one widget address."""

    section: str = Field(min_length=1)
    row: int
    column: int
    widget: int

    @field_validator("section", mode="before")
    @classmethod
    def _strip_section(cls, value: object) -> object:
        """Normalize surrounding whitespace for the section name."""
        return _strip_text(value)

    def address(self) -> TreeAddress:
        """Return the validated widget address."""
        return TreeAddress(self.section, self.row, self.column, self.widget)


class UpdateWidgetRequest(WidgetAddressRequest):
    """Validate one widget content update."""

    update: WidgetContentUpdate


class InsertWidgetRequest(MutationRequest):
    """Validate one widget insertion into a cell."""

    section: str = Field(min_length=1)
    row: int
    column: int
    widget: NewWidget

    def address(self) -> TreeAddress:
        """Return the validated cell address."""
        return TreeAddress(self.section, self.row, self.column)


class PublishRequest(ContentRefRequest):
    """Validate one publish request."""

    publish_date: str | None = None

    @field_validator("publish_date", mode="before")
    @classmethod
    def _blank_date(cls, value: object) -> object:
        """Blank dates publish immediately."""
        return _none_if_blank(value)


class CreatePostRequest(BaseModel):
    """Validate one post creation request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    post: NewPost


class UploadFileRequest(BaseModel):
    """Validate one file upload request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    file_content: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    folder_path: str | None = None
    access: FileAccess = FileAccess.PUBLIC_INDEXABLE
    ttl: str | None = None

    @field_validator("file_name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        """Normalize surrounding whitespace for the file name."""
        return _strip_text(value)

    @field_validator("folder_path", "ttl", mode="before")
    @classmethod
    def _blank_optional(cls, value: object) -> object:
        """Treat blank optional values as absent."""
        return _none_if_blank(value)


def payload_without_none(**values: Any) -> dict[str, Any]:
    """Drop ``None`` values so model defaults apply."""
    return {key: value for key, value in values.items() if value is not None}
