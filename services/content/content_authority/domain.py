"""Domain models for remote content objects and their layout trees.

Remote payloads are parsed into pydantic models that keep unknown keys at
every level, so a fetch/serialize round trip reproduces the wire object.
Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
)
from pydantic.alias_generators import to_camel

_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="allow",
)


class _WireModel(BaseModel):
    """Base for remote shapes that must round-trip unknown fields."""

    model_config = _WIRE_CONFIG

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys, emitting only fields that were set."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class WidgetBody(_WireModel):
    """Widget body; ``html`` is the only key updates may replace."""

    html: str | None = None


class _WidgetBase(_WireModel):
    id: str | int | None = None
    name: str | None = None
    body: WidgetBody | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    styles: dict[str, Any] = Field(default_factory=dict)


class RichTextWidget(_WidgetBase):
    """Rich text widget with HTML body."""

    type: Literal["rich_text"] = "rich_text"


class ImageWidget(_WidgetBase):
    """Image widget; source and alt text live in ``params``."""

    type: Literal["image"] = "image"


class ModuleWidget(_WidgetBase):
    """Custom module widget."""

    type: Literal["module"] = "module"


class OpaqueWidget(_WidgetBase):
    """Widget of an unrecognised type, passed through untouched."""

    type: str | None = None


KNOWN_WIDGET_TYPES = frozenset({"rich_text", "image", "module"})


def _widget_tag(value: Any) -> str:
    raw = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return raw if raw in KNOWN_WIDGET_TYPES else "opaque"


Widget = Annotated[
    Union[
        Annotated[RichTextWidget, Tag("rich_text")],
        Annotated[ImageWidget, Tag("image")],
        Annotated[ModuleWidget, Tag("module")],
        Annotated[OpaqueWidget, Tag("opaque")],
    ],
    Discriminator(_widget_tag),
]


class Cell(_WireModel):
    """One column of a row holding an ordered widget list."""

    widgets: list[Widget] = Field(default_factory=list)


class Row(_WireModel):
    """One row of cells."""

    cells: list[Cell] = Field(default_factory=list)


class Section(_WireModel):
    """One named layout section."""

    rows: list[Row] = Field(default_factory=list)


class RemoteObject(_WireModel):
    """Complete remote content object: flat fields plus the layout tree."""

    id: str | int | None = None
    name: str | None = None
    slug: str | None = None
    state: str | None = None
    current_state: str | None = None
    html_title: str | None = None
    meta_description: str | None = None
    featured_image: str | None = None
    featured_image_alt_text: str | None = None
    use_featured_image: bool | None = None
    author_name: str | None = None
    blog_author_id: str | int | None = None
    content_group_id: str | int | None = None
    tag_ids: list[int | str] | None = None
    publish_date: str | None = None
    created: str | None = None
    updated: str | None = None
    url: str | None = None
    absolute_url: str | None = None
    preview_key: str | None = None
    post_body: str | None = None
    post_summary: str | None = None
    currently_published: bool | None = None
    widgets: dict[str, Any] | None = None
    widget_containers: dict[str, Any] | None = None
    layout_sections: dict[str, Section] | None = None

    @classmethod
    def from_wire(cls, payload: Any) -> RemoteObject:
        """Parse one wire payload."""
        return cls.model_validate(payload)


@dataclass(frozen=True)
class TreeAddress:
    """Structural address of a widget, or of a cell when ``widget`` is None."""

    section: str
    row: int
    column: int
    widget: int | None = None

    @property
    def is_cell(self) -> bool:
        """Return True when this address designates an insertion point."""
        return self.widget is None

    def cell(self) -> TreeAddress:
        """Return the enclosing cell address."""
        return TreeAddress(self.section, self.row, self.column)

    def with_widget(self, index: int) -> TreeAddress:
        """Return the address of widget ``index`` in this cell."""
        return TreeAddress(self.section, self.row, self.column, index)

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping."""
        data: dict[str, Any] = {
            "section": self.section,
            "row": self.row,
            "column": self.column,
        }
        if self.widget is not None:
            data["widget"] = self.widget
        return data

    def __str__(self) -> str:
        parts = [self.section, str(self.row), str(self.column)]
        if self.widget is not None:
            parts.append(str(self.widget))
        return "/".join(parts)


@dataclass(frozen=True)
class AddressNotFound:
    """Reason an address did not resolve inside a snapshot."""

    address: TreeAddress
    reason: str


class _UpdateModel(BaseModel):
    """Narrow update payloads; unknown keys are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    def changes(self) -> dict[str, Any]:
        """Return snake_case field changes that were explicitly provided."""
        return self.model_dump(exclude_unset=True)


class MetadataUpdate(_UpdateModel):
    """Flat metadata changes. Carries no body or layout fields."""

    name: str | None = None
    slug: str | None = None
    meta_description: str | None = None
    html_title: str | None = None
    featured_image: str | None = None
    featured_image_alt_text: str | None = None
    blog_author_id: str | None = None
    author_name: str | None = None
    tag_ids: list[int] | None = None


class ContentBodyUpdate(_UpdateModel):
    """Replacement of the post body and optionally the summary."""

    post_body: str
    post_summary: str | None = None


class WidgetContentUpdate(_UpdateModel):
    """Changes limited to ``body.html``, ``params`` and ``styles``."""

    html: str | None = None
    params: dict[str, Any] | None = None
    styles: dict[str, Any] | None = None


class NewWidget(_UpdateModel):
    """Widget to append into a cell."""

    type: str = Field(min_length=1)
    id: str | None = None
    name: str | None = None
    html: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    styles: dict[str, Any] = Field(default_factory=dict)

    def to_widget(self) -> Any:
        """Build the tagged widget model for insertion."""
        payload: dict[str, Any] = {
            "type": self.type,
            "params": dict(self.params),
            "styles": dict(self.styles),
        }
        if self.id is not None:
            payload["id"] = self.id
        if self.name is not None:
            payload["name"] = self.name
        if self.html is not None:
            payload["body"] = {"html": self.html}
        return Cell.model_validate({"widgets": [payload]}).widgets[0]


class NewPost(_UpdateModel):
    """Fields accepted when creating a blog post draft."""

    name: str = Field(min_length=1)
    slug: str | None = None
    content_group_id: str | None = None
    blog_author_id: str | None = None
    html_title: str | None = None
    post_body: str | None = None
    post_summary: str | None = None
    meta_description: str | None = None
    tag_ids: list[int] | None = None
    featured_image: str | None = None
    featured_image_alt_text: str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase create body with empty values dropped."""
        body = {
            key: value
            for key, value in self.model_dump(by_alias=True).items()
            if value not in (None, "", [])
        }
        if self.featured_image:
            body["useFeaturedImage"] = True
        return body
