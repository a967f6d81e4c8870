"""Single-purpose mutations applied to a working copy inside the pipeline.

Each builder returns a callable that receives the ``after`` copy and returns
either :class:`Mutated` or a :class:`CmsFailure`. Builders never touch the
``before`` snapshot.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from resources.adapters.hubspot import CmsFailure, FailureKind
from services.content.content_authority.domain import (
    AddressNotFound,
    ContentBodyUpdate,
    MetadataUpdate,
    NewWidget,
    RemoteObject,
    TreeAddress,
    WidgetBody,
    WidgetContentUpdate,
)
from services.content.content_authority.navigator import TreeNavigator
from services.content.content_authority.validator import flatten

# Nested values a flat metadata merge must carry over unchanged.
PINNED_FIELDS = ("post_body", "widgets", "widget_containers", "layout_sections")


@dataclass(frozen=True)
class Mutated:
    """Result of a successful mutation."""

    obj: RemoteObject
    detail: Any = None
    expected_widget_delta: int | None = None


Mutation = Callable[[RemoteObject, RemoteObject], "Mutated | CmsFailure"]

_NAVIGATOR = TreeNavigator()


def address_failure(missing: AddressNotFound) -> CmsFailure:
    """Build the failure reported for an unresolved address."""
    return CmsFailure(
        kind=FailureKind.ADDRESS_NOT_FOUND,
        message=f"Address {missing.address} not found: {missing.reason}",
        details={"address": str(missing.address), "reason": missing.reason},
    )


def merge_metadata(update: MetadataUpdate) -> Mutation:
    """Merge flat metadata, re-pinning body and layout to the fetched values."""

    def apply(before: RemoteObject, after: RemoteObject) -> Mutated | CmsFailure:
        for key, value in update.changes().items():
            setattr(after, key, value)
        for name in PINNED_FIELDS:
            if name in before.model_fields_set:
                setattr(after, name, copy.deepcopy(getattr(before, name)))
        return Mutated(obj=after)

    return apply


def replace_content_body(update: ContentBodyUpdate) -> Mutation:
    """Replace the post body and, when given, the summary."""

    def apply(before: RemoteObject, after: RemoteObject) -> Mutated | CmsFailure:
        del before
        after.post_body = update.post_body
        if update.post_summary is not None:
            after.post_summary = update.post_summary
        return Mutated(obj=after)

    return apply


def update_widget_content(
    address: TreeAddress, update: WidgetContentUpdate
) -> Mutation:
    """Replace ``body.html``, ``params`` or ``styles`` of one widget."""

    def apply(before: RemoteObject, after: RemoteObject) -> Mutated | CmsFailure:
        del before
        located = _NAVIGATOR.locate(after, address)
        if isinstance(located, AddressNotFound):
            return address_failure(located)
        widget = located.model_copy(deep=True)
        if update.html is not None:
            body = widget.body or WidgetBody()
            body.html = update.html
            widget.body = body
        if update.params is not None:
            widget.params = dict(update.params)
        if update.styles is not None:
            widget.styles = dict(update.styles)
        _NAVIGATOR.replace(after, address, widget)
        return Mutated(obj=after, detail=address)

    return apply


def insert_widget(cell: TreeAddress, new_widget: NewWidget) -> Mutation:
    """Append one widget to an existing cell."""

    def apply(before: RemoteObject, after: RemoteObject) -> Mutated | CmsFailure:
        del before
        try:
            widget = new_widget.to_widget()
        except ValidationError as exc:
            return CmsFailure(
                kind=FailureKind.INVALID_REQUEST,
                message=f"Invalid widget: {exc.errors()[0].get('msg', 'invalid')}",
            )
        inserted = _NAVIGATOR.insert(after, cell.cell(), widget)
        if isinstance(inserted, AddressNotFound):
            return address_failure(inserted)
        return Mutated(obj=after, detail=inserted)

    return apply


def remove_widget(address: TreeAddress) -> Mutation:
    """Splice one widget out of its cell."""

    def apply(before: RemoteObject, after: RemoteObject) -> Mutated | CmsFailure:
        del before
        removed = _NAVIGATOR.remove(after, address)
        if isinstance(removed, AddressNotFound):
            return address_failure(removed)
        return Mutated(obj=after, detail=removed)

    return apply


def restore_snapshot(snapshot: Mapping[str, Any]) -> Mutation:
    """Replace the whole object with a previously recorded snapshot."""

    def apply(before: RemoteObject, after: RemoteObject) -> Mutated | CmsFailure:
        del after
        try:
            restored = RemoteObject.from_wire(dict(snapshot))
        except ValidationError as exc:
            return CmsFailure(
                kind=FailureKind.INVALID_REQUEST,
                message=f"Snapshot cannot be restored: {exc.errors()[0].get('msg')}",
            )
        delta = len(flatten(restored)) - len(flatten(before))
        return Mutated(obj=restored, expected_widget_delta=delta)

    return apply
