"""Before/after structural comparison of remote object snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from services.content.content_authority.domain import RemoteObject, TreeAddress


class StructuralValidation(BaseModel):
    """Outcome of comparing two snapshots of the same object."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_valid: bool
    before_widget_count: int
    after_widget_count: int
    before_section_count: int
    after_section_count: int
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class FlatWidget:
    """One widget paired with its address in document order."""

    address: TreeAddress
    widget: Any = field(compare=False)


def flatten(obj: RemoteObject) -> list[FlatWidget]:
    """Return every widget in section, row, cell, widget order."""
    flat: list[FlatWidget] = []
    for section_name, section in (obj.layout_sections or {}).items():
        for row_index, row in enumerate(section.rows):
            for column_index, cell in enumerate(row.cells):
                for widget_index, widget in enumerate(cell.widgets):
                    flat.append(
                        FlatWidget(
                            address=TreeAddress(
                                section_name, row_index, column_index, widget_index
                            ),
                            widget=widget,
                        )
                    )
    return flat


class StructuralValidator:
    """Classify snapshot differences as expected, warnings or errors."""

    def validate(
        self,
        before: RemoteObject,
        after: RemoteObject,
        expected_widget_delta: int,
    ) -> StructuralValidation:
        """Compare ``before`` and ``after`` given the intended widget delta.

        A section present before and missing after is an error. Added
        sections, an unexpected widget count change, a per-section row count
        change and the loss of a non-empty post body are warnings.
        """
        before_sections = before.layout_sections or {}
        after_sections = after.layout_sections or {}
        before_count = len(flatten(before))
        after_count = len(flatten(after))
        warnings: list[str] = []
        errors: list[str] = []

        for name in before_sections:
            if name not in after_sections:
                errors.append(f"section {name!r} was removed")
        for name in after_sections:
            if name not in before_sections:
                warnings.append(f"section {name!r} was added")

        actual_delta = after_count - before_count
        if actual_delta != expected_widget_delta:
            warnings.append(
                f"widget count changed by {actual_delta}, "
                f"expected {expected_widget_delta} "
                f"({before_count} -> {after_count})"
            )

        for name, section in before_sections.items():
            other = after_sections.get(name)
            if other is not None and len(other.rows) != len(section.rows):
                warnings.append(
                    f"section {name!r} row count changed "
                    f"({len(section.rows)} -> {len(other.rows)})"
                )

        if before.post_body and not after.post_body:
            warnings.append("post body was cleared")

        return StructuralValidation(
            is_valid=not errors,
            before_widget_count=before_count,
            after_widget_count=after_count,
            before_section_count=len(before_sections),
            after_section_count=len(after_sections),
            warnings=tuple(warnings),
            errors=tuple(errors),
        )
