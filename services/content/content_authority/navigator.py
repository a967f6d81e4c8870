"""Structural addressing into a remote object's layout tree.

All operations resolve ``section -> row -> cell -> widget`` by name and index
and report a missing level as :class:`AddressNotFound` instead of raising.
Mutating operations change the given object in place; callers pass a copy.
Widget lists are reassigned, never mutated in place, so that a cell parsed
without a ``widgets`` key still serializes its new widgets.
Sections and rows are never created.
"""

from __future__ import annotations

from typing import Any

from services.content.content_authority.domain import (
    AddressNotFound,
    Cell,
    RemoteObject,
    TreeAddress,
)


def _index_ok(index: int, length: int) -> bool:
    return 0 <= index < length


class TreeNavigator:
    """Locate, replace, insert and remove widgets by :class:`TreeAddress`."""

    def locate(self, obj: RemoteObject, address: TreeAddress) -> Any:
        """Return the widget at ``address`` or an :class:`AddressNotFound`."""
        cell = self._cell(obj, address)
        if isinstance(cell, AddressNotFound):
            return cell
        if address.widget is None:
            return AddressNotFound(address, "address designates a cell, not a widget")
        if not _index_ok(address.widget, len(cell.widgets)):
            return AddressNotFound(
                address,
                f"widget index {address.widget} out of range "
                f"(cell has {len(cell.widgets)} widgets)",
            )
        return cell.widgets[address.widget]

    def replace(self, obj: RemoteObject, address: TreeAddress, widget: Any) -> bool:
        """Replace the widget at ``address``; return False when it is absent."""
        cell = self._cell(obj, address)
        if isinstance(cell, AddressNotFound) or address.widget is None:
            return False
        if not _index_ok(address.widget, len(cell.widgets)):
            return False
        widgets = list(cell.widgets)
        widgets[address.widget] = widget
        cell.widgets = widgets
        return True

    def insert(self, obj: RemoteObject, address: TreeAddress, widget: Any) -> Any:
        """Append ``widget`` to the cell and return its full address."""
        cell = self._cell(obj, address)
        if isinstance(cell, AddressNotFound):
            return cell
        cell.widgets = [*cell.widgets, widget]
        return address.with_widget(len(cell.widgets) - 1)

    def remove(self, obj: RemoteObject, address: TreeAddress) -> Any:
        """Splice out and return the widget at ``address``."""
        located = self.locate(obj, address)
        if isinstance(located, AddressNotFound):
            return located
        cell = self._cell(obj, address)
        assert isinstance(cell, Cell) and address.widget is not None
        widgets = list(cell.widgets)
        removed = widgets.pop(address.widget)
        cell.widgets = widgets
        return removed

    def _cell(self, obj: RemoteObject, address: TreeAddress) -> Cell | AddressNotFound:
        sections = obj.layout_sections or {}
        section = sections.get(address.section)
        if section is None:
            return AddressNotFound(address, f"section {address.section!r} not found")
        if not _index_ok(address.row, len(section.rows)):
            return AddressNotFound(
                address,
                f"row index {address.row} out of range "
                f"(section has {len(section.rows)} rows)",
            )
        row = section.rows[address.row]
        if not _index_ok(address.column, len(row.cells)):
            return AddressNotFound(
                address,
                f"column index {address.column} out of range "
                f"(row has {len(row.cells)} cells)",
            )
        return row.cells[address.column]
