"""Per-task logging context.

The context lives in a ``ContextVar``: every asyncio task works on its own
copy, so two pipeline runs in flight never see each other's operation ids.
Values are stored as strings and ``None`` is dropped.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar("steward_log_context", default={})


def _merged(values: Mapping[str, object]) -> dict[str, str]:
    merged = dict(_CONTEXT.get())
    merged.update({str(k): str(v) for k, v in values.items() if v is not None})
    return merged


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound in the current task."""
    return dict(_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Add fields to the current context until cleared."""
    if values:
        _CONTEXT.set(_merged(values))


def clear_context(*keys: str) -> None:
    """Drop the named fields, or everything when no names are given."""
    if not keys:
        _CONTEXT.set({})
        return
    _CONTEXT.set({k: v for k, v in _CONTEXT.get().items() if k not in keys})


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind fields for the duration of a ``with`` block."""
    token = _CONTEXT.set(_merged(values))
    try:
        yield
    finally:
        _CONTEXT.reset(token)
