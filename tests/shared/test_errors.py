"""Tests for the shared error factory."""

from __future__ import annotations

from packages.steward_shared.errors import (
    DEFAULT_CODES,
    ErrorCategory,
    codes,
    make_error,
)


def test_code_defaults_from_category() -> None:
    """Omitting a code picks the category default."""
    detail = make_error(ErrorCategory.CONFLICT, "stale")

    assert detail.code == codes.CONFLICT
    assert detail.retryable is False
    assert dict(detail.metadata) == {}


def test_metadata_is_stringified_and_none_dropped() -> None:
    """Metadata values become strings; missing values are omitted."""
    detail = make_error(
        ErrorCategory.DEPENDENCY,
        "unavailable",
        code=codes.DEPENDENCY_UNAVAILABLE,
        retryable=True,
        metadata={"status_code": 503, "correlation_id": None},
    )

    assert detail.code == codes.DEPENDENCY_UNAVAILABLE
    assert detail.retryable is True
    assert dict(detail.metadata) == {"status_code": "503"}


def test_every_category_has_a_default_code() -> None:
    """No category is left without a fallback code."""
    assert set(DEFAULT_CODES) == set(ErrorCategory)
