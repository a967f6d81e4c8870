"""Construction of ``ErrorDetail`` values."""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail

DEFAULT_CODES: Mapping[ErrorCategory, str] = {
    ErrorCategory.VALIDATION: codes.VALIDATION_ERROR,
    ErrorCategory.CONFLICT: codes.CONFLICT,
    ErrorCategory.NOT_FOUND: codes.NOT_FOUND,
    ErrorCategory.POLICY: codes.POLICY_VIOLATION,
    ErrorCategory.DEPENDENCY: codes.DEPENDENCY_FAILURE,
}


def make_error(
    category: ErrorCategory,
    message: str,
    *,
    code: str | None = None,
    retryable: bool = False,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Build an error, defaulting the code from the category.

    Metadata values are stringified; ``None`` entries are dropped.
    """
    return ErrorDetail(
        code=code or DEFAULT_CODES[category],
        message=message,
        category=category,
        retryable=retryable,
        metadata={
            str(key): str(value)
            for key, value in (metadata or {}).items()
            if value is not None
        },
    )
