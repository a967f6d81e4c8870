"""Shared error taxonomy for Steward components."""

from . import codes
from .factories import DEFAULT_CODES, make_error
from .types import ErrorCategory, ErrorDetail

__all__ = [
    "DEFAULT_CODES",
    "ErrorCategory",
    "ErrorDetail",
    "codes",
    "make_error",
]
