"""Error shape used when a failure leaves the service boundary.

CLI output and audit records render failures through ``ErrorDetail`` so that
callers can branch on ``category`` and ``code`` without knowing CMS specifics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class ErrorCategory(str, Enum):
    """Coarse failure families."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    POLICY = "policy"
    DEPENDENCY = "dependency"


@dataclass(frozen=True)
class ErrorDetail:
    """A rendered failure: stable code, readable message, string metadata."""

    code: str
    message: str
    category: ErrorCategory
    retryable: bool = False
    metadata: Mapping[str, str] = field(default_factory=dict)
