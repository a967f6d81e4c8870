"""Typed failure values for CMS requests and safe-update operations.

Failures are returned, not raised: every layer above the request executor
passes a ``CmsFailure`` up unchanged so the remote correlation id and the
structured details reach the caller intact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, Mapping, TypeVar

from packages.steward_shared.errors import ErrorCategory, ErrorDetail, codes, make_error

T = TypeVar("T")


class FailureKind(StrEnum):
    """Classification of one failed request or pipeline run."""

    THROTTLED_LOCALLY = "throttled_locally"
    THROTTLED_REMOTELY = "throttled_remotely"
    NETWORK_TRANSIENT = "network_transient"
    AUTHENTICATION_FAILED = "authentication_failed"
    AUTHORIZATION_DENIED = "authorization_denied"
    NOT_FOUND = "not_found"
    VALIDATION_REJECTED = "validation_rejected"
    REMOTE_VALIDATION_FAILED = "remote_validation_failed"
    ADDRESS_NOT_FOUND = "address_not_found"
    SERVER_ERROR = "server_error"
    UNEXPECTED_STATUS = "unexpected_status"
    INVALID_RESPONSE = "invalid_response"
    CONFLICT = "conflict"
    INVALID_REQUEST = "invalid_request"


RETRYABLE_KINDS = frozenset(
    {FailureKind.THROTTLED_REMOTELY, FailureKind.NETWORK_TRANSIENT}
)

# Kinds that originate in transport or rate governance rather than in content.
TRANSPORT_KINDS = frozenset(
    {
        FailureKind.THROTTLED_LOCALLY,
        FailureKind.THROTTLED_REMOTELY,
        FailureKind.NETWORK_TRANSIENT,
        FailureKind.SERVER_ERROR,
    }
)


_ERROR_MAPPING: dict[FailureKind, tuple[ErrorCategory, str]] = {
    FailureKind.THROTTLED_LOCALLY: (ErrorCategory.DEPENDENCY, codes.DEPENDENCY_RATE_LIMITED),
    FailureKind.THROTTLED_REMOTELY: (ErrorCategory.DEPENDENCY, codes.DEPENDENCY_RATE_LIMITED),
    FailureKind.NETWORK_TRANSIENT: (ErrorCategory.DEPENDENCY, codes.DEPENDENCY_UNAVAILABLE),
    FailureKind.SERVER_ERROR: (ErrorCategory.DEPENDENCY, codes.DEPENDENCY_UNAVAILABLE),
    FailureKind.AUTHENTICATION_FAILED: (ErrorCategory.POLICY, codes.UNAUTHENTICATED),
    FailureKind.AUTHORIZATION_DENIED: (ErrorCategory.POLICY, codes.PERMISSION_DENIED),
    FailureKind.NOT_FOUND: (ErrorCategory.NOT_FOUND, codes.RESOURCE_NOT_FOUND),
    FailureKind.ADDRESS_NOT_FOUND: (ErrorCategory.NOT_FOUND, codes.RESOURCE_NOT_FOUND),
    FailureKind.CONFLICT: (ErrorCategory.CONFLICT, codes.CONFLICT),
    FailureKind.INVALID_REQUEST: (ErrorCategory.VALIDATION, codes.INVALID_ARGUMENT),
    FailureKind.VALIDATION_REJECTED: (ErrorCategory.VALIDATION, codes.VALIDATION_ERROR),
    FailureKind.REMOTE_VALIDATION_FAILED: (ErrorCategory.VALIDATION, codes.VALIDATION_ERROR),
}


@dataclass(frozen=True)
class RemoteErrorItem:
    """One entry of the remote error envelope ``errors`` array."""

    message: str
    location: str = ""


@dataclass(frozen=True)
class CmsFailure:
    """One classified failure with everything a caller needs to act on it."""

    kind: FailureKind
    message: str
    status_code: int | None = None
    correlation_id: str = ""
    remote_status: str = ""
    category: str = ""
    sub_category: str = ""
    errors: tuple[RemoteErrorItem, ...] = ()
    details: Mapping[str, Any] = field(default_factory=dict)

    @property
    def retryable(self) -> bool:
        """Return True for classes the executor retries internally."""
        return self.kind in RETRYABLE_KINDS

    @property
    def is_transport(self) -> bool:
        """Return True when the failure is about reaching the API at all."""
        return self.kind in TRANSPORT_KINDS

    def with_details(self, **values: Any) -> CmsFailure:
        """Return a copy with additional structured details merged in."""
        return CmsFailure(
            kind=self.kind,
            message=self.message,
            status_code=self.status_code,
            correlation_id=self.correlation_id,
            remote_status=self.remote_status,
            category=self.category,
            sub_category=self.sub_category,
            errors=self.errors,
            details={**self.details, **values},
        )

    def to_error_detail(self) -> ErrorDetail:
        """Map onto the shared error taxonomy for rendering."""
        category, code = _ERROR_MAPPING.get(
            self.kind, (ErrorCategory.DEPENDENCY, codes.DEPENDENCY_FAILURE)
        )
        return make_error(
            category,
            self.message,
            code=code,
            retryable=self.retryable,
            metadata={
                "failure_kind": str(self.kind),
                "correlation_id": self.correlation_id or None,
                "status_code": self.status_code,
                **self.details,
            },
        )


@dataclass(frozen=True)
class RequestResult(Generic[T]):
    """Either a decoded payload or a classified failure, never both."""

    payload: T | None = None
    failure: CmsFailure | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        """Return True when no failure is present."""
        return self.failure is None


def success(payload: T, *, attempts: int = 1) -> RequestResult[T]:
    """Build a successful result."""
    return RequestResult(payload=payload, attempts=attempts)


def failed(failure: CmsFailure, *, attempts: int = 0) -> RequestResult[Any]:
    """Build a failed result."""
    return RequestResult(failure=failure, attempts=attempts)
