"""Immutable operation records and the sinks that receive them."""

from __future__ import annotations

import itertools
import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any, Mapping, Protocol

from packages.steward_shared.logging import fields, get_logger, log_context
from resources.adapters.hubspot import CmsFailure, FailureKind

_LOGGER = get_logger(__name__)


class OperationStatus(StrEnum):
    """Terminal outcome of one pipeline run."""

    DONE = "done"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class OperationRecord:
    """Reversible audit record for one mutating or publishing operation."""

    operation_id: int
    operation_kind: str
    content_type: str
    content_id: str
    input_parameters: Mapping[str, Any]
    status: OperationStatus
    before_snapshot: Mapping[str, Any] | None = None
    after_snapshot: Mapping[str, Any] | None = None
    failure: CmsFailure | None = None
    warnings: tuple[str, ...] = ()
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def summary(self) -> dict[str, Any]:
        """Return a JSON-friendly view without snapshots."""
        data: dict[str, Any] = {
            "operation_id": self.operation_id,
            "operation_kind": self.operation_kind,
            "content_type": self.content_type,
            "content_id": self.content_id,
            "status": str(self.status),
            "timestamp": self.timestamp,
            "input_parameters": dict(self.input_parameters),
        }
        if self.warnings:
            data["warnings"] = list(self.warnings)
        if self.failure is not None:
            data["failure"] = {
                "kind": str(self.failure.kind),
                "message": self.failure.message,
                "correlation_id": self.failure.correlation_id,
            }
        return data

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly view including both snapshots."""
        data = self.summary()
        data["before_snapshot"] = self.before_snapshot
        data["after_snapshot"] = self.after_snapshot
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OperationRecord:
        """Rebuild a record from :meth:`as_dict` output."""
        raw_failure = data.get("failure")
        failure = None
        if isinstance(raw_failure, Mapping):
            failure = CmsFailure(
                kind=FailureKind(raw_failure["kind"]),
                message=str(raw_failure.get("message", "")),
                correlation_id=str(raw_failure.get("correlation_id", "")),
            )
        return cls(
            operation_id=int(data["operation_id"]),
            operation_kind=str(data["operation_kind"]),
            content_type=str(data["content_type"]),
            content_id=str(data["content_id"]),
            input_parameters=dict(data.get("input_parameters") or {}),
            status=OperationStatus(data["status"]),
            before_snapshot=data.get("before_snapshot"),
            after_snapshot=data.get("after_snapshot"),
            failure=failure,
            warnings=tuple(data.get("warnings") or ()),
            timestamp=str(data.get("timestamp", "")),
        )


class OperationIdSource:
    """Process-wide monotonic operation id allocator."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        """Return the next id; ids never repeat within one source."""
        with self._lock:
            return next(self._counter)


class AuditSink(Protocol):
    """Receiver of operation records."""

    def emit(self, record: OperationRecord) -> None:
        """Accept one completed, rejected or failed record."""


class LoggingAuditSink:
    """Write records to the log: summary at INFO, snapshots at DEBUG."""

    def __init__(self, logger_name: str = "steward.audit") -> None:
        self._logger = get_logger(logger_name)

    def emit(self, record: OperationRecord) -> None:
        with log_context(
            {
                fields.OPERATION_ID: record.operation_id,
                fields.OPERATION_KIND: record.operation_kind,
                fields.CONTENT_TYPE: record.content_type,
                fields.CONTENT_ID: record.content_id,
                fields.OUTCOME: record.status,
            }
        ):
            self._logger.info(
                "operation %s %s", record.operation_kind, record.status
            )
            if self._logger.isEnabledFor(logging.DEBUG):
                self._logger.debug(
                    "operation snapshots %s",
                    json.dumps(
                        {
                            "before": record.before_snapshot,
                            "after": record.after_snapshot,
                        },
                        default=str,
                    ),
                )


class InMemoryAuditSink:
    """Keep records in memory, in emission order."""

    def __init__(self) -> None:
        self.records: list[OperationRecord] = []

    def emit(self, record: OperationRecord) -> None:
        self.records.append(record)

    def find(self, operation_id: int) -> OperationRecord | None:
        """Return the record with ``operation_id`` if it was emitted."""
        for record in self.records:
            if record.operation_id == operation_id:
                return record
        return None


class FanOutAuditSink:
    """Forward each record to several sinks in order."""

    def __init__(self, *sinks: AuditSink) -> None:
        self._sinks = sinks

    def emit(self, record: OperationRecord) -> None:
        """Deliver to every sink; one failing sink does not starve the rest."""
        for sink in self._sinks:
            try:
                sink.emit(record)
            except Exception:  # noqa: BLE001
                _LOGGER.exception(
                    "Audit sink %s failed for operation %s",
                    type(sink).__name__,
                    record.operation_id,
                )


class JsonlAuditSink:
    """Append each record, snapshots included, as one JSON line to a file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        """Destination file."""
        return self._path

    def emit(self, record: OperationRecord) -> None:
        line = json.dumps(record.as_dict(), default=str, separators=(",", ":"))
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            prefix = "" if _ends_with_newline(self._path) else "\n"
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(prefix + line + "\n")


def _ends_with_newline(path: Path) -> bool:
    # A torn final line from an interrupted append must not absorb the next record.
    if not path.exists() or path.stat().st_size == 0:
        return True
    with path.open("rb") as handle:
        handle.seek(-1, 2)
        return handle.read(1) == b"\n"


def read_records(path: str | Path) -> list[OperationRecord]:
    """Load every record from a JSON-lines audit file; missing file is empty.

    Lines that do not decode into a record, such as a partial line left by an
    interrupted append, are skipped with a warning.
    """
    source = Path(path).expanduser()
    if not source.exists():
        return []
    records: list[OperationRecord] = []
    with source.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                records.append(OperationRecord.from_dict(json.loads(line)))
            except (ValueError, KeyError, TypeError, AttributeError) as exc:
                _LOGGER.warning(
                    "Skipping unreadable audit line %d in %s: %s",
                    line_number,
                    source,
                    exc,
                )
    return records
