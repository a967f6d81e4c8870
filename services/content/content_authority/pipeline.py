"""Fetch, mutate, validate and commit one remote object as a single operation.

Nested layout values cannot be partially updated remotely, so every change is
applied to a deep copy of the freshly fetched object and the entire copy is
written back. A run ends in exactly one of DONE, REJECTED or FAILED and emits
exactly one :class:`OperationRecord` to the audit sink.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Mapping

from pydantic import ValidationError

from packages.steward_shared.logging import fields, get_logger, log_context
from resources.adapters.hubspot import (
    CmsAdapter,
    CmsFailure,
    ContentType,
    FailureKind,
)
from services.content.content_authority.audit import (
    AuditSink,
    OperationIdSource,
    OperationRecord,
    OperationStatus,
)
from services.content.content_authority.domain import RemoteObject
from services.content.content_authority.mutations import Mutated, Mutation
from services.content.content_authority.validator import (
    StructuralValidation,
    StructuralValidator,
)

_LOGGER = get_logger(__name__)


class PipelineStage(StrEnum):
    """Stages of one pipeline run."""

    FETCHING = "fetching"
    MUTATING = "mutating"
    VALIDATING = "validating"
    COMMITTING = "committing"
    DONE = "done"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineOutcome:
    """Terminal result of one run."""

    status: OperationStatus
    record: OperationRecord
    object: RemoteObject | None = None
    validation: StructuralValidation | None = None
    failure: CmsFailure | None = None
    detail: Any = None

    @property
    def ok(self) -> bool:
        """Return True when the run committed."""
        return self.status is OperationStatus.DONE


class UpdatePipeline:
    """Run safe read-modify-write operations against one CMS adapter."""

    def __init__(
        self,
        *,
        adapter: CmsAdapter,
        audit_sink: AuditSink,
        ids: OperationIdSource | None = None,
        validator: StructuralValidator | None = None,
    ) -> None:
        self._adapter = adapter
        self._audit_sink = audit_sink
        self._ids = ids or OperationIdSource()
        self._validator = validator or StructuralValidator()

    async def run(
        self,
        *,
        operation_kind: str,
        content_type: ContentType,
        content_id: str,
        input_parameters: Mapping[str, Any],
        mutate: Mutation,
        expected_widget_delta: int = 0,
        if_updated: str | None = None,
    ) -> PipelineOutcome:
        """Apply ``mutate`` to a fresh copy of the object and commit it."""
        run = _Run(
            adapter=self._adapter,
            audit_sink=self._audit_sink,
            operation_id=self._ids.next_id(),
            operation_kind=operation_kind,
            content_type=content_type,
            content_id=content_id,
            input_parameters=input_parameters,
        )
        with run.context():
            with run.stage(PipelineStage.FETCHING):
                fetched = await self.fetch(content_type, content_id)
                if isinstance(fetched, CmsFailure):
                    return run.failed(fetched)
                before = fetched
                run.before_snapshot = before.to_wire()

                if if_updated is not None and before.updated != if_updated:
                    return run.failed(
                        CmsFailure(
                            kind=FailureKind.CONFLICT,
                            message=(
                                "Object changed since it was read: expected "
                                f"updated={if_updated!r}, found {before.updated!r}"
                            ),
                            details={
                                "expected_updated": if_updated,
                                "actual_updated": before.updated or "",
                            },
                        )
                    )

            with run.stage(PipelineStage.MUTATING):
                mutated = mutate(before, before.model_copy(deep=True))
                if isinstance(mutated, CmsFailure):
                    return run.failed(mutated)

            with run.stage(PipelineStage.VALIDATING):
                delta = (
                    mutated.expected_widget_delta
                    if mutated.expected_widget_delta is not None
                    else expected_widget_delta
                )
                validation = self._validator.validate(before, mutated.obj, delta)
                for warning in validation.warnings:
                    _LOGGER.warning("Structural warning: %s", warning)
                if not validation.is_valid:
                    return run.rejected(validation)

            with run.stage(PipelineStage.COMMITTING):
                return await run.commit(mutated, validation)

    async def publish(
        self,
        *,
        content_type: ContentType,
        content_id: str,
        publish_date: str | None = None,
    ) -> PipelineOutcome:
        """Push the current draft live, recording the prior state."""
        input_parameters: dict[str, Any] = {}
        if publish_date:
            input_parameters["publish_date"] = publish_date
        run = _Run(
            adapter=self._adapter,
            audit_sink=self._audit_sink,
            operation_id=self._ids.next_id(),
            operation_kind="publish",
            content_type=content_type,
            content_id=content_id,
            input_parameters=input_parameters,
        )
        with run.context():
            with run.stage(PipelineStage.FETCHING):
                fetched = await self.fetch(content_type, content_id)
                if isinstance(fetched, CmsFailure):
                    _LOGGER.warning(
                        "Could not fetch prior state for audit: %s", fetched.kind
                    )
                else:
                    run.before_snapshot = fetched.to_wire()

            with run.stage(PipelineStage.COMMITTING):
                result = await self._adapter.push_live(
                    content_type=content_type,
                    content_id=content_id,
                    publish_date=publish_date,
                )
                if result.failure is not None:
                    return run.failed(result.failure)
                payload = result.payload if isinstance(result.payload, dict) else {}
                return run.done(
                    after_snapshot=payload,
                    obj=_parse_or_none(payload),
                )

    async def create(
        self,
        *,
        body: Mapping[str, Any],
        input_parameters: Mapping[str, Any],
    ) -> PipelineOutcome:
        """Create a blog post draft and record it with no prior state."""
        run = _Run(
            adapter=self._adapter,
            audit_sink=self._audit_sink,
            operation_id=self._ids.next_id(),
            operation_kind="create_post",
            content_type=ContentType.BLOG_POST,
            content_id="",
            input_parameters=input_parameters,
        )
        with run.context():
            with run.stage(PipelineStage.COMMITTING):
                result = await self._adapter.create_post(body=dict(body))
                if result.failure is not None:
                    return run.failed(result.failure)
                payload = result.payload if isinstance(result.payload, dict) else {}
                run.content_id = str(payload.get("id", ""))
                return run.done(after_snapshot=payload, obj=_parse_or_none(payload))

    async def fetch(
        self, content_type: ContentType, content_id: str
    ) -> RemoteObject | CmsFailure:
        """Fetch and parse one object, returning a failure value on error."""
        result = await self._adapter.get_object(
            content_type=content_type, content_id=content_id
        )
        if result.failure is not None:
            return result.failure
        try:
            return RemoteObject.from_wire(result.payload)
        except ValidationError as exc:
            return CmsFailure(
                kind=FailureKind.INVALID_RESPONSE,
                message=f"Fetched object does not match the expected shape: {exc.errors()[0].get('msg')}",
            )


class _Run:
    """Mutable bookkeeping for one pipeline run; emits its record once."""

    def __init__(
        self,
        *,
        adapter: CmsAdapter,
        audit_sink: AuditSink,
        operation_id: int,
        operation_kind: str,
        content_type: ContentType,
        content_id: str,
        input_parameters: Mapping[str, Any],
    ) -> None:
        self._adapter = adapter
        self._audit_sink = audit_sink
        self.operation_id = operation_id
        self.operation_kind = operation_kind
        self.content_type = content_type
        self.content_id = content_id
        self.input_parameters = dict(input_parameters)
        self.before_snapshot: dict[str, Any] | None = None

    def context(self) -> Any:
        return log_context(
            {
                fields.OPERATION_ID: self.operation_id,
                fields.OPERATION_KIND: self.operation_kind,
                fields.CONTENT_TYPE: self.content_type,
                fields.CONTENT_ID: self.content_id,
            }
        )

    def stage(self, stage: PipelineStage) -> Any:
        _LOGGER.debug("Entering stage %s", stage)
        return log_context({fields.STAGE: stage})

    async def commit(
        self, mutated: Mutated, validation: StructuralValidation
    ) -> PipelineOutcome:
        body = mutated.obj.to_wire()
        result = await self._adapter.write_draft(
            content_type=self.content_type,
            content_id=self.content_id,
            body=body,
        )
        if result.failure is not None:
            return self.failed(result.failure, validation=validation)
        payload = result.payload if isinstance(result.payload, dict) else {}
        after_snapshot = payload or body
        committed = _parse_or_none(after_snapshot) or mutated.obj
        return self.done(
            after_snapshot=after_snapshot,
            obj=committed,
            validation=validation,
            detail=mutated.detail,
        )

    def done(
        self,
        *,
        after_snapshot: dict[str, Any],
        obj: RemoteObject | None,
        validation: StructuralValidation | None = None,
        detail: Any = None,
    ) -> PipelineOutcome:
        record = self._emit(
            OperationStatus.DONE,
            after_snapshot=after_snapshot,
            warnings=validation.warnings if validation else (),
        )
        _LOGGER.info("Operation %s completed", self.operation_kind)
        return PipelineOutcome(
            status=OperationStatus.DONE,
            record=record,
            object=obj,
            validation=validation,
            detail=detail,
        )

    def rejected(self, validation: StructuralValidation) -> PipelineOutcome:
        failure = CmsFailure(
            kind=FailureKind.VALIDATION_REJECTED,
            message="Structural validation failed: " + "; ".join(validation.errors),
            details={
                "errors": list(validation.errors),
                "before_widget_count": validation.before_widget_count,
                "after_widget_count": validation.after_widget_count,
                "before_section_count": validation.before_section_count,
                "after_section_count": validation.after_section_count,
            },
        )
        _LOGGER.warning("Operation %s rejected: %s", self.operation_kind, failure.message)
        record = self._emit(
            OperationStatus.REJECTED, failure=failure, warnings=validation.warnings
        )
        return PipelineOutcome(
            status=OperationStatus.REJECTED,
            record=record,
            validation=validation,
            failure=failure,
        )

    def failed(
        self,
        failure: CmsFailure,
        *,
        validation: StructuralValidation | None = None,
    ) -> PipelineOutcome:
        _LOGGER.error(
            "Operation %s failed: %s",
            self.operation_kind,
            failure.kind,
            extra={fields.CORRELATION_ID: failure.correlation_id or None},
        )
        record = self._emit(OperationStatus.FAILED, failure=failure)
        return PipelineOutcome(
            status=OperationStatus.FAILED,
            record=record,
            validation=validation,
            failure=failure,
        )

    def _emit(
        self,
        status: OperationStatus,
        *,
        after_snapshot: dict[str, Any] | None = None,
        failure: CmsFailure | None = None,
        warnings: tuple[str, ...] = (),
    ) -> OperationRecord:
        record = OperationRecord(
            operation_id=self.operation_id,
            operation_kind=self.operation_kind,
            content_type=str(self.content_type),
            content_id=self.content_id,
            input_parameters=self.input_parameters,
            status=status,
            before_snapshot=self.before_snapshot,
            after_snapshot=after_snapshot,
            failure=failure,
            warnings=tuple(warnings),
        )
        try:
            self._audit_sink.emit(record)
        except Exception:  # noqa: BLE001
            # The remote outcome stands; only its record was lost.
            _LOGGER.exception(
                "Audit sink failed for operation %s (%s)",
                self.operation_id,
                status,
            )
        return record


def _parse_or_none(payload: Mapping[str, Any]) -> RemoteObject | None:
    if not payload:
        return None
    try:
        return RemoteObject.from_wire(dict(payload))
    except ValidationError:
        _LOGGER.warning("Remote response does not match the expected object shape")
        return None
