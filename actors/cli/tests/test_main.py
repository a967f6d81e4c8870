"""CLI tests for Steward Typer commands."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from actors.cli import main as cli_module
from resources.adapters.hubspot import CmsFailure, FailureKind
from services.content.content_authority import (
    ContentAuthoritySettings,
    DefaultContentAuthorityService,
    InMemoryAuditSink,
    JsonlAuditSink,
    OperationRecord,
    OperationStatus,
    RemoteObject,
    TreeAddress,
)
from services.content.content_authority.tests.fakes import FakeCmsAdapter, sample_post


@pytest.fixture()
def fake(monkeypatch: Any) -> FakeCmsAdapter:
    """Route CLI service construction to an in-memory adapter."""

    adapter = FakeCmsAdapter()
    adapter.put(sample_post())
    monkeypatch.setattr(
        cli_module,
        "_build_service",
        lambda cfg: DefaultContentAuthorityService(
            settings=ContentAuthoritySettings(),
            adapter=adapter,
            audit_sink=InMemoryAuditSink(),
        ),
    )
    return adapter


@pytest.fixture()
def logging_calls(monkeypatch: Any) -> list[dict[str, Any]]:
    """Record logging configuration instead of replacing root handlers."""

    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(
        cli_module, "configure_logging", lambda **kwargs: calls.append(kwargs)
    )
    return calls


def _base_args(tmp_path: Path) -> list[str]:
    """Return global flags isolating the CLI from user configuration."""

    return ["--config", str(tmp_path / "steward.yaml"), "--access-token", "pat-test"]


def _invoke(tmp_path: Path, *args: str) -> Any:
    return CliRunner().invoke(cli_module.app, [*_base_args(tmp_path), *args])


def test_get_json_output_contains_full_object(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """`--json` emits the object with operation and rate limit context."""

    result = _invoke(tmp_path, "--json", "content", "get", "101")

    assert result.exit_code == 0
    document = json.loads(result.stdout)
    assert document["data"] == sample_post()
    assert document["operation"] is None
    assert document["warnings"] == []
    assert "burst_remaining" in document["rate_limit"]
    assert fake.closed is True


def test_posts_list_human_output(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Post lists render one line per post plus the total."""

    result = _invoke(tmp_path, "posts", "list", "--state", "draft", "--limit", "5")

    assert result.exit_code == 0
    assert "- 101: Launch notes [DRAFT]" in result.stdout
    assert "Total: 1" in result.stdout
    assert fake.list_filters[0].state == "DRAFT"
    assert fake.list_filters[0].limit == 5


def test_update_metadata_reports_operation(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Mutations print the committed object and the audit operation."""

    result = _invoke(
        tmp_path,
        "content",
        "update-metadata",
        "101",
        "--name",
        "Renamed",
        "--tag-id",
        "5",
        "--tag-id",
        "6",
    )

    assert result.exit_code == 0
    assert "Operation 1 (update_metadata): done" in result.stdout
    assert fake.stored("101")["name"] == "Renamed"
    assert fake.stored("101")["tagIds"] == [5, 6]
    assert fake.stored("101")["layoutSections"] == sample_post()["layoutSections"]


def test_domain_failure_maps_to_exit_code_3(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Unresolved addresses are domain failures."""

    result = _invoke(tmp_path, "widgets", "remove", "101", "main", "0", "0", "9")

    assert result.exit_code == 3
    assert "kind=address_not_found" in result.stderr
    assert fake.network_writes() == []


def test_transport_failure_maps_to_exit_code_4(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Throttling and network failures map to exit code 4."""

    fake.failures["get_object"] = CmsFailure(
        kind=FailureKind.THROTTLED_LOCALLY,
        message="Approaching rate limit threshold. Request blocked by safety margin.",
    )

    result = _invoke(tmp_path, "--json", "content", "preview", "101")

    assert result.exit_code == 4
    error = json.loads(result.stderr)["error"]
    assert error["code"] == "DEPENDENCY_RATE_LIMITED"
    assert error["metadata"]["failure_kind"] == "throttled_locally"


def test_remote_failure_prints_correlation_id(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Remote failures surface the correlation id for support requests."""

    result = _invoke(tmp_path, "content", "get", "999")

    assert result.exit_code == 3
    assert "correlation_id=corr-404" in result.stderr
    assert "status=404" in result.stderr


def test_insert_widget_prints_new_address(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Insertion reports the address of the new widget."""

    result = _invoke(
        tmp_path,
        "--json",
        "widgets",
        "insert",
        "101",
        "main",
        "0",
        "1",
        "--widget-type",
        "module",
        "--params",
        '{"module_id": 9}',
    )

    assert result.exit_code == 0
    assert json.loads(result.stdout)["data"] == {
        "section": "main",
        "row": 0,
        "column": 1,
        "widget": 1,
    }


def test_invalid_json_option_is_a_usage_error(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Malformed JSON options fail before any remote call."""

    result = _invoke(
        tmp_path,
        "widgets",
        "update",
        "101",
        "main",
        "0",
        "0",
        "0",
        "--params",
        "{not json",
    )

    assert result.exit_code == 2
    assert fake.calls == []


def test_upload_local_file_sends_base64(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Local files are base64 encoded and named after the file."""

    source = tmp_path / "chart.png"
    source.write_bytes(b"\x89PNG")

    result = _invoke(tmp_path, "files", "upload", str(source), "--access", "private")

    assert result.exit_code == 0
    upload = fake.uploads[0]
    assert upload.file_name == "chart.png"
    assert base64.b64decode(upload.file_content) == b"\x89PNG"
    assert upload.access == "PRIVATE"


def test_restore_reads_record_from_audit_log(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """`content restore` writes the logged before snapshot back."""

    audit_path = tmp_path / "audit.jsonl"
    renamed = sample_post()
    renamed["name"] = "Renamed"
    fake.put(renamed)
    JsonlAuditSink(audit_path).emit(
        OperationRecord(
            operation_id=4,
            operation_kind="update_metadata",
            content_type="blog-post",
            content_id="101",
            input_parameters={"metadata": {"name": "Renamed"}},
            status=OperationStatus.DONE,
            before_snapshot=sample_post(),
            after_snapshot=renamed,
        )
    )

    result = _invoke(tmp_path, "--audit-log", str(audit_path), "content", "restore", "4")
    missing = _invoke(tmp_path, "--audit-log", str(audit_path), "content", "restore", "5")

    assert result.exit_code == 0
    assert fake.stored("101") == sample_post()
    assert missing.exit_code == 3
    assert "Operation 5 not found" in missing.stderr


def test_audit_list_json(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Audit summaries omit snapshots."""

    audit_path = tmp_path / "audit.jsonl"
    sink = JsonlAuditSink(audit_path)
    for operation_id in (1, 2):
        sink.emit(
            OperationRecord(
                operation_id=operation_id,
                operation_kind="publish",
                content_type="blog-post",
                content_id="101",
                input_parameters={},
                status=OperationStatus.DONE,
                before_snapshot=sample_post(),
            )
        )

    result = _invoke(tmp_path, "--audit-log", str(audit_path), "--json", "audit", "list")

    assert result.exit_code == 0
    summaries = json.loads(result.stdout)
    assert [item["operation_id"] for item in summaries] == [1, 2]
    assert "before_snapshot" not in summaries[0]


def test_audit_without_configured_log_fails(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Audit commands need a log path."""

    result = _invoke(tmp_path, "audit", "list")

    assert result.exit_code == 3
    assert "No audit log configured" in result.stderr


def test_missing_access_token_is_reported(
    tmp_path: Path, logging_calls: list[dict[str, Any]]
) -> None:
    """Without a token the CLI stops before building any client."""

    result = CliRunner().invoke(
        cli_module.app,
        ["--config", str(tmp_path / "steward.yaml"), "auth", "check"],
        env={"HUBSPOT_ACCESS_TOKEN": None},
    )

    assert result.exit_code == 3
    assert "No HubSpot access token configured" in result.stderr


def test_logging_configured_from_settings(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """`--log-level` overrides the configured logging level."""

    result = _invoke(tmp_path, "--log-level", "debug", "rate-limit")

    assert result.exit_code == 0
    assert "Burst remaining:" in result.stdout
    assert logging_calls[0]["level"] == "DEBUG"
    assert logging_calls[0]["service"] == "steward"


def test_typer_usage_errors_are_unchanged(
    tmp_path: Path, fake: FakeCmsAdapter, logging_calls: list[dict[str, Any]]
) -> None:
    """Typer validation/usage behavior should remain default."""

    result = _invoke(tmp_path, "content", "get")

    assert result.exit_code == 2
    assert "Missing argument" in result.stderr


def test_serialize_tree_address_and_remote_object() -> None:
    """Addresses and remote objects serialize to their wire forms."""

    assert cli_module._serialize(TreeAddress("main", 1, 2)) == {
        "section": "main",
        "row": 1,
        "column": 2,
    }
    assert cli_module._serialize(RemoteObject.from_wire(sample_post())) == sample_post()
