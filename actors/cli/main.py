"""Steward CLI actor implemented with Typer."""

from __future__ import annotations

import asyncio
import base64
import dataclasses
import json
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable
from urllib.parse import urlparse

import typer
from pydantic import ValidationError

from packages.steward_shared.config import (
    DEFAULT_CONFIG_PATH,
    StewardSettings,
    load_settings,
)
from packages.steward_shared.logging import configure_logging
from resources.adapters.hubspot import FileAccess, resolve_hubspot_adapter_settings
from services.content.content_authority import (
    CmsFailure,
    ContentAuthorityService,
    ContentType,
    DefaultContentAuthorityService,
    OperationRecord,
    ServiceResult,
    TreeAddress,
    read_records,
    resolve_content_authority_settings,
)

SUCCESS_EXIT_CODE = 0
DOMAIN_ERROR_EXIT_CODE = 3
TRANSPORT_ERROR_EXIT_CODE = 4


@dataclass(frozen=True)
class CliConfig:
    """Global CLI runtime options propagated to service calls."""

    settings: StewardSettings
    as_json: bool


def _serialize(value: Any) -> Any:
    """Convert result objects to JSON-serializable structures."""

    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date, Path)):
        return str(value)
    if isinstance(value, Enum):
        return _serialize(value.value)
    if isinstance(value, TreeAddress):
        return value.as_dict()
    if dataclasses.is_dataclass(value):
        return _serialize(dataclasses.asdict(value))
    if isinstance(value, dict):
        return {str(key): _serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_serialize(item) for item in value]
    if hasattr(value, "to_wire"):
        return _serialize(value.to_wire())
    if hasattr(value, "model_dump"):
        return _serialize(value.model_dump(mode="json"))
    return str(value)


def _emit_output(result: ServiceResult[Any], as_json: bool) -> None:
    """Render one successful service result in requested format."""

    data = _serialize(result.payload)
    if as_json:
        document = {
            "data": data,
            "operation": result.record.summary() if result.record else None,
            "warnings": list(result.warnings),
            "rate_limit": _serialize(result.rate_limit),
        }
        typer.echo(json.dumps(document, sort_keys=True, separators=(",", ":")))
        return

    rendered = _render_human(data)
    typer.echo("ok" if rendered is None else rendered)
    if result.record is not None:
        typer.echo(
            f"Operation {result.record.operation_id} "
            f"({result.record.operation_kind}): {result.record.status}"
        )
    for warning in result.warnings:
        typer.echo(f"warning: {warning}", err=True)


def _emit_data(data: Any, as_json: bool) -> None:
    """Render plain local data such as audit summaries."""

    serialized = _serialize(data)
    if as_json:
        typer.echo(json.dumps(serialized, sort_keys=True, separators=(",", ":")))
        return
    rendered = _render_human(serialized)
    typer.echo("ok" if rendered is None else rendered)


def _emit_failure(failure: CmsFailure, as_json: bool) -> None:
    """Render one classified failure to stderr."""

    if as_json:
        detail = _serialize(failure.to_error_detail())
        if failure.errors:
            detail["errors"] = [
                {"message": item.message, "in": item.location} for item in failure.errors
            ]
        typer.echo(json.dumps({"error": detail}, sort_keys=True), err=True)
        return

    context = [f"kind={failure.kind}"]
    if failure.status_code is not None:
        context.append(f"status={failure.status_code}")
    if failure.correlation_id:
        context.append(f"correlation_id={failure.correlation_id}")
    typer.echo(f"error: {failure.message} ({', '.join(context)})", err=True)
    for item in failure.errors:
        location = f" [{item.location}]" if item.location else ""
        typer.echo(f"  - {item.message}{location}", err=True)


def _emit_error(message: str, as_json: bool) -> None:
    """Render one local, non-service error to stderr."""

    if as_json:
        typer.echo(json.dumps({"error": {"message": message}}), err=True)
        return
    typer.echo(f"error: {message}", err=True)


def _render_human(data: Any) -> str | None:
    """Return human-oriented rendering for recognized response shapes."""
    if data is None:
        return None
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        if isinstance(data.get("results"), list):
            return _render_results(data)
        if _looks_like_rate_limit(data):
            return _render_rate_limit(data)
    if isinstance(data, list) and all(
        isinstance(item, dict) and "operation_id" in item for item in data
    ):
        return _render_audit(data)
    return json.dumps(data, indent=2, sort_keys=True)


def _looks_like_rate_limit(value: dict[str, Any]) -> bool:
    """Return True for rate budget payloads."""
    return "burst_remaining" in value and "daily_remaining" in value


def _render_results(data: dict[str, Any]) -> str:
    """Render one paged list of posts or tags."""
    items = data["results"]
    if len(items) == 0:
        return "No results found."
    lines: list[str] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        line = f"- {item.get('id', '<unknown>')}: {item.get('name', '')}".rstrip()
        state = item.get("state") or item.get("currentState")
        if state:
            line = f"{line} [{state}]"
        lines.append(line)
    total = data.get("total")
    if isinstance(total, int):
        lines.append(f"Total: {total}")
    return "\n".join(lines)


def _render_rate_limit(data: dict[str, Any]) -> str:
    """Render rate budget status."""
    return "\n".join(
        [
            f"Burst remaining: {data['burst_remaining']} "
            f"({data.get('burst_percent_used', 0):.1f}% used)",
            f"Daily remaining: {data['daily_remaining']} "
            f"({data.get('daily_percent_used', 0):.1f}% used)",
        ]
    )


def _render_audit(items: list[dict[str, Any]]) -> str:
    """Render audit record summaries."""
    if len(items) == 0:
        return "No operations recorded."
    return "\n".join(
        f"{item['operation_id']} {item.get('timestamp', '')} "
        f"{item.get('operation_kind', '')} {item.get('content_type', '')}/"
        f"{item.get('content_id', '')} {item.get('status', '')}"
        for item in items
    )


def _build_service(cfg: CliConfig) -> ContentAuthorityService:
    """Return one service built from global CLI settings."""
    if not resolve_hubspot_adapter_settings(cfg.settings).access_token:
        _emit_error(
            "No HubSpot access token configured. Pass --access-token or set "
            "HUBSPOT_ACCESS_TOKEN.",
            cfg.as_json,
        )
        raise typer.Exit(code=DOMAIN_ERROR_EXIT_CODE)
    return DefaultContentAuthorityService.from_settings(cfg.settings)


async def _call_service(
    service: ContentAuthorityService,
    invoke: Callable[[ContentAuthorityService], Awaitable[ServiceResult[Any]]],
) -> ServiceResult[Any]:
    """Await one service call and release the service afterwards."""
    try:
        return await invoke(service)
    finally:
        await service.aclose()


def _run_command(
    cfg: CliConfig,
    invoke: Callable[[ContentAuthorityService], Awaitable[ServiceResult[Any]]],
) -> None:
    """Execute one service call and map outputs/failures to process semantics."""
    service = _build_service(cfg)
    result = asyncio.run(_call_service(service, invoke))

    if result.failure is not None:
        _emit_failure(result.failure, cfg.as_json)
        if result.failure.is_transport:
            raise typer.Exit(code=TRANSPORT_ERROR_EXIT_CODE)
        raise typer.Exit(code=DOMAIN_ERROR_EXIT_CODE)

    _emit_output(result, cfg.as_json)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""

    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


def _audit_records(cfg: CliConfig) -> list[OperationRecord]:
    """Read the configured audit log or exit when none is configured."""
    path = resolve_content_authority_settings(cfg.settings).audit_log_path
    if not path:
        _emit_error(
            "No audit log configured. Pass --audit-log or set "
            "components.service.content_authority.audit_log_path.",
            cfg.as_json,
        )
        raise typer.Exit(code=DOMAIN_ERROR_EXIT_CODE)
    return read_records(path)


def _json_object(value: str | None) -> dict[str, Any] | None:
    """Parse an optional JSON object option."""
    if value is None:
        return None
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"invalid JSON: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise typer.BadParameter("expected a JSON object")
    return parsed


def _read_text(value: str | None, path: Path | None, label: str) -> str | None:
    """Return inline text or the contents of a file option."""
    if value is not None and path is not None:
        raise typer.BadParameter(f"pass either --{label} or --{label}-file, not both")
    if path is not None:
        return path.read_text(encoding="utf-8")
    return value


def _upload_source(source: str) -> tuple[str, str]:
    """Return upload content and default file name for a path, URL or data URI."""
    if source.startswith(("http://", "https://")):
        return source, Path(urlparse(source).path).name
    if source.startswith("data:"):
        return source, ""
    path = Path(source).expanduser()
    if not path.is_file():
        raise typer.BadParameter(f"file not found: {source}")
    return base64.b64encode(path.read_bytes()).decode("ascii"), path.name


app = typer.Typer(no_args_is_help=True, help="Steward CMS content command-line interface")
auth_app = typer.Typer(help="Access token commands")
posts_app = typer.Typer(help="Blog post collection commands")
content_app = typer.Typer(help="Single content object commands")
widgets_app = typer.Typer(help="Layout widget commands")
tags_app = typer.Typer(help="Blog tag commands")
files_app = typer.Typer(help="File manager commands")
audit_app = typer.Typer(help="Operation audit log commands")

_TYPE_OPTION = typer.Option(
    ContentType.BLOG_POST,
    "--type",
    help="Content type",
    case_sensitive=False,
    show_choices=True,
)
_IF_UPDATED_OPTION = typer.Option(
    None,
    "--if-updated",
    help="Only write when the object's updated timestamp still matches",
)


@app.callback()
def main(
    ctx: typer.Context,
    access_token: str | None = typer.Option(
        None,
        envvar="HUBSPOT_ACCESS_TOKEN",
        help="HubSpot private app access token",
    ),
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH, "--config", help="Steward YAML configuration file"
    ),
    audit_log: str | None = typer.Option(
        None, "--audit-log", help="JSONL operation audit log path"
    ),
    log_level: str | None = typer.Option(None, help="Override the logging level"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
) -> None:
    """Load settings and configure logging for all commands."""

    cli_params: dict[str, Any] = {}
    components: dict[str, Any] = {}
    if access_token:
        components["adapter"] = {"hubspot": {"access_token": access_token}}
    if audit_log is not None:
        components["service"] = {"content_authority": {"audit_log_path": audit_log}}
    if components:
        cli_params["components"] = components
    if log_level:
        cli_params["logging"] = {"level": log_level.upper()}

    try:
        settings = load_settings(cli_params=cli_params, config_path=config_path)
    except ValidationError as exc:
        _emit_error(f"invalid configuration: {exc}", as_json)
        raise typer.Exit(code=DOMAIN_ERROR_EXIT_CODE) from exc

    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )
    ctx.obj = CliConfig(settings=settings, as_json=as_json)


@auth_app.command("check")
def auth_check(ctx: typer.Context) -> None:
    """Validate the configured access token."""
    cfg = _require_config(ctx)
    _run_command(cfg, lambda service: service.authenticate())


@app.command("rate-limit")
def rate_limit(ctx: typer.Context) -> None:
    """Show the locally estimated rate budget."""
    cfg = _require_config(ctx)

    async def invoke(service: ContentAuthorityService) -> ServiceResult[Any]:
        return ServiceResult(payload=service.rate_limit_status())

    _run_command(cfg, invoke)


@posts_app.command("list")
def posts_list(
    ctx: typer.Context,
    limit: int | None = typer.Option(None, min=1, help="Page size"),
    offset: int = typer.Option(0, min=0, help="Page offset"),
    state: str | None = typer.Option(None, help="DRAFT, PUBLISHED or SCHEDULED"),
    author_name: str | None = typer.Option(None, help="Exact author name"),
    name: str | None = typer.Option(None, help="Name contains"),
    created_after: str | None = typer.Option(None, help="ISO timestamp"),
    updated_after: str | None = typer.Option(None, help="ISO timestamp"),
    archived: bool | None = typer.Option(
        None, "--archived/--not-archived", help="Archived in dashboard"
    ),
) -> None:
    """List blog posts."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda service: service.list_posts(
            limit=limit,
            offset=offset,
            state=state,
            author_name=author_name,
            name=name,
            created_after=created_after,
            updated_after=updated_after,
            archived_in_dashboard=archived,
        ),
    )


@posts_app.command("create")
def posts_create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Post name"),
    slug: str | None = typer.Option(None, help="URL slug"),
    content_group_id: str | None = typer.Option(None, help="Blog id"),
    blog_author_id: str | None = typer.Option(None, help="Author id"),
    html_title: str | None = typer.Option(None, help="HTML title"),
    body: str | None = typer.Option(None, help="Post body HTML"),
    body_file: Path | None = typer.Option(None, exists=True, dir_okay=False),
    summary: str | None = typer.Option(None, help="Post summary HTML"),
    meta_description: str | None = typer.Option(None, help="Meta description"),
    tag_id: list[int] | None = typer.Option(None, help="Tag id, repeatable"),
    featured_image: str | None = typer.Option(None, help="Featured image URL"),
    featured_image_alt_text: str | None = typer.Option(None, help="Alt text"),
) -> None:
    """Create one blog post draft."""
    cfg = _require_config(ctx)
    post: dict[str, Any] = {
        "name": name,
        "slug": slug,
        "content_group_id": content_group_id,
        "blog_author_id": blog_author_id,
        "html_title": html_title,
        "post_body": _read_text(body, body_file, "body"),
        "post_summary": summary,
        "meta_description": meta_description,
        "tag_ids": tag_id or None,
        "featured_image": featured_image,
        "featured_image_alt_text": featured_image_alt_text,
    }
    _run_command(
        cfg,
        lambda service: service.create_post(
            post={key: value for key, value in post.items() if value is not None}
        ),
    )


@content_app.command("get")
def content_get(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Content id"),
    content_type: ContentType = _TYPE_OPTION,
) -> None:
    """Fetch one complete content object."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda service: service.get_object(
            content_type=content_type, content_id=content_id
        ),
    )


@content_app.command("preview")
def content_preview(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Content id"),
    content_type: ContentType = _TYPE_OPTION,
) -> None:
    """Print the draft preview URL."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda service: service.preview_url(
            content_type=content_type, content_id=content_id
        ),
    )


@content_app.command("update-metadata")
def content_update_metadata(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Content id"),
    content_type: ContentType = _TYPE_OPTION,
    name: str | None = typer.Option(None, help="Internal name"),
    slug: str | None = typer.Option(None, help="URL slug"),
    html_title: str | None = typer.Option(None, help="HTML title"),
    meta_description: str | None = typer.Option(None, help="Meta description"),
    featured_image: str | None = typer.Option(None, help="Featured image URL"),
    featured_image_alt_text: str | None = typer.Option(None, help="Alt text"),
    blog_author_id: str | None = typer.Option(None, help="Author id"),
    author_name: str | None = typer.Option(None, help="Author display name"),
    tag_id: list[int] | None = typer.Option(None, help="Tag id, repeatable"),
    if_updated: str | None = _IF_UPDATED_OPTION,
) -> None:
    """Update flat metadata without touching body or layout."""
    cfg = _require_config(ctx)
    metadata = {
        key: value
        for key, value in {
            "name": name,
            "slug": slug,
            "html_title": html_title,
            "meta_description": meta_description,
            "featured_image": featured_image,
            "featured_image_alt_text": featured_image_alt_text,
            "blog_author_id": blog_author_id,
            "author_name": author_name,
            "tag_ids": tag_id or None,
        }.items()
        if value is not None
    }
    _run_command(
        cfg,
        lambda service: service.update_metadata(
            content_type=content_type,
            content_id=content_id,
            metadata=metadata,
            if_updated=if_updated,
        ),
    )


@content_app.command("update-content")
def content_update_content(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Content id"),
    content_type: ContentType = _TYPE_OPTION,
    body: str | None = typer.Option(None, help="Post body HTML"),
    body_file: Path | None = typer.Option(None, exists=True, dir_okay=False),
    summary: str | None = typer.Option(None, help="Post summary HTML"),
    if_updated: str | None = _IF_UPDATED_OPTION,
) -> None:
    """Replace the post body and optionally the summary."""
    cfg = _require_config(ctx)
    post_body = _read_text(body, body_file, "body")
    if post_body is None:
        raise typer.BadParameter("pass --body or --body-file")
    _run_command(
        cfg,
        lambda service: service.update_content(
            content_type=content_type,
            content_id=content_id,
            post_body=post_body,
            post_summary=summary,
            if_updated=if_updated,
        ),
    )


@content_app.command("publish")
def content_publish(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Content id"),
    content_type: ContentType = _TYPE_OPTION,
    publish_date: str | None = typer.Option(
        None, "--at", help="ISO timestamp to schedule publication"
    ),
) -> None:
    """Push the current draft live."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda service: service.publish(
            content_type=content_type,
            content_id=content_id,
            publish_date=publish_date,
        ),
    )


@content_app.command("restore")
def content_restore(
    ctx: typer.Context,
    operation_id: int = typer.Argument(..., help="Audit operation id"),
) -> None:
    """Write an operation's before snapshot back to the remote object."""
    cfg = _require_config(ctx)
    matches = [
        record
        for record in _audit_records(cfg)
        if record.operation_id == operation_id
    ]
    if not matches:
        _emit_error(f"Operation {operation_id} not found in audit log.", cfg.as_json)
        raise typer.Exit(code=DOMAIN_ERROR_EXIT_CODE)
    record = matches[-1]
    _run_command(cfg, lambda service: service.restore_snapshot(record=record))


@widgets_app.command("update")
def widgets_update(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Content id"),
    section: str = typer.Argument(..., help="Layout section name"),
    row: int = typer.Argument(..., help="Row index"),
    column: int = typer.Argument(..., help="Cell index"),
    widget: int = typer.Argument(..., help="Widget index"),
    content_type: ContentType = _TYPE_OPTION,
    html: str | None = typer.Option(None, help="Replacement body HTML"),
    params_json: str | None = typer.Option(None, "--params", help="JSON object"),
    styles_json: str | None = typer.Option(None, "--styles", help="JSON object"),
    if_updated: str | None = _IF_UPDATED_OPTION,
) -> None:
    """Update one widget's html, params or styles."""
    cfg = _require_config(ctx)
    params = _json_object(params_json)
    styles = _json_object(styles_json)
    _run_command(
        cfg,
        lambda service: service.update_widget(
            content_type=content_type,
            content_id=content_id,
            address=TreeAddress(section, row, column, widget),
            html=html,
            params=params,
            styles=styles,
            if_updated=if_updated,
        ),
    )


@widgets_app.command("insert")
def widgets_insert(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Content id"),
    section: str = typer.Argument(..., help="Layout section name"),
    row: int = typer.Argument(..., help="Row index"),
    column: int = typer.Argument(..., help="Cell index"),
    widget_type: str = typer.Option(..., "--widget-type", help="Widget type"),
    content_type: ContentType = _TYPE_OPTION,
    widget_id: str | None = typer.Option(None, "--widget-id", help="Widget id"),
    name: str | None = typer.Option(None, help="Widget name"),
    html: str | None = typer.Option(None, help="Body HTML"),
    params_json: str | None = typer.Option(None, "--params", help="JSON object"),
    styles_json: str | None = typer.Option(None, "--styles", help="JSON object"),
    if_updated: str | None = _IF_UPDATED_OPTION,
) -> None:
    """Append one widget to a cell."""
    cfg = _require_config(ctx)
    new_widget: dict[str, Any] = {
        "type": widget_type,
        "id": widget_id,
        "name": name,
        "html": html,
        "params": _json_object(params_json),
        "styles": _json_object(styles_json),
    }
    _run_command(
        cfg,
        lambda service: service.insert_widget(
            content_type=content_type,
            content_id=content_id,
            cell=TreeAddress(section, row, column),
            widget={key: value for key, value in new_widget.items() if value is not None},
            if_updated=if_updated,
        ),
    )


@widgets_app.command("remove")
def widgets_remove(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Content id"),
    section: str = typer.Argument(..., help="Layout section name"),
    row: int = typer.Argument(..., help="Row index"),
    column: int = typer.Argument(..., help="Cell index"),
    widget: int = typer.Argument(..., help="Widget index"),
    content_type: ContentType = _TYPE_OPTION,
    if_updated: str | None = _IF_UPDATED_OPTION,
) -> None:
    """Remove one widget and print it."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda service: service.remove_widget(
            content_type=content_type,
            content_id=content_id,
            address=TreeAddress(section, row, column, widget),
            if_updated=if_updated,
        ),
    )


@tags_app.command("list")
def tags_list(
    ctx: typer.Context,
    search: str | None = typer.Option(None, help="Name contains"),
) -> None:
    """List blog tags."""
    cfg = _require_config(ctx)
    _run_command(cfg, lambda service: service.list_tags(search_term=search))


@files_app.command("upload")
def files_upload(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Local path, URL or data URI"),
    file_name: str | None = typer.Option(None, help="Remote file name"),
    folder_path: str | None = typer.Option(None, help="Remote folder path"),
    access: FileAccess = typer.Option(
        FileAccess.PUBLIC_INDEXABLE, case_sensitive=False, help="Access level"
    ),
    ttl: str | None = typer.Option(None, help="Retention, for example P3M"),
) -> None:
    """Upload one file and print its URL."""
    cfg = _require_config(ctx)
    file_content, default_name = _upload_source(source)
    resolved_name = file_name or default_name
    if not resolved_name:
        raise typer.BadParameter("pass --file-name for data URI uploads")
    _run_command(
        cfg,
        lambda service: service.upload_file(
            file_content=file_content,
            file_name=resolved_name,
            folder_path=folder_path,
            access=access,
            ttl=ttl,
        ),
    )


@audit_app.command("list")
def audit_list(
    ctx: typer.Context,
    content_id: str | None = typer.Option(None, help="Only this content id"),
    limit: int = typer.Option(20, min=1, help="Most recent entries to show"),
) -> None:
    """List recorded operations, most recent last."""
    cfg = _require_config(ctx)
    records = [
        record
        for record in _audit_records(cfg)
        if content_id is None or record.content_id == content_id
    ]
    _emit_data([record.summary() for record in records[-limit:]], cfg.as_json)


@audit_app.command("show")
def audit_show(
    ctx: typer.Context,
    operation_id: int = typer.Argument(..., help="Audit operation id"),
) -> None:
    """Print one record including snapshots."""
    cfg = _require_config(ctx)
    for record in reversed(_audit_records(cfg)):
        if record.operation_id == operation_id:
            _emit_data(record.as_dict(), cfg.as_json)
            return
    _emit_error(f"Operation {operation_id} not found in audit log.", cfg.as_json)
    raise typer.Exit(code=DOMAIN_ERROR_EXIT_CODE)


app.add_typer(auth_app, name="auth")
app.add_typer(posts_app, name="posts")
app.add_typer(content_app, name="content")
app.add_typer(widgets_app, name="widgets")
app.add_typer(tags_app, name="tags")
app.add_typer(files_app, name="files")
app.add_typer(audit_app, name="audit")


if __name__ == "__main__":
    app()
