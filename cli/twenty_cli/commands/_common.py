from __future__ import annotations

import json
import sys
from typing import Any, Callable, NoReturn

import typer
from twenty_client import (
    ListOptions,
    RateLimitedError,
    RequestCancelled,
    RequestTimeout,
    TwentyClientError,
    UnauthorizedError,
)

from .. import console
from ..formatting import render
from ..http import Runtime, client_for


def runtime(ctx: typer.Context) -> Runtime:
    obj = ctx.obj
    return obj if isinstance(obj, Runtime) else Runtime()


def fail(e: TwentyClientError, action: str) -> NoReturn:
    if isinstance(e, UnauthorizedError):
        console.err("Not authenticated. Your token is invalid or expired.")
        console.info("Run: twenty auth set-token")
    elif isinstance(e, RateLimitedError):
        console.err(f"Failed to {action}: rate limited by the API.")
        if e.retry_after:
            console.info(f"Retry after {e.retry_after}s.")
    elif isinstance(e, RequestTimeout):
        console.err(f"Failed to {action}: request timed out.")
    elif isinstance(e, RequestCancelled):
        console.err("Cancelled.")
        raise typer.Exit(code=1)
    else:
        console.err(f"Failed to {action}: {e}")
    raise typer.Exit(code=2)


def read_json_input(data: str | None, data_file: str | None) -> Any | None:
    """Parse ``--data`` or ``--data-file`` (``-`` reads stdin)."""
    if not data and not data_file:
        return None
    if data_file:
        try:
            if data_file == "-":
                raw = sys.stdin.read()
            else:
                with open(data_file, encoding="utf-8") as f:
                    raw = f.read()
        except OSError as e:
            console.err(f"Cannot read {data_file}: {e}")
            raise typer.Exit(code=2)
    else:
        raw = data or ""
    try:
        return json.loads(raw)
    except ValueError as e:
        console.err(f"Invalid JSON: {e}")
        raise typer.Exit(code=2)


def read_json_object(data: str | None, data_file: str | None) -> dict[str, Any] | None:
    value = read_json_input(data, data_file)
    if value is not None and not isinstance(value, dict):
        console.err("Expected a JSON object.")
        raise typer.Exit(code=2)
    return value


def parse_params(params: list[str] | None) -> list[tuple[str, str]]:
    out: list[tuple[str, str]] = []
    for item in params or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            console.err(f"Invalid --param {item!r}, expected key=value.")
            raise typer.Exit(code=2)
        out.append((key, value))
    return out


def build_list_options(
        *,
        limit: int | None = None,
        cursor: str | None = None,
        filter_json: str | None = None,
        sort: str | None = None,
        order: str | None = None,
        fields: str | None = None,
        include: list[str] | None = None,
        params: list[str] | None = None,
) -> ListOptions:
    filter_value = read_json_object(filter_json, None) if filter_json else {}
    return ListOptions(
        limit=limit,
        cursor=cursor,
        filter=filter_value or {},
        sort=sort,
        order=order,
        fields=fields,
        include=[i for i in include or [] if i],
        params=parse_params(params),
    )


def call(ctx: typer.Context, action: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
    """Run one client call with the global options applied."""
    rt = runtime(ctx)
    client = client_for(rt)
    try:
        return fn(client, *args, timeout_s=rt.timeout_s, **kwargs)
    except TwentyClientError as e:
        fail(e, action)
    finally:
        client.close()


def show_list(ctx: typer.Context, resp, columns: list[str], *, title: str | None = None) -> None:
    rt = runtime(ctx)
    if rt.output != "text":
        payload: dict[str, Any] = {"data": resp.data, "totalCount": resp.total_count}
        if resp.page_info is not None:
            payload["pageInfo"] = {
                "hasNextPage": resp.page_info.has_next_page,
                "endCursor": resp.page_info.end_cursor,
            }
        render(payload, output=rt.output)
        return
    render(resp.data, output="text", columns=columns, title=title)
    if resp.page_info is not None and resp.page_info.has_next_page and resp.page_info.end_cursor:
        console.info(f"More results: --cursor {resp.page_info.end_cursor}")


def show_item(ctx: typer.Context, item: Any, columns: list[str] | None = None) -> None:
    rt = runtime(ctx)
    render(item, output=rt.output, columns=columns if rt.output == "text" else None)


def record_app(plural: str, singular: str, *, help: str, columns: list[str]) -> typer.Typer:
    """Typer app with list/get/delete for a record resource.

    Resource modules add their own create/update commands, whose flags
    differ per resource.
    """
    app = typer.Typer(help=help)

    @app.command("list")
    def list_cmd(
            ctx: typer.Context,
            limit: int | None = typer.Option(None, "--limit", "-l", help="Max records to return."),
            cursor: str | None = typer.Option(None, "--cursor", help="Start after this cursor."),
            filter_json: str | None = typer.Option(None, "--filter", help="Filter as JSON object."),
            sort: str | None = typer.Option(None, "--sort", help="Field to order by."),
            order: str | None = typer.Option(None, "--order", help="AscNullsFirst, DescNullsLast, ..."),
            fields: str | None = typer.Option(None, "--fields", help="Comma separated fields to return."),
            include: list[str] | None = typer.Option(None, "--include", help="Relations to include."),
            params: list[str] | None = typer.Option(None, "--param", help="Extra query param key=value."),
    ):
        opts = build_list_options(
            limit=limit,
            cursor=cursor,
            filter_json=filter_json,
            sort=sort,
            order=order,
            fields=fields,
            include=include,
            params=params,
        )
        resp = call(ctx, f"list {plural}", lambda c, **kw: c.list_records(plural, opts, **kw))
        show_list(ctx, resp, columns, title=plural.capitalize())

    @app.command("get")
    def get_cmd(
            ctx: typer.Context,
            record_id: str = typer.Argument(..., help=f"{singular.capitalize()} ID."),
            include: list[str] | None = typer.Option(None, "--include", help="Relations to include."),
    ):
        opts = ListOptions(include=[i for i in include or [] if i]) if include else None
        item = call(ctx, f"get {singular}", lambda c, **kw: c.get_record(plural, record_id, opts, **kw))
        show_item(ctx, item, columns)

    @app.command("delete")
    def delete_cmd(
            ctx: typer.Context,
            record_id: str = typer.Argument(..., help=f"{singular.capitalize()} ID."),
            yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    ):
        if not yes and not typer.confirm(f"Delete {singular} {record_id}?", default=False):
            raise typer.Exit(code=0)
        call(ctx, f"delete {singular}", lambda c, **kw: c.delete_record(plural, record_id, **kw))
        console.ok(f"Deleted {singular} {record_id}.")

    return app


def run_create(ctx: typer.Context, plural: str, singular: str, body: dict[str, Any], columns: list[str]) -> None:
    if not body:
        console.err("Nothing to create. Pass --data or field options.")
        raise typer.Exit(code=2)
    item = call(ctx, f"create {singular}", lambda c, **kw: c.create_record(plural, body, **kw))
    if runtime(ctx).output == "text":
        console.ok(f"Created {singular} {item.get('id', '')}.")
    show_item(ctx, item, columns)


def run_update(
        ctx: typer.Context,
        plural: str,
        singular: str,
        record_id: str,
        body: dict[str, Any],
        columns: list[str],
) -> None:
    if not body:
        console.err("Nothing to update. Pass --data or field options.")
        raise typer.Exit(code=2)
    item = call(ctx, f"update {singular}", lambda c, **kw: c.update_record(plural, record_id, body, **kw))
    if runtime(ctx).output == "text":
        console.ok(f"Updated {singular} {record_id}.")
    show_item(ctx, item, columns)


def merge_body(data: dict[str, Any] | None, fields: dict[str, Any]) -> dict[str, Any]:
    """Flag values fill in on top of ``--data``; ``None`` flags are skipped."""
    body = dict(data or {})
    for key, value in fields.items():
        if value is not None:
            body[key] = value
    return body
