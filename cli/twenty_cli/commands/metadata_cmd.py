from __future__ import annotations

import json

import typer

from .. import console
from ..formatting import render
from ._common import call, read_json_object, runtime, show_item

OBJECT_COLUMNS = ["id", "nameSingular", "namePlural", "labelSingular", "isCustom", "isActive"]
FIELD_COLUMNS = ["id", "name", "label", "type", "objectMetadataId", "isCustom"]

objects_app = typer.Typer(help="Object metadata commands.")
fields_app = typer.Typer(help="Field metadata commands.")


def _require_body(data: str | None, data_file: str | None) -> dict:
    body = read_json_object(data, data_file)
    if not body:
        console.err("Either --data or --data-file is required.")
        raise typer.Exit(code=2)
    return body


def _show_raw(ctx: typer.Context, raw: bytes, done: str) -> None:
    if runtime(ctx).output == "text":
        console.ok(done)
    if raw.strip():
        render(json.loads(raw), output="json" if runtime(ctx).output == "text" else runtime(ctx).output)


def _confirm(what: str, yes: bool) -> None:
    if not yes and not typer.confirm(f"Delete {what}?", default=False):
        raise typer.Exit(code=0)


@objects_app.command("list")
def list_objects(ctx: typer.Context):
    items = call(ctx, "list objects", lambda c, **kw: c.objects_list(**kw))
    render(items, output=runtime(ctx).output, columns=OBJECT_COLUMNS, title="Objects")


@objects_app.command("get")
def get_object(
        ctx: typer.Context,
        name_or_id: str = typer.Argument(..., help="Object ID, singular or plural name."),
):
    item = call(ctx, "get object", lambda c, **kw: c.object_get(name_or_id, **kw))
    show_item(ctx, item, OBJECT_COLUMNS)


@objects_app.command("create")
def create_object(
        ctx: typer.Context,
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = _require_body(data, data_file)
    raw = call(ctx, "create object", lambda c, **kw: c.object_create(body, **kw))
    _show_raw(ctx, raw, "Object created.")


@objects_app.command("update")
def update_object(
        ctx: typer.Context,
        object_id: str = typer.Argument(..., help="Object ID."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = _require_body(data, data_file)
    raw = call(ctx, "update object", lambda c, **kw: c.object_update(object_id, body, **kw))
    _show_raw(ctx, raw, f"Object {object_id} updated.")


@objects_app.command("delete")
def delete_object(
        ctx: typer.Context,
        object_id: str = typer.Argument(..., help="Object ID."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    _confirm(f"object {object_id}", yes)
    call(ctx, "delete object", lambda c, **kw: c.object_delete(object_id, **kw))
    console.ok(f"Deleted object {object_id}.")


@fields_app.command("list")
def list_fields(
        ctx: typer.Context,
        object_id: str | None = typer.Option(None, "--object-id", help="Only fields of this object."),
):
    items = call(ctx, "list fields", lambda c, **kw: c.fields_list(**kw))
    if object_id:
        items = [f for f in items if f.get("objectMetadataId") == object_id]
    render(items, output=runtime(ctx).output, columns=FIELD_COLUMNS, title="Fields")


@fields_app.command("get")
def get_field(
        ctx: typer.Context,
        field_id: str = typer.Argument(..., help="Field ID."),
):
    item = call(ctx, "get field", lambda c, **kw: c.field_get(field_id, **kw))
    show_item(ctx, item, FIELD_COLUMNS)


@fields_app.command("create")
def create_field(
        ctx: typer.Context,
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = _require_body(data, data_file)
    raw = call(ctx, "create field", lambda c, **kw: c.field_create(body, **kw))
    _show_raw(ctx, raw, "Field created.")


@fields_app.command("update")
def update_field(
        ctx: typer.Context,
        field_id: str = typer.Argument(..., help="Field ID."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = _require_body(data, data_file)
    raw = call(ctx, "update field", lambda c, **kw: c.field_update(field_id, body, **kw))
    _show_raw(ctx, raw, f"Field {field_id} updated.")


@fields_app.command("delete")
def delete_field(
        ctx: typer.Context,
        field_id: str = typer.Argument(..., help="Field ID."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    _confirm(f"field {field_id}", yes)
    call(ctx, "delete field", lambda c, **kw: c.field_delete(field_id, **kw))
    console.ok(f"Deleted field {field_id}.")
