from __future__ import annotations

import typer

from ._common import merge_body, read_json_object, record_app, run_create, run_update

COLUMNS = ["id", "name", "type", "fullPath", "createdAt"]

app = record_app("attachments", "attachment", help="Attachments commands.", columns=COLUMNS)


def _attachment_fields(name: str | None, full_path: str | None, kind: str | None) -> dict:
    return {"name": name, "fullPath": full_path, "type": kind}


@app.command("create")
def create_attachment(
        ctx: typer.Context,
        name: str | None = typer.Option(None, "--name", help="File name."),
        full_path: str | None = typer.Option(None, "--full-path", help="Storage path of the uploaded file."),
        kind: str | None = typer.Option(None, "--type", help="Attachment type, e.g. Image or TextDocument."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(read_json_object(data, data_file), _attachment_fields(name, full_path, kind))
    run_create(ctx, "attachments", "attachment", body, COLUMNS)


@app.command("update")
def update_attachment(
        ctx: typer.Context,
        attachment_id: str = typer.Argument(..., help="Attachment ID."),
        name: str | None = typer.Option(None, "--name", help="File name."),
        full_path: str | None = typer.Option(None, "--full-path", help="Storage path of the uploaded file."),
        kind: str | None = typer.Option(None, "--type", help="Attachment type, e.g. Image or TextDocument."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(read_json_object(data, data_file), _attachment_fields(name, full_path, kind))
    run_update(ctx, "attachments", "attachment", attachment_id, body, COLUMNS)
