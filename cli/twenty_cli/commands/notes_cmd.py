from __future__ import annotations

import typer

from ._common import merge_body, read_json_object, record_app, run_create, run_update

COLUMNS = ["id", "title", "createdAt"]

app = record_app("notes", "note", help="Notes commands.", columns=COLUMNS)


def _body_v2(markdown: str | None) -> dict | None:
    return {"markdown": markdown} if markdown is not None else None


@app.command("create")
def create_note(
        ctx: typer.Context,
        title: str | None = typer.Option(None, "--title", help="Note title."),
        body_text: str | None = typer.Option(None, "--body", help="Note body (markdown)."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(read_json_object(data, data_file), {"title": title, "bodyV2": _body_v2(body_text)})
    run_create(ctx, "notes", "note", body, COLUMNS)


@app.command("update")
def update_note(
        ctx: typer.Context,
        note_id: str = typer.Argument(..., help="Note ID."),
        title: str | None = typer.Option(None, "--title", help="Note title."),
        body_text: str | None = typer.Option(None, "--body", help="Note body (markdown)."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(read_json_object(data, data_file), {"title": title, "bodyV2": _body_v2(body_text)})
    run_update(ctx, "notes", "note", note_id, body, COLUMNS)
