from __future__ import annotations

import typer

from ._common import merge_body, read_json_object, record_app, run_create, run_update

COLUMNS = ["id", "title", "status", "dueAt", "assigneeId"]

app = record_app("tasks", "task", help="Tasks commands.", columns=COLUMNS)


@app.command("create")
def create_task(
        ctx: typer.Context,
        title: str | None = typer.Option(None, "--title", help="Task title."),
        due_at: str | None = typer.Option(None, "--due", help="Due date (ISO 8601)."),
        status: str | None = typer.Option(None, "--status", help="TODO, IN_PROGRESS or DONE."),
        assignee_id: str | None = typer.Option(None, "--assignee-id", help="Workspace member ID."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    fields = {"title": title, "dueAt": due_at, "status": status, "assigneeId": assignee_id}
    body = merge_body(read_json_object(data, data_file), fields)
    run_create(ctx, "tasks", "task", body, COLUMNS)


@app.command("update")
def update_task(
        ctx: typer.Context,
        task_id: str = typer.Argument(..., help="Task ID."),
        title: str | None = typer.Option(None, "--title", help="Task title."),
        due_at: str | None = typer.Option(None, "--due", help="Due date (ISO 8601)."),
        status: str | None = typer.Option(None, "--status", help="TODO, IN_PROGRESS or DONE."),
        assignee_id: str | None = typer.Option(None, "--assignee-id", help="Workspace member ID."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    fields = {"title": title, "dueAt": due_at, "status": status, "assigneeId": assignee_id}
    body = merge_body(read_json_object(data, data_file), fields)
    run_update(ctx, "tasks", "task", task_id, body, COLUMNS)
