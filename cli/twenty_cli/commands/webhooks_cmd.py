from __future__ import annotations

import typer

from .. import console
from ._common import call, runtime, show_item, show_list

COLUMNS = ["id", "targetUrl", "operation", "isActive", "createdAt"]

app = typer.Typer(help="Webhooks commands.")


@app.command("list")
def list_webhooks(ctx: typer.Context):
    resp = call(ctx, "list webhooks", lambda c, **kw: c.webhooks_list(**kw))
    show_list(ctx, resp, COLUMNS, title="Webhooks")


@app.command("get")
def get_webhook(
        ctx: typer.Context,
        webhook_id: str = typer.Argument(..., help="Webhook ID."),
):
    item = call(ctx, "get webhook", lambda c, **kw: c.webhook_get(webhook_id, **kw))
    show_item(ctx, item, COLUMNS + ["description"])


@app.command("create")
def create_webhook(
        ctx: typer.Context,
        target_url: str = typer.Option(..., "--url", help="Target URL receiving events."),
        operation: str = typer.Option("*.*", "--operation", help="Event filter, e.g. person.created."),
        description: str | None = typer.Option(None, "--description", help="Description."),
        secret: str | None = typer.Option(None, "--secret", help="Signing secret."),
):
    item = call(
        ctx,
        "create webhook",
        lambda c, **kw: c.webhook_create(
            target_url=target_url,
            operation=operation,
            description=description,
            secret=secret,
            **kw,
        ),
    )
    if runtime(ctx).output == "text":
        console.ok(f"Created webhook {item.get('id', '')}.")
    show_item(ctx, item, COLUMNS)


@app.command("delete")
def delete_webhook(
        ctx: typer.Context,
        webhook_id: str = typer.Argument(..., help="Webhook ID."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    if not yes and not typer.confirm(f"Delete webhook {webhook_id}?", default=False):
        raise typer.Exit(code=0)
    call(ctx, "delete webhook", lambda c, **kw: c.webhook_delete(webhook_id, **kw))
    console.ok(f"Deleted webhook {webhook_id}.")
