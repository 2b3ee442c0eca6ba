from __future__ import annotations

import json

import typer

from .. import console
from ..formatting import render
from ._common import call, read_json_input, runtime

app = typer.Typer(help="Send raw REST requests.")

_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def _run(ctx: typer.Context, method: str, path: str, data: str | None, data_file: str | None) -> None:
    method = method.upper()
    if method not in _METHODS:
        console.err(f"Unsupported method: {method}")
        raise typer.Exit(code=2)
    if not path.startswith("/"):
        path = "/" + path
    body = read_json_input(data, data_file)
    raw = call(ctx, f"{method} {path}", lambda c, **kw: c.rest_request(method, path, body, **kw))
    if not raw.strip():
        console.ok(f"{method} {path}: no content.")
        return
    output = runtime(ctx).output
    render(json.loads(raw), output="json" if output == "text" else output)


@app.command("request")
def request(
        ctx: typer.Context,
        method: str = typer.Argument(..., help="HTTP method."),
        path: str = typer.Argument(..., help="Path, may include a query string."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON request body."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    _run(ctx, method, path, data, data_file)


@app.command("get")
def get(
        ctx: typer.Context,
        path: str = typer.Argument(..., help="Path, may include a query string."),
):
    _run(ctx, "GET", path, None, None)


@app.command("post")
def post(
        ctx: typer.Context,
        path: str = typer.Argument(..., help="Path."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON request body."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    _run(ctx, "POST", path, data, data_file)


@app.command("patch")
def patch(
        ctx: typer.Context,
        path: str = typer.Argument(..., help="Path."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON request body."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    _run(ctx, "PATCH", path, data, data_file)


@app.command("delete")
def delete(
        ctx: typer.Context,
        path: str = typer.Argument(..., help="Path."),
):
    _run(ctx, "DELETE", path, None, None)
