from __future__ import annotations

import typer

from . import __version__, console
from .commands import (
    attachments_cmd,
    auth_cmd,
    companies_cmd,
    favorites_cmd,
    metadata_cmd,
    notes_cmd,
    opportunities_cmd,
    people_cmd,
    rest_cmd,
    settings_cmd,
    tasks_cmd,
    webhooks_cmd,
)
from .formatting import OUTPUT_FORMATS
from .http import Runtime
from .logging_ import setup_logging


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"twenty {__version__}")
        raise typer.Exit()


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="twenty",
        help="CLI for the Twenty CRM REST API.",
        no_args_is_help=True,
    )

    app.add_typer(auth_cmd.app, name="auth")
    app.add_typer(settings_cmd.app, name="settings")
    app.add_typer(companies_cmd.app, name="companies")
    app.add_typer(people_cmd.app, name="people")
    app.add_typer(opportunities_cmd.app, name="opportunities")
    app.add_typer(tasks_cmd.app, name="tasks")
    app.add_typer(notes_cmd.app, name="notes")
    app.add_typer(attachments_cmd.app, name="attachments")
    app.add_typer(favorites_cmd.app, name="favorites")
    app.add_typer(webhooks_cmd.app, name="webhooks")
    app.add_typer(metadata_cmd.objects_app, name="objects")
    app.add_typer(metadata_cmd.fields_app, name="fields")
    app.add_typer(rest_cmd.app, name="rest")

    @app.callback()
    def _main(
            ctx: typer.Context,
            base_url: str | None = typer.Option(None, "--base-url", help="Override API base URL."),
            profile: str | None = typer.Option(None, "--profile", "-p", help="Config profile to use."),
            output: str = typer.Option("text", "--output", "-o", help="Output format: text, json, yaml."),
            debug: bool = typer.Option(False, "--debug", help="Log API requests and responses to stderr."),
            no_retry: bool = typer.Option(False, "--no-retry", help="Disable retries on 429/502/503/504."),
            max_attempts: int | None = typer.Option(None, "--max-attempts", min=1, help="Attempts per request."),
            timeout: float | None = typer.Option(None, "--timeout", min=0.1, help="Deadline per request, seconds."),
            version: bool = typer.Option(
                False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
            ),
    ):
        setup_logging(debug)
        output = output.lower()
        if output not in OUTPUT_FORMATS:
            console.err(f"Unknown output format: {output}")
            raise typer.Exit(code=2)
        ctx.obj = Runtime(
            base_url=base_url,
            profile=profile,
            output=output,
            debug=debug,
            no_retry=no_retry,
            max_attempts=max_attempts,
            timeout_s=timeout,
        )

    return app


app = _build_app()
