from __future__ import annotations

import typer
from twenty_client import TwentyClientError, UnauthorizedError

from .. import console
from ..config import load_config, save_config
from ..http import client_for
from ._common import runtime

app = typer.Typer(help="Auth commands.")


@app.command("set-token")
def set_token(
        token: str = typer.Option(..., "--token", prompt=True, hide_input=True, help="API key from Settings > APIs."),
        profile: str | None = typer.Option(None, "--profile", help="Store the token in this profile."),
):
    cfg = load_config()
    token = token.strip()
    if not token:
        console.err("Token cannot be empty.")
        raise typer.Exit(code=2)
    if profile:
        prof = cfg.profiles.get(profile)
        if prof is None:
            console.err(f"Unknown profile: {profile}")
            raise typer.Exit(code=2)
        prof.token = token
    else:
        cfg.auth.token = token
    save_path = save_config(cfg)
    console.ok(f"Token saved to {save_path}.")


@app.command("status")
def status(ctx: typer.Context):
    """Check that the stored token is accepted by the API."""
    rt = runtime(ctx)
    client = client_for(rt)
    try:
        client.objects_list(timeout_s=rt.timeout_s)
    except UnauthorizedError:
        console.err("Not authenticated.")
        console.info("Your token is invalid or expired.")
        console.info("Run: twenty auth set-token")
        raise typer.Exit(code=2)
    except TwentyClientError as e:
        console.err(f"Cannot verify token: {e}")
        raise typer.Exit(code=2)
    finally:
        client.close()
    console.ok("Authenticated.")


@app.command("logout", help="Clear the stored API token.")
def logout(
        profile: str | None = typer.Option(None, "--profile", help="Clear the token of this profile."),
):
    cfg = load_config()
    if profile:
        prof = cfg.profiles.get(profile)
        if prof is None:
            console.err(f"Unknown profile: {profile}")
            raise typer.Exit(code=2)
        prof.token = ""
    else:
        cfg.auth.token = ""
    save_path = save_config(cfg)
    console.ok(f"Token cleared from {save_path}.")
