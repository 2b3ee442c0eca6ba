from __future__ import annotations

import os

import typer
from twenty_client import RetryPolicy

from .. import console
from ..config import ProfileConfig, config_path, default_config, load_config, normalize_base_url, save_config

app = typer.Typer(help="Manage local CLI settings (~/.config/twenty/config.toml).")

_KEYS = ("base_url", "max_attempts", "base_delay", "max_delay")


@app.command("init")
def init_settings(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        base_url: str = typer.Option(
            ...,
            "--base-url",
            prompt="API base URL",
            help="API base URL like https://api.twenty.com",
        ),
):
    path = config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    cfg.base_url = normalize_base_url(base_url, warn=True)
    if not cfg.base_url:
        console.err("Base URL cannot be empty.")
        raise typer.Exit(code=2)
    saved = save_config(cfg)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_settings():
    cfg = load_config()
    token_state = "(set)" if (cfg.auth.token or "").strip() else "(empty)"
    console.print(
        f"base_url={cfg.base_url} token={token_state} max_attempts={cfg.retry.max_attempts} "
        f"base_delay={cfg.retry.base_delay} max_delay={cfg.retry.max_delay}",
        markup=False,
    )
    for name, prof in sorted(cfg.profiles.items()):
        prof_token = "(set)" if prof.token else "(empty)"
        console.print(f"profile {name}: base_url={prof.base_url or '-'} token={prof_token}", markup=False)


@app.command("get")
def get_setting(
        key: str = typer.Argument(..., help=f"Setting key ({', '.join(_KEYS)})."),
):
    cfg = load_config()
    k = key.strip().lower()
    if k == "base_url":
        console.print(cfg.base_url, markup=False)
        return
    if k in ("max_attempts", "base_delay", "max_delay"):
        console.print(str(getattr(cfg.retry, k)))
        return
    console.err(f"Unknown setting: {key}")
    raise typer.Exit(code=2)


@app.command("set")
def set_setting(
        base_url: str | None = typer.Option(None, "--base-url", help="Set API base URL."),
        max_attempts: int | None = typer.Option(None, "--max-attempts", help="Attempts per request, 1 disables retries."),
        base_delay: float | None = typer.Option(None, "--base-delay", help="First backoff delay in seconds."),
        max_delay: float | None = typer.Option(None, "--max-delay", help="Backoff cap in seconds."),
):
    cfg = load_config()
    if base_url is not None:
        cfg.base_url = normalize_base_url(base_url, warn=True)
    if max_attempts is not None:
        cfg.retry.max_attempts = max_attempts
    if base_delay is not None:
        cfg.retry.base_delay = base_delay
    if max_delay is not None:
        cfg.retry.max_delay = max_delay
    try:
        RetryPolicy(cfg.retry.max_attempts, cfg.retry.base_delay, cfg.retry.max_delay)
    except ValueError as e:
        console.err(f"Invalid retry settings: {e}")
        raise typer.Exit(code=2)
    saved = save_config(cfg)
    console.ok(f"Settings updated: {saved}")


@app.command("add-profile")
def add_profile(
        name: str = typer.Argument(..., help="Profile name."),
        base_url: str | None = typer.Option(None, "--base-url", help="Base URL for this profile."),
):
    cfg = load_config()
    prof = cfg.profiles.setdefault(name, ProfileConfig())
    if base_url is not None:
        prof.base_url = normalize_base_url(base_url, warn=True)
    saved = save_config(cfg)
    console.ok(f"Profile {name} saved: {saved}")
    console.info(f"Run: twenty auth set-token --profile {name}")
