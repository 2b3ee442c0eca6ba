from __future__ import annotations

from dataclasses import dataclass

import typer
from twenty_client import ClientConfig, RetryPolicy, TwentyClient

from . import __version__, console
from .config import AppConfig, apply_profile, load_config, normalize_base_url


@dataclass
class Runtime:
    """Global options resolved by the root callback."""

    base_url: str | None = None
    profile: str | None = None
    output: str = "text"
    debug: bool = False
    no_retry: bool = False
    max_attempts: int | None = None
    timeout_s: float | None = None


def make_client(
    cfg: AppConfig,
    *,
    profile: str | None,
    base_url_override: str | None,
    debug: bool = False,
    no_retry: bool = False,
    max_attempts: int | None = None,
) -> TwentyClient:
    effective_cfg = apply_profile(cfg, profile)
    base_url = normalize_base_url(base_url_override or effective_cfg.base_url, warn=True)
    token = effective_cfg.auth.token or None

    retry = RetryPolicy(
        max_attempts=max_attempts or effective_cfg.retry.max_attempts,
        base_delay=effective_cfg.retry.base_delay,
        max_delay=effective_cfg.retry.max_delay,
    )
    if no_retry:
        retry = retry.no_retry()
    return TwentyClient(
        ClientConfig(
            base_url=base_url,
            token=token,
            debug=debug,
            retry=retry,
            client_version=__version__,
        )
    )


def client_for(rt: Runtime, *, require_token: bool = True) -> TwentyClient:
    cfg = load_config()
    try:
        effective = apply_profile(cfg, rt.profile)
    except KeyError:
        console.err(f"Unknown profile: {rt.profile}")
        raise typer.Exit(code=2)
    if require_token and not (effective.auth.token or "").strip():
        console.err("Not authenticated. No token found.")
        console.info("Run: twenty auth set-token")
        raise typer.Exit(code=2)
    try:
        return make_client(
            cfg,
            profile=rt.profile,
            base_url_override=rt.base_url,
            debug=rt.debug,
            no_retry=rt.no_retry,
            max_attempts=rt.max_attempts,
        )
    except ValueError as e:
        console.err(f"Invalid retry settings: {e}")
        raise typer.Exit(code=2)
