from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from . import console

APP_NAME = "twenty"
CONFIG_FILENAME = "config.toml"
BASE_URL_DEFAULT = "https://api.twenty.com"

ENV_BASE_URL = "TWENTY_BASE_URL"
ENV_TOKEN = "TWENTY_TOKEN"
ENV_PROFILE = "TWENTY_PROFILE"

_WARNED_BASE_URL_SCHEME = False


@dataclass
class AuthConfig:
    token: str = ""


@dataclass
class RetryConfig:
    max_attempts: int = 4
    base_delay: float = 1.0
    max_delay: float = 30.0


@dataclass
class ProfileConfig:
    base_url: str = ""
    token: str = ""


@dataclass
class AppConfig:
    base_url: str
    auth: AuthConfig
    retry: RetryConfig = field(default_factory=RetryConfig)
    profiles: dict[str, ProfileConfig] = field(default_factory=dict)


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig(
        base_url=BASE_URL_DEFAULT,
        auth=AuthConfig(token=""),
        retry=RetryConfig(),
        profiles={},
    )


def normalize_base_url(raw: str | None, *, warn: bool = False) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    value = value.rstrip("/")
    lowered = value.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        scheme = "http://"
    else:
        scheme = "https://"

    normalized = f"{scheme}{value}"
    if warn:
        _warn_missing_scheme(normalized)
    return normalized


def _warn_missing_scheme(normalized: str) -> None:
    global _WARNED_BASE_URL_SCHEME
    if _WARNED_BASE_URL_SCHEME:
        return
    if not _is_interactive():
        return
    console.warn(f"base_url missing scheme, assuming {normalized}")
    _WARNED_BASE_URL_SCHEME = True


def _is_interactive() -> bool:
    import sys
    return bool(sys.stderr.isatty() or sys.stdout.isatty())


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    data: dict[str, Any] = {
        "base_url": cfg.base_url,
        "auth": {"token": cfg.auth.token},
        "retry": {
            "max_attempts": cfg.retry.max_attempts,
            "base_delay": cfg.retry.base_delay,
            "max_delay": cfg.retry.max_delay,
        },
    }
    profiles = {
        name: {k: v for k, v in (("base_url", p.base_url), ("token", p.token)) if v}
        for name, p in cfg.profiles.items()
    }
    if profiles:
        data["profiles"] = profiles
    return data


def _number(value: Any, default, cast):
    if isinstance(value, bool) or value is None:
        return default
    try:
        return cast(value)
    except (TypeError, ValueError):
        return default


def from_toml(data: dict[str, Any]) -> AppConfig:
    cfg = default_config()
    base_url = normalize_base_url(str(data.get("base_url") or ""), warn=True)
    if base_url:
        cfg.base_url = base_url

    auth_raw = data.get("auth") or {}
    if isinstance(auth_raw, dict):
        cfg.auth.token = str(auth_raw.get("token") or "")

    retry_raw = data.get("retry") or {}
    if isinstance(retry_raw, dict):
        defaults = RetryConfig()
        cfg.retry = RetryConfig(
            max_attempts=_number(retry_raw.get("max_attempts"), defaults.max_attempts, int),
            base_delay=_number(retry_raw.get("base_delay"), defaults.base_delay, float),
            max_delay=_number(retry_raw.get("max_delay"), defaults.max_delay, float),
        )

    profiles_raw = data.get("profiles") or {}
    if isinstance(profiles_raw, dict):
        for name, prof in profiles_raw.items():
            if not isinstance(prof, dict):
                continue
            cfg.profiles[str(name)] = ProfileConfig(
                base_url=normalize_base_url(str(prof.get("base_url") or ""), warn=True),
                token=str(prof.get("token") or ""),
            )
    return cfg


def load_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return from_toml(data)
    except FileNotFoundError:
        return default_config()


def apply_profile(cfg: AppConfig, profile: str | None) -> AppConfig:
    """Resolve the effective base URL and token.

    Precedence, lowest first: config file, named profile, environment.
    """
    profile = profile or os.getenv(ENV_PROFILE, "").strip() or None
    base_url = cfg.base_url
    token = cfg.auth.token
    if profile:
        prof = cfg.profiles.get(profile)
        if prof is None:
            raise KeyError(profile)
        base_url = prof.base_url or base_url
        token = prof.token or token

    env_base_url = normalize_base_url(os.getenv(ENV_BASE_URL, ""))
    env_token = os.getenv(ENV_TOKEN, "").strip()
    return AppConfig(
        base_url=env_base_url or base_url,
        auth=AuthConfig(token=env_token or token),
        retry=cfg.retry,
        profiles=cfg.profiles,
    )


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path
