from __future__ import annotations

import json

import httpx

from .errors import ApiError, NotFoundError, RateLimitedError, UnauthorizedError, ValidationError
from .retry import parse_retry_after

REDACTED = "[REDACTED]"

# Checked in order; the first noun found in a 404 message names the resource.
_RESOURCE_NOUNS: tuple[tuple[str, str], ...] = (
    ("person", "person"),
    ("people", "person"),
    ("company", "company"),
    ("opportunity", "opportunity"),
    ("task", "task"),
    ("note", "note"),
    ("webhook", "webhook"),
    ("attachment", "attachment"),
    ("favorite", "favorite"),
    ("object", "object"),
    ("field", "field"),
)


def redact(text: str, secret: str | None) -> str:
    if not secret or not text:
        return text
    return text.replace(secret, REDACTED)


def parse_api_error_detail(body: bytes | str | None) -> tuple[str, str]:
    """Best-effort ``(code, message)`` from an error body; never raises."""
    if not body:
        return "", ""
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return "", ""
    if not isinstance(data, dict):
        return "", ""
    err = data.get("error")
    if isinstance(err, dict):
        return _text(err.get("code")), _text(err.get("message"))
    return "", _text(data.get("message"))


def _text(value) -> str:
    return value if isinstance(value, str) else ""


def infer_resource(message: str) -> str:
    lowered = message.lower()
    for noun, resource in _RESOURCE_NOUNS:
        if noun in lowered:
            return resource
    return "resource"


def parse_api_error(
        status_code: int,
        body: bytes | str | None,
        retry_after: str | None = None,
        *,
        secret: str | None = None,
) -> ApiError:
    code, message = parse_api_error_detail(body)
    code = redact(code, secret)
    message = redact(message, secret)
    if not code:
        code = httpx.codes.get_reason_phrase(status_code)

    if status_code == 401:
        return UnauthorizedError(message)
    if status_code == 404:
        return NotFoundError(infer_resource(message), "", message)
    if status_code == 429:
        return RateLimitedError(parse_retry_after(retry_after), message)
    if status_code == 400:
        if "validation" in code.lower() or "invalid" in message.lower():
            return ValidationError("", message, code)
    return ApiError(status_code, code, message)
