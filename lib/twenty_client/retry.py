from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

import httpx

from .config_types import RetryPolicy

# 500 is not retried.
RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


def should_retry(status_code: int) -> bool:
    return status_code in RETRYABLE_STATUS_CODES


def backoff_delay(
        attempt: int,
        response: httpx.Response | None,
        policy: RetryPolicy,
        *,
        now: datetime | None = None,
) -> float:
    """Seconds to wait before retry number ``attempt`` (1-based).

    A ``Retry-After`` header on ``response`` wins over exponential
    backoff. The result never exceeds ``policy.max_delay``.
    """
    hint = response.headers.get("Retry-After") if response is not None else None
    if hint:
        delay = _hint_delay(hint.strip(), policy, now)
        if delay is not None:
            return min(delay, policy.max_delay)

    delay = policy.base_delay * (2 ** max(0, attempt - 1))
    return min(delay, policy.max_delay)


def _hint_delay(hint: str, policy: RetryPolicy, now: datetime | None) -> float | None:
    seconds = _parse_seconds(hint)
    if seconds is not None:
        return float(seconds) if seconds >= 0 else policy.base_delay

    try:
        when = parsedate_to_datetime(hint)
    except (TypeError, ValueError, IndexError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    current = now or datetime.now(timezone.utc)
    delta = (when - current).total_seconds()
    if delta < 0:
        return policy.base_delay
    return delta


def _parse_seconds(text: str) -> int | None:
    """Plain ASCII decimal with an optional sign, nothing else."""
    digits = text[1:] if text.startswith(("+", "-")) else text
    if not (digits.isascii() and digits.isdigit()):
        return None
    return int(text)


def parse_retry_after(value: str | None) -> int:
    seconds = _parse_seconds((value or "").strip())
    if seconds is None:
        return 0
    return max(0, seconds)
