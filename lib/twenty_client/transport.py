from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable
from urllib.parse import urlsplit

import httpx

from .config_types import ClientConfig
from .errors import (
    InvalidRequestError,
    NetworkError,
    RequestCancelled,
    RequestTimeout,
    ResponseDecodeError,
)
from .errors_utils import parse_api_error, redact
from .retry import backoff_delay, should_retry
from .sanitize import sanitize_json

log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "twenty-cli"


class Transport:
    """Sends one logical API call as one or more HTTP attempts.

    The underlying ``httpx.Client`` is the only shared state; every call
    runs its own retry loop, so one instance may serve several threads.
    """

    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None):
        self._cfg = cfg
        ua = f"{DEFAULT_USER_AGENT}/{cfg.client_version}" if cfg.client_version else DEFAULT_USER_AGENT
        headers = {
            "User-Agent": ua,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if cfg.token:
            headers["Authorization"] = f"Bearer {cfg.token}"

        self._client = httpx.Client(
            timeout=cfg.timeout_s,
            headers=headers,
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def request(
            self,
            method: str,
            path: str,
            *,
            json_body: Any | None = None,
            decode: Callable[[Any], Any] | None = None,
            cancel: threading.Event | None = None,
            timeout_s: float | None = None,
    ) -> Any:
        raw = self._send(method, path, json_body=json_body, cancel=cancel, timeout_s=timeout_s)
        data = _parse_body(raw)
        if decode is None:
            return data
        try:
            return decode(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseDecodeError(f"unexpected response shape: {e!r}") from e

    def request_raw(
            self,
            method: str,
            path: str,
            *,
            json_body: Any | None = None,
            cancel: threading.Event | None = None,
            timeout_s: float | None = None,
    ) -> bytes:
        """Like ``request`` but returns the sanitized JSON bytes undecoded."""
        raw = self._send(method, path, json_body=json_body, cancel=cancel, timeout_s=timeout_s)
        _parse_body(raw)
        return raw

    def _send(
            self,
            method: str,
            path: str,
            *,
            json_body: Any | None = None,
            cancel: threading.Event | None = None,
            timeout_s: float | None = None,
    ) -> bytes:
        content = self._encode_body(json_body)
        url = self._url_for(path)
        deadline = time.monotonic() + timeout_s if timeout_s is not None else None
        policy = self._cfg.retry

        response: httpx.Response | None = None
        last_network_error: Exception | None = None
        for attempt in range(1, policy.max_attempts + 1):
            if attempt > 1:
                delay = backoff_delay(attempt - 1, response, policy)
                self._debug("Retry %d/%d after %.2fs", attempt - 1, policy.max_attempts - 1, delay)
                self._wait(delay, cancel, deadline)
            self._check_cancelled(cancel, deadline)

            self._debug("%s %s", method, url)
            try:
                response = self._client.request(
                    method,
                    url,
                    content=content,
                    timeout=self._attempt_timeout(deadline),
                )
            except httpx.TransportError as e:
                self._check_cancelled(cancel, deadline, cause=e)
                self._debug("Request failed: %s", e)
                last_network_error = e
                response = None
                continue

            body = sanitize_json(response.content)
            self._debug("Response: %d %s", response.status_code, body.decode("utf-8", errors="replace"))
            if response.is_success:
                return body

            retry_after = response.headers.get("Retry-After")
            if retry_after:
                self._debug("Retry-After header: %s", retry_after)
            if should_retry(response.status_code) and attempt < policy.max_attempts:
                continue
            raise parse_api_error(response.status_code, body, retry_after, secret=self._cfg.token)

        msg = f"request failed after {policy.max_attempts} attempt(s): {last_network_error}"
        raise NetworkError(redact(msg, self._cfg.token)) from last_network_error

    def _encode_body(self, json_body: Any | None) -> bytes | None:
        if json_body is None:
            return None
        try:
            return json.dumps(json_body).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise InvalidRequestError(f"failed to encode body: {e}") from e

    def _url_for(self, path: str) -> str:
        base = urlsplit(self._cfg.base_url or "")
        if base.scheme not in ("http", "https") or not base.netloc:
            raise InvalidRequestError(f"invalid base URL: {redact(self._cfg.base_url or '', self._cfg.token)!r}")
        if not path.startswith("/"):
            path = "/" + path
        return f"{base.scheme}://{base.netloc}{base.path.rstrip('/')}{path}"

    def _attempt_timeout(self, deadline: float | None) -> float:
        if deadline is None:
            return self._cfg.timeout_s
        return max(0.001, min(self._cfg.timeout_s, deadline - time.monotonic()))

    def _wait(self, delay: float, cancel: threading.Event | None, deadline: float | None) -> None:
        timeout = delay
        if deadline is not None:
            timeout = min(delay, max(0.0, deadline - time.monotonic()))
        if cancel is None:
            time.sleep(timeout)
        elif cancel.wait(timeout):
            raise RequestCancelled("request cancelled")
        self._check_cancelled(cancel, deadline)

    def _check_cancelled(
            self,
            cancel: threading.Event | None,
            deadline: float | None,
            *,
            cause: Exception | None = None,
    ) -> None:
        if cancel is not None and cancel.is_set():
            raise RequestCancelled("request cancelled") from cause
        if deadline is not None and time.monotonic() >= deadline:
            raise RequestTimeout("request deadline exceeded") from cause

    def _debug(self, msg: str, *args: Any) -> None:
        if not self._cfg.debug:
            return
        token = self._cfg.token
        log.debug(redact(msg % args, token))


def _parse_body(raw: bytes) -> Any:
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ResponseDecodeError(f"failed to parse response: {e}") from e
