import json
import logging
import threading
import time

import httpx
import pytest

from twenty_client.config_types import ClientConfig, RetryPolicy
from twenty_client.errors import (
    ApiError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    RequestCancelled,
    RequestTimeout,
    ResponseDecodeError,
    UnauthorizedError,
    ValidationError,
)
from twenty_client.transport import Transport

TOKEN = "tok_live_0123456789abcdef"
BASE_URL = "https://crm.example.test"


class _Server:
    """Replays queued responses and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)


def _transport(
        server,
        *,
        max_attempts: int = 3,
        base_delay: float = 0.001,
        max_delay: float = 0.01,
        debug: bool = False,
        base_url: str = BASE_URL,
        token: str | None = TOKEN,
) -> Transport:
    cfg = ClientConfig(
        base_url=base_url,
        token=token,
        debug=debug,
        retry=RetryPolicy(max_attempts=max_attempts, base_delay=base_delay, max_delay=max_delay),
    )
    return Transport(cfg, transport=httpx.MockTransport(server))


def test_success_returns_parsed_json_and_sends_headers() -> None:
    server = _Server(httpx.Response(200, json={"data": {"people": []}}))
    t = _transport(server)

    data = t.request("GET", "/rest/people?limit=5")

    assert data == {"data": {"people": []}}
    req = server.requests[0]
    assert str(req.url) == f"{BASE_URL}/rest/people?limit=5"
    assert req.headers["Authorization"] == f"Bearer {TOKEN}"
    assert req.headers["Content-Type"] == "application/json"
    assert req.headers["Accept"] == "application/json"


def test_json_body_is_serialized() -> None:
    server = _Server(httpx.Response(201, json={"ok": True}))
    t = _transport(server)

    t.request("POST", "/rest/companies", json_body={"name": "Acme"})

    req = server.requests[0]
    assert req.method == "POST"
    assert json.loads(req.content) == {"name": "Acme"}


def test_base_url_path_is_kept() -> None:
    server = _Server(httpx.Response(200, json={}))
    t = _transport(server, base_url="https://crm.example.test/api/")

    t.request("GET", "/rest/tasks")

    assert str(server.requests[0].url) == "https://crm.example.test/api/rest/tasks"


def test_retries_until_attempts_exhausted() -> None:
    server = _Server(httpx.Response(429, headers={"Retry-After": "7"}))
    t = _transport(server, max_attempts=3)

    with pytest.raises(RateLimitedError) as exc:
        t.request("GET", "/rest/people")

    assert len(server.requests) == 3
    assert exc.value.retry_after == 7


def test_succeeds_on_third_attempt() -> None:
    server = _Server(
        httpx.Response(503),
        httpx.Response(502),
        httpx.Response(200, json={"ok": True}),
    )
    t = _transport(server, max_attempts=3)

    assert t.request("GET", "/rest/people") == {"ok": True}
    assert len(server.requests) == 3


def test_no_retry_policy_makes_single_attempt() -> None:
    server = _Server(httpx.Response(503))
    cfg = ClientConfig(base_url=BASE_URL, token=TOKEN, retry=RetryPolicy(max_attempts=5).no_retry())
    t = Transport(cfg, transport=httpx.MockTransport(server))

    with pytest.raises(ApiError) as exc:
        t.request("GET", "/rest/people")

    assert exc.value.status_code == 503
    assert len(server.requests) == 1


@pytest.mark.parametrize(
    "status, error_type",
    [(400, ApiError), (401, UnauthorizedError), (404, NotFoundError), (500, ApiError)],
)
def test_non_retryable_status_short_circuits(status: int, error_type: type) -> None:
    server = _Server(httpx.Response(status, json={"error": {"code": "X", "message": "nope"}}))
    t = _transport(server, max_attempts=5)

    with pytest.raises(error_type) as exc:
        t.request("GET", "/rest/people/1")

    assert exc.value.status_code == status
    assert len(server.requests) == 1


def test_validation_error_is_typed() -> None:
    server = _Server(httpx.Response(400, json={"error": {"code": "BAD_REQUEST", "message": "Invalid email"}}))
    t = _transport(server)

    with pytest.raises(ValidationError):
        t.request("POST", "/rest/people", json_body={})


def test_transport_failures_are_retried() -> None:
    server = _Server(
        httpx.ConnectError("connection refused"),
        httpx.ReadError("connection reset"),
        httpx.Response(200, json=[1, 2]),
    )
    t = _transport(server, max_attempts=3)

    assert t.request("GET", "/rest/webhooks") == [1, 2]
    assert len(server.requests) == 3


def test_transport_failures_exhaust_into_network_error() -> None:
    server = _Server(httpx.ConnectError(f"cannot reach host with {TOKEN}"))
    t = _transport(server, max_attempts=2)

    with pytest.raises(NetworkError) as exc:
        t.request("GET", "/rest/people")

    assert len(server.requests) == 2
    assert TOKEN not in str(exc.value)


def test_success_body_with_control_characters_is_repaired() -> None:
    server = _Server(httpx.Response(200, content=b'{"note": "line1\nline2"}'))
    t = _transport(server)

    assert t.request("GET", "/rest/notes/1") == {"note": "line1\nline2"}


def test_request_raw_returns_sanitized_bytes() -> None:
    server = _Server(httpx.Response(200, content=b'{"note": "a\tb"}'))
    t = _transport(server)

    assert t.request_raw("GET", "/rest/notes/1") == b'{"note": "a\\tb"}'


def test_request_raw_rejects_non_json_success_body() -> None:
    server = _Server(httpx.Response(200, content=b"<html>ok</html>"))
    t = _transport(server, max_attempts=3)

    with pytest.raises(ResponseDecodeError):
        t.request_raw("GET", "/rest/metadata/objects")
    assert len(server.requests) == 1


def test_request_raw_allows_empty_success_body() -> None:
    server = _Server(httpx.Response(204))
    t = _transport(server)

    assert t.request_raw("DELETE", "/rest/metadata/fields/f1") == b""


def test_empty_success_body_is_none() -> None:
    server = _Server(httpx.Response(204))
    t = _transport(server)

    assert t.request("DELETE", "/rest/people/1") is None


def test_malformed_success_body_is_fatal() -> None:
    server = _Server(httpx.Response(200, content=b"<html>ok</html>"))
    t = _transport(server, max_attempts=3)

    with pytest.raises(ResponseDecodeError):
        t.request("GET", "/rest/people")
    assert len(server.requests) == 1


def test_decoder_failure_is_fatal() -> None:
    server = _Server(httpx.Response(200, json={"data": {}}))
    t = _transport(server, max_attempts=3)

    with pytest.raises(ResponseDecodeError):
        t.request("GET", "/rest/people", decode=lambda payload: payload["data"]["people"])
    assert len(server.requests) == 1


def test_unserializable_body_is_fatal() -> None:
    server = _Server(httpx.Response(200, json={}))
    t = _transport(server)

    with pytest.raises(InvalidRequestError):
        t.request("POST", "/rest/people", json_body={"when": object()})
    assert server.requests == []


@pytest.mark.parametrize("base_url", ["", "crm.example.test", "ftp://crm.example.test", "https://"])
def test_malformed_base_url_is_fatal(base_url: str) -> None:
    server = _Server(httpx.Response(200, json={}))
    t = _transport(server, base_url=base_url)

    with pytest.raises(InvalidRequestError):
        t.request("GET", "/rest/people")
    assert server.requests == []


def test_cancel_preempts_backoff_wait() -> None:
    server = _Server(httpx.Response(503))
    t = _transport(server, max_attempts=3, base_delay=5.0, max_delay=5.0)
    cancel = threading.Event()
    timer = threading.Timer(0.05, cancel.set)
    timer.start()

    started = time.monotonic()
    try:
        with pytest.raises(RequestCancelled) as exc:
            t.request("GET", "/rest/people", cancel=cancel)
    finally:
        timer.cancel()

    assert not isinstance(exc.value, RequestTimeout)
    assert time.monotonic() - started < 2.0
    assert len(server.requests) == 1


def test_already_cancelled_call_sends_nothing() -> None:
    server = _Server(httpx.Response(200, json={}))
    t = _transport(server)
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(RequestCancelled):
        t.request("GET", "/rest/people", cancel=cancel)
    assert server.requests == []


def test_deadline_preempts_backoff_wait() -> None:
    server = _Server(httpx.Response(429, headers={"Retry-After": "5"}))
    t = _transport(server, max_attempts=3, base_delay=1.0, max_delay=10.0)

    started = time.monotonic()
    with pytest.raises(RequestTimeout):
        t.request("GET", "/rest/people", timeout_s=0.1)

    assert time.monotonic() - started < 2.0
    assert len(server.requests) == 1


@pytest.mark.parametrize("status", [401, 404, 429, 500, 503])
def test_errors_never_contain_token(status: int) -> None:
    body = {"error": {"code": f"E_{TOKEN}", "message": f"token {TOKEN} is invalid"}}
    server = _Server(httpx.Response(status, json=body, headers={"Retry-After": "1"}))
    t = _transport(server, max_attempts=2)

    with pytest.raises(ApiError) as exc:
        t.request("GET", "/rest/people")

    assert TOKEN not in str(exc.value)
    assert TOKEN not in exc.value.code
    assert TOKEN not in exc.value.message


def test_debug_logs_are_redacted(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="twenty_client.transport")
    server = _Server(
        httpx.Response(503, headers={"Retry-After": "0"}),
        httpx.Response(200, json={"echo": f"Bearer {TOKEN}"}),
    )
    t = _transport(server, debug=True)

    t.request("GET", "/rest/people")

    assert "GET https://crm.example.test/rest/people" in caplog.text
    assert "Response: 503" in caplog.text
    assert "Retry 1/2" in caplog.text
    assert "Retry-After header: 0" in caplog.text
    assert TOKEN not in caplog.text
    assert "[REDACTED]" in caplog.text


def test_no_logs_without_debug(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="twenty_client.transport")
    server = _Server(httpx.Response(200, json={}))
    t = _transport(server, debug=False)

    t.request("GET", "/rest/people")

    assert caplog.records == []


def test_concurrent_calls_keep_independent_attempt_counts() -> None:
    lock = threading.Lock()
    seen: dict[str, int] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        key = request.url.path
        with lock:
            seen[key] = seen.get(key, 0) + 1
            count = seen[key]
        if key.endswith("/ok") or count >= 2:
            return httpx.Response(200, json={"path": key})
        return httpx.Response(503)

    t = Transport(
        ClientConfig(base_url=BASE_URL, token=TOKEN, retry=RetryPolicy(max_attempts=3, base_delay=0.01, max_delay=0.02)),
        transport=httpx.MockTransport(handler),
    )
    results: dict[str, object] = {}

    def run(path: str) -> None:
        results[path] = t.request("GET", path)

    threads = [threading.Thread(target=run, args=(p,)) for p in ("/rest/a/ok", "/rest/b/flaky")]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert results == {"/rest/a/ok": {"path": "/rest/a/ok"}, "/rest/b/flaky": {"path": "/rest/b/flaky"}}
    assert seen == {"/rest/a/ok": 1, "/rest/b/flaky": 2}


def test_cancel_during_send_stops_before_next_attempt() -> None:
    cancel = threading.Event()
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        cancel.set()
        return httpx.Response(503)

    t = Transport(
        ClientConfig(base_url=BASE_URL, token=TOKEN, retry=RetryPolicy(max_attempts=3, base_delay=0.001, max_delay=0.01)),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(RequestCancelled):
        t.request("GET", "/rest/people", cancel=cancel)
    assert len(calls) == 1
