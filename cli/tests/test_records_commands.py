from __future__ import annotations

import json

import httpx
from typer.testing import CliRunner

from twenty_client import (
    ClientConfig,
    NotFoundError,
    RequestCancelled,
    RetryPolicy,
    TwentyClient,
    UnauthorizedError,
)
from twenty_client.responses import ListResponse, PageInfo

from twenty_cli import main
from twenty_cli.commands import _common


class _FakeClient:
    def __init__(self, error: Exception | None = None):
        self.calls: list[tuple] = []
        self.error = error

    def _record(self, *call) -> None:
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    def list_records(self, plural, opts, *, timeout_s=None):
        self._record("list", plural, opts)
        return ListResponse(
            data=[{"id": "c1", "name": "Acme", "createdAt": "2026-01-04T23:04:51Z"}],
            total_count=3,
            page_info=PageInfo(has_next_page=True, end_cursor="cur1"),
        )

    def get_record(self, plural, record_id, opts, *, timeout_s=None):
        self._record("get", plural, record_id, opts)
        return {"id": record_id, "name": "Acme"}

    def create_record(self, plural, body, *, timeout_s=None):
        self._record("create", plural, body)
        return {"id": "new1", **body}

    def update_record(self, plural, record_id, body, *, timeout_s=None):
        self._record("update", plural, record_id, body)
        return {"id": record_id, **body}

    def delete_record(self, plural, record_id, *, timeout_s=None):
        self._record("delete", plural, record_id)

    def close(self) -> None:
        return None


def _invoke(monkeypatch, client, args: list[str], **kwargs):
    monkeypatch.setattr(_common, "client_for", lambda rt: client)
    return CliRunner().invoke(main._build_app(), args, **kwargs)


def test_record_groups_available() -> None:
    result = CliRunner().invoke(main._build_app(), ["--help"])

    assert result.exit_code == 0
    for group in (
        "companies", "people", "opportunities", "tasks", "notes",
        "attachments", "favorites", "webhooks", "objects", "fields", "rest",
    ):
        assert group in result.output


def test_companies_list_text(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["companies", "list", "--limit", "1"])

    assert result.exit_code == 0, result.output
    assert "Acme" in result.output
    assert "--cursor cur1" in result.output
    _, plural, opts = client.calls[0]
    assert plural == "companies"
    assert opts.limit == 1


def test_people_list_json_passes_options(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(
        monkeypatch,
        client,
        [
            "-o", "json", "people", "list",
            "--filter", '{"city": {"eq": "Paris"}}',
            "--sort", "createdAt",
            "--order", "DescNullsLast",
            "--param", "depth=2",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["totalCount"] == 3
    assert payload["pageInfo"] == {"hasNextPage": True, "endCursor": "cur1"}
    opts = client.calls[0][2]
    assert opts.filter == {"city": {"eq": "Paris"}}
    assert opts.sort == "createdAt"
    assert opts.order == "DescNullsLast"
    assert opts.params == [("depth", "2")]


def test_list_rejects_bad_param(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["people", "list", "--param", "novalue"])

    assert result.exit_code == 2
    assert client.calls == []


def test_get_with_include(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["people", "get", "p1", "--include", "company"])

    assert result.exit_code == 0, result.output
    _, plural, record_id, opts = client.calls[0]
    assert (plural, record_id) == ("people", "p1")
    assert opts.include == ["company"]


def test_company_create_from_flags(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["companies", "create", "--name", "Acme", "--domain", "https://acme.test"])

    assert result.exit_code == 0, result.output
    assert "Created company new1" in result.output
    assert client.calls[0] == (
        "create",
        "companies",
        {"name": "Acme", "domainName": {"primaryLinkUrl": "https://acme.test"}},
    )


def test_create_flags_override_data(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(
        monkeypatch,
        client,
        ["companies", "create", "-d", '{"name": "Old", "employees": 3}', "--name", "New"],
    )

    assert result.exit_code == 0, result.output
    assert client.calls[0][2] == {"name": "New", "employees": 3}


def test_create_from_stdin(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["tasks", "create", "-f", "-"], input='{"title": "Call back"}')

    assert result.exit_code == 0, result.output
    assert client.calls[0] == ("create", "tasks", {"title": "Call back"})


def test_create_without_body_fails(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["notes", "create"])

    assert result.exit_code == 2
    assert client.calls == []


def test_create_invalid_json_fails(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["notes", "create", "-d", "{oops"])

    assert result.exit_code == 2
    assert "Invalid JSON" in result.output


def test_note_body_is_markdown(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["notes", "update", "n1", "--body", "# Hi"])

    assert result.exit_code == 0, result.output
    assert client.calls[0] == ("update", "notes", "n1", {"bodyV2": {"markdown": "# Hi"}})


def test_opportunity_amount_in_micros(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["opportunities", "create", "--name", "Deal", "--amount", "12.5"])

    assert result.exit_code == 0, result.output
    body = client.calls[0][2]
    assert body["amount"] == {"amountMicros": "12500000", "currencyCode": "USD"}


def test_delete_needs_confirmation(monkeypatch) -> None:
    client = _FakeClient()

    declined = _invoke(monkeypatch, client, ["companies", "delete", "c1"], input="n\n")
    assert declined.exit_code == 0
    assert client.calls == []

    accepted = _invoke(monkeypatch, client, ["companies", "delete", "c1", "--yes"])
    assert accepted.exit_code == 0, accepted.output
    assert client.calls == [("delete", "companies", "c1")]
    assert "Deleted company c1" in accepted.output


def test_unauthorized_exits_2(monkeypatch) -> None:
    result = _invoke(monkeypatch, _FakeClient(UnauthorizedError("bad token")), ["tasks", "list"])

    assert result.exit_code == 2
    assert "Not authenticated" in result.output


def test_not_found_exits_2(monkeypatch) -> None:
    result = _invoke(monkeypatch, _FakeClient(NotFoundError("company", "c9")), ["companies", "get", "c9"])

    assert result.exit_code == 2
    assert "not found: company with id c9" in result.output


def test_cancelled_exits_1(monkeypatch) -> None:
    result = _invoke(monkeypatch, _FakeClient(RequestCancelled("request cancelled")), ["tasks", "list"])

    assert result.exit_code == 1


def test_unknown_output_format(monkeypatch) -> None:
    result = _invoke(monkeypatch, _FakeClient(), ["-o", "xml", "tasks", "list"])

    assert result.exit_code == 2


def _mock_client(handler) -> TwentyClient:
    cfg = ClientConfig(base_url="https://crm.example.test", token="t0ken", retry=RetryPolicy(max_attempts=1))
    return TwentyClient(cfg, transport=httpx.MockTransport(handler))


def test_rest_get_prints_json(monkeypatch) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {"people": [{"id": "p1"}]}})

    result = _invoke(monkeypatch, _mock_client(handler), ["rest", "get", "rest/people?limit=1"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"data": {"people": [{"id": "p1"}]}}
    assert str(seen[0].url) == "https://crm.example.test/rest/people?limit=1"


def test_rest_post_sends_body(monkeypatch) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"ok": True})

    result = _invoke(monkeypatch, _mock_client(handler), ["-o", "yaml", "rest", "post", "/rest/notes", "-d", '{"title": "x"}'])

    assert result.exit_code == 0, result.output
    assert "ok: true" in result.output
    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"title": "x"}


def test_rest_error_is_reported(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": {"code": "NOT_FOUND", "message": "Person t0ken missing"}})

    result = _invoke(monkeypatch, _mock_client(handler), ["rest", "get", "/rest/people/x"])

    assert result.exit_code == 2
    assert "not found: person" in result.output
    assert "t0ken" not in result.output


def test_rest_rejects_unknown_method(monkeypatch) -> None:
    result = _invoke(monkeypatch, _FakeClient(), ["rest", "request", "TRACE", "/rest/people"])

    assert result.exit_code == 2


def test_rest_non_json_success_is_reported(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"plain text")

    result = _invoke(monkeypatch, _mock_client(handler), ["rest", "get", "/rest/people"])

    assert result.exit_code == 2
    assert "failed to parse response" in result.output


def test_object_create_non_json_success_is_reported(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, content=b"<html>created</html>")

    result = _invoke(monkeypatch, _mock_client(handler), ["objects", "create", "-d", '{"nameSingular": "pet"}'])

    assert result.exit_code == 2
    assert "failed to parse response" in result.output


def test_attachment_create_from_flags(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["attachments", "create", "--name", "deck.pdf", "--type", "TextDocument"])

    assert result.exit_code == 0, result.output
    assert client.calls[0] == ("create", "attachments", {"name": "deck.pdf", "type": "TextDocument"})


def test_favorites_list_and_delete(monkeypatch) -> None:
    client = _FakeClient()

    listed = _invoke(monkeypatch, client, ["favorites", "list"])
    deleted = _invoke(monkeypatch, client, ["favorites", "delete", "f1", "--yes"])

    assert listed.exit_code == 0, listed.output
    assert deleted.exit_code == 0, deleted.output
    assert client.calls[0][:2] == ("list", "favorites")
    assert client.calls[1] == ("delete", "favorites", "f1")


def test_favorite_create_links_record(monkeypatch) -> None:
    client = _FakeClient()

    result = _invoke(monkeypatch, client, ["favorites", "create", "--company-id", "c1", "--position", "1"])

    assert result.exit_code == 0, result.output
    assert client.calls[0] == ("create", "favorites", {"position": 1.0, "companyId": "c1"})
