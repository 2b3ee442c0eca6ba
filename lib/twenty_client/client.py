from __future__ import annotations

import re
import threading
from typing import Any
from urllib.parse import quote

import httpx

from .config_types import ClientConfig
from .errors import NotFoundError
from .list_options import ListOptions, apply_list_params
from .responses import ListResponse, plain_item, plain_list, unwrap_item, unwrap_list
from .transport import Transport

_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")

# plural path segment -> singular envelope key
RECORD_RESOURCES: dict[str, str] = {
    "companies": "company",
    "people": "person",
    "opportunities": "opportunity",
    "tasks": "task",
    "notes": "note",
    "attachments": "attachment",
    "favorites": "favorite",
}


def _singular(plural: str) -> str:
    try:
        return RECORD_RESOURCES[plural]
    except KeyError:
        raise ValueError(f"unknown resource {plural!r}") from None


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class TwentyClient:
    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None):
        self._t = Transport(cfg, transport=transport)

    def close(self) -> None:
        self._t.close()

    def __enter__(self) -> TwentyClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- generic record helpers ---
    def list_records(
            self,
            plural: str,
            opts: ListOptions | None = None,
            *,
            cancel: threading.Event | None = None,
            timeout_s: float | None = None,
    ) -> ListResponse:
        path = apply_list_params(f"/rest/{plural}", opts)
        return self._t.request("GET", path, decode=unwrap_list(plural), cancel=cancel, timeout_s=timeout_s)

    def get_record(
            self,
            plural: str,
            record_id: str,
            opts: ListOptions | None = None,
            *,
            cancel: threading.Event | None = None,
            timeout_s: float | None = None,
    ) -> dict[str, Any]:
        path = apply_list_params(f"/rest/{plural}/{_segment(record_id)}", opts)
        singular = _singular(plural)
        return self._t.request("GET", path, decode=unwrap_item(singular), cancel=cancel, timeout_s=timeout_s)

    def create_record(
            self,
            plural: str,
            body: dict[str, Any],
            *,
            cancel: threading.Event | None = None,
            timeout_s: float | None = None,
    ) -> dict[str, Any]:
        key = "create" + _capitalize(_singular(plural))
        return self._t.request(
            "POST", f"/rest/{plural}", json_body=body, decode=unwrap_item(key), cancel=cancel, timeout_s=timeout_s
        )

    def update_record(
            self,
            plural: str,
            record_id: str,
            body: dict[str, Any],
            *,
            cancel: threading.Event | None = None,
            timeout_s: float | None = None,
    ) -> dict[str, Any]:
        key = "update" + _capitalize(_singular(plural))
        return self._t.request(
            "PATCH",
            f"/rest/{plural}/{_segment(record_id)}",
            json_body=body,
            decode=unwrap_item(key),
            cancel=cancel,
            timeout_s=timeout_s,
        )

    def delete_record(
            self,
            plural: str,
            record_id: str,
            *,
            cancel: threading.Event | None = None,
            timeout_s: float | None = None,
    ) -> None:
        self._t.request("DELETE", f"/rest/{plural}/{_segment(record_id)}", cancel=cancel, timeout_s=timeout_s)

    # --- companies ---
    def companies_list(self, opts: ListOptions | None = None, **kw) -> ListResponse:
        return self.list_records("companies", opts, **kw)

    def company_get(self, company_id: str, opts: ListOptions | None = None, **kw) -> dict[str, Any]:
        return self.get_record("companies", company_id, opts, **kw)

    def company_create(self, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.create_record("companies", body, **kw)

    def company_update(self, company_id: str, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.update_record("companies", company_id, body, **kw)

    def company_delete(self, company_id: str, **kw) -> None:
        self.delete_record("companies", company_id, **kw)

    # --- people ---
    def people_list(self, opts: ListOptions | None = None, **kw) -> ListResponse:
        return self.list_records("people", opts, **kw)

    def person_get(self, person_id: str, *, include: list[str] | None = None, **kw) -> dict[str, Any]:
        opts = ListOptions(include=list(include)) if include else None
        return self.get_record("people", person_id, opts, **kw)

    def person_create(self, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.create_record("people", body, **kw)

    def person_update(self, person_id: str, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.update_record("people", person_id, body, **kw)

    def person_delete(self, person_id: str, **kw) -> None:
        self.delete_record("people", person_id, **kw)

    # --- opportunities ---
    def opportunities_list(self, opts: ListOptions | None = None, **kw) -> ListResponse:
        return self.list_records("opportunities", opts, **kw)

    def opportunity_get(self, opportunity_id: str, opts: ListOptions | None = None, **kw) -> dict[str, Any]:
        return self.get_record("opportunities", opportunity_id, opts, **kw)

    def opportunity_create(self, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.create_record("opportunities", body, **kw)

    def opportunity_update(self, opportunity_id: str, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.update_record("opportunities", opportunity_id, body, **kw)

    def opportunity_delete(self, opportunity_id: str, **kw) -> None:
        self.delete_record("opportunities", opportunity_id, **kw)

    # --- tasks ---
    def tasks_list(self, opts: ListOptions | None = None, **kw) -> ListResponse:
        return self.list_records("tasks", opts, **kw)

    def task_get(self, task_id: str, opts: ListOptions | None = None, **kw) -> dict[str, Any]:
        return self.get_record("tasks", task_id, opts, **kw)

    def task_create(self, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.create_record("tasks", body, **kw)

    def task_update(self, task_id: str, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.update_record("tasks", task_id, body, **kw)

    def task_delete(self, task_id: str, **kw) -> None:
        self.delete_record("tasks", task_id, **kw)

    # --- notes ---
    def notes_list(self, opts: ListOptions | None = None, **kw) -> ListResponse:
        return self.list_records("notes", opts, **kw)

    def note_get(self, note_id: str, opts: ListOptions | None = None, **kw) -> dict[str, Any]:
        return self.get_record("notes", note_id, opts, **kw)

    def note_create(self, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.create_record("notes", body, **kw)

    def note_update(self, note_id: str, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.update_record("notes", note_id, body, **kw)

    def note_delete(self, note_id: str, **kw) -> None:
        self.delete_record("notes", note_id, **kw)

    # --- attachments ---
    def attachments_list(self, opts: ListOptions | None = None, **kw) -> ListResponse:
        return self.list_records("attachments", opts, **kw)

    def attachment_get(self, attachment_id: str, opts: ListOptions | None = None, **kw) -> dict[str, Any]:
        return self.get_record("attachments", attachment_id, opts, **kw)

    def attachment_create(self, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.create_record("attachments", body, **kw)

    def attachment_update(self, attachment_id: str, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.update_record("attachments", attachment_id, body, **kw)

    def attachment_delete(self, attachment_id: str, **kw) -> None:
        self.delete_record("attachments", attachment_id, **kw)

    # --- favorites ---
    def favorites_list(self, opts: ListOptions | None = None, **kw) -> ListResponse:
        return self.list_records("favorites", opts, **kw)

    def favorite_get(self, favorite_id: str, opts: ListOptions | None = None, **kw) -> dict[str, Any]:
        return self.get_record("favorites", favorite_id, opts, **kw)

    def favorite_create(self, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.create_record("favorites", body, **kw)

    def favorite_update(self, favorite_id: str, body: dict[str, Any], **kw) -> dict[str, Any]:
        return self.update_record("favorites", favorite_id, body, **kw)

    def favorite_delete(self, favorite_id: str, **kw) -> None:
        self.delete_record("favorites", favorite_id, **kw)

    # --- webhooks (plain JSON, no data envelope) ---
    def webhooks_list(self, opts: ListOptions | None = None, **kw) -> ListResponse:
        path = apply_list_params("/rest/webhooks", opts)
        return self._t.request("GET", path, decode=plain_list, **kw)

    def webhook_get(self, webhook_id: str, **kw) -> dict[str, Any]:
        return self._t.request("GET", f"/rest/webhooks/{_segment(webhook_id)}", decode=plain_item, **kw)

    def webhook_create(
            self,
            *,
            target_url: str,
            operation: str,
            description: str | None = None,
            secret: str | None = None,
            **kw,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"targetUrl": target_url, "operation": operation}
        if description:
            body["description"] = description
        if secret:
            body["secret"] = secret
        return self._t.request("POST", "/rest/webhooks", json_body=body, decode=plain_item, **kw)

    def webhook_delete(self, webhook_id: str, **kw) -> None:
        self._t.request("DELETE", f"/rest/webhooks/{_segment(webhook_id)}", **kw)

    # --- metadata ---
    def objects_list(self, **kw) -> list[dict[str, Any]]:
        return self._t.request("GET", "/rest/metadata/objects", decode=unwrap_list("objects"), **kw).data

    def object_get(self, name_or_id: str, **kw) -> dict[str, Any]:
        """Fetch object metadata by id, or by singular/plural name."""
        if _UUID_RE.match(name_or_id):
            object_id = name_or_id
        else:
            object_id = ""
            for obj in self.objects_list(**kw):
                if name_or_id in (obj.get("nameSingular"), obj.get("namePlural")):
                    object_id = str(obj.get("id") or "")
                    break
            if not object_id:
                raise NotFoundError("object", name_or_id)
        return self._t.request(
            "GET", f"/rest/metadata/objects/{_segment(object_id)}", decode=unwrap_item("object"), **kw
        )

    def object_create(self, body: dict[str, Any], **kw) -> bytes:
        return self._t.request_raw("POST", "/rest/metadata/objects", json_body=body, **kw)

    def object_update(self, object_id: str, body: dict[str, Any], **kw) -> bytes:
        return self._t.request_raw("PATCH", f"/rest/metadata/objects/{_segment(object_id)}", json_body=body, **kw)

    def object_delete(self, object_id: str, **kw) -> None:
        self._t.request("DELETE", f"/rest/metadata/objects/{_segment(object_id)}", **kw)

    def fields_list(self, **kw) -> list[dict[str, Any]]:
        return self._t.request("GET", "/rest/metadata/fields", decode=unwrap_list("fields"), **kw).data

    def field_get(self, field_id: str, **kw) -> dict[str, Any]:
        return self._t.request("GET", f"/rest/metadata/fields/{_segment(field_id)}", decode=unwrap_item("field"), **kw)

    def field_create(self, body: dict[str, Any], **kw) -> bytes:
        return self._t.request_raw("POST", "/rest/metadata/fields", json_body=body, **kw)

    def field_update(self, field_id: str, body: dict[str, Any], **kw) -> bytes:
        return self._t.request_raw("PATCH", f"/rest/metadata/fields/{_segment(field_id)}", json_body=body, **kw)

    def field_delete(self, field_id: str, **kw) -> None:
        self._t.request("DELETE", f"/rest/metadata/fields/{_segment(field_id)}", **kw)

    # --- raw ---
    def rest_request(self, method: str, path: str, body: Any | None = None, **kw) -> bytes:
        return self._t.request_raw(method.upper(), path, json_body=body, **kw)
