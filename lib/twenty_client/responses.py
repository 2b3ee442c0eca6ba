from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass
class PageInfo:
    has_next_page: bool = False
    end_cursor: str | None = None


@dataclass
class ListResponse:
    data: list[dict[str, Any]] = field(default_factory=list)
    total_count: int = 0
    page_info: PageInfo | None = None


def _page_info(raw: Any) -> PageInfo | None:
    if not isinstance(raw, dict):
        return None
    return PageInfo(
        has_next_page=bool(raw.get("hasNextPage")),
        end_cursor=raw.get("endCursor") or None,
    )


def unwrap_list(key: str) -> Callable[[Any], ListResponse]:
    """Decoder for ``{"data": {key: [...]}, "totalCount": n, "pageInfo": {...}}``."""

    def decode(payload: Any) -> ListResponse:
        items = payload["data"][key]
        if not isinstance(items, list):
            raise TypeError(f"data.{key} is not a list")
        return ListResponse(
            data=items,
            total_count=int(payload.get("totalCount") or len(items)),
            page_info=_page_info(payload.get("pageInfo")),
        )

    return decode


def unwrap_item(key: str) -> Callable[[Any], dict[str, Any]]:
    """Decoder for ``{"data": {key: {...}}}``."""

    def decode(payload: Any) -> dict[str, Any]:
        item = payload["data"][key]
        if not isinstance(item, dict):
            raise TypeError(f"data.{key} is not an object")
        return item

    return decode


def plain_list(payload: Any) -> ListResponse:
    if not isinstance(payload, list):
        raise TypeError("expected a JSON array")
    return ListResponse(data=payload, total_count=len(payload), page_info=None)


def plain_item(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise TypeError("expected a JSON object")
    return payload
