from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

LOGICAL_OPERATORS = ("or", "and", "not")

FILTER_OPERATORS = frozenset(
    {
        "eq",
        "neq",
        "ne",
        "gt",
        "gte",
        "lt",
        "lte",
        "like",
        "ilike",
        "in",
        "is",
        "startsWith",
        "endsWith",
        "contains",
        "containsAny",
    }
)


@dataclass
class ListOptions:
    limit: int | None = None
    cursor: str | None = None
    filter: dict[str, Any] = field(default_factory=dict)
    sort: str | None = None
    order: str | None = None
    fields: str | None = None
    include: list[str] = field(default_factory=list)
    depth: int = 0
    params: list[tuple[str, str]] = field(default_factory=list)


def apply_list_params(path: str, opts: ListOptions | None) -> str:
    if opts is None:
        return path

    params: list[tuple[str, str]] = []
    if opts.limit:
        params.append(("limit", str(int(opts.limit))))
    if opts.cursor:
        params.append(("starting_after", opts.cursor))
    if opts.sort:
        params.append(("order_by", opts.sort))
    if opts.order:
        params.append(("order_by_direction", opts.order))
    if opts.fields:
        params.append(("fields", opts.fields))
    # relations are only returned with depth >= 1
    if opts.include:
        params.append(("depth", "1"))
    elif opts.depth > 0:
        params.append(("depth", str(int(opts.depth))))
    if opts.filter:
        filter_str = build_filter_string(opts.filter)
        if filter_str:
            params.append(("filter", filter_str))
    params.extend(opts.params)

    if not params:
        return path
    sep = "&" if "?" in path else "?"
    return f"{path}{sep}{urlencode(params)}"


def build_filter_string(filter: dict[str, Any]) -> str:
    """Compile a nested filter mapping into the CRM filter syntax.

    ``{"createdAt": {"gte": "2023-01-01"}}`` becomes
    ``createdAt[gte]:"2023-01-01"``; nested field maps are joined with
    dots and ``or``/``and``/``not`` keys become function-style groups.
    """
    parts = [_filter_part(key, value) for key, value in filter.items()]
    return ",".join(p for p in parts if p)


def _filter_part(key: str, value: Any) -> str:
    if key in LOGICAL_OPERATORS:
        return _logical(key, value)
    return _field_filter(key, value)


def _logical(op: str, value: Any) -> str:
    items = value if isinstance(value, list) else [value]
    parts = [build_filter_string(item) for item in items if isinstance(item, dict)]
    parts = [p for p in parts if p]
    if not parts:
        return ""
    return f"{op}({','.join(parts)})"


def _field_filter(path: str, value: Any) -> str:
    if not isinstance(value, dict):
        return f"{path}[eq]:{format_filter_value(value)}"
    for key, nested in value.items():
        if key in FILTER_OPERATORS:
            return f"{path}[{key}]:{format_filter_value(nested)}"
        return _field_filter(f"{path}.{key}", nested)
    return ""


def format_filter_value(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, list):
        return "[" + ",".join(format_filter_value(v) for v in value) + "]"
    return json.dumps(value)
