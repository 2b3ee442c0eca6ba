from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

import yaml
from rich.table import Table

from . import console

OUTPUT_FORMATS = ("text", "json", "yaml")


def format_list_timestamp(value: datetime | str | None) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value)
        try:
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return text
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M")


def lookup(record: dict[str, Any], path: str) -> Any:
    """Resolve a dotted path such as ``name.firstName`` inside a record."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def format_cell(column: str, value: Any) -> str:
    if value is None or value == "":
        return "-"
    if column.endswith("At") and isinstance(value, str):
        return format_list_timestamp(value)
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (dict, list)):
        return yaml.safe_dump(value, default_flow_style=True).strip()
    return str(value)


def records_table(records: Iterable[dict[str, Any]], columns: list[str], *, title: str | None = None) -> Table:
    table = Table(title=title)
    for i, column in enumerate(columns):
        table.add_column(column, style="bold" if i == 0 else None)
    for record in records:
        table.add_row(*(format_cell(c, lookup(record, c)) for c in columns))
    return table


def render(data: Any, *, output: str, columns: list[str] | None = None, title: str | None = None) -> None:
    if output == "json":
        console.print_json(data)
        return
    if output == "yaml":
        console.print(yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip(), markup=False, highlight=False)
        return

    if isinstance(data, list):
        if columns is None:
            columns = ["id"]
        console.print(records_table(data, columns, title=title))
        return
    if isinstance(data, dict):
        keys = columns or list(data.keys())
        for key in keys:
            console.print(f"{key}: {format_cell(key, lookup(data, key))}", markup=False, highlight=False)
        return
    console.print(str(data), markup=False, highlight=False)
