from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

EMPTY_VALUE = "—"
MAX_CELL_WIDTH = 32
MASKED_FRAGMENTS = ("token", "secret", "password", "ssn")
STATUS_VALUES = {"active", "inactive", "suspended", "pending", "discontinued", "pending_approval"}


@dataclass(frozen=True)
class ColumnDef:
    key: str
    label: str


def is_masked(key: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in MASKED_FRAGMENTS)


def display_value(value: Any) -> str:
    if value is None or value == "":
        return EMPTY_VALUE
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return value.astimezone().strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text:
        return EMPTY_VALUE
    # status enums read as labels in the table
    return text.upper() if text.lower() in STATUS_VALUES else text


def clip(text: str, width: int = MAX_CELL_WIDTH) -> str:
    return text if len(text) <= width else f"{text[: width - 1]}…"


def row_cells(row: dict[str, Any], columns: Iterable[ColumnDef]) -> list[str]:
    """Render one record as table cells in column order."""
    return [EMPTY_VALUE if is_masked(column.key) else clip(display_value(row.get(column.key))) for column in columns]
