from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from homealign_console.app.ui.listing_view import ColumnDef, row_cells

Output = Callable[[str], None]


def print_table(
    title: str,
    rows: list[dict[str, Any]],
    columns: Iterable[ColumnDef],
    *,
    row_ids: list[str] | None = None,
    selected: set[str] | None = None,
    empty_message: str = "No records found",
    output: Output = print,
) -> None:
    output(f"\n{title}")
    if not rows:
        output(empty_message)
        return

    column_list = list(columns)
    ids = row_ids if row_ids is not None else [str(index + 1) for index in range(len(rows))]
    chosen = selected or set()
    body = [
        ["[x]" if row_id in chosen else "[ ]", row_id, *row_cells(row, column_list)]
        for row_id, row in zip(ids, rows)
    ]
    header = ["", "id", *(column.label for column in column_list)]
    widths = [max(len(line[index]) for line in [header, *body]) for index in range(len(header))]
    widths[0] = 3

    output(" | ".join(cell.ljust(width) for cell, width in zip(header, widths)))
    output("-+-".join("-" * width for width in widths))
    for line in body:
        output(" | ".join(cell.ljust(width) for cell, width in zip(line, widths)))
