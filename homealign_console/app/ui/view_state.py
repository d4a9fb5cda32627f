from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

EMPTY_MESSAGE = "No records found"


class ListViewStatus(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    READY = "ready"


@dataclass(frozen=True)
class ListViewState:
    status: ListViewStatus
    message: str
    show_rows: bool = False

    def render(self) -> dict[str, Any]:
        return {"status": self.status.value, "message": self.message, "show_rows": self.show_rows}


def resolve_list_view_state(*, loading: bool, has_data: bool, error: str | None) -> ListViewState:
    """Pick the one table state to show. Loading, error and empty never overlap."""
    if loading:
        return ListViewState(status=ListViewStatus.LOADING, message="Loading…")
    if error:
        return ListViewState(status=ListViewStatus.ERROR, message=error, show_rows=has_data)
    if not has_data:
        return ListViewState(status=ListViewStatus.EMPTY, message=EMPTY_MESSAGE)
    return ListViewState(status=ListViewStatus.READY, message="Ready", show_rows=True)
