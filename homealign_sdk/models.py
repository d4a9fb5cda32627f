from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, Field

RecordId = Union[int, str]


class TokenPair(BaseModel):
    access: str
    refresh: str | None = None


class StoredSession(BaseModel):
    access_token: str | None = None
    refresh_token: str | None = None
    selected_tenant: str | None = None


class PageEnvelope(BaseModel):
    count: int = Field(default=0, ge=0)
    next: str | None = None
    previous: str | None = None
    results: list[dict[str, Any]] = Field(default_factory=list)


def _encode_param(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


@dataclass
class ListQuery:
    page: int = 1
    search: str = ""
    filters: dict[str, Any] = field(default_factory=dict)

    def _base_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        search = self.search.strip()
        if search:
            params["search"] = search
        for key, value in self.filters.items():
            if value in (None, ""):
                continue
            params[key] = _encode_param(value)
        return params

    def to_params(self) -> dict[str, Any]:
        return {"page": max(1, self.page), **self._base_params()}

    def to_export_params(self) -> dict[str, Any]:
        return {**self._base_params(), "format": "csv"}


@dataclass(frozen=True)
class BulkOutcome:
    record_id: RecordId
    ok: bool
    error: Exception | None = None
