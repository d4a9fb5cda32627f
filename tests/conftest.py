from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from homealign_sdk.config import ClientConfig
from homealign_sdk.credential_store import CredentialStorage
from homealign_sdk.http_client import ApiGateway
from homealign_sdk.models import StoredSession
from homealign_sdk.session import SessionStore

API_BASE = "https://api.test/core-api"
AUTH_BASE = "https://auth.test"


class FakeBackend:
    """In-memory paginated REST API served through ``httpx.MockTransport``."""

    def __init__(self, records: dict[str, list[dict[str, Any]]] | None = None, page_size: int = 10) -> None:
        self.records = {name: [dict(row) for row in rows] for name, rows in (records or {}).items()}
        self.page_size = page_size
        self.reference: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_delete: set[str] = set()
        self.fail_list_with: int | None = None
        self.export_payload = b"id,name\n1,Alpha\n"
        self._next_id = 1000

    def calls(self, method: str, path: str | None = None) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and (path is None or self._path(request) == path)
        ]

    def list_calls(self, entity: str) -> list[httpx.Request]:
        return self.calls("GET", f"/{entity}/")

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path.removeprefix("/core-api")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = [part for part in self._path(request).split("/") if part]
        name = parts[0]

        if name in self.reference:
            return httpx.Response(200, json=self.reference[name])
        if len(parts) == 2 and parts[1] == "export":
            return httpx.Response(200, content=self.export_payload, headers={"content-type": "text/csv"})

        rows = self.records.setdefault(name, [])
        if len(parts) == 1 and request.method == "GET":
            return self._list(request, rows)
        if len(parts) == 1 and request.method == "POST":
            body = json.loads(request.content)
            self._next_id += 1
            created = {**body, "id": self._next_id}
            rows.append(created)
            return httpx.Response(201, json=created)

        record_id = parts[1]
        match = next((row for row in rows if str(row.get("id")) == record_id), None)
        if match is None:
            return httpx.Response(404, json={"detail": "Not found."})
        if request.method == "GET":
            return httpx.Response(200, json=match)
        if request.method == "PUT":
            match.update(json.loads(request.content))
            return httpx.Response(200, json=match)
        if request.method == "DELETE":
            if record_id in self.fail_delete:
                return httpx.Response(400, json={"detail": "Cannot delete a record with open referrals"})
            rows.remove(match)
            return httpx.Response(204)
        return httpx.Response(405, json={"detail": "Method not allowed"})

    def _list(self, request: httpx.Request, rows: list[dict[str, Any]]) -> httpx.Response:
        if self.fail_list_with is not None:
            return httpx.Response(self.fail_list_with, json={"detail": "Backend unavailable"})
        params = request.url.params
        search = params.get("search", "").lower()
        matched = [
            row
            for row in rows
            if not search or any(search in str(value).lower() for value in row.values())
        ]
        for key, value in params.items():
            if key in {"page", "search"}:
                continue
            matched = [row for row in matched if str(row.get(key)) == value]
        page = int(params.get("page", "1"))
        start = (page - 1) * self.page_size
        chunk = matched[start : start + self.page_size]
        has_next = start + self.page_size < len(matched)
        return httpx.Response(
            200,
            json={
                "count": len(matched),
                "next": f"{API_BASE}{request.url.path}?page={page + 1}" if has_next else None,
                "previous": f"{API_BASE}{request.url.path}?page={page - 1}" if page > 1 else None,
                "results": chunk,
            },
        )


def build_patients(total: int = 23) -> list[dict[str, Any]]:
    return [
        {
            "id": index,
            "firstname": f"Pat{index}",
            "lastname": "Smith" if index % 5 == 0 else "Jones",
            "gender": "F" if index % 2 else "M",
        }
        for index in range(1, total + 1)
    ]


@pytest.fixture
def config(tmp_path: Path) -> ClientConfig:
    return ClientConfig(api_base_url=API_BASE, auth_url=AUTH_BASE, session_path=str(tmp_path / "session.json"))


@pytest.fixture
def storage(tmp_path: Path) -> CredentialStorage:
    return CredentialStorage(path=tmp_path / "session.json")


@pytest.fixture
def session(config: ClientConfig, storage: CredentialStorage) -> SessionStore:
    storage.save(StoredSession(access_token="access-1", refresh_token="refresh-1", selected_tenant="core"))
    return SessionStore(config, storage=storage)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(records={"patients": build_patients()})


@pytest.fixture
def gateway(session: SessionStore, backend: FakeBackend) -> ApiGateway:
    client = httpx.AsyncClient(base_url=API_BASE, transport=httpx.MockTransport(backend.handler))
    return ApiGateway(session, client=client)
