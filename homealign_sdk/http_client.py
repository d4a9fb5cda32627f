from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable, Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from .config import ClientConfig
from .errors import ApiError, AuthenticationError, NetworkError
from .models import BulkOutcome, ListQuery, PageEnvelope, RecordId
from .session import SessionStore

REFERENCE_LISTS = ("referral-types", "referral-status", "tenants")


class ApiGateway:
    """The only component that talks to the resource API."""

    def __init__(
        self,
        session: SessionStore,
        config: ClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.session = session
        self.config = config or session.config
        self._client = client or httpx.AsyncClient(
            base_url=self.config.api_base_url,
            timeout=self.config.timeout_seconds,
            verify=self.config.verify_ssl,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        normalized_path = path if path.startswith("/") else f"/{path}"
        try:
            response = await self._client.request(
                method=method,
                url=normalized_path,
                params=params,
                json=json_body,
                headers=self.session.auth_headers(),
            )
        except httpx.RequestError as exc:
            raise NetworkError(
                message="Network error while contacting the HomeAlign API",
                details=str(exc),
            ) from exc

        if response.status_code == 401:
            self.session.logout()
            raise AuthenticationError()
        if not response.is_success:
            raise ApiError.from_http_response(response)

        if "application/json" in response.headers.get("content-type", ""):
            try:
                return response.json()
            except ValueError as exc:
                raise ApiError(
                    message="Malformed JSON in API response",
                    status_code=response.status_code,
                ) from exc
        return response

    async def list(self, entity: str, query: ListQuery) -> PageEnvelope:
        payload = await self.request("GET", f"/{entity}/", params=query.to_params())
        if not isinstance(payload, dict):
            raise ApiError(message=f"Unexpected list response for {entity}")
        try:
            return PageEnvelope.model_validate(payload)
        except ValidationError as exc:
            raise ApiError(message=f"Unexpected list response for {entity}", details=str(exc)) from exc

    async def get(self, entity: str, record_id: RecordId) -> Any:
        return await self.request("GET", f"/{entity}/{record_id}/")

    async def create(self, entity: str, data: dict[str, Any]) -> Any:
        return await self.request("POST", f"/{entity}/", json_body=data)

    async def update(self, entity: str, record_id: RecordId, data: dict[str, Any]) -> Any:
        return await self.request("PUT", f"/{entity}/{record_id}/", json_body=data)

    async def delete(self, entity: str, record_id: RecordId) -> Any:
        return await self.request("DELETE", f"/{entity}/{record_id}/")

    async def bulk_delete(self, entity: str, ids: Iterable[RecordId]) -> list[BulkOutcome]:
        record_ids = list(ids)
        results = await asyncio.gather(
            *(self.delete(entity, record_id) for record_id in record_ids),
            return_exceptions=True,
        )
        return _settle(record_ids, results)

    async def bulk_update(self, entity: str, updates: Mapping[RecordId, dict[str, Any]]) -> list[BulkOutcome]:
        record_ids = list(updates)
        results = await asyncio.gather(
            *(self.update(entity, record_id, updates[record_id]) for record_id in record_ids),
            return_exceptions=True,
        )
        return _settle(record_ids, results)

    async def export(self, entity: str, query: ListQuery) -> bytes:
        payload = await self.request("GET", f"/{entity}/export/", params=query.to_export_params())
        if isinstance(payload, httpx.Response):
            return payload.content
        return json.dumps(payload).encode("utf-8")

    async def reference_list(self, name: str) -> list[dict[str, Any]]:
        if name not in REFERENCE_LISTS:
            raise ValueError(f"Unknown reference list: {name}")
        payload = await self.request("GET", f"/{name}/")
        if isinstance(payload, dict):
            rows = payload.get("results", [])
        elif isinstance(payload, list):
            rows = payload
        else:
            raise ApiError(message=f"Unexpected response for {name}")
        return [row for row in rows if isinstance(row, dict)]

    async def aclose(self) -> None:
        await self._client.aclose()


def _settle(record_ids: list[RecordId], results: list[Any]) -> list[BulkOutcome]:
    outcomes: list[BulkOutcome] = []
    for record_id, result in zip(record_ids, results):
        if isinstance(result, (ApiError, AuthenticationError)):
            outcomes.append(BulkOutcome(record_id=record_id, ok=False, error=result))
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes.append(BulkOutcome(record_id=record_id, ok=True))
    return outcomes
