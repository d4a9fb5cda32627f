from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx


@dataclass
class ApiError(Exception):
    message: str
    status_code: int | None = None
    details: dict[str, Any] | list[Any] | str | None = None

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_http_response(cls, response: httpx.Response) -> "ApiError":
        fallback = f"HTTP error! status: {response.status_code}"
        try:
            payload = response.json()
        except ValueError:
            return cls(message=fallback, status_code=response.status_code)

        if isinstance(payload, dict):
            message = payload.get("detail") or payload.get("error")
            return cls(
                message=str(message) if message else fallback,
                status_code=response.status_code,
                details=payload,
            )

        return cls(message=fallback, status_code=response.status_code, details=payload)


class NetworkError(ApiError):
    pass


@dataclass
class AuthenticationError(Exception):
    message: str = "Session expired. Please log in again."
    status_code: int = 401

    def __str__(self) -> str:
        return self.message
