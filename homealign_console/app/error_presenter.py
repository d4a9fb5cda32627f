from __future__ import annotations

from collections.abc import Callable
from typing import Any

from homealign_sdk.errors import ApiError, AuthenticationError, NetworkError

SUGGESTED_ACTIONS = {
    "network": "Retry",
    "500": "Retry",
    "401": "Log in again",
    "400": "Review the submitted fields",
    "403": "Check tenant permissions",
    "404": "Refresh the list",
}
FALLBACK_ACTION = "Contact support"


def error_category(error: Exception) -> str:
    if isinstance(error, AuthenticationError):
        return "401"
    if isinstance(error, NetworkError):
        return "network"
    if not isinstance(error, ApiError):
        return "internal"
    status = error.status_code or 0
    if status >= 500:
        return "500"
    return str(status) if status in {400, 403, 404} else "api"


def build_error_payload(error: Exception) -> dict[str, Any]:
    category = error_category(error)
    return {
        "category": category,
        "message": getattr(error, "message", None) or str(error),
        "status_code": getattr(error, "status_code", None),
        "action": SUGGESTED_ACTIONS.get(category, FALLBACK_ACTION),
    }


def print_error_banner(payload: dict[str, Any], output: Callable[[str], None] = print) -> None:
    status = payload.get("status_code") or "n/a"
    output(f"[ERROR] {payload['message']} (status={status} category={payload['category']} action={payload['action']})")
