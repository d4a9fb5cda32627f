from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "http://localhost:8000/core-api"
DEFAULT_AUTH_URL = "http://localhost:8000"
DEFAULT_TENANT_HEADER = "X-Selected-Tenant"
DEFAULT_TENANT = "core"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    api_base_url: str = DEFAULT_API_BASE_URL
    auth_url: str = DEFAULT_AUTH_URL
    timeout_seconds: float = 30.0
    verify_ssl: bool = True
    tenant_header: str = DEFAULT_TENANT_HEADER
    default_tenant: str = DEFAULT_TENANT
    session_path: str | None = None


def parse_bool(value: str | bool | None, default: bool = True) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default

    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_url(name: str, default: str) -> str:
    raw = os.getenv(name)
    value = default if raw is None else raw.strip()
    _validate(bool(value), f"Invalid {name}: expected a URL, got an empty value")
    _validate(
        value.startswith(("http://", "https://")),
        f"Invalid {name}: expected an http(s) URL, got {value!r}",
    )
    return value.rstrip("/")


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from environment with optional .env override."""
    load_dotenv(env_file)

    api_base_url = _read_url("HOMEALIGN_API_BASE_URL", DEFAULT_API_BASE_URL)
    auth_url = _read_url("HOMEALIGN_AUTH_URL", DEFAULT_AUTH_URL)

    timeout_seconds = _read_float("HOMEALIGN_TIMEOUT_SECONDS", "30")
    _validate(
        timeout_seconds > 0,
        f"Invalid HOMEALIGN_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}",
    )

    tenant_header = (os.getenv("HOMEALIGN_TENANT_HEADER") or DEFAULT_TENANT_HEADER).strip()
    default_tenant = (os.getenv("HOMEALIGN_DEFAULT_TENANT") or DEFAULT_TENANT).strip()
    _validate(bool(default_tenant), "Invalid HOMEALIGN_DEFAULT_TENANT: expected a tenant id")

    session_path = (os.getenv("HOMEALIGN_SESSION_PATH") or "").strip() or None

    return ClientConfig(
        api_base_url=api_base_url,
        auth_url=auth_url,
        timeout_seconds=timeout_seconds,
        verify_ssl=parse_bool(os.getenv("HOMEALIGN_VERIFY_SSL"), default=True),
        tenant_header=tenant_header,
        default_tenant=default_tenant,
        session_path=session_path,
    )
