from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from homealign_console.app.export.csv_exporter import DEFAULT_EXPORT_DIR

DEFAULT_TENANTS: tuple[tuple[str, str], ...] = (
    ("core", "Core"),
    ("humana", "Humana"),
    ("bcbs_az", "BCBS Arizona"),
    ("centene", "Centene"),
    ("uhc", "UHC"),
    ("aarp", "AARP"),
    ("aetna", "Aetna"),
)


@dataclass(frozen=True)
class AppConfig:
    export_dir: str = DEFAULT_EXPORT_DIR
    log_level: str = "INFO"
    tenants: tuple[tuple[str, str], ...] = field(default=DEFAULT_TENANTS)

    @classmethod
    def from_env(cls, env_file: str | None = None) -> "AppConfig":
        load_dotenv(env_file)
        config = cls(
            export_dir=(os.getenv("HOMEALIGN_EXPORT_DIR") or DEFAULT_EXPORT_DIR).strip(),
            log_level=(os.getenv("HOMEALIGN_LOG_LEVEL") or "INFO").strip().upper(),
            tenants=parse_tenants(os.getenv("HOMEALIGN_TENANTS")),
        )
        config.validate()
        return config

    def validate(self) -> None:
        if not self.export_dir:
            raise ValueError("HOMEALIGN_EXPORT_DIR cannot be empty")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"HOMEALIGN_LOG_LEVEL is not a logging level: {self.log_level}")
        if not self.tenants:
            raise ValueError("HOMEALIGN_TENANTS must list at least one tenant")


def parse_tenants(raw: str | None) -> tuple[tuple[str, str], ...]:
    if raw is None or not raw.strip():
        return DEFAULT_TENANTS

    tenants: list[tuple[str, str]] = []
    for chunk in raw.split(","):
        item = chunk.strip()
        if not item:
            continue
        value, _, label = item.partition(":")
        value = value.strip()
        if value:
            tenants.append((value, label.strip() or value))
    return tuple(tenants)
