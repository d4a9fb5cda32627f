from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_data_dir
from pydantic import ValidationError

from .models import StoredSession


@dataclass
class CredentialStorage:
    """Durable key-value storage for the session tokens and tenant selection."""

    path: str | Path | None = None
    app_name: str = "homealign-console"
    app_author: str = "HomeAlign"
    filename: str = "session.json"

    def _path(self) -> Path:
        if self.path is not None:
            return Path(self.path)
        configured = os.getenv("HOMEALIGN_SESSION_PATH", "").strip()
        if configured:
            return Path(configured)
        return Path(user_data_dir(self.app_name, self.app_author)) / self.filename

    def save(self, session: StoredSession) -> None:
        path = self._path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(session.model_dump_json(indent=2), encoding="utf-8")
        try:
            path.chmod(0o600)
        except OSError:
            pass

    def load(self) -> StoredSession | None:
        path = self._path()
        if not path.exists():
            return None
        try:
            return StoredSession.model_validate_json(path.read_bytes())
        except (ValidationError, OSError):
            # unreadable or tampered sessions are dropped
            self.clear()
            return None

    def clear(self) -> None:
        path = self._path()
        if path.exists():
            path.unlink()
