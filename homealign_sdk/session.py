from __future__ import annotations

import httpx
from pydantic import ValidationError

from .config import ClientConfig
from .credential_store import CredentialStorage
from .models import StoredSession, TokenPair


class SessionStore:
    """Single owner of the bearer tokens and the selected tenant.

    State is restored from durable storage on construction so a restarted
    console resumes the previous session. Only ``login``, ``logout`` and
    ``set_selected_tenant`` mutate it.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        storage: CredentialStorage | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._storage = storage or CredentialStorage(path=self.config.session_path)
        self._client = client
        self.token: str | None = None
        self.refresh_token: str | None = None
        self.selected_tenant: str = self.config.default_tenant
        self._restore()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def _restore(self) -> None:
        stored = self._storage.load()
        if stored is None:
            return
        self.token = stored.access_token
        self.refresh_token = stored.refresh_token
        self.selected_tenant = stored.selected_tenant or self.config.default_tenant

    def _persist(self) -> None:
        self._storage.save(
            StoredSession(
                access_token=self.token,
                refresh_token=self.refresh_token,
                selected_tenant=self.selected_tenant,
            )
        )

    def _auth_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.auth_url,
                timeout=self.config.timeout_seconds,
                verify=self.config.verify_ssl,
            )
        return self._client

    async def login(self, username: str, password: str) -> bool:
        try:
            response = await self._auth_client().post(
                "/token/",
                json={"username": username, "password": password},
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError:
            return False

        if response.status_code != 200:
            return False
        try:
            tokens = TokenPair.model_validate(response.json())
        except (ValueError, ValidationError):
            return False

        self.token = tokens.access
        self.refresh_token = tokens.refresh
        self._persist()
        return True

    def logout(self) -> None:
        self.token = None
        self.refresh_token = None
        self.selected_tenant = self.config.default_tenant
        self._storage.clear()

    def set_selected_tenant(self, tenant_id: str) -> None:
        normalized = (tenant_id or "").strip()
        if not normalized:
            raise ValueError("tenant_id is required")
        self.selected_tenant = normalized
        self._persist()

    def auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token or 'null'}",
            "Content-Type": "application/json",
            self.config.tenant_header: self.selected_tenant,
        }

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
