import asyncio
import json
from pathlib import Path

import httpx

from homealign_console.app.config import AppConfig
from homealign_console.app.main import run_console
from homealign_sdk.config import ClientConfig

API_BASE = "https://api.test/core-api"
AUTH_BASE = "https://auth.test"


class ScriptedPrompt:
    def __init__(self, answers):
        self.answers = list(answers)
        self.questions = []

    def __call__(self, question: str) -> str:
        self.questions.append(question)
        if not self.answers:
            raise AssertionError(f"no scripted answer for {question!r}")
        return self.answers.pop(0)


def _auth_handler(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content)
    if request.url.path == "/token/" and body == {"username": "admin", "password": "secret"}:
        return httpx.Response(200, json={"access": "tok-a", "refresh": "tok-r"})
    return httpx.Response(401, json={"detail": "No active account found with the given credentials"})


def _run(config: ClientConfig, tmp_path: Path, prompt: ScriptedPrompt, api_handler) -> list[str]:
    lines: list[str] = []
    asyncio.run(
        run_console(
            config,
            AppConfig(export_dir=str(tmp_path / "exports")),
            prompt=prompt,
            password_prompt=lambda label: "secret",
            output=lines.append,
            auth_client=httpx.AsyncClient(base_url=AUTH_BASE, transport=httpx.MockTransport(_auth_handler)),
            api_client=httpx.AsyncClient(base_url=API_BASE, transport=httpx.MockTransport(api_handler)),
        )
    )
    return lines


def test_login_search_bulk_delete_and_quit(config, backend, tmp_path: Path) -> None:
    backend.reference["tenants"] = [{"value": "core", "label": "Core"}, {"value": "humana", "label": "Humana"}]
    prompt = ScriptedPrompt(["admin", "s", "Smith", "a", "d", "y", "q"])

    lines = _run(config, tmp_path, prompt, backend.handler)

    assert "Login OK" in lines
    assert "Are you sure you want to delete 4 patients? [y/N]: " in prompt.questions
    assert sorted(request.url.path for request in backend.calls("DELETE")) == [
        "/core-api/patients/10/",
        "/core-api/patients/15/",
        "/core-api/patients/20/",
        "/core-api/patients/5/",
    ]
    assert len(backend.records["patients"]) == 19
    assert all(request.headers["Authorization"] == "Bearer tok-a" for request in backend.requests)
    assert "Page 1 of 1 (0 records) | prev (disabled) | next (disabled) | selected=0" in lines

    stored = json.loads(Path(config.session_path).read_text(encoding="utf-8"))
    assert stored["access_token"] == "tok-a"
    assert stored["selected_tenant"] == "core"


def test_rejected_credentials_are_retried(config, backend, tmp_path: Path) -> None:
    prompt = ScriptedPrompt(["intruder", "admin", "q"])
    attempts: list[str] = []

    def password_for(label: str) -> str:
        attempts.append(label)
        return "secret"

    lines: list[str] = []
    asyncio.run(
        run_console(
            config,
            AppConfig(export_dir=str(tmp_path / "exports")),
            prompt=prompt,
            password_prompt=password_for,
            output=lines.append,
            auth_client=httpx.AsyncClient(base_url=AUTH_BASE, transport=httpx.MockTransport(_auth_handler)),
            api_client=httpx.AsyncClient(base_url=API_BASE, transport=httpx.MockTransport(backend.handler)),
        )
    )

    assert lines.count("Invalid username or password, or the auth service is unreachable.") == 1
    assert lines.count("Login OK") == 1
    assert len(attempts) == 2


def test_expired_session_returns_to_login(config, tmp_path: Path) -> None:
    def api_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"detail": "Token is invalid or expired"})

    prompt = ScriptedPrompt(["admin", ""])

    lines = _run(config, tmp_path, prompt, api_handler)

    assert "Session expired. Please log in again. Returning to login." in lines
    assert prompt.questions.count("Username (blank to exit): ") == 2
    assert not Path(config.session_path).exists()


def test_failed_save_reports_field_errors_and_returns_to_menu(config, backend, tmp_path: Path) -> None:
    keep_every_field = [""] * 15
    prompt = ScriptedPrompt(["admin", "ed", "3", *keep_every_field, "n", "q"])
    original = backend.handler

    def api_handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            return httpx.Response(400, json={"email": ["Enter a valid email address."]})
        return original(request)

    lines = _run(config, tmp_path, prompt, api_handler)

    assert "  email: Enter a valid email address." in lines
    assert "[ERROR] Failed to save patient: HTTP error! status: 400" in lines
    assert "Keep editing? [y/N]: " in prompt.questions
    assert prompt.questions[-1] == "Select an option: "
    assert backend.records["patients"][2]["firstname"] == "Pat3"
