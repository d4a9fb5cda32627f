from __future__ import annotations

import argparse
import asyncio
import getpass
from collections.abc import Callable

import httpx

from homealign_sdk.config import ClientConfig, load_config
from homealign_sdk.http_client import ApiGateway
from homealign_sdk.session import SessionStore

from homealign_console.app.config import AppConfig
from homealign_console.app.entity_console import EntityConsole, make_confirm
from homealign_console.app.infrastructure.logging.logger import configure_logging, get_logger, log_action
from homealign_console.app.navigation_shell import NavigationShell
from homealign_console.app.session_guard import discard_invalid_session

logger = get_logger(__name__)

Prompt = Callable[[str], str]
Output = Callable[[str], None]


def _print_runtime_config(config: ClientConfig, app_config: AppConfig, output: Output = print) -> None:
    output("HomeAlign Admin Console")
    output(f"API base URL: {config.api_base_url}")
    output(f"Auth URL: {config.auth_url}")
    output(f"Timeout: {config.timeout_seconds}s | Verify SSL: {config.verify_ssl}")
    output(f"Exports: {app_config.export_dir}")


async def login_gate(
    session: SessionStore,
    prompt: Prompt = input,
    password_prompt: Prompt = getpass.getpass,
    output: Output = print,
) -> bool:
    """Ask for credentials until login succeeds. An empty username gives up."""
    while not session.is_authenticated:
        username = prompt("Username (blank to exit): ").strip()
        if not username:
            return False
        password = password_prompt("Password: ")
        if await session.login(username, password):
            log_action(logger, "auth", "login", session.selected_tenant, "success")
            output("Login OK")
            return True
        log_action(logger, "auth", "login", session.selected_tenant, "error")
        output("Invalid username or password, or the auth service is unreachable.")
    return True


async def run_console(
    config: ClientConfig,
    app_config: AppConfig,
    *,
    prompt: Prompt = input,
    password_prompt: Prompt = getpass.getpass,
    output: Output = print,
    auth_client: httpx.AsyncClient | None = None,
    api_client: httpx.AsyncClient | None = None,
) -> None:
    session = SessionStore(config, client=auth_client)
    gateway = ApiGateway(session, config, client=api_client)
    validation = discard_invalid_session(session)
    if validation.reason in {"expired_token", "corrupt_token"}:
        log_action(logger, "auth", "resume_session", session.selected_tenant, "error", validation.reason)

    try:
        while True:
            if not await login_gate(session, prompt=prompt, password_prompt=password_prompt, output=output):
                return
            shell = NavigationShell(
                session,
                gateway,
                confirm=make_confirm(prompt),
                export_dir=app_config.export_dir,
                tenants=app_config.tenants,
            )
            outcome = await EntityConsole(shell, prompt=prompt, output=output).run()
            if outcome == "quit":
                return
    finally:
        await gateway.aclose()
        await session.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="homealign-console", description="HomeAlign healthcare admin console")
    parser.add_argument("--env-file", default=None, help="Path to a .env file with HOMEALIGN_* settings")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    config = load_config(args.env_file)
    app_config = AppConfig.from_env(args.env_file)
    configure_logging(app_config.log_level)
    _print_runtime_config(config, app_config)
    asyncio.run(run_console(config, app_config))


if __name__ == "__main__":
    main()
