from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from homealign_sdk.errors import ApiError
from homealign_sdk.http_client import ApiGateway
from homealign_sdk.session import SessionStore

from homealign_console.app.config import DEFAULT_TENANTS
from homealign_console.app.entities import ENTITIES, get_descriptor
from homealign_console.app.export.csv_exporter import DEFAULT_EXPORT_DIR
from homealign_console.app.infrastructure.logging.logger import get_logger, log_action
from homealign_console.app.ui.listing_controller import Confirm, ListController

logger = get_logger(__name__)

Output = Callable[[str], None]


@dataclass(frozen=True)
class NavRoute:
    key: str
    option: str
    label: str


ROUTES: list[NavRoute] = [
    *(NavRoute(f"entity.{descriptor.name}", str(index), descriptor.label) for index, descriptor in enumerate(ENTITIES, 1)),
    NavRoute("action.tenant_switch", "t", "Switch tenant"),
    NavRoute("action.logout", "l", "Logout"),
    NavRoute("action.quit", "q", "Quit"),
]


def resolve_route(option: str) -> NavRoute | None:
    normalized = option.strip().lower()
    return next((route for route in ROUTES if route.option == normalized), None)


class NavigationShell:
    """Owns one list controller per entity and routes between them."""

    def __init__(
        self,
        session: SessionStore,
        gateway: ApiGateway,
        *,
        confirm: Confirm | None = None,
        export_dir: str | Path = DEFAULT_EXPORT_DIR,
        tenants: tuple[tuple[str, str], ...] = DEFAULT_TENANTS,
    ) -> None:
        self.session = session
        self.gateway = gateway
        self._confirm = confirm
        self._export_dir = export_dir
        self.configured_tenants = tenants
        self.tenants: tuple[tuple[str, str], ...] = tenants
        self.active_entity = ENTITIES[0].name
        self._controllers: dict[str, ListController] = {}

    def controller(self, entity: str | None = None) -> ListController:
        name = entity or self.active_entity
        if name not in self._controllers:
            self._controllers[name] = ListController(
                get_descriptor(name),
                self.gateway,
                self.session,
                confirm=self._confirm,
                export_dir=self._export_dir,
            )
        return self._controllers[name]

    @property
    def active(self) -> ListController:
        return self.controller()

    async def open(self) -> None:
        await self.active.mount()

    async def switch_entity(self, entity: str) -> ListController:
        get_descriptor(entity)
        if entity != self.active_entity:
            self.active.leave()
            self.active_entity = entity
        await self.active.mount()
        return self.active

    async def load_tenants(self) -> tuple[tuple[str, str], ...]:
        try:
            rows = await self.gateway.reference_list("tenants")
        except ApiError as error:
            log_action(logger, "navigation", "load_tenants", self.session.selected_tenant, "error", error.message)
            self.tenants = self.configured_tenants
            return self.tenants

        loaded = tuple(
            (str(value), str(row.get("label") or row.get("name") or value))
            for row in rows
            for value in [row.get("value") or row.get("code") or row.get("id")]
            if value is not None
        )
        self.tenants = loaded or self.configured_tenants
        return self.tenants

    async def switch_tenant(self, tenant_id: str) -> None:
        previous = self.session.selected_tenant
        self.session.set_selected_tenant(tenant_id)
        log_action(logger, "navigation", "switch_tenant", self.session.selected_tenant, "success", f"from={previous}")
        for name, controller in self._controllers.items():
            if name != self.active_entity:
                controller.reset_for_tenant()
        await self.active.on_tenant_changed()

    def logout(self) -> None:
        tenant = self.session.selected_tenant
        self.session.logout()
        self._controllers.clear()
        self.active_entity = ENTITIES[0].name
        log_action(logger, "navigation", "logout", tenant, "success")

    def tenant_label(self) -> str:
        current = self.session.selected_tenant
        return next((label for value, label in self.tenants if value == current), current)

    def render_shell(self, output: Output = print) -> None:
        output("\n=== HomeAlign Admin Console ===")
        output(f"Tenant: {self.tenant_label()} ({self.session.selected_tenant}) | View: {get_descriptor(self.active_entity).label}")
        output("Sections:")
        for route in ROUTES:
            marker = "*" if route.key == f"entity.{self.active_entity}" else " "
            output(f" {marker}{route.option}. {route.label}")
