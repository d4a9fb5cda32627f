from __future__ import annotations

from collections.abc import Callable
from typing import Any

from homealign_sdk.errors import ApiError, AuthenticationError
from homealign_sdk.models import RecordId

from homealign_console.app.entities import FieldKind
from homealign_console.app.error_presenter import build_error_payload, print_error_banner
from homealign_console.app.navigation_shell import NavigationShell, resolve_route
from homealign_console.app.ui.filters import describe_choices, prompt_filters
from homealign_console.app.ui.forms import RecordForm, coerce_value
from homealign_console.app.ui.listing_controller import ListController
from homealign_console.app.ui.table_printer import print_table
from homealign_console.app.ui.view_state import ListViewStatus

Prompt = Callable[[str], str]
Output = Callable[[str], None]

ACTIONS = (
    ("s", "Search"),
    ("f", "Filters"),
    ("c", "Clear filters"),
    ("n", "Next page"),
    ("p", "Previous page"),
    ("g", "Go to page"),
    ("r", "Refresh"),
    ("x", "Select row"),
    ("a", "Select all"),
    ("d", "Delete selected"),
    ("dr", "Delete row"),
    ("e", "Export CSV"),
    ("+", "New record"),
    ("ed", "Edit record"),
    ("u", "Set field on selected"),
    ("st", "Change status"),
)

YES = {"y", "yes"}


def make_confirm(prompt: Prompt = input) -> Callable[[str], bool]:
    def _confirm(message: str) -> bool:
        return prompt(f"{message} [y/N]: ").strip().lower() in YES

    return _confirm


class EntityConsole:
    def __init__(self, shell: NavigationShell, prompt: Prompt = input, output: Output = print) -> None:
        self.shell = shell
        self._prompt = prompt
        self._output = output

    @property
    def controller(self) -> ListController:
        return self.shell.active

    async def run(self) -> str:
        """Drive the console until the user quits or the session ends.

        Returns ``"quit"``, ``"logout"`` or ``"expired"``.
        """
        try:
            await self.shell.load_tenants()
            await self.shell.open()
        except AuthenticationError as error:
            return self._expired(error)

        while True:
            self.render()
            option = self._prompt("Select an option: ").strip().lower()
            try:
                outcome = await self.dispatch(option)
            except AuthenticationError as error:
                return self._expired(error)
            except ApiError as error:
                print_error_banner(build_error_payload(error), output=self._output)
                continue
            if outcome is not None:
                return outcome

    def _expired(self, error: AuthenticationError) -> str:
        self.shell.logout()
        self._output(f"{error.message} Returning to login.")
        return "expired"

    async def dispatch(self, option: str) -> str | None:
        route = resolve_route(option)
        if route is not None:
            if route.key == "action.quit":
                return "quit"
            if route.key == "action.logout":
                self.shell.logout()
                self._output("Logged out.")
                return "logout"
            if route.key == "action.tenant_switch":
                await self._switch_tenant()
                return None
            await self.shell.switch_entity(route.key.split(".", 1)[1])
            return None

        controller = self.controller
        if option == "s":
            await controller.submit_search(self._prompt("Search text (blank to clear): "))
        elif option == "f":
            filters = prompt_filters(controller.descriptor.filters, controller.filters, controller.choices_for, self._prompt)
            await controller.replace_filters(filters)
        elif option == "c":
            await controller.clear_filters()
        elif option == "n":
            await controller.next_page()
        elif option == "p":
            await controller.previous_page()
        elif option == "g":
            page = self._ask_int("Page number: ")
            if page is not None:
                await controller.goto_page(page)
        elif option == "r":
            await controller.refresh()
        elif option == "x":
            record_id = self._ask_record_id()
            if record_id is not None:
                controller.toggle_select(record_id)
        elif option == "a":
            controller.toggle_select_all()
        elif option == "d":
            if not controller.selection:
                self._output("Nothing selected.")
            else:
                await controller.bulk_delete()
        elif option == "dr":
            record_id = self._ask_record_id()
            if record_id is not None:
                await controller.delete_row(record_id)
        elif option == "e":
            path = await controller.export_current_view()
            if path is not None:
                self._output(f"Exported to {path}")
        elif option == "+":
            await self._edit_form(controller.open_create())
        elif option == "ed":
            record_id = self._ask_record_id()
            if record_id is not None:
                await self._edit_form(controller.open_edit(record_id))
        elif option == "u":
            await self._set_field_on_selection()
        elif option == "st":
            await self._change_status()
        else:
            self._output("Invalid option.")
        return None

    def render(self) -> None:
        controller = self.controller
        self.shell.render_shell(output=self._output)
        state = controller.view_state()
        descriptor = controller.descriptor
        title = f"{descriptor.label} | search='{controller.search_text}' filters={controller.filters or {}}"

        if state.status is ListViewStatus.LOADING:
            self._output(f"\n{title}\n{state.message}")
        else:
            if state.status is ListViewStatus.ERROR:
                self._output(f"[ERROR] {state.message}")
            if state.show_rows or state.status is ListViewStatus.EMPTY:
                ids = [str(descriptor.identity_of(item)) for item in controller.items]
                print_table(
                    title,
                    controller.items if state.show_rows else [],
                    descriptor.columns,
                    row_ids=ids,
                    selected={str(record_id) for record_id in controller.selection},
                    empty_message=state.message,
                    output=self._output,
                )

        previous = "prev" if controller.has_previous else "prev (disabled)"
        following = "next" if controller.has_next else "next (disabled)"
        self._output(
            f"Page {controller.page} of {max(controller.total_pages, 1)} "
            f"({controller.total_count} records) | {previous} | {following} | selected={len(controller.selection)}"
        )
        if controller.action_error:
            self._output(f"[ERROR] {controller.action_error}")
        self._output("Actions: " + "  ".join(f"{key}={label}" for key, label in ACTIONS))

    async def _switch_tenant(self) -> None:
        for value, label in self.shell.tenants:
            marker = "*" if value == self.shell.session.selected_tenant else " "
            self._output(f" {marker} {value}: {label}")
        tenant_id = self._prompt("Tenant id: ").strip()
        if not tenant_id:
            return
        if tenant_id not in {value for value, _ in self.shell.tenants}:
            self._output(f"Unknown tenant: {tenant_id}")
            return
        await self.shell.switch_tenant(tenant_id)

    async def _edit_form(self, form: RecordForm) -> None:
        controller = self.controller
        while True:
            self._output(f"\n{form.title} (blank keeps the current value, '-' clears it)")
            for definition in form.descriptor.fields:
                choices = controller.choices_for(definition)
                hint = f" [{describe_choices(choices)}]" if choices else ""
                if definition.kind is FieldKind.BOOL:
                    hint = " [true/false]"
                marker = "*" if definition.required else ""
                current = form.draft.get(definition.name)
                raw = self._prompt(f"{definition.label}{marker}{hint} ({'' if current is None else current}): ")
                if not raw.strip():
                    continue
                form.set_field(definition.name, "" if raw.strip() == "-" else raw.strip())

            if await form.submit():
                self._output(f"Saved {form.descriptor.singular}.")
                return

            for name, message in form.field_errors.items():
                self._output(f"  {name}: {message}")
            if form.error_message:
                self._output(f"[ERROR] {form.error_message}")
            if self._prompt("Keep editing? [y/N]: ").strip().lower() not in YES:
                controller.close_form()
                return

    async def _set_field_on_selection(self) -> None:
        controller = self.controller
        if not controller.selection:
            self._output("Nothing selected.")
            return
        name = self._prompt("Field name: ").strip()
        if not controller.descriptor.has_field(name):
            self._output(f"Unknown field: {name}")
            return
        raw = self._prompt("New value: ").strip()
        value: Any = coerce_value(controller.descriptor.get_field(name), raw)
        await controller.bulk_update_field(name, value)

    async def _change_status(self) -> None:
        controller = self.controller
        field = controller.descriptor.inline_status_field
        if field is None:
            self._output(f"{controller.descriptor.label} do not support inline status changes.")
            return
        record_id = self._ask_record_id()
        if record_id is None:
            return
        definition = next(item for item in controller.descriptor.filters if item.key == field)
        choices = controller.choices_for(definition)
        hint = f" [{describe_choices(choices)}]" if choices else ""
        value = self._prompt(f"New status{hint}: ").strip()
        if value:
            await controller.update_field(record_id, field, value)

    def _ask_int(self, label: str) -> int | None:
        raw = self._prompt(label).strip()
        try:
            return int(raw)
        except ValueError:
            self._output("Enter a whole number.")
            return None

    def _ask_record_id(self) -> RecordId | None:
        raw = self._prompt("Record id: ").strip()
        record = self.controller.find(raw) if raw else None
        if record is None:
            self._output(f"No {self.controller.descriptor.singular} with id '{raw}' on this page.")
            return None
        return self.controller.descriptor.identity_of(record)
