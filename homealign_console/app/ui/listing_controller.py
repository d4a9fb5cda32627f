from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path
from typing import Any

from homealign_sdk.errors import ApiError, AuthenticationError
from homealign_sdk.http_client import ApiGateway
from homealign_sdk.models import BulkOutcome, ListQuery, RecordId
from homealign_sdk.session import SessionStore

from homealign_console.app.entities import Choice, EntityDescriptor, FieldDef, FilterDef, reference_choices
from homealign_console.app.export.csv_exporter import DEFAULT_EXPORT_DIR, save_export
from homealign_console.app.infrastructure.logging.logger import get_logger, log_action
from homealign_console.app.ui.filters import clean_filters
from homealign_console.app.ui.forms import RecordForm
from homealign_console.app.ui.pagination import PAGE_SIZE, PaginationState, goto_page, next_page, prev_page, reset_page
from homealign_console.app.ui.view_state import ListViewState, resolve_list_view_state

logger = get_logger(__name__)

Confirm = Callable[[str], bool]


class ListStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class ModalMode(str, Enum):
    NONE = "none"
    CREATE = "create"
    EDIT = "edit"


def _deny(_message: str) -> bool:
    return False


class ListController:
    """Fetch, search, filter, paginate, select and bulk-act on one entity.

    Every fetch takes a sequence number and only the latest issued fetch may
    write results, so a slow earlier response never overwrites a newer one.
    Failed fetches keep the previous rows visible under the error message.
    """

    def __init__(
        self,
        descriptor: EntityDescriptor,
        gateway: ApiGateway,
        session: SessionStore,
        *,
        confirm: Confirm | None = None,
        export_dir: str | Path = DEFAULT_EXPORT_DIR,
        page_size: int = PAGE_SIZE,
    ) -> None:
        self.descriptor = descriptor
        self._gateway = gateway
        self._session = session
        self._confirm = confirm or _deny
        self.export_dir = export_dir
        self.status = ListStatus.IDLE
        self.error: str | None = None
        self.action_error: str | None = None
        self.items: list[dict[str, Any]] = []
        self.next_url: str | None = None
        self.previous_url: str | None = None
        self.pagination = PaginationState(page_size=page_size)
        self.search_text = ""
        self.filters: dict[str, Any] = {}
        self.selection: set[RecordId] = set()
        self.modal = ModalMode.NONE
        self.form: RecordForm | None = None
        self.reference_options: dict[str, tuple[Choice, ...]] = {}
        self.last_bulk_outcomes: list[BulkOutcome] = []
        self._fetch_seq = 0

    @property
    def entity(self) -> str:
        return self.descriptor.name

    @property
    def page(self) -> int:
        return self.pagination.page

    @property
    def total_count(self) -> int:
        return self.pagination.total_count

    @property
    def total_pages(self) -> int:
        return self.pagination.total_pages

    @property
    def has_next(self) -> bool:
        return self.pagination.has_next

    @property
    def has_previous(self) -> bool:
        return self.pagination.has_previous

    def current_query(self) -> ListQuery:
        return ListQuery(page=self.pagination.page, search=self.search_text, filters=dict(self.filters))

    def visible_ids(self) -> list[RecordId]:
        ids = (self.descriptor.identity_of(item) for item in self.items)
        return [record_id for record_id in ids if record_id is not None]

    def find(self, record_id: RecordId) -> dict[str, Any] | None:
        for item in self.items:
            if _same_id(self.descriptor.identity_of(item), record_id):
                return item
        return None

    def _log(self, action: str, outcome: str, detail: str | None = None) -> None:
        log_action(logger, self.entity, action, self._session.selected_tenant, outcome, detail)

    async def mount(self) -> None:
        await self.load_reference_options()
        await self.fetch()

    async def load_reference_options(self) -> None:
        for source in sorted(self.descriptor.reference_sources):
            try:
                rows = await self._gateway.reference_list(source)
            except ApiError as error:
                self._log(f"load_{source}", "error", error.message)
                continue
            self.reference_options[source] = reference_choices(rows)

    def choices_for(self, definition: FilterDef | FieldDef) -> tuple[Choice, ...]:
        if definition.choices_source:
            return self.reference_options.get(definition.choices_source, ())
        return definition.choices

    async def fetch(self, *, reclamp: bool = True) -> None:
        self._fetch_seq += 1
        seq = self._fetch_seq
        self.status = ListStatus.LOADING
        self.error = None
        query = self.current_query()

        try:
            envelope = await self._gateway.list(self.entity, query)
        except AuthenticationError as error:
            if seq == self._fetch_seq:
                self.status = ListStatus.ERROR
                self.error = error.message
            raise
        except ApiError as error:
            if seq != self._fetch_seq:
                return
            self.status = ListStatus.ERROR
            self.error = f"Failed to fetch {self.entity}: {error.message}"
            self._log("fetch", "error", error.message)
            return

        if seq != self._fetch_seq:
            return
        self.pagination.total_count = envelope.count
        if reclamp and self.pagination.page > self.pagination.last_page:
            # the current page vanished under a shrinking count
            goto_page(self.pagination, self.pagination.last_page)
            await self.fetch(reclamp=False)
            return
        self.items = list(envelope.results)
        self.next_url = envelope.next
        self.previous_url = envelope.previous
        self._prune_selection()
        self.status = ListStatus.LOADED
        self._log("fetch", "success", f"page={query.page} count={envelope.count}")

    def _prune_selection(self) -> None:
        visible = self.visible_ids()
        self.selection = {record_id for record_id in self.selection if any(_same_id(record_id, v) for v in visible)}

    async def refresh(self) -> None:
        await self.fetch()

    async def submit_search(self, text: str) -> None:
        self.search_text = text.strip()
        reset_page(self.pagination)
        await self.fetch()

    async def replace_filters(self, filters: dict[str, Any]) -> None:
        self.filters = clean_filters(dict(filters))
        reset_page(self.pagination)
        await self.fetch()

    async def clear_filters(self) -> None:
        await self.replace_filters({})

    async def next_page(self) -> None:
        await self._navigate(next_page)

    async def previous_page(self) -> None:
        await self._navigate(prev_page)

    async def goto_page(self, page: int) -> None:
        await self._navigate(lambda state: goto_page(state, page))

    async def _navigate(self, move: Callable[[PaginationState], PaginationState]) -> None:
        before = self.pagination.page
        move(self.pagination)
        if self.pagination.page != before:
            await self.fetch()

    def reset_for_tenant(self) -> None:
        reset_page(self.pagination)
        self.selection.clear()
        self.close_form()
        self.reference_options = {}

    async def on_tenant_changed(self) -> None:
        self.reset_for_tenant()
        await self.mount()

    def leave(self) -> None:
        self.selection.clear()
        self.close_form()

    def toggle_select(self, record_id: RecordId) -> None:
        match = next((v for v in self.visible_ids() if _same_id(v, record_id)), None)
        if match is None:
            return
        if match in self.selection:
            self.selection.discard(match)
        else:
            self.selection.add(match)

    @property
    def all_selected(self) -> bool:
        visible = self.visible_ids()
        return bool(visible) and all(record_id in self.selection for record_id in visible)

    def toggle_select_all(self) -> None:
        if self.all_selected:
            self.selection.clear()
        else:
            self.selection = set(self.visible_ids())

    def _noun(self, count: int) -> str:
        return self.descriptor.singular if count == 1 else self.entity

    async def bulk_delete(self, ids: Iterable[RecordId] | None = None) -> list[BulkOutcome] | None:
        record_ids = list(self.selection if ids is None else ids)
        if not record_ids:
            return None
        if not self._confirm(f"Are you sure you want to delete {len(record_ids)} {self._noun(len(record_ids))}?"):
            return None

        outcomes = await self._gateway.bulk_delete(self.entity, record_ids)
        self.selection.clear()
        return await self._settle("bulk_delete", "delete", outcomes)

    async def delete_row(self, record_id: RecordId) -> list[BulkOutcome] | None:
        return await self.bulk_delete([record_id])

    async def bulk_update_field(self, field: str, value: Any) -> list[BulkOutcome] | None:
        record_ids = list(self.selection)
        if not record_ids:
            return None
        outcomes = await self._gateway.bulk_update(self.entity, {record_id: {field: value} for record_id in record_ids})
        self.selection.clear()
        return await self._settle("bulk_update", "update", outcomes)

    async def _settle(self, action: str, verb: str, outcomes: list[BulkOutcome]) -> list[BulkOutcome]:
        self.last_bulk_outcomes = outcomes
        failures = [outcome for outcome in outcomes if not outcome.ok]
        auth_failure = next((o.error for o in failures if isinstance(o.error, AuthenticationError)), None)
        if auth_failure is not None:
            self._log(action, "error", "authentication")
            raise auth_failure

        if failures:
            details = ", ".join(f"{outcome.record_id} ({outcome.error})" for outcome in failures)
            self.action_error = f"Failed to {verb} {len(failures)} of {len(outcomes)} {self.entity}: {details}"
            self._log(action, "error", details)
        else:
            self.action_error = None
            self._log(action, "success", f"count={len(outcomes)}")
        await self.fetch()
        return outcomes

    async def update_field(self, record_id: RecordId, field: str, value: Any) -> bool:
        try:
            await self._gateway.update(self.entity, record_id, {field: value})
        except ApiError as error:
            self.action_error = f"Failed to update {self.descriptor.singular} {field}: {error.message}"
            self._log(f"update_{field}", "error", error.message)
            return False
        self.action_error = None
        self._log(f"update_{field}", "success", str(record_id))
        await self.fetch()
        return True

    async def export_current_view(self, output_dir: str | Path | None = None) -> Path | None:
        try:
            payload = await self._gateway.export(self.entity, self.current_query())
        except ApiError as error:
            self.action_error = f"Failed to export {self.entity}: {error.message}"
            self._log("export", "error", error.message)
            return None
        path = save_export(entity=self.entity, payload=payload, output_dir=output_dir or self.export_dir)
        self.action_error = None
        self._log("export", "success", str(path))
        return path

    def open_create(self) -> RecordForm:
        self.form = RecordForm(
            self.descriptor,
            self._gateway,
            on_save=self._on_form_saved,
            tenant_id=self._session.selected_tenant,
        )
        self.modal = ModalMode.CREATE
        return self.form

    def open_edit(self, record_id: RecordId) -> RecordForm:
        record = self.find(record_id)
        if record is None:
            raise KeyError(f"{self.descriptor.singular} {record_id} is not on the current page")
        self.form = RecordForm(
            self.descriptor,
            self._gateway,
            record=record,
            on_save=self._on_form_saved,
            tenant_id=self._session.selected_tenant,
        )
        self.modal = ModalMode.EDIT
        return self.form

    def close_form(self) -> None:
        self.form = None
        self.modal = ModalMode.NONE

    async def _on_form_saved(self, _saved: Any) -> None:
        self.close_form()
        await self.fetch()

    def view_state(self) -> ListViewState:
        return resolve_list_view_state(
            loading=self.status in {ListStatus.IDLE, ListStatus.LOADING},
            has_data=bool(self.items),
            error=self.error if self.status is ListStatus.ERROR else None,
        )


def _same_id(left: RecordId | None, right: RecordId | None) -> bool:
    if left is None or right is None:
        return False
    return str(left) == str(right)
