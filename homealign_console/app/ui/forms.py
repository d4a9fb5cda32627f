from __future__ import annotations

import copy
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from homealign_sdk.errors import ApiError, AuthenticationError
from homealign_sdk.http_client import ApiGateway
from homealign_sdk.models import RecordId

from homealign_console.app.entities import EntityDescriptor, FieldDef, FieldKind
from homealign_console.app.infrastructure.logging.logger import get_logger, log_action

INTEGER_REGEX = re.compile(r"^[+-]?\d+$")

logger = get_logger(__name__)

OnSave = Callable[[Any], Awaitable[None]]


class FormStatus(str, Enum):
    IDLE = "idle"
    DIRTY = "dirty"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class ValidationError(Exception):
    def __init__(self, field_errors: dict[str, str]) -> None:
        self.field_errors = dict(field_errors)
        super().__init__("; ".join(self.field_errors.values()))


@dataclass
class FormResult:
    values: dict[str, Any]
    field_errors: dict[str, str]

    @property
    def is_valid(self) -> bool:
        return len(self.field_errors) == 0


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_value(definition: FieldDef, value: Any) -> Any:
    if definition.kind is FieldKind.BOOL:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
            return value.strip().lower() == "true"
        return value
    if definition.kind in {FieldKind.INTEGER, FieldKind.FOREIGN_KEY}:
        if _is_blank(value):
            return None
        if isinstance(value, str) and INTEGER_REGEX.match(value.strip()):
            return int(value.strip())
        return value
    if definition.kind in {FieldKind.DATE, FieldKind.DECIMAL}:
        return None if _is_blank(value) else value
    return value


def validate_required(descriptor: EntityDescriptor, draft: dict[str, Any]) -> FormResult:
    field_errors: dict[str, str] = {}
    for definition in descriptor.required_fields:
        if _is_blank(draft.get(definition.name)):
            field_errors[definition.name] = f"{definition.label} is required."
    return FormResult(values=dict(draft), field_errors=field_errors)


def map_api_validation_errors(error_details: Any) -> dict[str, str]:
    if not isinstance(error_details, dict):
        return {}

    mapped: dict[str, str] = {}
    for key, value in error_details.items():
        if key in {"detail", "error"}:
            continue
        if isinstance(value, str):
            mapped[str(key)] = value
        elif isinstance(value, list) and value and isinstance(value[0], str):
            mapped[str(key)] = value[0]
    return mapped


class RecordForm:
    """Edits one record through a private draft and saves it through the gateway."""

    def __init__(
        self,
        descriptor: EntityDescriptor,
        gateway: ApiGateway,
        record: dict[str, Any] | None = None,
        on_save: OnSave | None = None,
        tenant_id: str | None = None,
    ) -> None:
        self.descriptor = descriptor
        self._gateway = gateway
        self._on_save = on_save
        self._tenant_id = tenant_id
        self.mode = FormMode.CREATE if record is None else FormMode.EDIT
        self.record_id: RecordId | None = None if record is None else descriptor.identity_of(record)
        if self.mode is FormMode.EDIT and self.record_id is None:
            raise ValueError(f"Cannot edit a {descriptor.singular} without an identifier")
        self.draft: dict[str, Any] = copy.deepcopy(record) if record is not None else descriptor.defaults()
        self.status = FormStatus.IDLE
        self.field_errors: dict[str, str] = {}
        self.error_message: str | None = None
        self.closed = False

    @property
    def title(self) -> str:
        verb = "New" if self.mode is FormMode.CREATE else "Edit"
        return f"{verb} {self.descriptor.singular}"

    def set_field(self, name: str, value: Any) -> None:
        if not self.descriptor.has_field(name):
            raise KeyError(f"Unknown field for {self.descriptor.name}: {name}")
        self.draft[name] = value
        self.field_errors.pop(name, None)
        self.status = FormStatus.DIRTY

    def validate(self) -> FormResult:
        return validate_required(self.descriptor, self.draft)

    def build_payload(self) -> dict[str, Any]:
        result = self.validate()
        if not result.is_valid:
            raise ValidationError(result.field_errors)

        payload = copy.deepcopy(self.draft)
        for definition in self.descriptor.fields:
            if definition.name in payload:
                payload[definition.name] = coerce_value(definition, payload[definition.name])
        return payload

    async def submit(self) -> bool:
        if self.status is FormStatus.SUBMITTING or self.closed:
            return False

        try:
            payload = self.build_payload()
        except ValidationError as error:
            self.field_errors = error.field_errors
            self.error_message = None
            self.status = FormStatus.ERROR
            return False

        self.status = FormStatus.SUBMITTING
        self.field_errors = {}
        self.error_message = None
        try:
            if self.mode is FormMode.CREATE:
                saved = await self._gateway.create(self.descriptor.name, payload)
            else:
                saved = await self._gateway.update(self.descriptor.name, self.record_id, payload)
        except ApiError as error:
            self.status = FormStatus.ERROR
            self.error_message = f"Failed to save {self.descriptor.singular}: {error.message}"
            self.field_errors = map_api_validation_errors(error.details)
            log_action(logger, self.descriptor.name, f"form_{self.mode.value}", self._tenant_id, "error", error.message)
            return False
        except AuthenticationError:
            self.status = FormStatus.ERROR
            raise

        self.status = FormStatus.SUCCESS
        self.closed = True
        log_action(logger, self.descriptor.name, f"form_{self.mode.value}", self._tenant_id, "success")
        if self._on_save is not None:
            await self._on_save(saved)
        return True
