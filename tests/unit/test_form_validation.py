import asyncio
import json

import httpx
import pytest

from homealign_console.app.entities import CLIENTS, PATIENTS, REFERRALS, SERVICES
from homealign_console.app.ui.forms import (
    FormMode,
    FormStatus,
    RecordForm,
    ValidationError,
    map_api_validation_errors,
)
from homealign_sdk.http_client import ApiGateway
from homealign_sdk.session import SessionStore

API_BASE = "https://api.test/core-api"


def _gateway(session: SessionStore, handler) -> ApiGateway:
    return ApiGateway(session, client=httpx.AsyncClient(base_url=API_BASE, transport=httpx.MockTransport(handler)))


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request {request.method} {request.url}")


def test_missing_required_fields_never_reach_the_network(session: SessionStore) -> None:
    form = RecordForm(PATIENTS, _gateway(session, _unreachable))
    form.set_field("firstname", "   ")

    saved = asyncio.run(form.submit())

    assert saved is False
    assert form.status is FormStatus.ERROR
    assert form.field_errors == {
        "firstname": "First name is required.",
        "lastname": "Last name is required.",
    }
    assert form.closed is False


def test_build_payload_coerces_by_field_kind(session: SessionStore) -> None:
    form = RecordForm(REFERRALS, _gateway(session, _unreachable))
    form.set_field("patient_id", " 42 ")
    form.set_field("referring_provider_id", "")
    form.set_field("referral_type_id", "not-a-number")
    form.set_field("authorization_required", "TRUE")
    form.set_field("insurance_verification", False)
    form.set_field("due_date", "")

    payload = form.build_payload()

    assert payload["patient_id"] == 42
    assert payload["referring_provider_id"] is None
    assert payload["referral_type_id"] == "not-a-number"
    assert payload["authorization_required"] is True
    assert payload["insurance_verification"] is False
    assert payload["due_date"] is None
    assert form.draft["patient_id"] == " 42 "


def test_service_numbers_and_flags_are_typed(session: SessionStore) -> None:
    form = RecordForm(SERVICES, _gateway(session, _unreachable))
    form.set_field("name", "Telehealth visit")
    form.set_field("duration_minutes", "30")
    form.set_field("price", "")
    form.set_field("telehealth_eligible", "false")

    payload = form.build_payload()

    assert payload["duration_minutes"] == 30
    assert payload["price"] is None
    assert payload["telehealth_eligible"] is False


def test_build_payload_raises_validation_error(session: SessionStore) -> None:
    form = RecordForm(CLIENTS, _gateway(session, _unreachable))

    with pytest.raises(ValidationError) as excinfo:
        form.build_payload()

    assert excinfo.value.field_errors == {"name": "Name is required."}


def test_failed_save_keeps_form_open_with_data(session: SessionStore) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"email": ["Enter a valid email address."]})

    saves: list[object] = []

    async def on_save(saved: object) -> None:
        saves.append(saved)

    form = RecordForm(CLIENTS, _gateway(session, handler), on_save=on_save)
    form.set_field("name", "Acme Health")
    form.set_field("email", "not-an-email")

    assert asyncio.run(form.submit()) is False

    assert form.closed is False
    assert form.status is FormStatus.ERROR
    assert form.error_message == "Failed to save client: HTTP error! status: 400"
    assert form.field_errors == {"email": "Enter a valid email address."}
    assert form.draft["name"] == "Acme Health"
    assert saves == []


def test_edit_puts_to_record_identity_and_calls_on_save(session: SessionStore) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=json.loads(request.content))

    saves: list[object] = []

    async def on_save(saved: object) -> None:
        saves.append(saved)

    original = {"pkclientid": 77, "id": 3, "name": "Acme", "status": "active"}
    form = RecordForm(CLIENTS, _gateway(session, handler), record=original, on_save=on_save)
    form.set_field("status", "inactive")

    assert asyncio.run(form.submit()) is True

    assert form.mode is FormMode.EDIT
    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/core-api/clients/77/"
    assert json.loads(seen[0].content)["status"] == "inactive"
    assert original["status"] == "active"
    assert saves == [json.loads(seen[0].content)]
    assert form.closed is True
    assert asyncio.run(form.submit()) is False
    assert len(seen) == 1


def test_unknown_fields_and_anonymous_records_are_rejected(session: SessionStore) -> None:
    gateway = _gateway(session, _unreachable)

    with pytest.raises(KeyError):
        RecordForm(CLIENTS, gateway).set_field("favourite_colour", "teal")
    with pytest.raises(ValueError):
        RecordForm(CLIENTS, gateway, record={"name": "No id"})


def test_map_api_validation_errors_skips_detail_keys() -> None:
    assert map_api_validation_errors({"detail": "Bad", "name": ["Required"], "npi_number": "Too short"}) == {
        "name": "Required",
        "npi_number": "Too short",
    }
    assert map_api_validation_errors(["noise"]) == {}
