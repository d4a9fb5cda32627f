from datetime import date

import pytest

from homealign_console.app.entities import (
    CLIENTS,
    ENTITIES,
    PATIENTS,
    REFERRALS,
    SERVICES,
    FieldKind,
    get_descriptor,
    reference_choices,
)


def test_identity_prefers_domain_key_and_falls_back_to_id() -> None:
    assert PATIENTS.identity_of({"pkpatientid": 41, "id": 9}) == 41
    assert PATIENTS.identity_of({"pkpatientid": None, "id": 9}) == 9
    assert CLIENTS.identity_of({"pkclientid": "C-7"}) == "C-7"
    assert CLIENTS.identity_of({"name": "Acme"}) is None


def test_defaults_are_fresh_per_call() -> None:
    first = SERVICES.defaults()
    first["status"] = "inactive"

    second = SERVICES.defaults()

    assert second["status"] == "active"
    assert second["unit_of_measure"] == "visit"
    assert second["requires_authorization"] is False


def test_referral_defaults_date_to_today() -> None:
    defaults = REFERRALS.defaults()

    assert defaults["referral_date"] == date.today().isoformat()
    assert defaults["priority"] == "normal"
    assert defaults["authorization_required"] is False


def test_required_fields_per_entity() -> None:
    required = {descriptor.name: [item.name for item in descriptor.required_fields] for descriptor in ENTITIES}

    assert required == {
        "patients": ["firstname", "lastname"],
        "clients": ["name"],
        "providers": ["name"],
        "referrals": ["patient_id"],
        "services": ["name"],
    }


def test_referrals_pull_choices_from_reference_lists() -> None:
    assert REFERRALS.reference_sources == {"referral-types", "referral-status"}
    assert REFERRALS.get_field("patient_id").kind is FieldKind.FOREIGN_KEY
    assert PATIENTS.reference_sources == set()


def test_unknown_entity_raises_key_error() -> None:
    assert get_descriptor("providers").singular == "provider"
    with pytest.raises(KeyError):
        get_descriptor("invoices")


def test_reference_choices_use_id_and_name() -> None:
    rows = [{"id": 1, "name": "Open"}, {"id": 2}, {"name": "orphan"}]

    assert reference_choices(rows) == (("1", "Open"), ("2", "2"))
