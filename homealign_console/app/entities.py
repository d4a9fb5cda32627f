from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from homealign_sdk.models import RecordId

from homealign_console.app.ui.listing_view import ColumnDef


class FieldKind(str, Enum):
    TEXT = "text"
    DATE = "date"
    CHOICE = "choice"
    BOOL = "bool"
    INTEGER = "integer"
    FOREIGN_KEY = "foreign_key"
    DECIMAL = "decimal"


Choice = tuple[str, str]


@dataclass(frozen=True)
class FieldDef:
    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    default: Any = ""
    choices: tuple[Choice, ...] = ()
    choices_source: str | None = None

    def initial_value(self) -> Any:
        return self.default() if callable(self.default) else self.default


@dataclass(frozen=True)
class FilterDef:
    key: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    choices: tuple[Choice, ...] = ()
    choices_source: str | None = None


@dataclass(frozen=True)
class EntityDescriptor:
    name: str
    singular: str
    label: str
    identity_fields: tuple[str, ...]
    columns: tuple[ColumnDef, ...]
    fields: tuple[FieldDef, ...]
    filters: tuple[FilterDef, ...] = ()
    inline_status_field: str | None = None
    _fields_by_name: dict[str, FieldDef] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._fields_by_name.update({item.name: item for item in self.fields})

    def identity_of(self, record: dict[str, Any]) -> RecordId | None:
        for key in self.identity_fields:
            value = record.get(key)
            if value is not None and value != "":
                return value
        return None

    def defaults(self) -> dict[str, Any]:
        return {item.name: item.initial_value() for item in self.fields}

    @property
    def required_fields(self) -> list[FieldDef]:
        return [item for item in self.fields if item.required]

    def get_field(self, name: str) -> FieldDef:
        return self._fields_by_name[name]

    def has_field(self, name: str) -> bool:
        return name in self._fields_by_name

    @property
    def reference_sources(self) -> set[str]:
        sources = {item.choices_source for item in self.filters if item.choices_source}
        sources.update(item.choices_source for item in self.fields if item.choices_source)
        return sources


def _today() -> str:
    return date.today().isoformat()


def _text(name: str, label: str, required: bool = False) -> FieldDef:
    return FieldDef(name=name, label=label, required=required)


def _choice(name: str, label: str, choices: tuple[Choice, ...], default: str = "") -> FieldDef:
    return FieldDef(name=name, label=label, kind=FieldKind.CHOICE, choices=choices, default=default)


def _flag(name: str, label: str) -> FieldDef:
    return FieldDef(name=name, label=label, kind=FieldKind.BOOL, default=False)


def _options(*values: str) -> tuple[Choice, ...]:
    return tuple((value, value.replace("_", " ").title()) for value in values)


GENDERS: tuple[Choice, ...] = (("M", "Male"), ("F", "Female"), ("O", "Other"))
CLIENT_TYPES = _options("hospital", "clinic", "insurance", "corporate")
CLIENT_STATUSES = _options("active", "inactive", "pending")
PROVIDER_TYPES = _options("individual", "organization", "facility")
SPECIALTIES = _options(
    "primary_care", "cardiology", "orthopedics", "neurology", "oncology", "pediatrics", "psychiatry", "surgery"
)
PROVIDER_STATUSES = _options("active", "inactive", "suspended")
NETWORK_STATUSES = _options("in_network", "out_of_network", "pending")
PRIORITIES = _options("low", "normal", "high", "urgent")
SERVICE_TYPES = _options("medical", "diagnostic", "therapeutic", "preventive", "emergency", "consultation")
SERVICE_CATEGORIES = _options(
    "primary_care", "specialty_care", "urgent_care", "home_health", "telehealth", "mental_health"
)
SERVICE_STATUSES = _options("active", "inactive", "discontinued", "pending_approval")
YES_NO: tuple[Choice, ...] = (("true", "Yes"), ("false", "No"))


PATIENTS = EntityDescriptor(
    name="patients",
    singular="patient",
    label="Members",
    identity_fields=("pkpatientid", "id"),
    columns=(
        ColumnDef("firstname", "First name"),
        ColumnDef("lastname", "Last name"),
        ColumnDef("email", "Email"),
        ColumnDef("phone", "Phone"),
        ColumnDef("dateofbirth", "Born"),
        ColumnDef("gender", "Gender"),
        ColumnDef("medical_record_number", "MRN"),
    ),
    fields=(
        _text("firstname", "First name", required=True),
        _text("lastname", "Last name", required=True),
        _text("email", "Email"),
        _text("phone", "Phone"),
        FieldDef("dateofbirth", "Date of birth", kind=FieldKind.DATE),
        _choice("gender", "Gender", GENDERS),
        _text("address", "Address"),
        _text("city", "City"),
        _text("state", "State"),
        _text("zip_code", "ZIP code"),
        _text("emergency_contact", "Emergency contact"),
        _text("emergency_phone", "Emergency phone"),
        _text("medical_record_number", "Medical record number"),
        _text("insurance_id", "Insurance ID"),
        _text("notes", "Notes"),
    ),
    filters=(
        FilterDef("gender", "Gender", FieldKind.CHOICE, GENDERS),
        FilterDef("age_min", "Min age", FieldKind.INTEGER),
        FilterDef("age_max", "Max age", FieldKind.INTEGER),
        FilterDef("created_after", "Created after", FieldKind.DATE),
    ),
)

CLIENTS = EntityDescriptor(
    name="clients",
    singular="client",
    label="Clients",
    identity_fields=("pkclientid", "id"),
    columns=(
        ColumnDef("name", "Client"),
        ColumnDef("client_type", "Type"),
        ColumnDef("contact_person", "Contact"),
        ColumnDef("email", "Email"),
        ColumnDef("phone", "Phone"),
        ColumnDef("status", "Status"),
    ),
    fields=(
        _text("name", "Name", required=True),
        _choice("client_type", "Client type", CLIENT_TYPES),
        _text("contact_person", "Contact person"),
        _text("email", "Email"),
        _text("phone", "Phone"),
        _text("address", "Address"),
        _text("city", "City"),
        _text("state", "State"),
        _text("zip_code", "ZIP code"),
        _choice("status", "Status", CLIENT_STATUSES, default="active"),
        _text("notes", "Notes"),
    ),
    filters=(
        FilterDef("client_type", "Client type", FieldKind.CHOICE, CLIENT_TYPES),
        FilterDef("status", "Status", FieldKind.CHOICE, CLIENT_STATUSES),
        FilterDef("created_after", "Created after", FieldKind.DATE),
    ),
)

PROVIDERS = EntityDescriptor(
    name="providers",
    singular="provider",
    label="Providers",
    identity_fields=("pkproviderid", "id"),
    columns=(
        ColumnDef("name", "Provider"),
        ColumnDef("specialty", "Specialty"),
        ColumnDef("phone", "Phone"),
        ColumnDef("npi_number", "NPI"),
        ColumnDef("status", "Status"),
        ColumnDef("network_status", "Network"),
    ),
    fields=(
        _text("name", "Name", required=True),
        _choice("provider_type", "Provider type", PROVIDER_TYPES, default="individual"),
        _text("first_name", "First name"),
        _text("last_name", "Last name"),
        _text("title", "Title"),
        _choice("specialty", "Specialty", SPECIALTIES),
        _text("subspecialty", "Subspecialty"),
        _text("npi_number", "NPI number"),
        _text("license_number", "License number"),
        _text("license_state", "License state"),
        _text("dea_number", "DEA number"),
        _text("tax_id", "Tax ID"),
        _text("phone", "Phone"),
        _text("fax", "Fax"),
        _text("email", "Email"),
        _text("practice_name", "Practice name"),
        _text("practice_address", "Practice address"),
        _text("practice_city", "Practice city"),
        _text("practice_state", "Practice state"),
        _text("practice_zip", "Practice ZIP"),
        _text("billing_address", "Billing address"),
        _text("billing_city", "Billing city"),
        _text("billing_state", "Billing state"),
        _text("billing_zip", "Billing ZIP"),
        _choice("status", "Status", PROVIDER_STATUSES, default="active"),
        _choice("network_status", "Network status", NETWORK_STATUSES, default="in_network"),
        FieldDef("contract_start_date", "Contract start", kind=FieldKind.DATE),
        FieldDef("contract_end_date", "Contract end", kind=FieldKind.DATE),
        _text("notes", "Notes"),
    ),
    filters=(
        FilterDef("provider_type", "Provider type", FieldKind.CHOICE, PROVIDER_TYPES),
        FilterDef("specialty", "Specialty", FieldKind.CHOICE, SPECIALTIES),
        FilterDef("status", "Status", FieldKind.CHOICE, PROVIDER_STATUSES),
        FilterDef("network_status", "Network status", FieldKind.CHOICE, NETWORK_STATUSES),
    ),
)

REFERRALS = EntityDescriptor(
    name="referrals",
    singular="referral",
    label="Referrals",
    identity_fields=("pkreferralid", "id"),
    columns=(
        ColumnDef("patient_name", "Patient"),
        ColumnDef("referral_type_name", "Type"),
        ColumnDef("referring_provider_name", "From"),
        ColumnDef("referred_to_provider_name", "To"),
        ColumnDef("status_name", "Status"),
        ColumnDef("priority", "Priority"),
        ColumnDef("due_date", "Due"),
    ),
    fields=(
        FieldDef("patient_id", "Patient ID", kind=FieldKind.FOREIGN_KEY, required=True),
        FieldDef("referring_provider_id", "Referring provider ID", kind=FieldKind.FOREIGN_KEY),
        FieldDef("referred_to_provider_id", "Referred-to provider ID", kind=FieldKind.FOREIGN_KEY),
        FieldDef("referral_type_id", "Referral type", kind=FieldKind.FOREIGN_KEY, choices_source="referral-types"),
        FieldDef("status_id", "Status", kind=FieldKind.FOREIGN_KEY, choices_source="referral-status"),
        _choice("priority", "Priority", PRIORITIES, default="normal"),
        _text("reason", "Reason"),
        _text("notes", "Notes"),
        FieldDef("referral_date", "Referral date", kind=FieldKind.DATE, default=_today),
        FieldDef("appointment_date", "Appointment date", kind=FieldKind.DATE),
        FieldDef("due_date", "Due date", kind=FieldKind.DATE),
        _text("diagnosis_code", "Diagnosis code"),
        _text("service_requested", "Service requested"),
        _flag("authorization_required", "Authorization required"),
        _text("authorization_number", "Authorization number"),
        _flag("insurance_verification", "Insurance verified"),
        _text("clinical_summary", "Clinical summary"),
    ),
    filters=(
        FilterDef("referral_type", "Referral type", FieldKind.CHOICE, choices_source="referral-types"),
        FilterDef("status", "Status", FieldKind.CHOICE, choices_source="referral-status"),
        FilterDef("priority", "Priority", FieldKind.CHOICE, PRIORITIES),
        FilterDef("created_after", "Created after", FieldKind.DATE),
        FilterDef("due_before", "Due before", FieldKind.DATE),
    ),
    inline_status_field="status",
)

SERVICES = EntityDescriptor(
    name="services",
    singular="service",
    label="Services",
    identity_fields=("pkserviceid", "id"),
    columns=(
        ColumnDef("name", "Service"),
        ColumnDef("service_type", "Type"),
        ColumnDef("category", "Category"),
        ColumnDef("cpt_code", "CPT"),
        ColumnDef("price", "Price"),
        ColumnDef("requires_authorization", "Auth"),
        ColumnDef("status", "Status"),
    ),
    fields=(
        _text("name", "Name", required=True),
        _text("description", "Description"),
        _choice("service_type", "Service type", SERVICE_TYPES, default="medical"),
        _choice("category", "Category", SERVICE_CATEGORIES, default="primary_care"),
        _text("service_code", "Service code"),
        _text("cpt_code", "CPT code"),
        _text("hcpcs_code", "HCPCS code"),
        FieldDef("price", "Price", kind=FieldKind.DECIMAL),
        FieldDef("duration_minutes", "Duration (minutes)", kind=FieldKind.INTEGER),
        _flag("requires_authorization", "Requires authorization"),
        _flag("requires_referral", "Requires referral"),
        _flag("telehealth_eligible", "Telehealth eligible"),
        _choice("status", "Status", SERVICE_STATUSES, default="active"),
        _text("provider_instructions", "Provider instructions"),
        _text("patient_instructions", "Patient instructions"),
        _text("prerequisites", "Prerequisites"),
        _text("contraindications", "Contraindications"),
        _text("billing_code", "Billing code"),
        _text("revenue_code", "Revenue code"),
        _text("modifier_codes", "Modifier codes"),
        FieldDef("unit_of_measure", "Unit of measure", default="visit"),
        FieldDef("max_units_per_day", "Max units per day", kind=FieldKind.INTEGER),
        _text("frequency_limit", "Frequency limit"),
        _text("age_restrictions", "Age restrictions"),
        _text("gender_restrictions", "Gender restrictions"),
        _text("notes", "Notes"),
    ),
    filters=(
        FilterDef("service_type", "Service type", FieldKind.CHOICE, SERVICE_TYPES),
        FilterDef("category", "Category", FieldKind.CHOICE, SERVICE_CATEGORIES),
        FilterDef("status", "Status", FieldKind.CHOICE, SERVICE_STATUSES),
        FilterDef("requires_authorization", "Requires authorization", FieldKind.BOOL, YES_NO),
        FilterDef("price_min", "Min price", FieldKind.DECIMAL),
        FilterDef("price_max", "Max price", FieldKind.DECIMAL),
    ),
)

ENTITIES: tuple[EntityDescriptor, ...] = (PATIENTS, CLIENTS, PROVIDERS, REFERRALS, SERVICES)
_BY_NAME: dict[str, EntityDescriptor] = {descriptor.name: descriptor for descriptor in ENTITIES}


def get_descriptor(name: str) -> EntityDescriptor:
    try:
        return _BY_NAME[name]
    except KeyError:
        raise KeyError(f"Unknown entity: {name}") from None


def reference_choices(rows: list[dict[str, Any]], value_key: str = "id", label_key: str = "name") -> tuple[Choice, ...]:
    return tuple(
        (str(row[value_key]), str(row.get(label_key) or row[value_key]))
        for row in rows
        if row.get(value_key) is not None
    )
