"""Shared builders for charge aggregates and claim records."""

from datetime import date, datetime, timezone

import pytest

from claim_engine.config import EngineConfig
from claim_engine.schemas import (
    Address,
    ChargeAggregate,
    ChargeRecord,
    ClaimRecord,
    PatientRecord,
    PersonName,
    ProviderBlock,
    ProviderRecord,
    ServiceLine,
)


def _make_charge(charge_id: str = "chg-001", **overrides) -> ChargeRecord:
    data = {
        "id": charge_id,
        "provider_id": "prov-001",
        "patient_id": "pat-001",
        "procedure_code": "90834",
        "modifiers": ["GT"],
        "diagnosis_codes": ["F32.9", "F41.1"],
        "diagnosis_pointers": ["A", "B"],
        "units": 1,
        "rendering_provider_identifier": "1234567890",
        "billing_provider_identifier": "1234567890",
        "billing_tax_identifier": "12-3456789",
        "charge_amount": 150.00,
        "date_of_service": date(2024, 3, 1),
        "created_at": datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return ChargeRecord(**data)


def _make_patient(**overrides) -> PatientRecord:
    data = {
        "id": "pat-001",
        "name": PersonName(first_name="Sarah", last_name="Johnson"),
        "date_of_birth": date(1985, 6, 15),
        "address": Address(
            street="123 Main St", city="Springfield", state="IL", zip_code="62701"
        ),
        "phone": "555-123-4567",
        "insurance_identifier": "INS123456",
    }
    data.update(overrides)
    return PatientRecord(**data)


def _make_provider(**overrides) -> ProviderRecord:
    data = {
        "id": "prov-001",
        "name": PersonName(first_name="Emily", last_name="Chen"),
        "organization": "Serenity Mental Health Clinic",
        "identifier": "1234567890",
        "tax_identifier": "12-3456789",
        "address": Address(
            street="456 Oak Ave", city="Springfield", state="IL", zip_code="62702"
        ),
        "phone": "555-987-6543",
    }
    data.update(overrides)
    return ProviderRecord(**data)


def _make_aggregate(
    charge: ChargeRecord | None = None,
    related_charges: list[ChargeRecord] | None = None,
    patient: PatientRecord | None = None,
    provider: ProviderRecord | None = None,
) -> ChargeAggregate:
    return ChargeAggregate(
        charge=charge or _make_charge(),
        patient=patient or _make_patient(),
        provider=provider or _make_provider(),
        related_charges=related_charges or [],
    )


def _make_line(**overrides) -> ServiceLine:
    data = {
        "date_of_service_from": date(2024, 3, 1),
        "date_of_service_to": date(2024, 3, 1),
        "place_of_service_code": "11",
        "procedure_code": "90834",
        "modifiers": ["GT"],
        "diagnosis_pointers": ["A"],
        "units": 1,
        "charge_amount": 150.00,
        "rendering_provider_identifier": "1234567890",
    }
    data.update(overrides)
    return ServiceLine(**data)


def _make_record(**overrides) -> ClaimRecord:
    """A structurally valid, scrub-clean claim record."""
    data = {
        "insured_identifier": "INS123456",
        "patient_name": "Johnson, Sarah",
        "patient_date_of_birth": date(1985, 6, 15),
        "insured_name": "Johnson, Sarah",
        "patient_street": "123 Main St",
        "patient_city": "Springfield",
        "patient_state": "IL",
        "patient_zip_code": "62701",
        "signature_on_file": True,
        "signature_date": date(2024, 3, 1),
        "diagnosis_codes": ["F32.9", "F41.1"],
        "service_lines": [_make_line()],
        "rendering_provider": ProviderBlock(
            name="Chen, Emily", identifier="1234567890"
        ),
        "billing_provider": ProviderBlock(
            name="Serenity Mental Health Clinic",
            identifier="1234567890",
            tax_identifier="12-3456789",
        ),
        "patient_account_number": "pat-001",
        "total_charge": 150.00,
        "amount_paid": 0.0,
        "balance_due": 150.00,
    }
    data.update(overrides)
    return ClaimRecord(**data)


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def make_charge():
    return _make_charge


@pytest.fixture
def make_patient():
    return _make_patient


@pytest.fixture
def make_provider():
    return _make_provider


@pytest.fixture
def make_aggregate():
    return _make_aggregate


@pytest.fixture
def make_line():
    return _make_line


@pytest.fixture
def make_record():
    return _make_record
