"""Upstream charge, patient and provider records.

These are owned by the external persistence layer. The engine reads them to
build a claim record and never mutates them.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel

from .cms1500 import RelationshipToInsured
from .common import Address, PersonName


class ChargeStatus(str, Enum):
    """Lifecycle status of an upstream charge."""

    DRAFT = "DRAFT"
    READY_FOR_EXPORT = "READY_FOR_EXPORT"
    EXPORTED = "EXPORTED"
    SUBMITTED = "SUBMITTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    PAID = "PAID"


# Statuses for which no claim document may be produced
NON_EXPORTABLE_STATUSES = frozenset({ChargeStatus.DRAFT})


class ChargeRecord(BaseModel):
    """A single billable service charge."""

    id: str
    provider_id: str | None = None
    patient_id: str | None = None
    procedure_code: str | None = None
    modifiers: list[str] = []
    diagnosis_codes: list[str] = []
    diagnosis_pointers: list[str] = []
    units: int = 1
    place_of_service_code: str | None = None
    rendering_provider_identifier: str | None = None
    billing_provider_identifier: str | None = None
    billing_tax_identifier: str | None = None
    charge_amount: float
    accept_assignment: bool = True
    signature_on_file: bool = True
    signature_date: date | None = None
    prior_authorization_number: str | None = None
    date_of_current_illness: date | None = None
    date_of_service: date | None = None
    date_of_service_to: date | None = None
    created_at: datetime
    claim_total: float | None = None
    amount_paid: float = 0.0
    status: ChargeStatus = ChargeStatus.READY_FOR_EXPORT


class PatientRecord(BaseModel):
    """Patient demographics and coverage."""

    id: str
    name: PersonName
    date_of_birth: date | None = None
    address: Address | None = None
    phone: str | None = None
    insurance_identifier: str | None = None
    relationship_to_insured: RelationshipToInsured = RelationshipToInsured.SELF
    insured_name: PersonName | None = None
    insured_address: Address | None = None
    insured_phone: str | None = None
    other_insured_name: PersonName | None = None
    other_insured_group_number: str | None = None
    employer_name: str | None = None
    insurance_plan_name: str | None = None


class ProviderRecord(BaseModel):
    """Rendering provider and, by default, the billing entity."""

    id: str
    name: PersonName
    organization: str | None = None
    identifier: str | None = None
    billing_identifier: str | None = None
    tax_identifier: str | None = None
    address: Address | None = None
    phone: str | None = None


class ChargeAggregate(BaseModel):
    """A charge with its linked patient and provider.

    ``related_charges`` are further services for the same patient and
    provider billed on the same claim form; each becomes an additional
    service line after the primary charge.
    """

    charge: ChargeRecord
    patient: PatientRecord
    provider: ProviderRecord
    related_charges: list[ChargeRecord] = []

    @property
    def charges(self) -> list[ChargeRecord]:
        return [self.charge, *self.related_charges]
