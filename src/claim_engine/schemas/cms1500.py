"""CMS-1500 professional claim record."""

from datetime import date
from enum import Enum

from pydantic import BaseModel


class RelationshipToInsured(str, Enum):
    """Box 6: patient relationship to insured."""

    SELF = "SELF"
    SPOUSE = "SPOUSE"
    CHILD = "CHILD"
    OTHER = "OTHER"


class ServiceLine(BaseModel):
    """Service line from CMS-1500 Box 24."""

    date_of_service_from: date | None = None
    date_of_service_to: date | None = None
    place_of_service_code: str | None = None
    procedure_code: str | None = None
    modifiers: list[str] = []
    diagnosis_pointers: list[str] = []
    units: int = 1
    charge_amount: float = 0.0
    rendering_provider_identifier: str | None = None


class ProviderBlock(BaseModel):
    """Rendering provider (Box 24J/32) or billing provider (Box 25/33)."""

    name: str | None = None
    identifier: str | None = None
    tax_identifier: str | None = None
    street: str | None = None
    city_state_zip: str | None = None
    phone: str | None = None


class ClaimRecord(BaseModel):
    """CMS-1500 professional claim, flattened and ready to validate and render.

    Person names are already formatted (``"Last, First"`` or initials) and
    addresses flattened to a street line plus a ``"City, ST ZIP"`` line.
    """

    # Boxes 1-7
    insured_identifier: str | None = None
    patient_name: str | None = None
    patient_date_of_birth: date | None = None
    insured_name: str | None = None
    patient_street: str | None = None
    patient_city: str | None = None
    patient_state: str | None = None
    patient_zip_code: str | None = None
    patient_phone: str | None = None
    relationship_to_insured: RelationshipToInsured = RelationshipToInsured.SELF
    insured_street: str | None = None
    insured_city_state_zip: str | None = None
    insured_phone: str | None = None

    # Boxes 9-14
    other_insured_name: str | None = None
    other_insured_group_number: str | None = None
    employer_name: str | None = None
    insurance_plan_name: str | None = None
    signature_on_file: bool = False
    signature_date: date | None = None
    date_of_current_illness: date | None = None

    # Boxes 21-24
    prior_authorization_number: str | None = None
    diagnosis_codes: list[str] = []
    service_lines: list[ServiceLine] = []

    # Boxes 25-33
    rendering_provider: ProviderBlock = ProviderBlock()
    billing_provider: ProviderBlock = ProviderBlock()
    patient_account_number: str | None = None
    accept_assignment: bool = True
    total_charge: float = 0.0
    amount_paid: float = 0.0
    balance_due: float = 0.0

    @property
    def patient_city_state_zip(self) -> str:
        return format_city_state_zip(
            self.patient_city, self.patient_state, self.patient_zip_code
        )


def format_city_state_zip(
    city: str | None, state: str | None, zip_code: str | None
) -> str:
    """Format ``"City, ST ZIP"``, skipping missing parts."""
    locality = ", ".join(part for part in (city, state) if part)
    return " ".join(part for part in (locality, zip_code) if part)
