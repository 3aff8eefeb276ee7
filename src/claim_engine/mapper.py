"""Map upstream charge, patient and provider records onto a CMS-1500 claim record."""

import logging

from .config import EngineConfig, get_config
from .schemas.charge import ChargeAggregate, ChargeRecord, PatientRecord, ProviderRecord
from .schemas.cms1500 import (
    ClaimRecord,
    ProviderBlock,
    RelationshipToInsured,
    ServiceLine,
    format_city_state_zip,
)
from .schemas.common import Address, PersonName

logger = logging.getLogger(__name__)


def map_charge_to_claim(
    aggregate: ChargeAggregate,
    include_patient_name: bool = True,
    config: EngineConfig | None = None,
) -> ClaimRecord:
    """Build a claim record from a charge aggregate.

    The primary charge supplies claim-level fields (diagnosis codes,
    authorization, assignment, totals); it and every related charge become
    one service line each. With ``include_patient_name=False`` the patient,
    insured and other insured names are all reduced to initials.
    """
    config = config or get_config()
    charge = aggregate.charge
    patient = aggregate.patient
    provider = aggregate.provider

    service_lines = [
        _map_service_line(c, provider, config.mapping.default_place_of_service_code)
        for c in aggregate.charges
    ]
    line_total = round(sum(line.charge_amount for line in service_lines), 2)
    total_charge = charge.claim_total if charge.claim_total is not None else line_total
    amount_paid = charge.amount_paid or 0.0

    patient_name = format_person_name(patient.name)
    insured_name = _insured_name(patient)
    other_insured_name = (
        format_person_name(patient.other_insured_name)
        if patient.other_insured_name
        else None
    )
    if not include_patient_name:
        patient_name = to_initials(patient_name)
        insured_name = to_initials(insured_name) if insured_name else insured_name
        if other_insured_name:
            other_insured_name = to_initials(other_insured_name)

    patient_address = patient.address or Address()
    insured_address = _insured_address(patient)

    signature_date = None
    if charge.signature_on_file:
        signature_date = charge.signature_date or service_lines[0].date_of_service_from

    record = ClaimRecord(
        insured_identifier=patient.insurance_identifier,
        patient_name=patient_name,
        patient_date_of_birth=patient.date_of_birth,
        insured_name=insured_name,
        patient_street=patient_address.street,
        patient_city=patient_address.city,
        patient_state=patient_address.state,
        patient_zip_code=patient_address.zip_code,
        patient_phone=patient.phone,
        relationship_to_insured=patient.relationship_to_insured,
        insured_street=insured_address.street,
        insured_city_state_zip=flatten_city_state_zip(insured_address),
        insured_phone=_insured_phone(patient),
        other_insured_name=other_insured_name,
        other_insured_group_number=patient.other_insured_group_number,
        employer_name=patient.employer_name,
        insurance_plan_name=patient.insurance_plan_name,
        signature_on_file=charge.signature_on_file,
        signature_date=signature_date,
        date_of_current_illness=(
            charge.date_of_current_illness or service_lines[0].date_of_service_from
        ),
        prior_authorization_number=charge.prior_authorization_number,
        diagnosis_codes=list(charge.diagnosis_codes),
        service_lines=service_lines,
        rendering_provider=_rendering_provider_block(charge, provider),
        billing_provider=_billing_provider_block(charge, provider),
        patient_account_number=patient.id,
        accept_assignment=charge.accept_assignment,
        total_charge=total_charge,
        amount_paid=amount_paid,
        balance_due=round(total_charge - amount_paid, 2),
    )

    logger.debug(
        "Mapped charge %s to claim record with %d service lines",
        charge.id,
        len(service_lines),
    )
    return record


def format_person_name(name: PersonName) -> str:
    """Format a name as ``"Last, First"`` or ``"Last, First M"``."""
    given = name.first_name.strip()
    if name.middle_name and name.middle_name.strip():
        given = f"{given} {name.middle_name.strip()[0].upper()}"
    return f"{name.last_name.strip()}, {given}"


def to_initials(formatted_name: str) -> str:
    """Reduce a ``"Last, First [Middle]"`` name to initials in reading order.

    ``"Johnson, Sarah"`` becomes ``"S.J."``; one initial is produced per
    name part.
    """
    last, _, given = formatted_name.partition(",")
    parts = [*given.split(), *last.split()]
    return "".join(f"{part[0].upper()}." for part in parts)


def flatten_address(address: Address | None) -> tuple[str, str]:
    """Flatten an address into a street line and a ``"City, ST ZIP"`` line."""
    if address is None:
        return "", ""
    return address.street or "", flatten_city_state_zip(address)


def flatten_city_state_zip(address: Address) -> str:
    return format_city_state_zip(address.city, address.state, address.zip_code)


def _map_service_line(
    charge: ChargeRecord, provider: ProviderRecord, default_pos: str
) -> ServiceLine:
    service_date = charge.date_of_service or charge.created_at.date()
    return ServiceLine(
        date_of_service_from=service_date,
        date_of_service_to=charge.date_of_service_to or service_date,
        place_of_service_code=charge.place_of_service_code or default_pos,
        procedure_code=charge.procedure_code,
        modifiers=list(charge.modifiers),
        diagnosis_pointers=list(charge.diagnosis_pointers),
        units=charge.units,
        charge_amount=charge.charge_amount,
        rendering_provider_identifier=(
            charge.rendering_provider_identifier or provider.identifier
        ),
    )


def _insured_name(patient: PatientRecord) -> str | None:
    if patient.relationship_to_insured == RelationshipToInsured.SELF:
        return format_person_name(patient.name)
    if patient.insured_name is None:
        return None
    return format_person_name(patient.insured_name)


def _insured_address(patient: PatientRecord) -> Address:
    if patient.relationship_to_insured == RelationshipToInsured.SELF:
        return patient.address or Address()
    return patient.insured_address or Address()


def _insured_phone(patient: PatientRecord) -> str | None:
    if patient.relationship_to_insured == RelationshipToInsured.SELF:
        return patient.phone
    return patient.insured_phone


def _rendering_provider_block(
    charge: ChargeRecord, provider: ProviderRecord
) -> ProviderBlock:
    street, city_state_zip = flatten_address(provider.address)
    return ProviderBlock(
        name=format_person_name(provider.name),
        identifier=charge.rendering_provider_identifier or provider.identifier,
        street=street,
        city_state_zip=city_state_zip,
        phone=provider.phone,
    )


def _billing_provider_block(
    charge: ChargeRecord, provider: ProviderRecord
) -> ProviderBlock:
    street, city_state_zip = flatten_address(provider.address)
    identifier = (
        charge.billing_provider_identifier
        or provider.billing_identifier
        or charge.rendering_provider_identifier
        or provider.identifier
    )
    return ProviderBlock(
        name=provider.organization or format_person_name(provider.name),
        identifier=identifier,
        tax_identifier=charge.billing_tax_identifier or provider.tax_identifier,
        street=street,
        city_state_zip=city_state_zip,
        phone=provider.phone,
    )
