"""Structural validation of a complete claim record.

Every check runs on every call and all findings are collected, so a caller
gets the full correction list for a claim in one pass.
"""

from ..config import ReferenceDataConfig, get_config
from ..schemas.cms1500 import ClaimRecord, ServiceLine
from ..schemas.common import ValidationResult
from .field_formats import (
    is_absent,
    missing_fields,
    validate_diagnosis_pointers,
    validate_modifiers,
    validate_procedure_code,
    validate_provider_identifier,
    validate_tax_identifier,
    validate_units,
)

TOLERANCE = 0.01
MAX_DIAGNOSIS_CODES = 12


def validate_claim_record(
    record: ClaimRecord, reference: ReferenceDataConfig | None = None
) -> ValidationResult:
    """Run all structural checks on a claim record.

    Checks:
    - required_field: identity, address, provider and tax id fields (Boxes 1a-5, 24J, 25, 33a)
    - provider_identifier_format / tax_identifier_format: NPI and TIN shapes
    - service_lines_present: at least one service line (Box 24)
    - service_line_*: per-line date, place of service, procedure, modifiers,
      diagnosis pointers, units, rendering NPI and charge amount
    - diagnosis_code_count: at most 12 diagnosis codes (Box 21)
    - total_charge_mismatch: line charges must sum to the total charge (Box 28)
    - balance_due_mismatch: total charge minus amount paid must equal balance due (Box 30)
    """
    reference = reference or get_config().reference_data
    result = ValidationResult()

    _check_required_fields(record, result)
    _check_provider_formats(record, result)
    _check_diagnosis_codes(record, result)

    if not record.service_lines:
        result.add_error(
            "service_lines_present",
            "at least one service line is required (Box 24)",
            recommendation="Add the billed service to the claim",
        )
    for index, line in enumerate(record.service_lines, start=1):
        _check_service_line(line, index, record, reference, result)

    _check_totals(record, result)

    return result


def _check_required_fields(record: ClaimRecord, result: ValidationResult) -> None:
    required = [
        ("insured ID number (Box 1a)", record.insured_identifier),
        ("patient name (Box 2)", record.patient_name),
        ("insured name (Box 4)", record.insured_name),
        ("patient street address (Box 5)", record.patient_street),
        ("patient city (Box 5)", record.patient_city),
        ("patient state (Box 5)", record.patient_state),
        ("patient ZIP code (Box 5)", record.patient_zip_code),
        ("rendering provider NPI", record.rendering_provider.identifier),
        ("billing provider NPI (Box 33a)", record.billing_provider.identifier),
        ("billing provider TIN (Box 25)", record.billing_provider.tax_identifier),
    ]
    for label in missing_fields(required):
        result.add_error("required_field", f"{label} is required")

    if record.patient_date_of_birth is None:
        result.add_error("required_field", "patient date of birth (Box 3) is required")


def _check_provider_formats(record: ClaimRecord, result: ValidationResult) -> None:
    for error in validate_provider_identifier(
        record.rendering_provider.identifier, "rendering provider NPI"
    ):
        result.add_error(
            "provider_identifier_format",
            error,
            recommendation="Enter the NPI without spaces or dashes (e.g., 1234567890)",
        )
    for error in validate_provider_identifier(
        record.billing_provider.identifier, "billing provider NPI"
    ):
        result.add_error(
            "provider_identifier_format",
            error,
            recommendation="Enter the NPI without spaces or dashes (e.g., 1234567890)",
        )
    for error in validate_tax_identifier(record.billing_provider.tax_identifier):
        result.add_error(
            "tax_identifier_format",
            f"billing provider {error}",
            recommendation="Enter the TIN with its hyphen (e.g., 12-3456789)",
        )


def _check_diagnosis_codes(record: ClaimRecord, result: ValidationResult) -> None:
    if len(record.diagnosis_codes) > MAX_DIAGNOSIS_CODES:
        result.add_error(
            "diagnosis_code_count",
            f"a maximum of {MAX_DIAGNOSIS_CODES} diagnosis codes is allowed (Box 21)",
        )


def _check_service_line(
    line: ServiceLine,
    index: int,
    record: ClaimRecord,
    reference: ReferenceDataConfig,
    result: ValidationResult,
) -> None:
    prefix = f"Service line {index}"

    if line.date_of_service_from is None:
        result.add_error("service_line_date", f"{prefix}: date of service is required")
    elif (
        line.date_of_service_to is not None
        and line.date_of_service_to < line.date_of_service_from
    ):
        result.add_error(
            "service_line_date",
            f"{prefix}: date of service 'to' is before 'from'",
        )

    if is_absent(line.place_of_service_code):
        result.add_error(
            "service_line_place_of_service",
            f"{prefix}: place of service is required",
            recommendation="Add a POS code (e.g., 11 for Office)",
        )

    for error in validate_procedure_code(
        line.procedure_code, reference.approved_procedure_codes
    ):
        result.add_error("service_line_procedure_code", f"{prefix}: {error}")

    for error in validate_modifiers(line.modifiers, reference.approved_modifiers):
        result.add_error("service_line_modifiers", f"{prefix}: {error}")

    for error in validate_diagnosis_pointers(
        line.diagnosis_pointers, diagnosis_count=len(record.diagnosis_codes)
    ):
        result.add_error("service_line_diagnosis_pointers", f"{prefix}: {error}")

    for error in validate_units(line.units):
        result.add_error("service_line_units", f"{prefix}: {error}")

    if is_absent(line.rendering_provider_identifier):
        result.add_error(
            "service_line_rendering_provider",
            f"{prefix}: rendering provider NPI is required",
        )
    else:
        for error in validate_provider_identifier(
            line.rendering_provider_identifier, "rendering provider NPI"
        ):
            result.add_error("service_line_rendering_provider", f"{prefix}: {error}")

    if line.charge_amount <= 0:
        result.add_error(
            "service_line_charge_amount",
            f"{prefix}: charge amount must be greater than 0",
        )


def _check_totals(record: ClaimRecord, result: ValidationResult) -> None:
    if record.service_lines:
        line_sum = sum(line.charge_amount for line in record.service_lines)
        if _exceeds_tolerance(line_sum, record.total_charge):
            result.add_error(
                "total_charge_mismatch",
                f"total charge ${record.total_charge:.2f} does not match sum of "
                f"service line charges ${line_sum:.2f}",
                recommendation="Correct the upstream charge record before generating the claim",
            )

    expected_balance = record.total_charge - record.amount_paid
    if _exceeds_tolerance(expected_balance, record.balance_due):
        result.add_error(
            "balance_due_mismatch",
            f"balance due ${record.balance_due:.2f} does not equal total charge "
            f"${record.total_charge:.2f} minus amount paid ${record.amount_paid:.2f}",
        )


def _exceeds_tolerance(a: float, b: float) -> bool:
    # Rounded to cents so a one-cent difference is not lost to float error
    return round(abs(a - b), 2) > TOLERANCE
