"""Compliance scrub: advisory billing-quality checks.

Scrub findings are always warnings. They flag claims for human review but
never block document generation; only structural validation does that.
"""

import re

from ..config import ReferenceDataConfig, get_config
from ..schemas.cms1500 import ClaimRecord, ServiceLine
from ..schemas.common import ValidationResult

DIAGNOSIS_CODE_PATTERN = re.compile(r"^[A-Z]\d{2}(\.\d{1,4})?$")


def scrub_claim_record(
    record: ClaimRecord, reference: ReferenceDataConfig | None = None
) -> ValidationResult:
    """Run all compliance scrub checks on a claim record.

    Checks:
    - uncommon_procedure_code: procedure outside the common reference subset
    - telehealth_modifier_mismatch: telehealth modifier on a procedure not billed via telehealth
    - diagnosis_code_format: diagnosis code not in ICD-10 shape
    - single_encounter_units: more than one unit on a single-encounter procedure
    - high_unit_count: unit count above the configured threshold
    - charge_below_minimum: charge under the configured minimum amount
    - unusual_charge_amount: charge outside the typical range for the procedure
    - missing_prior_authorization: high-value service without a prior auth number
    - uncommon_place_of_service: POS code outside the common list
    """
    reference = reference or get_config().reference_data
    result = ValidationResult()

    for code in record.diagnosis_codes:
        if not DIAGNOSIS_CODE_PATTERN.fullmatch(code or ""):
            result.add_warning(
                "diagnosis_code_format",
                f"Diagnosis code {code} may not be valid ICD-10 format",
                recommendation="Verify the code against the current ICD-10-CM code set (e.g., F32.9)",
            )

    for index, line in enumerate(record.service_lines, start=1):
        _scrub_service_line(line, index, reference, result)

    _check_prior_authorization(record, reference, result)

    return result


def _scrub_service_line(
    line: ServiceLine,
    index: int,
    reference: ReferenceDataConfig,
    result: ValidationResult,
) -> None:
    prefix = f"Service line {index}"
    code = line.procedure_code

    if code and code not in reference.common_procedure_codes:
        result.add_warning(
            "uncommon_procedure_code",
            f"{prefix}: CPT code {code} is not a standard therapy code",
            recommendation="Confirm the procedure code is billable for this service domain",
        )

    for modifier in line.modifiers:
        if (
            modifier in reference.telehealth_modifiers
            and code not in reference.telehealth_procedure_codes
        ):
            result.add_warning(
                "telehealth_modifier_mismatch",
                f"{prefix}: {modifier} modifier is not typically billed with CPT code {code}",
                recommendation="Telehealth modifiers are typically used with individual therapy codes",
            )

    if line.units > 1 and code in reference.single_encounter_procedure_codes:
        result.add_warning(
            "single_encounter_units",
            f"{prefix}: CPT code {code} is typically billed as 1 unit per session "
            f"but has {line.units} units",
            recommendation="Bill one unit per session or split into separate dates of service",
        )

    if line.units > reference.high_unit_threshold:
        result.add_warning(
            "high_unit_count",
            f"{prefix}: unusually high unit count ({line.units})",
            recommendation="Verify units are correct and consider splitting if appropriate",
        )

    if line.charge_amount < reference.minimum_charge_amount:
        result.add_warning(
            "charge_below_minimum",
            f"{prefix}: charge ${line.charge_amount:.2f} is below the minimum of "
            f"${reference.minimum_charge_amount:.2f}",
            recommendation="Verify the charge amount; nominal charges are usually entry errors",
        )

    typical_range = reference.charge_range(code)
    if typical_range is not None:
        low, high = typical_range
        if line.charge_amount < low or line.charge_amount > high:
            result.add_warning(
                "unusual_charge_amount",
                f"{prefix}: charge ${line.charge_amount:.2f} is outside the typical "
                f"range for {code} (${low:.2f}-${high:.2f})",
                recommendation="Verify the charge amount is correct",
            )

    pos = line.place_of_service_code
    if pos and pos not in reference.common_place_of_service_codes:
        result.add_warning(
            "uncommon_place_of_service",
            f"{prefix}: place of service {pos} is uncommon for behavioral health services",
            recommendation="Use 11 (Office), 02 (Telehealth), 53 (Community Mental Health Center) or another valid POS code",
        )


def _check_prior_authorization(
    record: ClaimRecord, reference: ReferenceDataConfig, result: ValidationResult
) -> None:
    if record.prior_authorization_number:
        return
    high_value = [
        index
        for index, line in enumerate(record.service_lines, start=1)
        if line.charge_amount > reference.prior_authorization_threshold
    ]
    for index in high_value:
        result.add_warning(
            "missing_prior_authorization",
            f"Service line {index}: no prior authorization number for a service over "
            f"${reference.prior_authorization_threshold:.2f}",
            recommendation="Some payers require prior authorization for high-value services (Box 23)",
        )
