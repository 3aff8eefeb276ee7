"""Structural validation and compliance scrubbing for claim records."""

from ..config import ReferenceDataConfig
from ..schemas.cms1500 import ClaimRecord
from ..schemas.common import ValidationResult
from .claim_record import validate_claim_record
from .scrub import scrub_claim_record

__all__ = [
    "run_all_validations",
    "validate_claim_record",
    "scrub_claim_record",
]


def run_all_validations(
    record: ClaimRecord, reference: ReferenceDataConfig | None = None
) -> ValidationResult:
    """Validate a claim record and, when it is structurally valid, scrub it.

    The scrub runs only once validation passes. Findings are ordered
    structural first, then scrub warnings.
    """
    result = validate_claim_record(record, reference)
    if not result.valid:
        return result
    return result.merge(scrub_claim_record(record, reference))
