"""Claim generation pipeline.

Drives a single charge through the fixed sequence

    Requested -> Mapped -> Validated -> (Rejected | Scrubbed -> Rendered -> Complete)

and packages the outcome as a ``GenerationResult``. Expected failures
(unknown charge, draft charge, structural errors) come back as unsuccessful
results; repository and rendering faults are logged and re-raised.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from .config import EngineConfig, get_config
from .mapper import map_charge_to_claim
from .renderer import render_claim_document
from .repository import ChargeRepository
from .schemas.charge import NON_EXPORTABLE_STATUSES, ChargeAggregate
from .schemas.cms1500 import ClaimRecord
from .schemas.common import ValidationResult
from .schemas.generation_output import GenerationMetadata, GenerationResult
from .validators import scrub_claim_record, validate_claim_record

logger = logging.getLogger(__name__)

DRAFT_CHARGE_ERROR = "Cannot generate claim for draft charges"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ClaimGenerator:
    """Generate CMS-1500 documents for charges held in a repository."""

    def __init__(
        self,
        repository: ChargeRepository,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.repository = repository
        self.config = config or get_config()
        self.clock = clock or utc_now

    def generate(
        self, charge_id: str, include_patient_name: bool = False
    ) -> GenerationResult:
        """Map, validate, scrub and render the claim for ``charge_id``.

        Patient and insured names are reduced to initials unless
        ``include_patient_name`` is set.
        """
        logger.info("Claim generation requested for charge %s", charge_id)

        prepared = self._prepare(charge_id, include_patient_name)
        if isinstance(prepared, GenerationResult):
            return prepared
        aggregate, record = prepared

        validation = validate_claim_record(record, self.config.reference_data)
        if not validation.valid:
            return rejected_result(charge_id, validation)
        logger.info("Charge %s validated", charge_id)

        scrub = scrub_claim_record(record, self.config.reference_data)
        logger.info(
            "Charge %s scrubbed with %d warning(s)", charge_id, len(scrub.warnings)
        )

        return render_result(
            aggregate, record, validation.merge(scrub), self.clock(), self.config
        )

    def validate(
        self, charge_id: str, include_patient_name: bool = False
    ) -> ValidationResult | GenerationResult:
        """Structurally validate the claim for ``charge_id`` without rendering it.

        Unknown and draft charges return the same failure result as
        ``generate``.
        """
        prepared = self._prepare(charge_id, include_patient_name)
        if isinstance(prepared, GenerationResult):
            return prepared
        _, record = prepared
        return validate_claim_record(record, self.config.reference_data)

    def scrub(
        self, charge_id: str, include_patient_name: bool = False
    ) -> ValidationResult | GenerationResult:
        """Run only the compliance scrub on the claim for ``charge_id``."""
        prepared = self._prepare(charge_id, include_patient_name)
        if isinstance(prepared, GenerationResult):
            return prepared
        _, record = prepared
        return scrub_claim_record(record, self.config.reference_data)

    def _prepare(
        self, charge_id: str, include_patient_name: bool
    ) -> tuple[ChargeAggregate, ClaimRecord] | GenerationResult:
        aggregate = fetch_aggregate(self.repository, charge_id)
        if aggregate is None:
            logger.warning("Charge %s not found", charge_id)
            return not_found_result(charge_id)

        precondition = check_exportable(aggregate)
        if precondition is not None:
            return precondition

        record = map_charge_to_claim(aggregate, include_patient_name, self.config)
        logger.info("Charge %s mapped", charge_id)
        return aggregate, record


def generate_claim(
    repository: ChargeRepository,
    charge_id: str,
    include_patient_name: bool = False,
    config: EngineConfig | None = None,
) -> GenerationResult:
    """Generate the claim document for one charge with default settings."""
    return ClaimGenerator(repository, config).generate(charge_id, include_patient_name)


# --- Stage helpers, shared with the workflow variant ---


def fetch_aggregate(
    repository: ChargeRepository, charge_id: str
) -> ChargeAggregate | None:
    try:
        return repository.get_charge_aggregate(charge_id)
    except Exception:
        logger.exception("Failed to load charge %s from repository", charge_id)
        raise


def check_exportable(aggregate: ChargeAggregate) -> GenerationResult | None:
    """Return a failure result when the charge may not be exported yet."""
    if aggregate.charge.status in NON_EXPORTABLE_STATUSES:
        logger.warning(
            "Charge %s rejected: status is %s",
            aggregate.charge.id,
            aggregate.charge.status.value,
        )
        return GenerationResult(success=False, errors=[DRAFT_CHARGE_ERROR])
    return None


def not_found_result(charge_id: str) -> GenerationResult:
    return GenerationResult(success=False, errors=[f"Charge {charge_id} not found"])


def rejected_result(charge_id: str, validation: ValidationResult) -> GenerationResult:
    logger.warning(
        "Charge %s rejected with %d validation error(s)",
        charge_id,
        len(validation.errors),
    )
    return GenerationResult(
        success=False,
        errors=validation.errors,
        warnings=validation.warnings,
    )


def render_result(
    aggregate: ChargeAggregate,
    record: ClaimRecord,
    findings: ValidationResult,
    generated_at: datetime,
    config: EngineConfig,
) -> GenerationResult:
    """Render a validated claim record and assemble the successful result."""
    charge_id = aggregate.charge.id
    try:
        document = render_claim_document(record, generated_at, config)
    except Exception:
        logger.exception("Failed to render claim document for charge %s", charge_id)
        raise
    logger.info("Charge %s rendered as %s", charge_id, document.filename)

    metadata = GenerationMetadata(
        charge_id=charge_id,
        patient_display_name=record.patient_name,
        provider_id=aggregate.provider.id,
        total_amount=record.total_charge,
        generated_at=generated_at,
    )
    return GenerationResult(
        success=True,
        document=document,
        metadata=metadata,
        warnings=[*findings.warnings, *document.warnings],
    )
