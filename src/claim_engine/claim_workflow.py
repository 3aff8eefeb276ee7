"""Claim generation workflow.

An event-driven version of ``ClaimGenerator`` for async callers:
1. Loads the charge and maps it onto a CMS-1500 claim record
2. Validates the record, stopping with the error list when it is invalid
3. Scrubs the record for compliance warnings
4. Renders the PDF and returns a ``GenerationResult``

Progress is streamed to the caller as ``StatusEvent``s.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Literal

from workflows import Context, Workflow, step
from workflows.events import Event, StartEvent, StopEvent

from .config import EngineConfig, get_config
from .mapper import map_charge_to_claim
from .orchestrator import (
    check_exportable,
    fetch_aggregate,
    not_found_result,
    rejected_result,
    render_result,
    utc_now,
)
from .repository import ChargeRepository
from .schemas import ChargeAggregate, ClaimRecord, ValidationResult
from .validators import scrub_claim_record, validate_claim_record

logger = logging.getLogger(__name__)


# --- Events ---


class ClaimStartEvent(StartEvent):
    """Start event naming the charge to generate a claim for."""

    charge_id: str
    include_patient_name: bool = False


class StatusEvent(Event):
    """Progress status update for the client."""

    message: str
    level: Literal["info", "warning", "error"] = "info"


class ClaimMappedEvent(Event):
    """Emitted once the charge has been mapped onto a claim record."""

    aggregate: ChargeAggregate
    record: ClaimRecord


class ClaimValidatedEvent(Event):
    """Emitted when the claim record passed structural validation."""

    aggregate: ChargeAggregate
    record: ClaimRecord
    validation: ValidationResult


class ClaimScrubbedEvent(Event):
    """Emitted after the compliance scrub, carrying all findings so far."""

    aggregate: ChargeAggregate
    record: ClaimRecord
    findings: ValidationResult


# --- Workflow ---


class ClaimGenerationWorkflow(Workflow):
    """Validate, scrub and render a CMS-1500 claim for one charge."""

    def __init__(
        self,
        repository: ChargeRepository,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.repository = repository
        self.config = config or get_config()
        self.clock = clock or utc_now

    @step()
    async def map_charge(
        self, event: ClaimStartEvent, ctx: Context
    ) -> ClaimMappedEvent | StopEvent:
        """Load the charge aggregate and map it onto a claim record."""
        ctx.write_event_to_stream(
            StatusEvent(message=f"Loading charge {event.charge_id}...")
        )

        aggregate = fetch_aggregate(self.repository, event.charge_id)
        if aggregate is None:
            logger.warning("Charge %s not found", event.charge_id)
            ctx.write_event_to_stream(
                StatusEvent(message=f"Charge {event.charge_id} not found", level="error")
            )
            return StopEvent(result=not_found_result(event.charge_id))

        precondition = check_exportable(aggregate)
        if precondition is not None:
            ctx.write_event_to_stream(
                StatusEvent(message=precondition.errors[0], level="error")
            )
            return StopEvent(result=precondition)

        record = map_charge_to_claim(
            aggregate, event.include_patient_name, self.config
        )
        logger.info("Charge %s mapped", event.charge_id)
        return ClaimMappedEvent(aggregate=aggregate, record=record)

    @step()
    async def validate_claim(
        self, event: ClaimMappedEvent, ctx: Context
    ) -> ClaimValidatedEvent | StopEvent:
        """Run the structural checks; invalid claims stop here."""
        ctx.write_event_to_stream(StatusEvent(message="Validating claim record..."))

        validation = validate_claim_record(event.record, self.config.reference_data)
        if not validation.valid:
            ctx.write_event_to_stream(
                StatusEvent(message=validation.summary(), level="error")
            )
            return StopEvent(result=rejected_result(event.aggregate.charge.id, validation))

        logger.info("Charge %s validated", event.aggregate.charge.id)
        return ClaimValidatedEvent(
            aggregate=event.aggregate, record=event.record, validation=validation
        )

    @step()
    async def scrub_claim(
        self, event: ClaimValidatedEvent, ctx: Context
    ) -> ClaimScrubbedEvent:
        """Run the compliance scrub."""
        ctx.write_event_to_stream(StatusEvent(message="Running compliance scrub..."))

        scrub = scrub_claim_record(event.record, self.config.reference_data)
        if scrub.warnings:
            ctx.write_event_to_stream(
                StatusEvent(
                    message=f"Compliance scrub raised {len(scrub.warnings)} warning(s)",
                    level="warning",
                )
            )
        else:
            ctx.write_event_to_stream(StatusEvent(message="Compliance scrub passed"))

        return ClaimScrubbedEvent(
            aggregate=event.aggregate,
            record=event.record,
            findings=event.validation.merge(scrub),
        )

    @step()
    async def render_claim(self, event: ClaimScrubbedEvent, ctx: Context) -> StopEvent:
        """Render the CMS-1500 document."""
        ctx.write_event_to_stream(StatusEvent(message="Rendering CMS-1500 form..."))

        result = render_result(
            event.aggregate, event.record, event.findings, self.clock(), self.config
        )

        ctx.write_event_to_stream(StatusEvent(message="Claim generation complete"))
        return StopEvent(result=result)
