"""Output schemas for claim document generation."""

from datetime import datetime

from pydantic import BaseModel


class ClaimDocument(BaseModel):
    """A rendered CMS-1500 document."""

    filename: str
    content: bytes
    content_type: str = "application/pdf"
    fields: dict[str, str] = {}
    rendered_line_count: int = 0
    truncated_line_count: int = 0
    warnings: list[str] = []


class GenerationMetadata(BaseModel):
    """Identifying details of a generated claim."""

    charge_id: str
    patient_display_name: str | None = None
    provider_id: str | None = None
    total_amount: float
    generated_at: datetime


class GenerationResult(BaseModel):
    """Outcome of a claim generation request.

    ``success`` is False when the charge could not be generated; ``errors``
    then lists every blocking problem. Warnings are returned in both cases.
    """

    success: bool
    document: ClaimDocument | None = None
    metadata: GenerationMetadata | None = None
    errors: list[str] = []
    warnings: list[str] = []
