"""Claim engine schemas: upstream records, claim record and results."""

from .charge import (
    NON_EXPORTABLE_STATUSES,
    ChargeAggregate,
    ChargeRecord,
    ChargeStatus,
    PatientRecord,
    ProviderRecord,
)
from .cms1500 import ClaimRecord, ProviderBlock, RelationshipToInsured, ServiceLine
from .common import (
    Address,
    FindingSeverity,
    PersonName,
    ValidationFinding,
    ValidationResult,
)
from .generation_output import ClaimDocument, GenerationMetadata, GenerationResult

__all__ = [
    # Common
    "Address",
    "PersonName",
    "FindingSeverity",
    "ValidationFinding",
    "ValidationResult",
    # Upstream records
    "ChargeStatus",
    "NON_EXPORTABLE_STATUSES",
    "ChargeRecord",
    "PatientRecord",
    "ProviderRecord",
    "ChargeAggregate",
    # CMS-1500
    "RelationshipToInsured",
    "ServiceLine",
    "ProviderBlock",
    "ClaimRecord",
    # Output
    "ClaimDocument",
    "GenerationMetadata",
    "GenerationResult",
]
