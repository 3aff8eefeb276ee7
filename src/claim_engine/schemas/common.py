"""Shared types for claim records and validation results."""

from enum import Enum

from pydantic import BaseModel, computed_field


class Address(BaseModel):
    """Structured postal address."""

    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None


class PersonName(BaseModel):
    """A person's name as held by the upstream system."""

    first_name: str
    last_name: str
    middle_name: str | None = None


class FindingSeverity(str, Enum):
    """Tier of a validation finding. Errors block generation, warnings do not."""

    ERROR = "ERROR"
    WARNING = "WARNING"


class ValidationFinding(BaseModel):
    """Result of a single validation or scrub check."""

    check_name: str
    severity: FindingSeverity
    detail: str
    recommendation: str | None = None


class ValidationResult(BaseModel):
    """Aggregated findings of a validation or scrub pass."""

    findings: list[ValidationFinding] = []

    @computed_field
    @property
    def valid(self) -> bool:
        return not self.errors

    @computed_field
    @property
    def errors(self) -> list[str]:
        return [
            f.detail for f in self.findings if f.severity == FindingSeverity.ERROR
        ]

    @computed_field
    @property
    def warnings(self) -> list[str]:
        return [
            f.detail for f in self.findings if f.severity == FindingSeverity.WARNING
        ]

    def add_error(
        self, check_name: str, detail: str, recommendation: str | None = None
    ) -> None:
        self.findings.append(
            ValidationFinding(
                check_name=check_name,
                severity=FindingSeverity.ERROR,
                detail=detail,
                recommendation=recommendation,
            )
        )

    def add_warning(
        self, check_name: str, detail: str, recommendation: str | None = None
    ) -> None:
        self.findings.append(
            ValidationFinding(
                check_name=check_name,
                severity=FindingSeverity.WARNING,
                detail=detail,
                recommendation=recommendation,
            )
        )

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Return a new result holding this result's findings followed by ``other``'s."""
        return ValidationResult(findings=[*self.findings, *other.findings])

    def summary(self) -> str:
        """One-line, human readable summary of the findings."""
        error_count = len(self.errors)
        warning_count = len(self.warnings)

        if error_count == 0 and warning_count == 0:
            return "Claim passed all validation checks."

        parts: list[str] = []
        if error_count:
            plural = "s" if error_count > 1 else ""
            parts.append(f"{error_count} error{plural} must be fixed before submission.")
        if warning_count:
            plural = "s" if warning_count > 1 else ""
            parts.append(f"{warning_count} warning{plural} should be reviewed.")
        return " ".join(parts)
