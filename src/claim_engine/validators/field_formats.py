"""Format validators for atomic claim values.

Each validator returns a list of error messages; an empty list means the
value is valid. Validators for optional values treat an absent value as
valid and only report a value that is present but malformed.
"""

import re
from collections.abc import Iterable, Sequence

MODIFIER_PATTERN = re.compile(r"^[A-Z0-9]{2}$")
PROVIDER_IDENTIFIER_PATTERN = re.compile(r"^[0-9]{10}$")
TAX_IDENTIFIER_PATTERN = re.compile(r"^[0-9]{2}-[0-9]{7}$")

PROCEDURE_CODE_LENGTH = 5
MAX_MODIFIERS = 4
MAX_DIAGNOSIS_POINTERS = 4
VALID_DIAGNOSIS_POINTERS = ("A", "B", "C", "D")
MIN_UNITS = 1
MAX_UNITS = 99


def is_absent(value: str | None) -> bool:
    """True when an optional value was not provided (None or blank)."""
    return value is None or not value.strip()


def validate_procedure_code(code: str | None, approved: Sequence[str]) -> list[str]:
    """Procedure code must be one of the approved codes.

    The approved set is closed: a correctly shaped code that is not listed
    is rejected the same way as a malformed one.
    """
    if is_absent(code):
        return ["procedure code is required"]
    if len(code) != PROCEDURE_CODE_LENGTH or code not in approved:
        return [f"procedure code must be one of: {', '.join(approved)}"]
    return []


def validate_modifiers(modifiers: Sequence[str], approved: Sequence[str]) -> list[str]:
    """Up to four distinct modifiers, each two alphanumerics from the approved set.

    The count and each item are checked independently so every problem in
    the list is reported.
    """
    errors: list[str] = []
    if len(modifiers) > MAX_MODIFIERS:
        errors.append(f"a maximum of {MAX_MODIFIERS} modifiers is allowed")

    seen: set[str] = set()
    for modifier in modifiers:
        if not MODIFIER_PATTERN.fullmatch(modifier or ""):
            errors.append(f"modifier '{modifier}' must be 2 alphanumeric characters")
        elif modifier not in approved:
            errors.append(
                f"modifier '{modifier}' must be one of: {', '.join(approved)}"
            )
        if modifier in seen:
            errors.append(f"modifier '{modifier}' is duplicated")
        seen.add(modifier)
    return errors


def validate_diagnosis_pointers(
    pointers: Sequence[str], diagnosis_count: int | None = None
) -> list[str]:
    """One to four distinct pointers from A-D.

    When ``diagnosis_count`` is given, a pointer must also reference one of
    the diagnosis codes actually listed on the claim.
    """
    errors: list[str] = []
    if not pointers:
        errors.append("at least one diagnosis pointer is required")
    elif len(pointers) > MAX_DIAGNOSIS_POINTERS:
        errors.append(
            f"a maximum of {MAX_DIAGNOSIS_POINTERS} diagnosis pointers is allowed"
        )

    seen: set[str] = set()
    for pointer in pointers:
        if pointer not in VALID_DIAGNOSIS_POINTERS:
            errors.append(f"diagnosis pointer '{pointer}' must be A, B, C, or D")
            continue
        if pointer in seen:
            errors.append(f"diagnosis pointer '{pointer}' is duplicated")
            continue
        seen.add(pointer)
        if (
            diagnosis_count is not None
            and VALID_DIAGNOSIS_POINTERS.index(pointer) >= diagnosis_count
        ):
            errors.append(
                f"diagnosis pointer '{pointer}' references a diagnosis code that is not listed"
            )
    return errors


def validate_provider_identifier(value: str | None, label: str = "NPI") -> list[str]:
    """Optional 10-digit provider identifier (NPI)."""
    if is_absent(value):
        return []
    if not PROVIDER_IDENTIFIER_PATTERN.fullmatch(value):
        return [f"{label} must be exactly 10 digits"]
    return []


def validate_tax_identifier(value: str | None) -> list[str]:
    """Optional tax identifier in ``NN-NNNNNNN`` form."""
    if is_absent(value):
        return []
    if not TAX_IDENTIFIER_PATTERN.fullmatch(value):
        return ["TIN must be in format XX-XXXXXXX"]
    return []


def validate_units(units: int | None) -> list[str]:
    if units is None or units < MIN_UNITS:
        return [f"units must be at least {MIN_UNITS}"]
    if units > MAX_UNITS:
        return [f"units cannot exceed {MAX_UNITS}"]
    return []


def missing_fields(fields: Iterable[tuple[str, str | None]]) -> list[str]:
    """Labels of the (label, value) pairs whose value is absent."""
    return [label for label, value in fields if is_absent(value)]
