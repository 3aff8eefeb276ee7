"""Unit tests for the atomic field format validators."""

import pytest

from claim_engine.validators.field_formats import (
    is_absent,
    missing_fields,
    validate_diagnosis_pointers,
    validate_modifiers,
    validate_procedure_code,
    validate_provider_identifier,
    validate_tax_identifier,
    validate_units,
)

APPROVED_CODES = ("90791", "90834", "90837", "90853")
APPROVED_MODIFIERS = ("HK", "HO", "GT", "95", "XE", "XS", "XP", "XU")


class TestProcedureCode:
    @pytest.mark.parametrize("code", APPROVED_CODES)
    def test_approved_codes_pass(self, code):
        assert validate_procedure_code(code, APPROVED_CODES) == []

    @pytest.mark.parametrize("code", ["99213", "99999", "9083", "90834A", "ABCDE"])
    def test_unlisted_codes_fail_with_membership_message(self, code):
        """Well-formed but unlisted codes fail the same way as malformed ones."""
        assert validate_procedure_code(code, APPROVED_CODES) == [
            "procedure code must be one of: 90791, 90834, 90837, 90853"
        ]

    @pytest.mark.parametrize("code", [None, "", "   "])
    def test_missing_code_is_required(self, code):
        assert validate_procedure_code(code, APPROVED_CODES) == [
            "procedure code is required"
        ]


class TestModifiers:
    def test_empty_list_passes(self):
        assert validate_modifiers([], APPROVED_MODIFIERS) == []

    def test_four_approved_modifiers_pass(self):
        assert validate_modifiers(["GT", "HK", "XE", "95"], APPROVED_MODIFIERS) == []

    def test_more_than_four_fails(self):
        errors = validate_modifiers(["GT", "HK", "XE", "95", "XS"], APPROVED_MODIFIERS)
        assert errors == ["a maximum of 4 modifiers is allowed"]

    def test_malformed_modifier(self):
        errors = validate_modifiers(["G"], APPROVED_MODIFIERS)
        assert errors == ["modifier 'G' must be 2 alphanumeric characters"]

    def test_lowercase_modifier_is_malformed(self):
        errors = validate_modifiers(["gt"], APPROVED_MODIFIERS)
        assert errors == ["modifier 'gt' must be 2 alphanumeric characters"]

    def test_unapproved_modifier(self):
        errors = validate_modifiers(["25"], APPROVED_MODIFIERS)
        assert len(errors) == 1
        assert errors[0].startswith("modifier '25' must be one of:")

    def test_count_and_item_errors_reported_together(self):
        errors = validate_modifiers(
            ["GT", "HK", "XE", "95", "ZZ"], APPROVED_MODIFIERS
        )
        assert "a maximum of 4 modifiers is allowed" in errors
        assert any("'ZZ'" in error for error in errors)
        assert len(errors) == 2

    def test_duplicate_modifier(self):
        assert validate_modifiers(["GT", "GT"], APPROVED_MODIFIERS) == [
            "modifier 'GT' is duplicated"
        ]

    def test_every_repeat_is_reported_with_count_error(self):
        errors = validate_modifiers(["GT"] * 5, APPROVED_MODIFIERS)
        assert errors[0] == "a maximum of 4 modifiers is allowed"
        assert errors.count("modifier 'GT' is duplicated") == 4
        assert len(errors) == 5


class TestDiagnosisPointers:
    def test_valid_pointers_pass(self):
        assert validate_diagnosis_pointers(["A", "B", "C", "D"]) == []

    def test_empty_fails(self):
        assert validate_diagnosis_pointers([]) == [
            "at least one diagnosis pointer is required"
        ]

    def test_more_than_four_fails(self):
        errors = validate_diagnosis_pointers(["A", "B", "C", "D", "A"])
        assert "a maximum of 4 diagnosis pointers is allowed" in errors

    def test_pointer_outside_a_to_d(self):
        assert validate_diagnosis_pointers(["E"]) == [
            "diagnosis pointer 'E' must be A, B, C, or D"
        ]

    def test_duplicate_pointer(self):
        assert validate_diagnosis_pointers(["A", "A"]) == [
            "diagnosis pointer 'A' is duplicated"
        ]

    def test_pointer_beyond_listed_diagnoses(self):
        errors = validate_diagnosis_pointers(["A", "C"], diagnosis_count=2)
        assert errors == [
            "diagnosis pointer 'C' references a diagnosis code that is not listed"
        ]

    def test_pointer_within_listed_diagnoses(self):
        assert validate_diagnosis_pointers(["A", "B"], diagnosis_count=2) == []


class TestIdentifiers:
    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_absent_npi_is_valid(self, value):
        assert validate_provider_identifier(value) == []

    def test_ten_digit_npi_passes(self):
        assert validate_provider_identifier("1234567890") == []

    @pytest.mark.parametrize("value", ["123456789", "12345678901", "12345abcde", "1234567890\n"])
    def test_malformed_npi_fails(self, value):
        assert validate_provider_identifier(value, "billing provider NPI") == [
            "billing provider NPI must be exactly 10 digits"
        ]

    def test_tin_passes(self):
        assert validate_tax_identifier("12-3456789") == []

    def test_absent_tin_is_valid(self):
        assert validate_tax_identifier(None) == []

    @pytest.mark.parametrize("value", ["123456789", "12-345678", "1-23456789", "AB-CDEFGHI"])
    def test_malformed_tin_fails(self, value):
        assert validate_tax_identifier(value) == ["TIN must be in format XX-XXXXXXX"]


class TestUnitsAndPresence:
    @pytest.mark.parametrize("units", [1, 2, 99])
    def test_units_in_range(self, units):
        assert validate_units(units) == []

    def test_zero_units_fail(self):
        assert validate_units(0) == ["units must be at least 1"]

    def test_too_many_units_fail(self):
        assert validate_units(100) == ["units cannot exceed 99"]

    def test_is_absent(self):
        assert is_absent(None)
        assert is_absent(" ")
        assert not is_absent("x")

    def test_missing_fields_returns_labels(self):
        assert missing_fields([("a", "1"), ("b", None), ("c", "")]) == ["b", "c"]
