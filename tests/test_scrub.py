"""Tests for compliance scrub warnings."""

from claim_engine.schemas import FindingSeverity
from claim_engine.validators import scrub_claim_record


def _check_names(result) -> list[str]:
    return [finding.check_name for finding in result.findings]


class TestScrubClean:
    def test_standard_claim_has_no_warnings(self, make_record, engine_config):
        result = scrub_claim_record(make_record(), engine_config.reference_data)
        assert result.findings == []
        assert result.valid

    def test_scrub_findings_are_warnings_only(self, make_record, make_line, engine_config):
        record = make_record(
            diagnosis_codes=["bad"],
            service_lines=[make_line(units=25, place_of_service_code="81")],
        )
        result = scrub_claim_record(record, engine_config.reference_data)
        assert result.findings
        assert all(f.severity == FindingSeverity.WARNING for f in result.findings)
        assert result.valid
        assert all(f.recommendation for f in result.findings)


class TestScrubChecks:
    def test_diagnosis_code_format(self, make_record, engine_config):
        record = make_record(diagnosis_codes=["F32.9", "f41.1", "F4"])
        result = scrub_claim_record(record, engine_config.reference_data)
        assert result.warnings == [
            "Diagnosis code f41.1 may not be valid ICD-10 format",
            "Diagnosis code F4 may not be valid ICD-10 format",
        ]

    def test_uncommon_procedure_code(self, make_record, make_line, engine_config):
        record = make_record(
            service_lines=[make_line(procedure_code="99213", modifiers=[])]
        )
        result = scrub_claim_record(record, engine_config.reference_data)
        assert _check_names(result) == ["uncommon_procedure_code"]

    def test_family_therapy_code_is_common(self, make_record, make_line, engine_config):
        record = make_record(
            service_lines=[make_line(procedure_code="90847", modifiers=[])]
        )
        assert scrub_claim_record(record, engine_config.reference_data).findings == []

    def test_telehealth_modifier_on_group_therapy(
        self, make_record, make_line, engine_config
    ):
        record = make_record(
            service_lines=[
                make_line(procedure_code="90853", modifiers=["95"], charge_amount=100.0)
            ]
        )
        result = scrub_claim_record(record, engine_config.reference_data)
        assert result.warnings == [
            "Service line 1: 95 modifier is not typically billed with CPT code 90853"
        ]

    def test_multiple_units_on_single_encounter_code(
        self, make_record, make_line, engine_config
    ):
        record = make_record(service_lines=[make_line(units=2)])
        result = scrub_claim_record(record, engine_config.reference_data)
        assert _check_names(result) == ["single_encounter_units"]

    def test_high_unit_count(self, make_record, make_line, engine_config):
        record = make_record(
            service_lines=[make_line(procedure_code="90853", modifiers=[], units=21, charge_amount=100.0)]
        )
        result = scrub_claim_record(record, engine_config.reference_data)
        assert _check_names(result) == ["high_unit_count"]

    def test_unusual_charge_amount(self, make_record, make_line, engine_config):
        record = make_record(service_lines=[make_line(charge_amount=450.0)])
        result = scrub_claim_record(record, engine_config.reference_data)
        assert _check_names(result) == ["unusual_charge_amount"]
        assert "$100.00-$200.00" in result.warnings[0]

    def test_charge_below_minimum(self, make_record, make_line, engine_config):
        record = make_record(
            service_lines=[make_line(procedure_code="90847", modifiers=[], charge_amount=0.5)]
        )
        result = scrub_claim_record(record, engine_config.reference_data)
        assert result.warnings == [
            "Service line 1: charge $0.50 is below the minimum of $1.00"
        ]
        assert _check_names(result) == ["charge_below_minimum"]

    def test_minimum_charge_amount_is_not_flagged(
        self, make_record, make_line, engine_config
    ):
        record = make_record(
            service_lines=[make_line(procedure_code="90847", modifiers=[], charge_amount=1.0)]
        )
        assert scrub_claim_record(record, engine_config.reference_data).findings == []

    def test_missing_prior_authorization(self, make_record, make_line, engine_config):
        record = make_record(
            service_lines=[make_line(procedure_code="90847", modifiers=[], charge_amount=600.0)]
        )
        result = scrub_claim_record(record, engine_config.reference_data)
        assert _check_names(result) == ["missing_prior_authorization"]

    def test_prior_authorization_present(self, make_record, make_line, engine_config):
        record = make_record(
            prior_authorization_number="AUTH-1",
            service_lines=[make_line(procedure_code="90847", modifiers=[], charge_amount=600.0)],
        )
        assert scrub_claim_record(record, engine_config.reference_data).findings == []

    def test_uncommon_place_of_service(self, make_record, make_line, engine_config):
        record = make_record(service_lines=[make_line(place_of_service_code="81")])
        result = scrub_claim_record(record, engine_config.reference_data)
        assert _check_names(result) == ["uncommon_place_of_service"]

    def test_summary_counts_warnings(self, make_record, make_line, engine_config):
        record = make_record(
            diagnosis_codes=["bad", "F41.1"],
            service_lines=[make_line(units=2)],
        )
        result = scrub_claim_record(record, engine_config.reference_data)
        assert result.summary() == "2 warnings should be reviewed."
