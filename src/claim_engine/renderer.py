"""CMS-1500 document renderer.

Lays a claim record out on a single US-letter page at fixed box positions
using reportlab. The renderer does not validate; callers validate first.
"""

import io
import logging
import re
from datetime import date, datetime, timezone

from reportlab.lib.pagesizes import letter
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .config import EngineConfig, RenderConfig, get_config
from .schemas.cms1500 import ClaimRecord, RelationshipToInsured, ServiceLine
from .schemas.generation_output import ClaimDocument

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = letter
MARGIN = 36
LABEL_FONT_SIZE = 6
SIGNATURE_ON_FILE = "SIGNATURE ON FILE"
DIAGNOSIS_LETTERS = "ABCDEFGHIJKL"
BOX_PADDING = 4
# Boxes within this vertical distance share a row and bound each other's width
ROW_TOLERANCE = 10

# Box value positions: field key -> (label, x, y). Labels sit just above the value.
BOX_LAYOUT: dict[str, tuple[str, float, float]] = {
    # Insured / patient identity, boxes 1-7
    "box_1a_insured_id": ("1a. INSURED'S I.D. NUMBER", 380, 715),
    "box_2_patient_name": ("2. PATIENT'S NAME (Last Name, First Name)", 40, 690),
    "box_3_patient_birth_date": ("3. PATIENT'S BIRTH DATE", 250, 690),
    "box_4_insured_name": ("4. INSURED'S NAME (Last Name, First Name)", 380, 690),
    "box_5_patient_address": ("5. PATIENT'S ADDRESS (No., Street)", 40, 665),
    "box_5_patient_city_state_zip": ("CITY, STATE, ZIP CODE", 40, 640),
    "box_5_patient_phone": ("TELEPHONE", 40, 615),
    "box_6_relationship": ("6. PATIENT RELATIONSHIP TO INSURED", 180, 640),
    "box_7_insured_address": ("7. INSURED'S ADDRESS (No., Street)", 380, 665),
    "box_7_insured_city_state_zip": ("CITY, STATE, ZIP CODE", 380, 640),
    "box_7_insured_phone": ("TELEPHONE", 380, 615),
    # Payer / authorization, boxes 9-14 and 21-23
    "box_9_other_insured_name": ("9. OTHER INSURED'S NAME", 40, 585),
    "box_14_date_of_current_illness": ("14. DATE OF CURRENT ILLNESS", 250, 585),
    "box_9a_other_insured_group": ("a. OTHER INSURED'S POLICY OR GROUP NUMBER", 40, 560),
    "box_13_insured_signature": ("13. INSURED'S SIGNATURE", 250, 560),
    "box_11b_employer_name": ("11b. EMPLOYER OR SCHOOL NAME", 380, 585),
    "box_11c_insurance_plan_name": ("11c. INSURANCE PLAN OR PROGRAM NAME", 380, 560),
    "box_12_patient_signature": ("12. PATIENT'S OR AUTHORIZED PERSON'S SIGNATURE", 40, 530),
    "box_12_signature_date": ("DATE", 250, 530),
    "box_23_prior_authorization": ("23. PRIOR AUTHORIZATION NUMBER", 380, 530),
    "box_21_diagnosis_codes": ("21. DIAGNOSIS OR NATURE OF ILLNESS OR INJURY", 40, 500),
    # Financial summary, boxes 25-30
    "box_25_federal_tax_id": ("25. FEDERAL TAX I.D. NUMBER", 40, 325),
    "box_26_patient_account": ("26. PATIENT'S ACCOUNT NO.", 170, 325),
    "box_27_accept_assignment": ("27. ACCEPT ASSIGNMENT?", 290, 325),
    "box_28_total_charge": ("28. TOTAL CHARGE", 390, 325),
    "box_29_amount_paid": ("29. AMOUNT PAID", 460, 325),
    "box_30_balance_due": ("30. BALANCE DUE", 530, 325),
    # Signature, service facility and billing provider, boxes 31-33
    "box_31_physician_signature": ("31. SIGNATURE OF PHYSICIAN OR SUPPLIER", 40, 290),
    "box_31_signature_date": ("DATE", 40, 265),
    "box_32_service_facility_name": ("32. SERVICE FACILITY LOCATION INFORMATION", 200, 290),
    "box_32_service_facility_address": ("", 200, 278),
    "box_32_service_facility_city_state_zip": ("", 200, 266),
    "box_32_service_facility_phone": ("", 200, 254),
    "box_32a_service_facility_npi": ("a. NPI", 200, 235),
    "box_33_billing_provider_name": ("33. BILLING PROVIDER INFO & PH #", 400, 290),
    "box_33_billing_provider_address": ("", 400, 278),
    "box_33_billing_provider_city_state_zip": ("", 400, 266),
    "box_33_billing_provider_phone": ("", 400, 254),
    "box_33a_billing_provider_npi": ("a. NPI", 400, 235),
}

# Box 24 columns: field suffix -> (header, x)
LINE_COLUMNS: dict[str, tuple[str, float]] = {
    "date_from": ("24A. FROM", 40),
    "date_to": ("TO", 95),
    "place_of_service": ("B. POS", 150),
    "procedure_code": ("D. CPT/HCPCS", 180),
    "modifiers": ("MODIFIER", 240),
    "diagnosis_pointers": ("E. DX PTR", 320),
    "charges": ("F. $ CHARGES", 380),
    "units": ("G. UNITS", 450),
    "rendering_npi": ("J. RENDERING NPI", 490),
}
LINE_HEADER_Y = 470
LINE_FIRST_ROW_Y = 455
LINE_ROW_HEIGHT = 18


def _box_widths(layout: dict[str, tuple[str, float, float]]) -> dict[str, float]:
    """Usable width of each box: up to the next box on the same row, or the margin."""
    widths = {}
    for key, (_, x, y) in layout.items():
        right = min(
            (
                other_x
                for _, other_x, other_y in layout.values()
                if other_x > x and abs(other_y - y) < ROW_TOLERANCE
            ),
            default=PAGE_WIDTH - MARGIN,
        )
        widths[key] = right - x - BOX_PADDING
    return widths


BOX_WIDTHS = _box_widths(BOX_LAYOUT)


def render_claim_document(
    record: ClaimRecord,
    generated_at: datetime | None = None,
    config: EngineConfig | None = None,
) -> ClaimDocument:
    """Render a claim record to a CMS-1500 PDF.

    Only the first ``max_service_lines`` lines fit on the form; any further
    lines are left off and reported in the returned document's warnings.
    """
    render = (config or get_config()).render
    generated_at = generated_at or datetime.now(timezone.utc)

    fields = build_form_fields(record, render.max_service_lines)
    rendered_lines = min(len(record.service_lines), render.max_service_lines)
    truncated_lines = len(record.service_lines) - rendered_lines

    warnings: list[str] = []
    if truncated_lines > 0:
        first_omitted = render.max_service_lines + 1
        last_omitted = len(record.service_lines)
        omitted = (
            f"line {first_omitted}"
            if first_omitted == last_omitted
            else f"lines {first_omitted}-{last_omitted}"
        )
        warnings.append(
            f"Claim has {len(record.service_lines)} service lines but the form holds "
            f"{render.max_service_lines}; {truncated_lines} truncated service line(s) "
            f"({omitted}) were not rendered"
        )
        logger.warning(
            "Truncated %d service lines beyond the form limit of %d",
            truncated_lines,
            render.max_service_lines,
        )

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter, invariant=1)
    pdf.setTitle("CMS-1500 Health Insurance Claim Form")
    _draw_form(pdf, fields, rendered_lines, render)
    pdf.showPage()
    pdf.save()

    return ClaimDocument(
        filename=build_filename(record.patient_name, generated_at, render.filename_prefix),
        content=buffer.getvalue(),
        fields=fields,
        rendered_line_count=rendered_lines,
        truncated_line_count=truncated_lines,
        warnings=warnings,
    )


def build_form_fields(record: ClaimRecord, max_service_lines: int = 6) -> dict[str, str]:
    """Text for every box on the form, keyed by box field name.

    Blank boxes map to an empty string. Service-line fields are only present
    for rendered lines.
    """
    fields: dict[str, str] = {
        "box_1a_insured_id": record.insured_identifier or "",
        "box_2_patient_name": record.patient_name or "",
        "box_3_patient_birth_date": _format_date(record.patient_date_of_birth),
        "box_4_insured_name": record.insured_name or "",
        "box_5_patient_address": record.patient_street or "",
        "box_5_patient_city_state_zip": record.patient_city_state_zip,
        "box_5_patient_phone": record.patient_phone or "",
        "box_6_relationship": _format_relationship(record.relationship_to_insured),
        "box_7_insured_address": record.insured_street or "",
        "box_7_insured_city_state_zip": record.insured_city_state_zip or "",
        "box_7_insured_phone": record.insured_phone or "",
        "box_9_other_insured_name": record.other_insured_name or "",
        "box_9a_other_insured_group": record.other_insured_group_number or "",
        "box_11b_employer_name": record.employer_name or "",
        "box_11c_insurance_plan_name": record.insurance_plan_name or "",
        "box_12_patient_signature": SIGNATURE_ON_FILE if record.signature_on_file else "",
        "box_12_signature_date": (
            _format_date(record.signature_date) if record.signature_on_file else ""
        ),
        "box_13_insured_signature": SIGNATURE_ON_FILE if record.signature_on_file else "",
        "box_14_date_of_current_illness": _format_date(record.date_of_current_illness),
        "box_23_prior_authorization": record.prior_authorization_number or "",
        "box_21_diagnosis_codes": _format_diagnosis_codes(record.diagnosis_codes),
    }

    for number, line in enumerate(record.service_lines[:max_service_lines], start=1):
        fields.update(_service_line_fields(number, line))

    billing = record.billing_provider
    facility = record.rendering_provider
    fields.update(
        {
            "box_25_federal_tax_id": billing.tax_identifier or "",
            "box_26_patient_account": record.patient_account_number or "",
            "box_27_accept_assignment": "YES" if record.accept_assignment else "NO",
            "box_28_total_charge": format_currency(record.total_charge),
            "box_29_amount_paid": format_currency(record.amount_paid),
            "box_30_balance_due": format_currency(record.balance_due),
            "box_31_physician_signature": (
                SIGNATURE_ON_FILE if record.signature_on_file else ""
            ),
            "box_31_signature_date": (
                _format_date(record.signature_date) if record.signature_on_file else ""
            ),
            "box_32_service_facility_name": facility.name or "",
            "box_32_service_facility_address": facility.street or "",
            "box_32_service_facility_city_state_zip": facility.city_state_zip or "",
            "box_32_service_facility_phone": facility.phone or "",
            "box_32a_service_facility_npi": facility.identifier or "",
            "box_33_billing_provider_name": billing.name or "",
            "box_33_billing_provider_address": billing.street or "",
            "box_33_billing_provider_city_state_zip": billing.city_state_zip or "",
            "box_33_billing_provider_phone": billing.phone or "",
            "box_33a_billing_provider_npi": billing.identifier or "",
        }
    )
    return fields


def build_filename(
    patient_name: str | None, generated_at: datetime, prefix: str = "CMS1500"
) -> str:
    """``<prefix>_<patient name>_<timestamp>.pdf`` with the name reduced to safe characters."""
    safe_name = re.sub(r"[^A-Za-z0-9]+", "_", patient_name or "").strip("_") or "PATIENT"
    return f"{prefix}_{safe_name}_{generated_at:%Y%m%dT%H%M%S%f}.pdf"


def format_currency(amount: float) -> str:
    return f"{amount:.2f}"


def fit_text(text: str, width: float, font_name: str, font_size: float) -> str:
    """Cut ``text`` so it fits within ``width`` points in the given font."""
    while text and stringWidth(text, font_name, font_size) > width:
        text = text[:-1]
    return text


def _service_line_fields(number: int, line: ServiceLine) -> dict[str, str]:
    key = f"box_24_line_{number}"
    return {
        f"{key}_date_from": _format_date(line.date_of_service_from),
        f"{key}_date_to": _format_date(line.date_of_service_to),
        f"{key}_place_of_service": line.place_of_service_code or "",
        f"{key}_procedure_code": line.procedure_code or "",
        f"{key}_modifiers": " ".join(line.modifiers),
        f"{key}_diagnosis_pointers": " ".join(line.diagnosis_pointers),
        f"{key}_charges": f"${format_currency(line.charge_amount)}",
        f"{key}_units": str(line.units),
        f"{key}_rendering_npi": line.rendering_provider_identifier or "",
    }


def _format_date(value: date | None) -> str:
    return value.strftime("%m/%d/%Y") if value else ""


def _format_relationship(relationship: RelationshipToInsured) -> str:
    return "  ".join(
        f"[{'X' if option == relationship else ' '}] {option.value}"
        for option in RelationshipToInsured
    )


def _format_diagnosis_codes(codes: list[str]) -> str:
    return "  ".join(
        f"{pointer}. {code}" for pointer, code in zip(DIAGNOSIS_LETTERS, codes)
    )


def _draw_form(
    pdf: canvas.Canvas,
    fields: dict[str, str],
    rendered_lines: int,
    render: RenderConfig,
) -> None:
    pdf.setFont(render.title_font_name, 14)
    pdf.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT - 32, render.title)
    pdf.setFont(render.font_name, LABEL_FONT_SIZE)
    pdf.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT - 44, render.subtitle)

    pdf.setLineWidth(0.5)
    # Section frames: identity, payer, service lines, totals, signatures
    pdf.rect(MARGIN, 605, PAGE_WIDTH - 2 * MARGIN, 130)
    pdf.rect(MARGIN, 490, PAGE_WIDTH - 2 * MARGIN, 115)
    pdf.rect(MARGIN, 345, PAGE_WIDTH - 2 * MARGIN, 145)
    pdf.rect(MARGIN, 310, PAGE_WIDTH - 2 * MARGIN, 35)
    pdf.rect(MARGIN, 225, PAGE_WIDTH - 2 * MARGIN, 85)

    for key, (label, x, y) in BOX_LAYOUT.items():
        if label:
            pdf.setFont(render.font_name, LABEL_FONT_SIZE)
            pdf.drawString(x, y + 10, label)
        pdf.setFont(render.font_name, render.font_size)
        value = fit_text(
            fields.get(key, ""), BOX_WIDTHS[key], render.font_name, render.font_size
        )
        pdf.drawString(x, y, value)

    _draw_service_lines(pdf, fields, rendered_lines, render)


def _draw_service_lines(
    pdf: canvas.Canvas,
    fields: dict[str, str],
    rendered_lines: int,
    render: RenderConfig,
) -> None:
    pdf.setFont(render.font_name, LABEL_FONT_SIZE)
    for header, x in LINE_COLUMNS.values():
        pdf.drawString(x, LINE_HEADER_Y, header)

    for row in range(render.max_service_lines):
        y = LINE_FIRST_ROW_Y - row * LINE_ROW_HEIGHT
        pdf.line(MARGIN, y - 5, PAGE_WIDTH - MARGIN, y - 5)
        if row >= rendered_lines:
            continue
        pdf.setFont(render.font_name, render.font_size - 1)
        pdf.drawString(MARGIN - 10, y, str(row + 1))
        key = f"box_24_line_{row + 1}"
        for suffix, (_, x) in LINE_COLUMNS.items():
            pdf.drawString(x, y, fields.get(f"{key}_{suffix}", ""))
