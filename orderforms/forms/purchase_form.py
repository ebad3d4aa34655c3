"""
Purchase-request form filler.

The Jonsson School purchase form is an AcroForm PDF with fixed field names
(some of them meaningless, like "Text10"). PURCHASE_FORM_FIELDS is the one
place that knows them. Values are formatted per key before they are written.
"""

import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from pypdf import PdfReader, PdfWriter

from orderforms.core.errors import PurchaseFormConfigurationError
from orderforms.core.money import format_cents, format_date

log = logging.getLogger("orderforms.purchase_form")

# logical key → template field name
PURCHASE_FORM_FIELDS = {
    "org_name": "Organization Name",
    "contact_name": "Contact Name First Last",
    "contact_phone": "Contact Phone Number",
    "contact_email": "Contact UTD email",
    "event_name": "Event Name if applicable",
    "event_date": "Event Date if applicable",
    "expected_attendance": "Expected Attendance if applicable",
    "business_justification": "Text10",
    "student_signature_date": "Date1_af_date",
    "total_quote_cost_cents": "Total Quote Cost excluding sales tax",
}

FORMATTERS = {
    "total_quote_cost_cents": format_cents,
    "student_signature_date": format_date,
    "event_date": format_date,
}

TEXT_FIELD = "/Tx"


@dataclass
class PurchaseFormData:
    org_name: str
    contact_name: str
    contact_phone: str
    contact_email: str
    business_justification: str
    student_signature_date: date
    total_quote_cost_cents: int
    event_name: Optional[str] = None
    event_date: Optional[date] = None
    expected_attendance: Optional[str] = None

    def field_values(self) -> dict:
        """{template field name: display string} for every key that has a value."""
        values = {}
        for key, field_name in PURCHASE_FORM_FIELDS.items():
            raw = getattr(self, key)
            if raw is None or raw == "":
                continue
            fmt = FORMATTERS.get(key)
            values[field_name] = fmt(raw) if fmt else str(raw)
        return values


def check_template_fields(template_bytes: bytes) -> None:
    """
    Every field in PURCHASE_FORM_FIELDS must exist in the template as a text field.

    Raises PurchaseFormConfigurationError otherwise. This is a template/table
    mismatch, so it applies to every vendor alike.
    """
    try:
        reader = PdfReader(io.BytesIO(template_bytes))
        fields = reader.get_fields() or {}
    except Exception as e:
        raise PurchaseFormConfigurationError(f"Purchase form template could not be read: {e}") from e

    missing = [name for name in PURCHASE_FORM_FIELDS.values() if name not in fields]
    if missing:
        raise PurchaseFormConfigurationError(
            f"Purchase form is missing field(s): {', '.join(missing)}",
            details={"missing": missing},
        )

    wrong_type = [name for name in PURCHASE_FORM_FIELDS.values()
                  if fields[name].get("/FT") != TEXT_FIELD]
    if wrong_type:
        raise PurchaseFormConfigurationError(
            f"Purchase form field(s) are not text fields: {', '.join(wrong_type)}",
            details={"wrong_type": wrong_type},
        )


def fill_purchase_form(template_bytes: bytes, data: PurchaseFormData,
                       check_fields: bool = True) -> bytes:
    """Fill the purchase-request template. Returns the filled PDF bytes."""
    if check_fields:
        check_template_fields(template_bytes)

    reader = PdfReader(io.BytesIO(template_bytes))
    writer = PdfWriter()
    writer.append(reader)

    values = data.field_values()
    for page in writer.pages:
        writer.update_page_form_field_values(page, values, auto_regenerate=True)

    out = io.BytesIO()
    writer.write(out)
    log.debug("Purchase form filled for %s: %d fields", data.org_name, len(values))
    return out.getvalue()
