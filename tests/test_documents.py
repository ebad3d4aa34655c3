"""
Tests for forms/: order-list rendering, purchase-form filling, merging, naming.

PDFs are inspected with pypdf; the purchase form template is the
reportlab-built stand-in from conftest.build_template().
"""
import asyncio
import io
from datetime import date

import pytest
from pypdf import PdfReader

from conftest import build_template, make_item
from orderforms.core.errors import DocumentAssemblyError, PurchaseFormConfigurationError
from orderforms.forms.assembler import (
    assemble_vendor_document, build_form_data, generate_pdf_name, merge_pdfs,
)
from orderforms.forms.order_list_pdf import render_order_list_pdf
from orderforms.forms.purchase_form import (
    PURCHASE_FORM_FIELDS, PurchaseFormData, check_template_fields, fill_purchase_form,
)


def _reader(pdf_bytes):
    return PdfReader(io.BytesIO(pdf_bytes))


def _text(pdf_bytes):
    return "\n".join(page.extract_text() or "" for page in _reader(pdf_bytes).pages)


def _form_data(**overrides):
    values = dict(
        org_name="Comet Robotics", contact_name="Jane Doe", contact_phone="(555) 555-0100",
        contact_email="jane.doe@utdallas.edu", business_justification="For the robot.",
        student_signature_date=date(2026, 3, 7), total_quote_cost_cents=123456,
    )
    values.update(overrides)
    return PurchaseFormData(**values)


# ═══════════════════════════════════════════════════════════════════════════════
# Order list
# ═══════════════════════════════════════════════════════════════════════════════

class TestOrderList:

    def test_single_page(self, request_date):
        pdf = render_order_list_pdf("Acme", [make_item(quantity=3, shipping_cents=250)], request_date)
        assert pdf.startswith(b"%PDF")
        assert len(_reader(pdf).pages) == 1
        text = _text(pdf)
        assert "Requested Items" in text
        assert "Vendor: Acme" in text
        assert "Request Date: 3/7/2026" in text
        assert "$32.50" in text

    def test_multi_page_repeats_header(self, request_date):
        items = [make_item(name=f"Part {i}") for i in range(60)]
        pdf = render_order_list_pdf("Acme", items, request_date)
        reader = _reader(pdf)
        assert len(reader.pages) >= 2
        assert "$/Unit" in reader.pages[1].extract_text()
        assert "Total: $600.00" in _text(pdf)

    def test_long_name_and_url_wrap(self, request_date):
        item = make_item(name="Very long product name " * 8,
                         url="https://acme.test/" + "x" * 300)
        pdf = render_order_list_pdf("Acme", [item], request_date)
        assert len(_reader(pdf).pages) == 1

    def test_url_is_a_link(self, request_date):
        pdf = render_order_list_pdf("Acme", [make_item()], request_date)
        annots = _reader(pdf).pages[0].get("/Annots") or []
        uris = [a.get_object()["/A"]["/URI"] for a in annots]
        assert "https://acme.test/widget" in uris


# ═══════════════════════════════════════════════════════════════════════════════
# Purchase form
# ═══════════════════════════════════════════════════════════════════════════════

class TestPurchaseForm:

    def test_template_check_passes(self, template_bytes):
        check_template_fields(template_bytes)

    def test_missing_field_is_fatal(self):
        names = [n for n in PURCHASE_FORM_FIELDS.values() if n != "Text10"]
        with pytest.raises(PurchaseFormConfigurationError) as exc:
            check_template_fields(build_template(names))
        assert "Text10" in exc.value.message

    def test_non_text_field_is_fatal(self):
        names = [n for n in PURCHASE_FORM_FIELDS.values() if n != "Date1_af_date"]
        with pytest.raises(PurchaseFormConfigurationError) as exc:
            check_template_fields(build_template(names, checkbox_names=["Date1_af_date"]))
        assert "not text fields" in exc.value.message

    def test_unreadable_template(self):
        with pytest.raises(PurchaseFormConfigurationError):
            check_template_fields(b"not a pdf")

    def test_fill_formats_values(self, template_bytes):
        filled = fill_purchase_form(template_bytes, _form_data())
        fields = _reader(filled).get_fields()
        assert fields["Organization Name"]["/V"] == "Comet Robotics"
        assert fields["Text10"]["/V"] == "For the robot."
        assert fields["Date1_af_date"]["/V"] == "3/7/2026"
        assert fields["Total Quote Cost excluding sales tax"]["/V"] == "$1,234.56"

    def test_optional_event_fields(self, template_bytes):
        filled = fill_purchase_form(template_bytes, _form_data(
            event_name="Expo", event_date=date(2026, 4, 1), expected_attendance="40"))
        fields = _reader(filled).get_fields()
        assert fields["Event Name if applicable"]["/V"] == "Expo"
        assert fields["Event Date if applicable"]["/V"] == "4/1/2026"

    def test_field_values_skip_empty(self):
        values = _form_data().field_values()
        assert "Event Name if applicable" not in values
        assert values["Contact UTD email"] == "jane.doe@utdallas.edu"


# ═══════════════════════════════════════════════════════════════════════════════
# Merge + naming
# ═══════════════════════════════════════════════════════════════════════════════

class TestMergeAndName:

    def test_merge_order(self, template_bytes, request_date):
        order_list = render_order_list_pdf("Acme", [make_item()], request_date)
        merged = merge_pdfs([template_bytes, order_list])
        pages = _reader(merged).pages
        assert len(pages) == 2
        assert "Purchase Form" in pages[0].extract_text()
        assert "Requested Items" in pages[1].extract_text()

    def test_merge_empty_is_error(self):
        with pytest.raises(ValueError):
            merge_pdfs([])

    def test_name_full(self, request_date):
        assert generate_pdf_name("Acme", request_date, "Comet Robotics", "SumoBots") == \
            "Comet Robotics SumoBots order at Acme 03-07-2026.pdf"

    def test_name_without_org_or_project(self, request_date):
        assert generate_pdf_name("Acme", request_date) == "order at Acme 03-07-2026.pdf"

    def test_name_strips_illegal_chars(self, request_date):
        name = generate_pdf_name('Ac/me: "Co"?', request_date, "Comet|Robotics", "A*B<C>")
        assert name == "CometRobotics ABC order at Acme Co 03-07-2026.pdf"


class TestAssembleVendorDocument:

    def test_assembles(self, template_bytes, request_date):
        items = [make_item(quantity=2), make_item(name="Gear", price_cents=250)]
        form_data = build_form_data(items, {"org_name": "Comet Robotics"}, "Because.", request_date)
        assert form_data.total_quote_cost_cents == 2250

        doc = asyncio.run(assemble_vendor_document(
            "Acme", items, template_bytes, form_data, request_date, project="SumoBots"))
        assert doc.vendor == "Acme"
        assert doc.item_count == 2
        assert doc.request_date == request_date
        assert doc.filename == "Comet Robotics SumoBots order at Acme 03-07-2026.pdf"
        assert len(_reader(doc.pdf_bytes).pages) == 2

    def test_bad_template_is_vendor_failure(self, request_date):
        items = [make_item()]
        form_data = build_form_data(items, {}, "Because.", request_date)
        with pytest.raises(DocumentAssemblyError) as exc:
            asyncio.run(assemble_vendor_document("Acme", items, b"garbage", form_data, request_date))
        assert exc.value.vendor == "Acme"
