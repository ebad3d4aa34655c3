"""
Tests for forms/order_forms.py: orchestration, failure policy, full submission.

    generate_order_forms(request, resolver, isolate_failures=True) -> OrderFormsResult
    submit_pasted_orders(text, request, resolver, sink=None) -> SubmissionResult
"""
import asyncio
import io
import os
from datetime import date

import pytest
from pypdf import PdfReader

from conftest import build_template, make_item
from orderforms.forms import assembler
from orderforms.forms.order_forms import (
    GENERAL_JUSTIFICATION, PROJECT_NAMES, OrderRequest, build_project_justification,
    generate_order_forms, resolve_final_config, submit_pasted_orders,
)
from orderforms.forms.sinks import DirectorySink, MemorySink


def _request(items=(), **overrides):
    values = dict(items=list(items), org_name="Comet Robotics", contact_name="Jane Doe",
                  contact_email="jane.doe@utdallas.edu", contact_phone="(555) 555-0100",
                  request_date=date(2026, 3, 7))
    values.update(overrides)
    return OrderRequest(**values)


def _run(coro):
    return asyncio.run(coro)


# ═══════════════════════════════════════════════════════════════════════════════
# Config defaults + project presets
# ═══════════════════════════════════════════════════════════════════════════════

class TestResolveFinalConfig:

    def test_defaults(self):
        request_date, justification = resolve_final_config(_request(request_date=None))
        assert request_date == date.today()
        assert justification == GENERAL_JUSTIFICATION

    def test_explicit_values_kept(self):
        req = _request(justification="Custom.")
        assert resolve_final_config(req) == (date(2026, 3, 7), "Custom.")

    def test_from_profile(self, profile):
        req = OrderRequest.from_profile(profile, [make_item()], project="Sumo")
        assert req.org_name == "Comet Robotics"
        assert req.project == "Sumo"
        assert len(req.items) == 1


class TestProjectJustification:

    def test_stock_sentence(self):
        display, text = build_project_justification("Sumo")
        assert display == "SumoBots"
        assert text == ("These parts are needed for the SumoBots team to continue "
                        "research and development on their project.")

    def test_append(self):
        _, text = build_project_justification("VexU", append="Competition in April.")
        assert text.endswith("their project.\n\nCompetition in April.")

    def test_replace(self):
        assert build_project_justification("SRP", replace="Rover wheels.") == \
            ("Solis Rover Project", "Rover wheels.")

    def test_unknown_project(self):
        with pytest.raises(KeyError):
            build_project_justification("Blimp")

    def test_all_projects_have_display_names(self):
        assert PROJECT_NAMES["Full Combat"] == "Full Combat Robots (Ants, Beetles, etc.)"
        assert len(PROJECT_NAMES) == 8


# ═══════════════════════════════════════════════════════════════════════════════
# generate_order_forms
# ═══════════════════════════════════════════════════════════════════════════════

class TestGenerateOrderForms:

    def test_one_document_per_vendor(self, template_resolver):
        items = [make_item(vendor="Acme"), make_item(vendor="Pololu"), make_item(vendor="Acme")]
        result = _run(generate_order_forms(_request(items), template_resolver))
        assert result.ok
        assert [d.vendor for d in result.documents] == ["Acme", "Pololu"]
        assert [d.item_count for d in result.documents] == [2, 1]
        assert sum(d.item_count for d in result.documents) == len(items)

    def test_vendor_total_on_form(self, template_resolver):
        items = [make_item(vendor="Acme", quantity=2, price_cents=500, shipping_cents=100),
                 make_item(vendor="Pololu", price_cents=99999)]
        result = _run(generate_order_forms(_request(items), template_resolver))
        fields = PdfReader(io.BytesIO(result.documents[0].pdf_bytes)).get_fields()
        assert fields["Total Quote Cost excluding sales tax"]["/V"] == "$11.00"

    def test_async_resolver(self, template_bytes):
        async def resolver():
            await asyncio.sleep(0)
            return template_bytes

        result = _run(generate_order_forms(_request([make_item()]), resolver))
        assert len(result.documents) == 1

    def test_resolver_failure_is_fatal(self):
        def resolver():
            raise FileNotFoundError("purchase_form.pdf")

        result = _run(generate_order_forms(_request([make_item()]), resolver))
        assert result.documents == []
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Purchase form template unavailable")

    def test_misconfigured_template_is_fatal(self):
        template = build_template(["Organization Name"])
        result = _run(generate_order_forms(
            _request([make_item(vendor="A"), make_item(vendor="B")]), lambda: template))
        assert result.documents == []
        assert len(result.errors) == 1
        assert "missing field(s)" in result.errors[0]

    def test_vendor_failure_isolated(self, template_resolver, monkeypatch):
        real = assembler.render_order_list_pdf

        def flaky(vendor, items, request_date):
            if vendor == "Broken":
                raise RuntimeError("render blew up")
            return real(vendor, items, request_date)

        monkeypatch.setattr(assembler, "render_order_list_pdf", flaky)
        items = [make_item(vendor="Acme"), make_item(vendor="Broken"), make_item(vendor="Pololu")]
        result = _run(generate_order_forms(_request(items), template_resolver))
        assert [d.vendor for d in result.documents] == ["Acme", "Pololu"]
        assert result.errors == ["Broken: render blew up"]
        assert not result.ok

    def test_vendor_failure_aborts_when_not_isolated(self, template_resolver, monkeypatch):
        def broken(vendor, items, request_date):
            raise RuntimeError("render blew up")

        monkeypatch.setattr(assembler, "render_order_list_pdf", broken)
        result = _run(generate_order_forms(
            _request([make_item()]), template_resolver, isolate_failures=False))
        assert result.documents == []
        assert result.errors == ["Acme: render blew up"]

    def test_sibling_vendors_cancelled_when_not_isolated(self, template_resolver, monkeypatch):
        from orderforms.core.errors import DocumentAssemblyError
        from orderforms.forms import order_forms

        cancelled = []

        async def fake_assemble(vendor, *args, **kwargs):
            if vendor == "Broken":
                raise DocumentAssemblyError(vendor, "render blew up")
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                cancelled.append(vendor)
                raise

        monkeypatch.setattr(order_forms, "assemble_vendor_document", fake_assemble)

        async def scenario():
            items = [make_item(vendor="Acme"), make_item(vendor="Broken"), make_item(vendor="Pololu")]
            result = await generate_order_forms(_request(items), template_resolver,
                                                isolate_failures=False)
            return result, list(cancelled)

        result, cancelled_before_return = _run(scenario())
        assert result.errors == ["Broken: render blew up"]
        assert cancelled_before_return == ["Acme", "Pololu"]

    @pytest.mark.parametrize("first,second", [("A/B", "AB"), ("Acme", "acme")])
    def test_colliding_filenames_made_unique(self, template_resolver, tmp_path, first, second):
        items = [make_item(vendor=first), make_item(vendor=second)]
        result = _run(generate_order_forms(_request(items), template_resolver))
        names = [d.filename for d in result.documents]
        assert names[0] == "Comet Robotics order at " + first.replace("/", "") + " 03-07-2026.pdf"
        assert names[1] == "Comet Robotics order at " + second + " 03-07-2026 (2).pdf"

        sink = DirectorySink(str(tmp_path / "out"))
        for doc in result.documents:
            sink.write(doc)
        assert len(os.listdir(tmp_path / "out")) == 2

    def test_distinct_vendors_keep_plain_names(self, template_resolver):
        items = [make_item(vendor="Acme"), make_item(vendor="Pololu")]
        result = _run(generate_order_forms(_request(items), template_resolver))
        assert [d.filename for d in result.documents] == [
            "Comet Robotics order at Acme 03-07-2026.pdf",
            "Comet Robotics order at Pololu 03-07-2026.pdf",
        ]

    def test_no_items(self, template_resolver):
        result = _run(generate_order_forms(_request([]), template_resolver))
        assert result.documents == []
        assert result.ok


# ═══════════════════════════════════════════════════════════════════════════════
# submit_pasted_orders
# ═══════════════════════════════════════════════════════════════════════════════

class TestSubmitPastedOrders:

    def test_full_pipeline_to_directory(self, sample_paste, template_resolver, tmp_path):
        sink = DirectorySink(str(tmp_path / "out"))
        result = _run(submit_pasted_orders(sample_paste, _request(project="SumoBots"),
                                           template_resolver, sink=sink))
        assert result.ok
        assert sorted(os.listdir(tmp_path / "out")) == [
            "Comet Robotics SumoBots order at Acme 03-07-2026.pdf",
            "Comet Robotics SumoBots order at Pololu 03-07-2026.pdf",
        ]
        assert all(os.path.getsize(p) > 0 for p in result.written)

    def test_structural_error_stops(self, template_resolver):
        result = _run(submit_pasted_orders("   ", _request(), template_resolver))
        assert result.errors == ["No data provided"]
        assert result.validation is None
        assert not result.ok

    def test_validation_error_stops(self, template_resolver, ids):
        sink = MemorySink()
        text = "\tAcme\t\thttps://acme.test\t1\t1"
        result = _run(submit_pasted_orders(text, _request(), template_resolver,
                                           sink=sink, id_generator=ids))
        assert not result.validation.is_valid
        assert result.validation.errors[0].id == "diag-1"
        assert result.documents == []
        assert sink.files == []

    def test_warnings_do_not_block(self, template_resolver):
        text = "Widget\tAcme\t\tnot a url\t1\t1\t4.00"
        result = _run(submit_pasted_orders(text, _request(), template_resolver))
        assert result.validation.is_valid
        assert len(result.validation.warnings) == 2
        assert len(result.documents) == 1

    def test_transform_error_stops(self, template_resolver):
        # quantity 0 validates but cannot become a line item
        text = "Widget\tAcme\t\thttps://acme.test\t1\t0"
        result = _run(submit_pasted_orders(text, _request(), template_resolver))
        assert result.validation.is_valid
        assert result.errors == ["Row 1: Missing required fields (quantity)"]
        assert result.documents == []

    def test_to_dict(self, sample_paste, template_resolver):
        d = _run(submit_pasted_orders(sample_paste, _request(), template_resolver)).to_dict()
        assert d["ok"] is True
        assert [doc["vendor"] for doc in d["documents"]] == ["Acme", "Pololu"]
        assert d["parse"]["headers"][0] == "Name"
