"""
Per-vendor document assembly: order list + filled purchase form → one PDF.

The order list and the purchase form do not depend on each other, so
assemble_vendor_document() builds them concurrently and merges once both
are done. Everything runs on the event loop thread; each step yields
before it starts so vendor tasks interleave.
"""

import asyncio
import io
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from pypdf import PdfReader, PdfWriter

from orderforms.core.errors import DocumentAssemblyError
from orderforms.core.money import calculate_total_cents, format_file_date
from orderforms.forms.order_list_pdf import render_order_list_pdf
from orderforms.forms.purchase_form import PurchaseFormData, fill_purchase_form

log = logging.getLogger("orderforms.assembler")

_ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')


@dataclass
class GeneratedDocument:
    vendor: str
    pdf_bytes: bytes
    item_count: int
    filename: str
    request_date: date

    def to_dict(self) -> dict:
        """Metadata only; the bytes go to a sink, not into JSON."""
        return {
            "vendor": self.vendor,
            "item_count": self.item_count,
            "filename": self.filename,
            "request_date": self.request_date.isoformat(),
            "size": len(self.pdf_bytes),
        }


def merge_pdfs(documents) -> bytes:
    """Concatenate PDFs in order: pages of later documents follow the first."""
    if not documents:
        raise ValueError("merge_pdfs needs at least one document")
    writer = PdfWriter()
    for pdf_bytes in documents:
        writer.append(PdfReader(io.BytesIO(pdf_bytes)))
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def _clean_segment(value: Optional[str]) -> str:
    return _ILLEGAL_FILENAME_CHARS.sub("", value or "").strip()


def generate_pdf_name(vendor: str, request_date: date,
                      org_name: Optional[str] = None, project: Optional[str] = None) -> str:
    """'Comet Robotics Sumo order at Acme 03-07-2026.pdf'. Org and project are optional."""
    parts = [_clean_segment(org_name), _clean_segment(project), "order at",
             _clean_segment(vendor), format_file_date(request_date)]
    return " ".join(p for p in parts if p) + ".pdf"


async def _step(fn, *args):
    await asyncio.sleep(0)
    return fn(*args)


async def assemble_vendor_document(
    vendor: str,
    items,
    template_bytes: bytes,
    form_data: PurchaseFormData,
    request_date: date,
    project: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> GeneratedDocument:
    """
    Build the merged document for one vendor group.

    The template must already have passed check_template_fields(); a
    failure here belongs to this vendor only and is raised as
    DocumentAssemblyError.
    """
    logger = logger or log
    try:
        order_list, purchase_form = await asyncio.gather(
            _step(render_order_list_pdf, vendor, items, request_date),
            _step(fill_purchase_form, template_bytes, form_data, False),
        )
        merged = await _step(merge_pdfs, [purchase_form, order_list])
    except DocumentAssemblyError:
        raise
    except Exception as e:
        logger.error("Document assembly failed for %s: %s", vendor, e,
                     extra={"vendor": vendor})
        raise DocumentAssemblyError(vendor, str(e)) from e

    doc = GeneratedDocument(
        vendor=vendor,
        pdf_bytes=merged,
        item_count=len(items),
        filename=generate_pdf_name(vendor, request_date, form_data.org_name, project),
        request_date=request_date,
    )
    logger.info("Assembled %s (%d items, %d bytes)", doc.filename, doc.item_count,
                len(merged), extra={"vendor": vendor, "items": doc.item_count})
    return doc


def build_form_data(items, profile_fields: dict, justification: str,
                    request_date: date) -> PurchaseFormData:
    """Purchase-form values for one vendor group; the quoted total is that vendor's items only."""
    return PurchaseFormData(
        org_name=profile_fields.get("org_name", ""),
        contact_name=profile_fields.get("contact_name", ""),
        contact_phone=profile_fields.get("contact_phone", ""),
        contact_email=profile_fields.get("contact_email", ""),
        business_justification=justification,
        student_signature_date=request_date,
        total_quote_cost_cents=calculate_total_cents(items),
        event_name=profile_fields.get("event_name") or None,
        event_date=profile_fields.get("event_date") or None,
        expected_attendance=profile_fields.get("expected_attendance") or None,
    )
