"""
Order Forms Orchestrator
========================
Line items → one merged purchase-order PDF per vendor.

Flow:
  1. resolve_final_config()   — request date + justification defaults
  2. template resolver        — purchase form bytes, fetched once per run
  3. check_template_fields()  — template vs. field table, once per run (fatal)
  4. assemble_vendor_document — one task per vendor group, run concurrently
  5. OrderFormsResult         — documents + error messages, nothing dropped

submit_pasted_orders() drives the whole pipeline from pasted text,
including parse/validate/transform, and hands documents to a sink.

The core does not guard against overlapping submissions; callers that can
receive concurrent requests (the HTTP layer) serialize them.
"""

import asyncio
import inspect
import logging
import os
import time
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Awaitable, Callable, Optional, Union

from orderforms.core.errors import (
    DocumentAssemblyError, OrderFormsError, PurchaseFormConfigurationError,
    TemplateUnavailableError,
)
from orderforms.core.ids import IdGenerator
from orderforms.forms.assembler import (
    GeneratedDocument, assemble_vendor_document, build_form_data,
)
from orderforms.forms.purchase_form import check_template_fields
from orderforms.intake.clipboard_parser import ParseResult, parse_clipboard_data
from orderforms.intake.grouping import group_items_by_vendor
from orderforms.intake.transformer import transform_rows, validate_order_line_items
from orderforms.intake.validator import ValidationResult, validate_data

log = logging.getLogger("orderforms.orchestrator")

TemplateResolver = Callable[[], Union[bytes, Awaitable[bytes]]]

GENERAL_JUSTIFICATION = "These parts are needed for continued research and development on club projects."

# Sheet name on the club's master order list → display name on the paperwork
PROJECT_NAMES = {
    "General": "General",
    "Marketing": "Marketing",
    "Full Combat": "Full Combat Robots (Ants, Beetles, etc.)",
    "Plant": "Plant Combat Robots",
    "Sumo": "SumoBots",
    "VexU": "VEX U",
    "ChessBots": "ChessBots",
    "SRP": "Solis Rover Project",
}


def build_project_justification(project: str, replace: Optional[str] = None,
                                append: Optional[str] = None) -> tuple:
    """
    (display name, justification) for one of the club's projects.

    replace= swaps the stock sentence out entirely; append= adds a paragraph
    after it. Unknown projects raise KeyError.
    """
    if replace is not None and append is not None:
        raise ValueError("Pass replace= or append=, not both")
    display = PROJECT_NAMES[project]
    if replace is not None:
        return display, replace
    text = (f"These parts are needed for the {display} team to continue "
            f"research and development on their project.")
    if append:
        text += f"\n\n{append}"
    return display, text


# ═══════════════════════════════════════════════════════════════════════════════
# REQUEST / RESULT
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class OrderRequest:
    items: list
    org_name: str
    contact_name: str
    contact_email: str
    contact_phone: str
    project: Optional[str] = None
    justification: Optional[str] = None
    request_date: Optional[date] = None
    event_name: Optional[str] = None
    event_date: Optional[date] = None
    expected_attendance: Optional[str] = None

    @classmethod
    def from_profile(cls, profile, items=(), **overrides) -> "OrderRequest":
        """Contact details from a config Profile; anything else via keyword."""
        values = dict(
            items=list(items),
            org_name=profile.org_name,
            contact_name=profile.contact_name,
            contact_email=profile.contact_email,
            contact_phone=profile.contact_phone,
            project=profile.project or None,
            justification=profile.justification or None,
        )
        values.update(overrides)
        return cls(**values)


def resolve_final_config(request: OrderRequest) -> tuple:
    """(request_date, justification) with defaults applied: today, the general sentence."""
    request_date = request.request_date or date.today()
    justification = request.justification or GENERAL_JUSTIFICATION
    return request_date, justification


@dataclass
class OrderFormsResult:
    documents: list = field(default_factory=list)
    errors: list = field(default_factory=list)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "documents": [d.to_dict() for d in self.documents],
            "errors": list(self.errors),
            "duration_ms": self.duration_ms,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# GENERATION
# ═══════════════════════════════════════════════════════════════════════════════

async def _resolve_template(resolver: TemplateResolver) -> bytes:
    try:
        result = resolver()
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        raise TemplateUnavailableError(f"Purchase form template unavailable: {e}") from e
    if not result:
        raise TemplateUnavailableError("Purchase form template unavailable: resolver returned no data")
    return bytes(result)


def _dedupe_filenames(documents):
    """
    Suffix " (2)", " (3)" ... onto filenames that repeat within one run.

    Vendor keys that differ only by stripped characters or by case would
    otherwise overwrite each other on disk and in the zip.
    """
    seen = set()
    for doc in documents:
        stem, ext = os.path.splitext(doc.filename)
        name, n = doc.filename, 1
        while name.lower() in seen:
            n += 1
            name = f"{stem} ({n}){ext}"
        seen.add(name.lower())
        doc.filename = name


async def generate_order_forms(
    request: OrderRequest,
    resolver: TemplateResolver,
    isolate_failures: bool = True,
    logger: Optional[logging.Logger] = None,
) -> OrderFormsResult:
    """
    Build one merged PDF per vendor.

    Template and configuration problems end the run with no documents.
    A failure while assembling one vendor's document is recorded as
    "<vendor>: <message>" and the other vendors still complete; with
    isolate_failures=False the first such failure ends the run instead.
    """
    logger = logger or log
    t0 = time.time()
    result = OrderFormsResult()

    request_date, justification = resolve_final_config(request)
    grouped = group_items_by_vendor(request.items)

    try:
        template_bytes = await _resolve_template(resolver)
        check_template_fields(template_bytes)
    except (TemplateUnavailableError, PurchaseFormConfigurationError) as e:
        logger.error("Order form generation aborted: %s", e.message)
        result.errors.append(e.message)
        result.duration_ms = int((time.time() - t0) * 1000)
        return result

    profile_fields = {
        "org_name": request.org_name,
        "contact_name": request.contact_name,
        "contact_email": request.contact_email,
        "contact_phone": request.contact_phone,
        "event_name": request.event_name,
        "event_date": request.event_date,
        "expected_attendance": request.expected_attendance,
    }

    tasks = [
        asyncio.ensure_future(assemble_vendor_document(
            vendor, items, template_bytes,
            build_form_data(items, profile_fields, justification, request_date),
            request_date, project=request.project, logger=logger,
        ))
        for vendor, items in grouped.items()
    ]

    if isolate_failures:
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        for vendor, outcome in zip(grouped, outcomes):
            if isinstance(outcome, GeneratedDocument):
                result.documents.append(outcome)
            elif isinstance(outcome, OrderFormsError):
                result.errors.append(f"{vendor}: {outcome.message}")
            elif isinstance(outcome, Exception):
                result.errors.append(f"{vendor}: {outcome}")
            else:
                raise outcome
    else:
        try:
            result.documents = list(await asyncio.gather(*tasks))
        except DocumentAssemblyError as e:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.error("Order form generation aborted by %s", e.vendor)
            result.errors.append(f"{e.vendor}: {e.message}")
            result.documents = []

    _dedupe_filenames(result.documents)
    result.duration_ms = int((time.time() - t0) * 1000)
    logger.info("Generated %d/%d vendor documents in %dms",
                len(result.documents), len(grouped), result.duration_ms,
                extra={"documents": len(result.documents), "errors": len(result.errors),
                       "duration_ms": result.duration_ms})
    return result


# ═══════════════════════════════════════════════════════════════════════════════
# FULL SUBMISSION
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class SubmissionResult:
    parse: ParseResult
    validation: Optional[ValidationResult] = None
    errors: list = field(default_factory=list)
    documents: list = field(default_factory=list)
    written: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and bool(self.documents)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "parse": self.parse.to_dict(),
            "validation": self.validation.to_dict() if self.validation else None,
            "errors": list(self.errors),
            "documents": [d.to_dict() for d in self.documents],
            "written": list(self.written),
        }


async def submit_pasted_orders(
    text: str,
    request: OrderRequest,
    resolver: TemplateResolver,
    sink=None,
    id_generator: Optional[IdGenerator] = None,
    isolate_failures: bool = True,
    logger: Optional[logging.Logger] = None,
) -> SubmissionResult:
    """
    Pasted text → documents, stopping at the first stage that blocks.

    Structural parse errors, validation errors and transform errors all
    stop before any PDF is built and come back as data. request.items is
    replaced by the transformed rows. Documents go to sink.write() when a
    sink is given.
    """
    logger = logger or log

    parsed = parse_clipboard_data(text)
    submission = SubmissionResult(parse=parsed)
    if not parsed.ok:
        submission.errors.extend(parsed.errors)
        return submission

    validation = validate_data(parsed.rows, id_generator=id_generator)
    submission.validation = validation
    if not validation.is_valid:
        submission.errors.append(
            f"{len(validation.errors)} validation error(s) must be fixed before submitting")
        return submission

    items, transform_errors = transform_rows(parsed.rows)
    if transform_errors:
        submission.errors.extend(transform_errors)
        return submission

    check = validate_order_line_items(items)
    if not check["ok"]:
        submission.errors.extend(check["errors"])
        return submission

    logger.info("Submitting %d items", len(items), extra={"items": len(items), "rows": len(parsed.rows)})
    generated = await generate_order_forms(
        replace(request, items=items), resolver,
        isolate_failures=isolate_failures, logger=logger,
    )
    submission.documents = generated.documents
    submission.errors.extend(generated.errors)

    if sink is not None:
        for doc in generated.documents:
            submission.written.append(sink.write(doc))
    return submission
