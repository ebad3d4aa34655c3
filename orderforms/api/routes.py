"""
HTTP routes — validate / preview / generate for pasted order data.

All POST bodies are JSON with a "text" key holding the pasted rows.
Diagnostics come back as JSON; /generate returns a zip of the PDFs (plus
errors.txt when some vendors failed) and /overflow the spreadsheet of
items past the web form's item limit.
"""

import asyncio
import io
import logging
import threading
import time
import zipfile
from datetime import date

from flask import Blueprint, current_app, jsonify, request, send_file

from orderforms import __version__
from orderforms.agents.remaining_items_excel import (
    generate_remaining_items_excel, split_overflow_items,
)
from orderforms.core.config import file_template_resolver
from orderforms.core.errors import OrderFormsError
from orderforms.core.money import format_file_date
from orderforms.forms.order_forms import (
    PROJECT_NAMES, OrderRequest, build_project_justification, submit_pasted_orders,
)
from orderforms.forms.sinks import DirectorySink, MemorySink
from orderforms.intake.clipboard_parser import parse_clipboard_data
from orderforms.intake.grouping import preview_pdf_generation
from orderforms.intake.transformer import transform_rows
from orderforms.intake.validator import get_validation_summary, validate_data

log = logging.getLogger("orderforms.api")

bp = Blueprint("orders", __name__)

# The pipeline does not guard against overlapping submissions
_generate_lock = threading.Lock()

# Per-vendor failures ride along in the zip next to the PDFs that did build
ERRORS_FILENAME = "errors.txt"


def _pasted_text():
    body = request.get_json(silent=True) or {}
    return body, body.get("text") or ""


def _error(message, status, **extra):
    return jsonify({"ok": False, "error": message, **extra}), status


@bp.errorhandler(OrderFormsError)
def _handle_pipeline_error(e):
    log.error("Pipeline error on %s: %s", request.path, e.message,
              extra={"route": request.path, "method": request.method})
    return jsonify({"ok": False, **e.to_dict()}), 500


@bp.route("/api/health")
def api_health():
    profile = current_app.config["ORDERFORMS_PROFILE"]
    return jsonify({
        "ok": True,
        "version": __version__,
        "profile_complete": not profile.missing_contact_fields(),
        "form_item_limit": profile.form_item_limit,
        "projects": list(PROJECT_NAMES),
    })


@bp.route("/api/orders/validate", methods=["POST"])
def api_validate():
    """Parse + validate. Always 200; the verdict is in the body."""
    _, text = _pasted_text()
    parsed = parse_clipboard_data(text)
    body = {"ok": parsed.ok, "parse": parsed.to_dict(), "validation": None}
    if parsed.ok:
        validation = validate_data(parsed.rows)
        body["ok"] = validation.is_valid
        body["validation"] = validation.to_dict()
        body["summary"] = get_validation_summary(validation)
    log.info("Validated paste: %d rows", len(parsed.rows),
             extra={"route": request.path, "rows": len(parsed.rows)})
    return jsonify(body)


def _line_items(text):
    """(items, None) for clean input, (None, 422 response) otherwise."""
    parsed = parse_clipboard_data(text)
    if not parsed.ok:
        return None, _error("Could not parse pasted data", 422, parse=parsed.to_dict())
    validation = validate_data(parsed.rows)
    if not validation.is_valid:
        return None, _error(get_validation_summary(validation), 422, validation=validation.to_dict())
    items, transform_errors = transform_rows(parsed.rows)
    if transform_errors:
        return None, _error("Some rows could not be converted", 422, errors=transform_errors)
    return items, None


@bp.route("/api/orders/preview", methods=["POST"])
def api_preview():
    """Vendor breakdown for valid data; 422 with diagnostics otherwise."""
    _, text = _pasted_text()
    items, failure = _line_items(text)
    if failure:
        return failure
    return jsonify({"ok": True, **preview_pdf_generation(items)})


def _build_request(body, profile) -> OrderRequest:
    overrides = {}
    project = body.get("project") or profile.project or None
    justification = body.get("justification") or profile.justification or None
    if project in PROJECT_NAMES:
        display, text = build_project_justification(
            project, replace=body.get("justification") or None,
            append=body.get("justification_append") or None,
        )
        project, justification = display, text
    overrides["project"] = project
    overrides["justification"] = justification
    if body.get("request_date"):
        overrides["request_date"] = date.fromisoformat(body["request_date"])
    for key in ("event_name", "expected_attendance"):
        if body.get(key):
            overrides[key] = body[key]
    return OrderRequest.from_profile(profile, **overrides)


@bp.route("/api/orders/generate", methods=["POST"])
def api_generate():
    """Full submission → zip of merged PDFs (one per vendor)."""
    profile = current_app.config["ORDERFORMS_PROFILE"]
    body, text = _pasted_text()

    missing = profile.missing_contact_fields()
    if missing:
        return _error(f"Profile is missing: {', '.join(missing)}", 400)
    try:
        order_request = _build_request(body, profile)
    except ValueError as e:
        return _error(f"Bad request: {e}", 400)

    resolver = current_app.config.get("ORDERFORMS_TEMPLATE_RESOLVER") \
        or file_template_resolver(profile.resolved_purchase_form_path())
    sink = MemorySink()

    t0 = time.time()
    with _generate_lock:
        submission = asyncio.run(submit_pasted_orders(text, order_request, resolver, sink=sink))

    if not submission.documents:
        status = 422 if _is_input_problem(submission) else 500
        return jsonify({"ok": False, **submission.to_dict()}), status

    if body.get("save"):
        disk = DirectorySink(profile.resolved_output_dir())
        for doc in submission.documents:
            disk.write(doc)

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for filename, data in sink.files:
            zf.writestr(filename, data)
        if submission.errors:
            zf.writestr(ERRORS_FILENAME, "\n".join(submission.errors) + "\n")
    buf.seek(0)

    log.info("Generated %d document(s) in %dms", len(sink.files), int((time.time() - t0) * 1000),
             extra={"route": request.path, "documents": len(sink.files),
                    "errors": len(submission.errors)})
    response = send_file(
        buf, mimetype="application/zip", as_attachment=True,
        download_name=f"order forms {format_file_date(order_request.request_date or date.today())}.zip",
    )
    if submission.errors:
        response.headers["X-Order-Errors"] = str(len(submission.errors))
    return response


def _is_input_problem(submission) -> bool:
    """Bad pasted data (422) as opposed to a template or assembly failure (500)."""
    if not submission.parse.ok or submission.validation is None:
        return True
    if not submission.validation.is_valid:
        return True
    return any(e.startswith("Row ") or e.startswith("Item ") for e in submission.errors)


@bp.route("/api/orders/overflow", methods=["POST"])
def api_overflow():
    """Spreadsheet of the items that do not fit in the web form's item slots."""
    profile = current_app.config["ORDERFORMS_PROFILE"]
    body, text = _pasted_text()
    items, failure = _line_items(text)
    if failure:
        return failure

    _, remaining = split_overflow_items(items, profile.form_item_limit)
    if not remaining:
        return jsonify({"ok": True, "remaining": 0})
    project = body.get("project") or profile.project or None
    sheet = generate_remaining_items_excel(remaining, profile.org_name, PROJECT_NAMES.get(project, project))
    return send_file(io.BytesIO(sheet["buffer"]), mimetype=sheet["mime_type"],
                     as_attachment=True, download_name=sheet["name"])
