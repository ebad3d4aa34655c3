"""
Form submission boundary — hand a finished order to the external form bot.

The university's online purchase request is filled in by a separate
browser-automation program (the "sidecar"). This module owns the contract
with it:

  - build_form_payload()  — canonical order data + submitter inputs → JSON payload
  - parse_form_result()   — sidecar stdout → FormSubmissionResult
  - SidecarFormSubmitter  — runs `<command> --json <payload>` and parses the result

How the sidecar drives the browser is its own business.
"""

import json
import logging
import subprocess
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from orderforms.agents.remaining_items_excel import DEFAULT_ITEM_LIMIT, split_overflow_items
from orderforms.core.money import calculate_line_item_total, format_cents

log = logging.getLogger("orderforms.form_submitter")

COST_CENTER_TYPES = (
    "Student Organization Cost Center",
    "Jonsson School Student Council funding",
    "Other",
)

SUCCESS = "success"
ERROR = "error"


# ═══════════════════════════════════════════════════════════════════════════════
# PAYLOAD
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class FormInputs:
    """What the submitter types into the web form that the order data does not cover."""
    net_id: str
    advisor_name: str
    advisor_email: str
    event_name: str
    event_date: str                       # MM/DD/YYYY
    cost_center: str = COST_CENTER_TYPES[0]
    cost_center_other: Optional[str] = None

    def __post_init__(self):
        if self.cost_center not in COST_CENTER_TYPES:
            raise ValueError(f"Unknown cost center: {self.cost_center!r}")
        if self.cost_center == "Other" and not self.cost_center_other:
            raise ValueError('Cost center "Other" needs a value')

    def to_dict(self) -> dict:
        cost_center = {"type": self.cost_center}
        if self.cost_center == "Other":
            cost_center["value"] = self.cost_center_other
        return {
            "netID": self.net_id,
            "advisor": {"name": self.advisor_name, "email": self.advisor_email},
            "eventName": self.event_name,
            "eventDate": self.event_date,
            "costCenter": cost_center,
        }


def _item_to_dict(item) -> dict:
    data = {
        "name": item.name,
        "vendor": item.vendor,
        "quantity": item.quantity,
        "url": item.url,
        "pricePerUnitCents": item.price_per_unit_cents,
        "shippingAndHandlingCents": item.shipping_and_handling_cents,
    }
    if item.notes:
        data["notes"] = item.notes
    return data


def build_form_payload(request, form_inputs: FormInputs,
                       justification: Optional[str] = None) -> dict:
    """OrderRequest + FormInputs → the JSON-ready payload the sidecar reads."""
    order_data = {
        "items": [_item_to_dict(i) for i in request.items],
        "contactName": request.contact_name,
        "contactEmail": request.contact_email,
        "contactPhone": request.contact_phone,
        "orgName": request.org_name,
    }
    justification = justification or request.justification
    if justification:
        order_data["justification"] = justification
    if request.project:
        order_data["project"] = request.project
    if isinstance(request.request_date, date):
        order_data["requestDate"] = request.request_date.isoformat()
    return {"orderData": order_data, "formInputs": form_inputs.to_dict()}


def build_form_item_rows(items, limit: int = DEFAULT_ITEM_LIMIT) -> tuple:
    """
    (rows, remaining): what goes into the form's numbered item slots.

    Notes ride along in the name because the form has no notes slot.
    Items past the limit come back untouched for the overflow spreadsheet.
    """
    on_form, remaining = split_overflow_items(items, limit)
    rows = []
    for index, item in enumerate(on_form, start=1):
        rows.append({
            "slot": index,
            "name": f"{item.name} [NOTE: {item.notes}]" if item.notes else item.name,
            "url": item.url,
            "price": str(item.price_per_unit_cents),
            "quantity": str(item.quantity),
            "total": format_cents(calculate_line_item_total(item)),
        })
    return rows, remaining


# ═══════════════════════════════════════════════════════════════════════════════
# RESULT
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class FormSubmissionResult:
    status: str
    message: Optional[str] = None
    details: Optional[str] = None
    extra: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    def to_dict(self) -> dict:
        d = {"status": self.status, **self.extra}
        if self.message is not None:
            d["message"] = self.message
        if self.details is not None:
            d["details"] = self.details
        return d


def parse_form_result(stdout: str, stderr: str = "") -> FormSubmissionResult:
    """
    Read the sidecar's result from its stdout.

    The sidecar logs to stderr and prints one JSON object as its last stdout
    line. Anything else becomes an error result carrying stderr as details.
    """
    lines = [ln for ln in (stdout or "").splitlines() if ln.strip()]
    if not lines:
        return FormSubmissionResult(ERROR, "Form submitter produced no result",
                                    details=stderr.strip() or None)
    try:
        data = json.loads(lines[-1])
    except json.JSONDecodeError:
        return FormSubmissionResult(ERROR, "Form submitter returned invalid JSON",
                                    details=stderr.strip() or lines[-1])

    if not isinstance(data, dict) or data.get("status") not in (SUCCESS, ERROR):
        return FormSubmissionResult(ERROR, "Form submitter returned an unknown status",
                                    details=lines[-1])

    extra = {k: v for k, v in data.items() if k not in ("status", "message", "details")}
    return FormSubmissionResult(
        status=data["status"],
        message=data.get("message"),
        details=data.get("details"),
        extra=extra,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# SUBMITTER
# ═══════════════════════════════════════════════════════════════════════════════

class SidecarFormSubmitter:
    """Runs the sidecar as a subprocess: `<command...> --json <payload>`."""

    def __init__(self, command, timeout: int = 600):
        self.command = list(command) if isinstance(command, (list, tuple)) else [command]
        self.timeout = timeout

    def submit(self, payload: dict) -> FormSubmissionResult:
        args = self.command + ["--json", json.dumps(payload)]
        n_items = len(payload.get("orderData", {}).get("items", []))
        log.info("Submitting %d items via %s", n_items, self.command[0],
                 extra={"items": n_items})
        try:
            proc = subprocess.run(args, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as e:
            log.error("Form submitter not found: %s", e)
            return FormSubmissionResult(ERROR, "Form submitter not found", details=str(e))
        except subprocess.TimeoutExpired:
            log.error("Form submitter timed out after %ds", self.timeout)
            return FormSubmissionResult(ERROR, f"Form submitter timed out after {self.timeout}s")

        result = parse_form_result(proc.stdout, proc.stderr)
        if result.ok:
            log.info("Form submitted (exit %d)", proc.returncode)
        else:
            log.warning("Form submission failed (exit %d): %s", proc.returncode, result.message)
        return result
