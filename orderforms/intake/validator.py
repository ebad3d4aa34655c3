"""
Field validation for parsed order rows.

Every cell of every row is checked against its FieldSpec, in column order.
Errors block submission; warnings are advisory. The whole dataset is
re-validated from scratch after every edit; datasets are tens of rows.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlsplit

from orderforms.core.ids import IdGenerator, uuid_ids
from orderforms.core.money import parse_amount
from orderforms.intake.schema import (
    MAX_STRING_LENGTH, NON_NEGATIVE_KEYS, FieldSpec, FieldType,
)

log = logging.getLogger("orderforms.validator")

ERROR = "error"
WARNING = "warning"

TAX_EXEMPT_NOTICE = ("Student organizations do not pay sales tax, "
                     "so this should be zero or empty.")

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")
_HOST_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)*\.?$")


@dataclass(frozen=True)
class ValidationError:
    row_index: int          # 1-based row number
    field_label: str
    raw_value: str
    message: str
    severity: str           # "error" | "warning"
    id: str

    def to_dict(self) -> dict:
        return {
            "row": self.row_index,
            "field": self.field_label,
            "value": self.raw_value,
            "error": self.message,
            "severity": self.severity,
            "id": self.id,
        }


@dataclass
class ValidationResult:
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    valid_row_count: int = 0
    total_row_count: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def field_has_error(self, row_index: int, field_label: str) -> bool:
        return any(e.row_index == row_index and e.field_label == field_label
                   for e in self.errors)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "valid_row_count": self.valid_row_count,
            "total_row_count": self.total_row_count,
        }


def validate_data(rows, id_generator: Optional[IdGenerator] = None) -> ValidationResult:
    """Validate every row; isValid is true iff no error-severity diagnostics exist."""
    new_id = id_generator or uuid_ids
    result = ValidationResult(total_row_count=len(rows))

    for index, row in enumerate(rows):
        row_number = index + 1
        row_ok = True
        for spec, value in row:
            for diag in validate_field_value(value, spec, row_number, new_id):
                if diag.severity == ERROR:
                    result.errors.append(diag)
                    row_ok = False
                else:
                    result.warnings.append(diag)
        if row_ok:
            result.valid_row_count += 1

    log.debug("Validated %d rows: %d errors, %d warnings",
              result.total_row_count, len(result.errors), len(result.warnings))
    return result


def validate_field_value(value: str, spec: FieldSpec, row_number: int,
                         new_id: IdGenerator = uuid_ids) -> list:
    """Diagnostics for one cell. Required-and-empty short-circuits everything else."""
    value = value or ""
    trimmed = value.strip()
    diags = []

    def add(message, severity):
        diags.append(ValidationError(
            row_index=row_number, field_label=spec.label, raw_value=value,
            message=message, severity=severity, id=new_id(),
        ))

    if not trimmed:
        if spec.required:
            add(f'Required field "{spec.label}" is empty', ERROR)
        return diags

    number = parse_amount(trimmed) if spec.type is FieldType.NUMBER else None

    # ── Type rules ──
    if spec.type is FieldType.NUMBER:
        if number is None:
            add(f'"{spec.label}" must be a valid number', ERROR)
        elif number < 0 and spec.key in NON_NEGATIVE_KEYS:
            add(f'"{spec.label}" cannot be negative', ERROR)

    elif spec.type is FieldType.URL:
        if not is_valid_url(trimmed):
            add(f'"{spec.label}" must be a valid URL', WARNING)

    elif spec.type is FieldType.STRING:
        if len(trimmed) > MAX_STRING_LENGTH:
            add(f'"{spec.label}" is too long (max {MAX_STRING_LENGTH} characters)', WARNING)

    # ── Field-specific rules ──
    if number is not None:
        if spec.key == "quantity" and number != number.to_integral_value():
            add(f'"{spec.label}" should be a whole number', WARNING)
        if spec.key == "tax" and number != 0:
            add(f'"{spec.label}" has a non-zero value. {TAX_EXEMPT_NOTICE}', WARNING)

    return diags


# ═══════════════════════════════════════════════════════════════════════════════
# URLS
# ═══════════════════════════════════════════════════════════════════════════════

def _parses_as_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return False
    if not parts.netloc or any(ch.isspace() for ch in value):
        return False
    host = parts.hostname or ""
    if host.startswith("[") or ":" in host:
        return True  # IPv6 literal
    return bool(_HOST_RE.match(host))


def is_valid_url(value: str) -> bool:
    """Absolute URL as typed, or a bare host/path that works once https:// is added."""
    if _parses_as_url(value):
        return True
    if "://" not in value:
        return _parses_as_url(f"https://{value}")
    return False


# ═══════════════════════════════════════════════════════════════════════════════
# DISPLAY
# ═══════════════════════════════════════════════════════════════════════════════

def format_validation_errors(errors) -> list:
    """'Row 3: Required field "Name" is empty' lines for display."""
    lines = []
    for e in errors:
        if e.row_index == -1:
            lines.append(e.message)
        else:
            lines.append(f"Row {e.row_index}: {e.message}")
    return lines


def get_validation_summary(result: ValidationResult) -> str:
    if result.is_valid:
        return f"All {result.total_row_count} rows are valid"

    parts = []
    n_err, n_warn = len(result.errors), len(result.warnings)
    if n_err:
        parts.append(f"{n_err} error{'s' if n_err != 1 else ''}")
    if n_warn:
        parts.append(f"{n_warn} warning{'s' if n_warn != 1 else ''}")
    return f"{', '.join(parts)} • {result.valid_row_count}/{result.total_row_count} rows valid"
