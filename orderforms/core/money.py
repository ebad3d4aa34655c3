"""
Currency and date helpers shared by validation, transformation, and PDFs.

All money is integer cents. Dollar strings only exist at the edges:
pasted input on the way in, PDF text and spreadsheet cells on the way out.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from typing import Iterable, Optional, Union

_CURRENCY_NOISE = re.compile(r"[$,\s]")
_CENT = Decimal("0.01")


def clean_amount(raw: str) -> str:
    """Strip dollar signs, thousands separators, and whitespace."""
    return _CURRENCY_NOISE.sub("", raw or "")


def parse_amount(raw: str) -> Optional[Decimal]:
    """'$1,234.50' → Decimal('1234.50'). None unless it is a finite amount that fits in whole cents."""
    cleaned = clean_amount(raw)
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    # Whole cents must fit in the context precision or quantize() raises
    if value and value.adjusted() + 3 > getcontext().prec:
        return None
    return value


def dollars_to_cents(value: Union[Decimal, int, str]) -> int:
    """Round half-up to whole cents. Never truncates."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_cents(raw: str) -> Optional[int]:
    amount = parse_amount(raw)
    if amount is None:
        return None
    return dollars_to_cents(amount)


def format_cents(cents: int) -> str:
    """1234567 → '$12,345.67'. Integer math only, so parse_cents() reverses it exactly."""
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(int(cents)), 100)
    return f"{sign}${dollars:,}.{remainder:02d}"


def format_date(value: Union[date, datetime]) -> str:
    """US short date without zero padding: 3/7/2026."""
    return f"{value.month}/{value.day}/{value.year}"


def format_file_date(value: Union[date, datetime]) -> str:
    return value.strftime("%m-%d-%Y")


# ═══════════════════════════════════════════════════════════════════════════════
# LINE ITEM TOTALS
# ═══════════════════════════════════════════════════════════════════════════════

def calculate_line_item_total(item) -> int:
    """price × qty + shipping, in cents."""
    return item.price_per_unit_cents * item.quantity + (item.shipping_and_handling_cents or 0)


def calculate_total_cents(items: Iterable) -> int:
    return sum(calculate_line_item_total(item) for item in items)
