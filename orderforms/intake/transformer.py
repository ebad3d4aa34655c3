"""
Validated rows → OrderLineItem records for document generation.

Money leaves this module as integer cents. Notes collect the columns that
have no slot on the order list (part #, delivery type, tax, free text).
"""

import logging
from dataclasses import dataclass
from decimal import InvalidOperation, Overflow
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from orderforms.core.errors import TransformError
from orderforms.core.money import format_cents, parse_amount, parse_cents

log = logging.getLogger("orderforms.transformer")

# Retailers whose product links carry tracking junk in the query string
_CANONICAL_URL_HOSTS = ("amazon.com", "www.amazon.com")


@dataclass(frozen=True)
class OrderLineItem:
    name: str
    vendor: str
    quantity: int
    url: str
    price_per_unit_cents: int
    shipping_and_handling_cents: int
    notes: Optional[str] = None


def clean_amazon_url(url: str) -> str:
    """Drop query string and fragment from amazon.com links; everything else passes through."""
    if not url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if (parts.hostname or "").lower() not in _CANONICAL_URL_HOSTS:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", "", ""))


def _compose_notes(part_number: str, delivery_type: str, tax_cents: int, notes: str) -> Optional[str]:
    parts = []
    if part_number:
        parts.append(f"Part #: {part_number}")
    if delivery_type:
        parts.append(f"Delivery: {delivery_type}")
    if tax_cents:
        parts.append(f"Tax: {format_cents(tax_cents)}")
    if notes:
        parts.append(f"Notes: {notes}")
    return " | ".join(parts) or None


def transform_row(row, row_number: int) -> OrderLineItem:
    """One validated ParsedRow → OrderLineItem. Raises TransformError when a mandatory value is missing or an amount will not convert."""
    name = row.get("name").strip()
    vendor = row.get("vendor").strip()
    part_number = row.get("part_number").strip()
    link = row.get("link").strip()
    delivery_type = row.get("delivery_type").strip()
    notes = row.get("notes").strip()

    try:
        price_cents = parse_cents(row.get("price_per_unit"))
        quantity_amount = parse_amount(row.get("quantity"))
        quantity = int(quantity_amount) if quantity_amount is not None else 0
        tax_cents = parse_cents(row.get("tax")) or 0
        shipping_cents = parse_cents(row.get("shipping_handling")) or 0
    except (InvalidOperation, Overflow) as e:
        raise TransformError(row_number, f"Amount out of range ({e.__class__.__name__})") from e

    missing = [label for label, ok in (
        ("name", bool(name)),
        ("vendor", bool(vendor)),
        ("link", bool(link)),
        ("quantity", quantity > 0),
        ("price", price_cents is not None),
    ) if not ok]
    if missing:
        raise TransformError(row_number, f"Missing required fields ({', '.join(missing)})")

    return OrderLineItem(
        name=f"{name} ({part_number})" if part_number else name,
        vendor=vendor,
        quantity=quantity,
        url=clean_amazon_url(link),
        price_per_unit_cents=price_cents,
        shipping_and_handling_cents=shipping_cents,
        notes=_compose_notes(part_number, delivery_type, tax_cents, notes),
    )


def transform_rows(rows) -> tuple:
    """
    Transform every row, isolating failures.

    Returns (items, errors): items for the rows that transformed, and one
    message per row that did not. Callers decide whether a partial list is usable.
    """
    items, errors = [], []
    for index, row in enumerate(rows):
        try:
            items.append(transform_row(row, index + 1))
        except TransformError as e:
            log.warning("Transform failed: %s", e.message)
            errors.append(e.message)
    return items, errors


def validate_order_line_items(items) -> dict:
    """Last sanity check before PDFs: {"ok": bool, "errors": [str]}."""
    errors = []
    for i, item in enumerate(items, start=1):
        if not item.name:
            errors.append(f"Item {i}: Missing name")
        if not item.vendor:
            errors.append(f"Item {i}: Missing vendor")
        if item.quantity <= 0:
            errors.append(f"Item {i}: Quantity must be greater than 0")
        if item.price_per_unit_cents < 0:
            errors.append(f"Item {i}: Price cannot be negative")
        if item.shipping_and_handling_cents < 0:
            errors.append(f"Item {i}: Shipping cost cannot be negative")
    return {"ok": not errors, "errors": errors}
