"""Group line items by vendor: one purchase order per vendor."""

from orderforms.core.money import calculate_total_cents


def group_items_by_vendor(items) -> dict:
    """
    {vendor: [items]} in first-seen vendor order; items keep their input order.

    Keys are compared exactly: "Acme" and "acme" are two vendors. Case is
    not folded because vendor names go on the paperwork as typed.
    """
    grouped = {}
    for item in items:
        grouped.setdefault(item.vendor.strip(), []).append(item)
    return grouped


def preview_pdf_generation(items) -> dict:
    """What a submission would produce, without producing it."""
    grouped = group_items_by_vendor(items)
    return {
        "vendor_count": len(grouped),
        "vendors": list(grouped),
        "total_items": len(items),
        "vendor_totals_cents": {v: calculate_total_cents(its) for v, its in grouped.items()},
    }
