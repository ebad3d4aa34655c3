"""
Overflow spreadsheet for items past the online form's item limit.

The purchase request web form only has slots for a fixed number of items.
Items beyond that go into a spreadsheet that is attached to the same
request, one row per item, money as dollar strings.
"""

import logging
from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Border, Font, Side

from orderforms.core.money import calculate_line_item_total, format_cents
from orderforms.intake.grouping import group_items_by_vendor

log = logging.getLogger("orderforms.remaining_items")

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "Remaining Items"
DEFAULT_ITEM_LIMIT = 20

COLUMNS = [
    # (header, width)
    ("Name", 40),
    ("Vendor", 20),
    ("Quantity", 10),
    ("URL", 50),
    ("PricePerUnit", 14),
    ("ShippingAndHandling", 20),
    ("TotalPrice", 14),
    ("Notes", 40),
]


def split_overflow_items(items, limit: int = DEFAULT_ITEM_LIMIT) -> tuple:
    """
    (on_form, remaining): items flattened in vendor-group order, split at limit.

    Grouping first keeps each vendor's items together on the form so a
    vendor is not split across the form and the spreadsheet more than once.
    """
    if limit < 0:
        raise ValueError("limit cannot be negative")
    ordered = [item for group in group_items_by_vendor(items).values() for item in group]
    return ordered[:limit], ordered[limit:]


def remaining_items_filename(org_name: str, project_name: Optional[str] = None) -> str:
    base = f"{org_name} {project_name}" if project_name else org_name
    return f"{base} remaining items.xlsx"


def generate_remaining_items_excel(items, org_name: str,
                                   project_name: Optional[str] = None) -> dict:
    """
    Build the overflow workbook.

    Returns:
        {"name": filename, "buffer": bytes, "mime_type": XLSX_MIME_TYPE}
    """
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    bold_font = Font(bold=True)
    thin_border = Border(bottom=Side(style="thin", color="000000"))

    for col, (header, width) in enumerate(COLUMNS, start=1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = bold_font
        cell.border = thin_border
        ws.column_dimensions[cell.column_letter].width = width

    for row, item in enumerate(items, start=2):
        ws.cell(row=row, column=1, value=item.name)
        ws.cell(row=row, column=2, value=item.vendor)
        ws.cell(row=row, column=3, value=item.quantity)
        ws.cell(row=row, column=4, value=item.url)
        ws.cell(row=row, column=5, value=format_cents(item.price_per_unit_cents))
        ws.cell(row=row, column=6, value=format_cents(item.shipping_and_handling_cents))
        ws.cell(row=row, column=7, value=format_cents(calculate_line_item_total(item)))
        ws.cell(row=row, column=8, value=item.notes)

    ws.freeze_panes = "A2"

    buf = BytesIO()
    wb.save(buf)
    name = remaining_items_filename(org_name, project_name)
    log.info("Remaining items workbook %s: %d items", name, len(items),
             extra={"items": len(items)})
    return {"name": name, "buffer": buf.getvalue(), "mime_type": XLSX_MIME_TYPE}
