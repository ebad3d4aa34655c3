"""
Order List PDF Generator
========================
Itemized "Requested Items" sheet for one vendor, appended behind the
purchase-request form.

Layout:
  - Title, request date, vendor
  - Table: Name | URL | $/Unit | Qty | S&H | Total
  - Dynamic row heights (names and URLs wrap)
  - Multi-page with header repeat
  - Grand total = Σ(price × qty + S&H)
"""

import io
import logging
from datetime import date

from reportlab.lib.colors import Color, HexColor
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from orderforms.core.money import (
    calculate_line_item_total, calculate_total_cents, format_cents, format_date,
)

log = logging.getLogger("orderforms.order_list")

# ═══════════════════════════════════════════════════════════════════════════════
# STYLE
# ═══════════════════════════════════════════════════════════════════════════════
HDR_FILL = Color(0.941, 0.941, 0.941)   # #F0F0F0  header row fill
GRID     = HexColor("#000000")
BLACK    = HexColor("#000000")
GRAY     = HexColor("#555555")
LINK     = HexColor("#1a4fa0")

W, H  = letter
ML    = 40         # left margin
MR    = W - 40     # right edge
TOP   = 40         # top margin (top-origin)
BOTTOM_LIMIT = 60  # rows may not go below this (reportlab y)

CELL_FONT  = ("Helvetica", 10)
URL_FONT   = ("Helvetica", 6)
LINE_H     = 10
URL_LINE_H = 7
PAD        = 5

# (header, x, width); widths sum to MR - ML
COLS = [
    ("Name",   ML,        150),
    ("URL",    ML + 150,  140),
    ("$/Unit", ML + 290,  70),
    ("Qty",    ML + 360,  45),
    ("S&H",    ML + 405,  60),
    ("Total",  ML + 465,  MR - (ML + 465)),
]


def _wrap_chars(text: str, font: str, size: float, width: float) -> list:
    """Hard-wrap text with no spaces (URLs) by character width."""
    lines, cur = [], ""
    for ch in text:
        if cur and stringWidth(cur + ch, font, size) > width:
            lines.append(cur)
            cur = ch
        else:
            cur += ch
    if cur:
        lines.append(cur)
    return lines or [""]


def render_order_list_pdf(vendor: str, items, request_date: date) -> bytes:
    """Render the order list for one vendor's items. Returns PDF bytes."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.setTitle(f"Requested Items — {vendor}")
    c.setAuthor("orderforms")

    # top-origin y → reportlab y
    def Y(top_y):
        return H - top_y

    def text(x, yt, txt, font="Helvetica", size=10, color=BLACK, align="left"):
        c.setFont(font, size)
        c.setFillColor(color)
        s = str(txt) if txt is not None else ""
        if align == "right":
            c.drawRightString(x, Y(yt), s)
        else:
            c.drawString(x, Y(yt), s)

    page_num = 1

    def footer():
        c.setFillColor(GRAY)
        c.setFont("Helvetica", 8)
        c.drawRightString(MR, 24, f"Page {page_num}")

    # ══════════════════════════════════════════════════════════════════════════
    # HEADER BLOCK
    # ══════════════════════════════════════════════════════════════════════════
    text(ML, TOP + 24, "Requested Items", "Helvetica-Bold", 24)
    text(ML, TOP + 52, f"Request Date: {format_date(request_date)}", "Helvetica", 12)
    text(ML, TOP + 70, f"Vendor: {vendor}", "Helvetica", 12)
    text(ML, TOP + 100, "Order Items", "Helvetica-Bold", 16)

    hdr_h = 20

    def draw_table_header(ty):
        """Draw column headers at top-origin y. Returns top-origin y of the first data row."""
        rl_y = Y(ty) - hdr_h
        for name, cx, cw in COLS:
            c.setFillColor(HDR_FILL)
            c.rect(cx, rl_y, cw, hdr_h, fill=1, stroke=0)
            c.setStrokeColor(GRID)
            c.setLineWidth(0.75)
            c.rect(cx, rl_y, cw, hdr_h, fill=0, stroke=1)
            c.setFillColor(BLACK)
            c.setFont("Helvetica-Bold", 10)
            c.drawString(cx + PAD, rl_y + 6, name)
        return ty + hdr_h

    cur_y = draw_table_header(TOP + 112)

    # ══════════════════════════════════════════════════════════════════════════
    # LINE ITEMS
    # ══════════════════════════════════════════════════════════════════════════
    name_w = COLS[0][2] - 2 * PAD
    url_w = COLS[1][2] - 2 * PAD

    for item in items:
        name_lines = simpleSplit(item.name, CELL_FONT[0], CELL_FONT[1], name_w) or [""]
        url_lines = _wrap_chars(item.url, URL_FONT[0], URL_FONT[1], url_w)
        row_h = max(20, len(name_lines) * LINE_H + 8, len(url_lines) * URL_LINE_H + 8)

        if Y(cur_y) - row_h < BOTTOM_LIMIT:
            footer()
            c.showPage()
            page_num += 1
            cur_y = draw_table_header(TOP)

        rl_row_y = Y(cur_y) - row_h
        c.setStrokeColor(GRID)
        c.setLineWidth(0.5)
        for _, cx, cw in COLS:
            c.rect(cx, rl_row_y, cw, row_h, fill=0, stroke=1)

        baseline = rl_row_y + row_h - 12

        c.setFillColor(BLACK)
        c.setFont(*CELL_FONT)
        dy = baseline
        for ln in name_lines:
            c.drawString(COLS[0][1] + PAD, dy, ln)
            dy -= LINE_H

        # URL: small, wrapped, clickable over the whole cell
        c.setFillColor(LINK)
        c.setFont(*URL_FONT)
        dy = rl_row_y + row_h - 10
        for ln in url_lines:
            c.drawString(COLS[1][1] + PAD, dy, ln)
            dy -= URL_LINE_H
        if item.url:
            url_x = COLS[1][1]
            c.linkURL(item.url, (url_x, rl_row_y, url_x + COLS[1][2], rl_row_y + row_h), relative=0)

        c.setFillColor(BLACK)
        c.setFont(*CELL_FONT)
        money_cells = [
            (COLS[2], format_cents(item.price_per_unit_cents)),
            (COLS[3], str(item.quantity)),
            (COLS[4], format_cents(item.shipping_and_handling_cents)),
            (COLS[5], format_cents(calculate_line_item_total(item))),
        ]
        for (_, cx, cw), val in money_cells:
            c.drawRightString(cx + cw - PAD, baseline, val)

        cur_y += row_h

    # ══════════════════════════════════════════════════════════════════════════
    # TOTAL
    # ══════════════════════════════════════════════════════════════════════════
    total_cents = calculate_total_cents(items)
    if Y(cur_y + 30) < BOTTOM_LIMIT:
        footer()
        c.showPage()
        page_num += 1
        cur_y = TOP
    text(MR, cur_y + 26, f"Total: {format_cents(total_cents)}", "Helvetica-Bold", 12, align="right")

    footer()
    c.save()

    log.info("Order list for %s rendered: %d items, %s, %d page(s)",
             vendor, len(items), format_cents(total_cents), page_num)
    return buf.getvalue()
