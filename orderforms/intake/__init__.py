"""Pasted order data → validated, typed line items.

Key exports:
    parse_clipboard_data()   — Tab-separated paste → ParseResult of fixed-position rows
    validate_data()          — Per-cell diagnostics + dataset verdict
    transform_rows()         — Validated rows → OrderLineItem records
    group_items_by_vendor()  — Vendor-keyed grouping in first-seen order
"""
