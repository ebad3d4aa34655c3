"""
The fixed 11-column order sheet.

Pasted rows carry no header line; every column is identified by position.
Order here is the column order in the sheet and must not change.
"""

from dataclasses import dataclass
from enum import Enum


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    URL = "url"


@dataclass(frozen=True)
class FieldSpec:
    key: str
    label: str
    required: bool
    type: FieldType
    description: str = ""


FIELD_SPECS = (
    FieldSpec("name", "Name", True, FieldType.STRING, "Product or item name"),
    FieldSpec("vendor", "Vendor", True, FieldType.STRING, "Supplier or vendor name"),
    FieldSpec("part_number", "Part #", False, FieldType.STRING, "Part number or SKU"),
    FieldSpec("link", "Link", True, FieldType.URL, "Product URL or link"),
    FieldSpec("price_per_unit", "Price per Unit", True, FieldType.NUMBER, "Unit price in dollars"),
    FieldSpec("quantity", "Quantity", True, FieldType.NUMBER, "Number of items"),
    FieldSpec("tax", "Tax", False, FieldType.NUMBER, "Tax amount in dollars"),
    FieldSpec("shipping_handling", "S&H", False, FieldType.NUMBER, "Shipping and handling cost"),
    FieldSpec("total", "TOTAL", False, FieldType.NUMBER, "Total cost including all fees"),
    FieldSpec("delivery_type", "Delivery Type", False, FieldType.STRING, "Delivery method or type"),
    FieldSpec("notes", "Notes", False, FieldType.STRING, "Additional notes or comments"),
)

HEADERS = tuple(spec.label for spec in FIELD_SPECS)
COLUMN_COUNT = len(FIELD_SPECS)

# key → column position
FIELD_INDEX = {spec.key: i for i, spec in enumerate(FIELD_SPECS)}
LABEL_INDEX = {spec.label: i for i, spec in enumerate(FIELD_SPECS)}

# Numeric columns that may never go below zero
NON_NEGATIVE_KEYS = frozenset({
    "price_per_unit", "quantity", "tax", "shipping_handling", "total",
})

MAX_STRING_LENGTH = 500
