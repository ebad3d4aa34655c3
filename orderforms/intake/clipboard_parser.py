"""
Clipboard parser — pasted spreadsheet text → fixed-position rows.

Two stages:
  1. tokenize_line() splits one line on tabs, honoring "quoted" fields
     with "" as an escaped quote.
  2. parse_clipboard_data() maps each line's tokens onto the 11 fixed
     columns, padding or dropping columns with a warning.

No header row is expected; data starts on the first line.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Union

from orderforms.intake.schema import (
    COLUMN_COUNT, FIELD_INDEX, FIELD_SPECS, HEADERS, LABEL_INDEX,
)

log = logging.getLogger("orderforms.parser")

TAB = "\t"
QUOTE = '"'


# ═══════════════════════════════════════════════════════════════════════════════
# TOKENIZER
# ═══════════════════════════════════════════════════════════════════════════════

class TokenState(Enum):
    START_FIELD = "start_field"
    IN_UNQUOTED = "in_unquoted"
    IN_QUOTED = "in_quoted"
    ESCAPE_QUOTE = "escape_quote"


def tokenize_line(line: str) -> list:
    """
    Split one pasted line into trimmed field strings.

    A quote only opens a quoted section at the start of a field. Inside a
    quoted section tabs are literal and "" is one literal quote. A quote that
    shows up after unquoted text has started is kept as text:

        'a\\t"b\\tc"\\td'   → ['a', 'b\\tc', 'd']
        '"a""b\\tc"'       → ['a"b\\tc']
        '5" pipe\\tx'      → ['5" pipe', 'x']
        'a\\t'             → ['a', '']
    """
    if not line:
        return []

    fields = []
    buf = []
    state = TokenState.START_FIELD

    def emit():
        fields.append("".join(buf).strip())
        buf.clear()

    for i, ch in enumerate(line):
        if state is TokenState.START_FIELD:
            if ch == QUOTE:
                state = TokenState.IN_QUOTED
            elif ch == TAB:
                emit()
            else:
                buf.append(ch)
                state = TokenState.IN_UNQUOTED

        elif state is TokenState.IN_UNQUOTED:
            if ch == TAB:
                emit()
                state = TokenState.START_FIELD
            else:
                buf.append(ch)

        elif state is TokenState.IN_QUOTED:
            if ch == QUOTE:
                if i + 1 < len(line) and line[i + 1] == QUOTE:
                    state = TokenState.ESCAPE_QUOTE
                else:
                    # closing quote: anything up to the next tab still belongs to this field
                    state = TokenState.IN_UNQUOTED
            else:
                buf.append(ch)

        elif state is TokenState.ESCAPE_QUOTE:
            # second half of the "" pair
            buf.append(QUOTE)
            state = TokenState.IN_QUOTED

    emit()
    return fields


# ═══════════════════════════════════════════════════════════════════════════════
# ROWS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ParsedRow:
    """One pasted line bound to the fixed columns. Always COLUMN_COUNT values."""
    values: tuple

    def __post_init__(self):
        if len(self.values) != COLUMN_COUNT:
            raise ValueError(f"ParsedRow needs {COLUMN_COUNT} values, got {len(self.values)}")

    @classmethod
    def from_tokens(cls, tokens) -> "ParsedRow":
        padded = list(tokens[:COLUMN_COUNT])
        padded += [""] * (COLUMN_COUNT - len(padded))
        return cls(tuple(padded))

    @classmethod
    def from_mapping(cls, mapping: dict) -> "ParsedRow":
        """Build from {label or key: value}; absent columns are empty."""
        values = [""] * COLUMN_COUNT
        for name, value in mapping.items():
            values[_column(name)] = "" if value is None else str(value)
        return cls(tuple(values))

    def __getitem__(self, column: Union[int, str]) -> str:
        return self.values[_column(column)]

    def get(self, key: str) -> str:
        return self.values[FIELD_INDEX[key]]

    def with_value(self, column: Union[int, str], value: str) -> "ParsedRow":
        """A copy with one cell replaced (cell edits never mutate in place)."""
        values = list(self.values)
        values[_column(column)] = value
        return ParsedRow(tuple(values))

    def to_dict(self) -> dict:
        return dict(zip(HEADERS, self.values))

    def __iter__(self) -> Iterator:
        return iter(zip(FIELD_SPECS, self.values))


def _column(column: Union[int, str]) -> int:
    if isinstance(column, int):
        return column
    if column in FIELD_INDEX:
        return FIELD_INDEX[column]
    if column in LABEL_INDEX:
        return LABEL_INDEX[column]
    raise KeyError(column)


@dataclass
class ParseResult:
    headers: tuple = HEADERS
    rows: list = field(default_factory=list)
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "headers": list(self.headers),
            "rows": [row.to_dict() for row in self.rows],
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def parse_clipboard_data(data: str) -> ParseResult:
    """
    Parse pasted tab-separated text using fixed column positions.

    Blank lines are ignored entirely; "Row N" in messages counts non-blank
    lines only. Problems are returned in the result, never raised.
    """
    result = ParseResult()

    if not data or not data.strip():
        result.errors.append("No data provided")
        return result

    lines = [ln.rstrip("\r") for ln in data.split("\n")]
    lines = [ln for ln in lines if ln.strip()]

    for i, line in enumerate(lines):
        row_number = i + 1
        tokens = tokenize_line(line)

        if not tokens:
            result.warnings.append(f"Row {row_number}: Empty row skipped")
            continue

        extra = len(tokens) - COLUMN_COUNT
        if extra > 0:
            result.warnings.append(
                f"Row {row_number}: Has {extra} extra column(s) - they will be ignored")
        elif extra < 0:
            result.warnings.append(
                f"Row {row_number}: Missing {-extra} column(s) - they will be empty")

        result.rows.append(ParsedRow.from_tokens(tokens))

    if not result.rows:
        result.errors.append("No data rows found")

    log.debug("Parsed %d rows (%d warnings)", len(result.rows), len(result.warnings))
    return result
