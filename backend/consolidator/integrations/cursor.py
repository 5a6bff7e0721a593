from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Optional, Sequence

from .sheets import ParsedSheet, get_cell_by_address

Grid = Sequence[Sequence[Any]]

LEADING_ID_RE = re.compile(r"^([0-9]+)\s")
LEADING_INT_RE = re.compile(r"^\s*([+-]?[0-9]+)")


def to_decimal(value: Any) -> Optional[Decimal]:
    """Strict numeric coercion: blank is zero, anything unparsable is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        d = Decimal(repr(value))
        return d if d.is_finite() else None
    s = "" if value is None else str(value)
    s = s.replace(",", "").strip()
    if not s:
        return Decimal("0")
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    return d if d.is_finite() else None


def quant2(x: Decimal) -> Decimal:
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_decimal(x: Decimal) -> str:
    return f"{quant2(x):,.2f}"


def format_number(value: str) -> str:
    s = str(value).replace(",", "").strip()
    if not s:
        return str(value)
    try:
        d = Decimal(s)
    except InvalidOperation:
        return str(value)
    if not d.is_finite():
        return str(value)
    return format_decimal(d)


def parse_formatted(value: Any) -> Optional[float]:
    """Inverse of format_number for cell writes: "1,234.56" -> 1234.56."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if Decimal(repr(value)).is_finite() else None
    s = str(value or "").strip()
    if not s:
        return None
    d = to_decimal(s)
    return float(d) if d is not None else None


def cell_text(cell: Any) -> str:
    if isinstance(cell, bool) or cell is None:
        return ""
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    if isinstance(cell, (str, int, float)):
        return str(cell).strip()
    return ""


def read_cell(grid: Grid, row: int, col: int, numeric: bool = False) -> str:
    if row < 0 or row >= len(grid):
        return ""
    row_data = grid[row]
    if not isinstance(row_data, (list, tuple)) or col < 0 or col >= len(row_data):
        return ""
    value = cell_text(row_data[col])
    if numeric and value:
        return format_number(value)
    return value


def read_relative(grid: Grid, anchor: int, row_offset: int, col: int, numeric: bool = False) -> str:
    return read_cell(grid, anchor + row_offset, col, numeric)


def read_address(sheet: ParsedSheet, address: str) -> str:
    value = get_cell_by_address(sheet.worksheet, address)
    if value is None:
        return ""
    text = cell_text(value)
    return format_number(text) if text else ""


def find_anchor(grid: Grid, marker: str) -> Optional[int]:
    target = marker.upper()
    for index, row in enumerate(grid):
        if not isinstance(row, (list, tuple)):
            continue
        for cell in row:
            if isinstance(cell, str) and target in cell.upper():
                return index
    return None


def extract_file_id(filename: str) -> str:
    m = LEADING_ID_RE.match(filename or "")
    if not m:
        return ""
    return str(int(m.group(1)))


def normalize_id(value: Any) -> str:
    """Template-column identifier normalisation ("007" -> "7", 5.0 -> "5")."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float):
        if not Decimal(repr(value)).is_finite():
            return ""
        return str(int(value))
    m = LEADING_INT_RE.match(str(value))
    if not m:
        return ""
    return str(int(m.group(1)))


def column_values(grid: Grid, start_row: int, col: int, count: int) -> List[Any]:
    out: List[Any] = []
    for row in range(start_row, start_row + count):
        if row >= len(grid):
            break
        row_data = grid[row]
        out.append(row_data[col] if col < len(row_data) else None)
    return out
