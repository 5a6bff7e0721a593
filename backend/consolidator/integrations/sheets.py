from __future__ import annotations

import io
import zipfile
from datetime import date, datetime, time
from typing import Any, List, NamedTuple, Optional, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

CellValue = Union[str, int, float, None]


class SheetParseError(Exception):
    pass


class ParsedSheet(NamedTuple):
    name: str
    data: List[List[CellValue]]
    worksheet: Any = None


def _plain(value: Any) -> CellValue:
    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float, str)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _grid(worksheet) -> List[List[CellValue]]:
    rows: List[List[CellValue]] = []
    for raw in worksheet.iter_rows(values_only=True):
        row = [_plain(v) for v in raw]
        while row and (row[-1] is None or row[-1] == ""):
            row.pop()
        rows.append(row)
    while rows and not rows[-1]:
        rows.pop()
    return rows


def parse_excel_file(data: bytes) -> List[ParsedSheet]:
    """
    Read workbook bytes into positional grids.

    Grids start at A1; row i of the grid is spreadsheet row i + 1. Trailing
    empty rows are dropped, so a cell can be visible through
    get_cell_by_address while missing from the grid.
    """
    try:
        workbook = load_workbook(io.BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        raise SheetParseError(f"Unable to read workbook: {e}") from e

    return [ParsedSheet(ws.title, _grid(ws), ws) for ws in workbook.worksheets]


def get_cell_by_address(worksheet: Any, address: str) -> Optional[Union[str, int, float]]:
    if worksheet is None:
        return None
    value = _plain(worksheet[address].value)
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    return value.strip() or None
