"""Builders for in-memory grids and IFR/template workbooks used across tests."""

from __future__ import annotations

import io
from typing import Any, Dict, Iterable, List, Optional, Tuple

from openpyxl import Workbook, load_workbook

from consolidator.integrations.sheets import ParsedSheet

Cells = Dict[Tuple[int, int], Any]

ACC_ANCHOR_ROW = 8


def grid(cells: Cells) -> List[List[Any]]:
    """0-based (row, col) -> value mapping to a ragged list-of-lists grid."""
    if not cells:
        return []
    rows = max(r for r, _ in cells) + 1
    out: List[List[Any]] = [[] for _ in range(rows)]
    for (r, c), value in cells.items():
        row = out[r]
        while len(row) <= c:
            row.append(None)
        row[c] = value
    return out


def acc_cells(
    lot_no: Any = "LOT-5",
    owner: Tuple[str, str, str] = ("JUAN", "SANTOS", "DELACRUZ"),
    farmer: Tuple[str, str, str] = ("PEDRO", "REYES", "GARCIA"),
    division: str = "DIVISION 3",
    ia: str = "SAMPLE IA",
    anchor_row: int = ACC_ANCHOR_ROW,
    areas: Iterable[Any] = (),
) -> Cells:
    cells: Cells = {
        (0, 0): "NATIONAL IRRIGATION ADMINISTRATION",
        (3, 0): "DIVISION",
        (3, 2): division,
        (4, 0): "NAME OF IA",
        (4, 2): ia,
        (anchor_row, 0): "Account Details",
        (anchor_row + 1, 0): "LOT NO.",
        (anchor_row + 1, 2): lot_no,
    }
    for offset, value in zip((5, 6, 7), owner):
        cells[(anchor_row + offset, 2)] = value
    for offset, value in zip((9, 10, 11), farmer):
        cells[(anchor_row + offset, 2)] = value
    for i, area in enumerate(areas):
        cells[(29 + i, 3)] = area
    return cells


def soa_cells(
    area: Any = None,
    principal: Any = None,
    penalty: Any = None,
    old_account: Any = None,
    total: Any = None,
    ifr_rows: Iterable[Tuple[Any, Any, Any, Any]] = (),
) -> Cells:
    """ifr_rows: (rate, principal, penalty percent, penalty) from row 94 on."""
    cells: Cells = {(0, 0): "STATEMENT OF ACCOUNT"}
    if area is not None:
        cells[(12, 6)] = area
    for i, (rate, row_principal, pct, row_penalty) in enumerate(ifr_rows):
        for col, value in ((2, rate), (3, row_principal), (4, pct), (5, row_penalty)):
            if value is not None:
                cells[(94 + i, col)] = value
    if principal is not None:
        cells[(99, 3)] = principal
    if penalty is not None:
        cells[(99, 5)] = penalty
    if old_account is not None:
        cells[(100, 6)] = old_account
    if total is not None:
        cells[(101, 6)] = total
    return cells


def sheet(name: str, cells: Cells, worksheet: Any = None) -> ParsedSheet:
    return ParsedSheet(name, grid(cells), worksheet)


def _fill(ws, cells: Cells) -> None:
    for (r, c), value in cells.items():
        cell = ws.cell(row=r + 1, column=c + 1, value=value)
        if isinstance(value, str) and value:
            cell.data_type = "s"


def worksheet(cells: Cells):
    """A detached openpyxl worksheet holding cells, for address lookups."""
    wb = Workbook()
    ws = wb.active
    _fill(ws, cells)
    return ws


def workbook_bytes(sheets: Dict[str, Cells]) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for name, cells in sheets.items():
        _fill(wb.create_sheet(name), cells)
    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


def ifr_bytes(acc: Optional[Cells] = None, soa: Optional[Cells] = None) -> bytes:
    sheets: Dict[str, Cells] = {}
    sheets["00 ACC DETAILS"] = acc if acc is not None else acc_cells()
    if soa is not None:
        sheets["01 SOA 2024"] = soa
    return workbook_bytes(sheets)


def template_bytes(ids: Dict[int, Any] = None, title: str = "CONSOLIDATED") -> bytes:
    """ids: spreadsheet row (1-based) -> value in column A."""
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row, value in (ids or {}).items():
        ws.cell(row=row, column=1, value=value)
    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


def open_output(data: bytes, sheet_name: Optional[str] = None):
    wb = load_workbook(io.BytesIO(data))
    return wb[sheet_name] if sheet_name else wb.worksheets[0]
