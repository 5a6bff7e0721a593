from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .cursor import (
    column_values,
    extract_file_id,
    find_anchor,
    format_decimal,
    read_address,
    read_cell,
    read_relative,
    to_decimal,
)
from .models import AccountDetail, ExtractedData, Farmer, LotOwner, SOADetail
from .sheets import ParsedSheet

logger = logging.getLogger(__name__)

ACC_SHEET_MARKER = "00 ACC DETAILS"
SOA_SHEET_MARKER = "01 SOA"
ACCOUNT_ANCHOR = "ACCOUNT DETAILS"
SOA_ANCHOR = "STATEMENT OF ACCOUNT"

# ACC DETAILS layout (0-based grid positions)
NAME_COL = 2
LOT_OFFSET = 1
DIVISION_ROW = 3
IA_ROW = 4
OWNER_OFFSETS = (5, 6, 7)  # first, middle, last
FARMER_OFFSETS = (9, 10, 11)
PLANTED_AREA_ROW = 29
PLANTED_AREA_COL = 3
PLANTED_AREA_ROWS = 30

# SOA layout
AREA_CELL = (12, 6)
SUBTOTAL_ROW = 99
PRINCIPAL_COL = 3
PENALTY_COL = 5
PRINCIPAL_ADDRESS = "D100"
PENALTY_ADDRESS = "F100"
IFR_ROWS = range(94, 99)
RATE_COL = 2
PENALTY_PCT_COL = 4
COMPUTED_PAIRS = 10
OLD_ACCOUNT_CELL = (100, 6)
OLD_ACCOUNT_ADDRESS = "G101"
TOTAL_CELL = (101, 6)
TOTAL_ADDRESS = "G102"

Strategy = Callable[[], str]


def first_non_empty(chain: Sequence[Strategy]) -> str:
    for strategy in chain:
        value = strategy()
        if value:
            return value
    return ""


def _positive_or_blank(total: Decimal) -> str:
    return format_decimal(total) if total > 0 else ""


# ---------- ACC DETAILS ----------

def extract_account_details(sheet: ParsedSheet, warnings: Optional[List[str]] = None) -> List[AccountDetail]:
    warnings = warnings if warnings is not None else []
    grid = sheet.data
    anchor = find_anchor(grid, ACCOUNT_ANCHOR)
    if anchor is None:
        warnings.append(f"'{ACCOUNT_ANCHOR}' not found in sheet {sheet.name!r}")
        return []

    lot_no = read_relative(grid, anchor, LOT_OFFSET, NAME_COL)
    if not lot_no:
        warnings.append(f"'{ACCOUNT_ANCHOR}' found in sheet {sheet.name!r} but lot number is blank")
        return []

    owner = [read_relative(grid, anchor, off, NAME_COL) for off in OWNER_OFFSETS]
    farmer = [read_relative(grid, anchor, off, NAME_COL) for off in FARMER_OFFSETS]
    if not any(owner) and not any(farmer):
        warnings.append(f"'{ACCOUNT_ANCHOR}' found in sheet {sheet.name!r} but every name field is blank")
        return []

    return [
        AccountDetail(
            division=read_cell(grid, DIVISION_ROW, NAME_COL),
            farmer=Farmer(first_name=farmer[0], middle_name=farmer[1], last_name=farmer[2]),
            lot_no=lot_no,
            lot_owner=LotOwner(first_name=owner[0], middle_name=owner[1], last_name=owner[2]),
            name_of_ia=read_cell(grid, IA_ROW, NAME_COL),
        )
    ]


# ---------- SOA fallbacks ----------

def sum_planted_area(acc_grid) -> str:
    total = Decimal("0")
    for cell in column_values(acc_grid, PLANTED_AREA_ROW, PLANTED_AREA_COL, PLANTED_AREA_ROWS):
        n = to_decimal(cell)
        if n is not None and n > 0:
            total += n
    return _positive_or_blank(total)


def sum_ifr_rows(soa_grid) -> Dict[str, str]:
    principal = Decimal("0")
    penalty = Decimal("0")
    for row in IFR_ROWS:
        if row >= len(soa_grid):
            continue
        p = to_decimal(read_cell(soa_grid, row, PRINCIPAL_COL))
        q = to_decimal(read_cell(soa_grid, row, PENALTY_COL))
        if p is not None:
            principal += p
        if q is not None:
            penalty += q
    return {"principal": _positive_or_blank(principal), "penalty": _positive_or_blank(penalty)}


def compute_from_rates(acc_grid, soa_grid) -> Dict[str, str]:
    """area x rate per paired row; penalty only where a positive percent is present."""
    principal_total = Decimal("0")
    penalty_total = Decimal("0")
    for i in range(COMPUTED_PAIRS):
        acc_row = PLANTED_AREA_ROW + i
        soa_row = IFR_ROWS.start + i
        if acc_row >= len(acc_grid) or soa_row >= len(soa_grid):
            break
        area = to_decimal(read_cell(acc_grid, acc_row, PLANTED_AREA_COL))
        rate = to_decimal(read_cell(soa_grid, soa_row, RATE_COL))
        pct = to_decimal(read_cell(soa_grid, soa_row, PENALTY_PCT_COL))
        if area is None or area <= 0 or rate is None:
            continue
        principal = area * rate
        principal_total += principal
        if pct is not None and pct > 0:
            penalty_total += principal * (pct / Decimal("100"))
    return {
        "principal": _positive_or_blank(principal_total),
        "penalty": _positive_or_blank(penalty_total),
    }


def extract_soa_details(
    sheet: ParsedSheet,
    acc_sheet: Optional[ParsedSheet],
    warnings: Optional[List[str]] = None,
) -> List[SOADetail]:
    warnings = warnings if warnings is not None else []
    grid = sheet.data
    if find_anchor(grid, SOA_ANCHOR) is None:
        warnings.append(f"'{SOA_ANCHOR}' not found in sheet {sheet.name!r}")
        return []

    acc_grid = acc_sheet.data if acc_sheet is not None else None

    area = first_non_empty((
        lambda: read_cell(grid, *AREA_CELL, numeric=True),
        lambda: sum_planted_area(acc_grid) if acc_grid is not None else "",
    ))
    principal = first_non_empty((
        lambda: read_cell(grid, SUBTOTAL_ROW, PRINCIPAL_COL, numeric=True),
        lambda: read_address(sheet, PRINCIPAL_ADDRESS),
        lambda: sum_ifr_rows(grid)["principal"],
        lambda: compute_from_rates(acc_grid, grid)["principal"] if acc_grid is not None else "",
    ))
    penalty = first_non_empty((
        lambda: read_cell(grid, SUBTOTAL_ROW, PENALTY_COL, numeric=True),
        lambda: read_address(sheet, PENALTY_ADDRESS),
        lambda: sum_ifr_rows(grid)["penalty"],
        lambda: compute_from_rates(acc_grid, grid)["penalty"] if acc_grid is not None else "",
    ))
    old_account = first_non_empty((
        lambda: read_cell(grid, *OLD_ACCOUNT_CELL, numeric=True),
        lambda: read_address(sheet, OLD_ACCOUNT_ADDRESS),
    ))
    total = first_non_empty((
        lambda: read_cell(grid, *TOTAL_CELL, numeric=True),
        lambda: read_address(sheet, TOTAL_ADDRESS),
    ))

    if not (area or principal or penalty or old_account or total):
        warnings.append(f"'{SOA_ANCHOR}' found in sheet {sheet.name!r} but every amount is blank")
        return []

    return [SOADetail(area=area, principal=principal, penalty=penalty, old_account=old_account, total=total)]


def _select_soa(
    soa_sheets: Sequence[ParsedSheet],
    acc_sheet: Optional[ParsedSheet],
    warnings: List[str],
) -> List[SOADetail]:
    first_any: List[SOADetail] = []
    for soa_sheet in soa_sheets:
        extracted = extract_soa_details(soa_sheet, acc_sheet, warnings)
        if not extracted:
            continue
        if extracted[0].principal and extracted[0].penalty:
            return extracted
        if not first_any:
            first_any = extracted
    return first_any


def _match(name: str, marker: str) -> bool:
    return marker.upper() in name.upper()


def extract_data(sheets: Sequence[ParsedSheet], filename: str = "") -> ExtractedData:
    warnings: List[str] = []
    acc_sheet = next((s for s in sheets if _match(s.name, ACC_SHEET_MARKER)), None)
    soa_sheets = [s for s in sheets if _match(s.name, SOA_SHEET_MARKER)]

    if acc_sheet is None:
        warnings.append(f"no sheet named like '{ACC_SHEET_MARKER}'")
        account_details: List[AccountDetail] = []
    else:
        account_details = extract_account_details(acc_sheet, warnings)

    if not soa_sheets:
        warnings.append(f"no sheet named like '{SOA_SHEET_MARKER}'")
    soa_details = _select_soa(soa_sheets, acc_sheet, warnings)

    data = ExtractedData(
        account_details=account_details,
        file_id=extract_file_id(filename),
        soa_details=soa_details,
        warnings=warnings,
    )
    for w in warnings:
        logger.debug("%s: %s", filename or "<unnamed>", w)
    return data


def split_name(detail: AccountDetail) -> Tuple[str, str, str, str]:
    """(owner last, owner first, farmer last, farmer first) as written to the template."""
    return (
        detail.lot_owner.last_name,
        detail.lot_owner.first_name,
        detail.farmer.last_name,
        detail.farmer.first_name,
    )
