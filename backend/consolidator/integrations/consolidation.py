from __future__ import annotations

import io
import logging
import math
import re
import zipfile
from typing import List, NamedTuple, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.styles import Alignment
from openpyxl.utils.exceptions import InvalidFileException

from .cursor import LEADING_ID_RE, parse_formatted
from .extractor import extract_data, split_name
from .models import ConsolidationResult, ConsolidationSkippedDetail, ExtractedData
from .rows import RowAssignmentError, RowIndex, assign_row
from .sheets import SheetParseError, parse_excel_file

logger = logging.getLogger(__name__)

MAX_TEMPLATE_ROWS = 10000
DEFAULT_OUTPUT_NAME = "DIVISION X CONSOLIDATED"
OUTPUT_EXTENSION = ".xlsx"
AMOUNT_FORMAT = '#,##0.00;-#,##0.00;"-"'
TEXT_FORMAT = "@"
ILLEGAL_FILENAME_RE = re.compile(r'[<>:"/\\|?*\x00-\x1F]')

# destination columns
ID_COL = "A"
LOT_COL = "B"
OWNER_LAST_COL = "C"
OWNER_FIRST_COL = "D"
RESERVED_COL = "E"
FARMER_LAST_COL = "F"
FARMER_FIRST_COL = "G"
AMOUNT_COLS = ("I", "J", "K", "L", "M")  # area, principal, penalty, old account, total
IA_COL = "N"
DIVISION_COL = "O"


class ConsolidationError(Exception):
    pass


class TemplateUnreadableError(ConsolidationError):
    pass


class NothingConsolidatedError(ConsolidationError):
    def __init__(self, message: str, skipped_details: Sequence[ConsolidationSkippedDetail] = ()):
        super().__init__(message)
        self.skipped_details = list(skipped_details)


class InputFile(NamedTuple):
    file_name: str
    buffer: bytes


def sanitize_filename(value: str) -> str:
    return ILLEGAL_FILENAME_RE.sub("_", value or "").strip()


def output_filename(requested: Optional[str]) -> str:
    name = sanitize_filename(requested or DEFAULT_OUTPUT_NAME) or DEFAULT_OUTPUT_NAME
    if not name.lower().endswith(OUTPUT_EXTENSION):
        name += OUTPUT_EXTENSION
    return name


def sort_key(file_name: str) -> float:
    m = LEADING_ID_RE.match(file_name or "")
    return int(m.group(1)) if m else math.inf


def digits_only(value: str) -> str:
    return re.sub(r"[^0-9]", "", value or "")


# ---------- template ----------

def open_template(template: bytes, sheet_name: Optional[str] = None):
    try:
        workbook = load_workbook(io.BytesIO(template))
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        raise TemplateUnreadableError("Template has no readable worksheet") from e

    if sheet_name and sheet_name in workbook.sheetnames:
        return workbook, workbook[sheet_name]
    if sheet_name:
        logger.warning("template sheet %r not found, using first readable sheet", sheet_name)
    for position in (0, 1):
        if position < len(workbook.worksheets):
            return workbook, workbook.worksheets[position]
    raise TemplateUnreadableError("Template has no readable worksheet")


def seed_row_index(sheet) -> RowIndex:
    last = min(sheet.max_row or 0, MAX_TEMPLATE_ROWS)
    if last < 1:
        return RowIndex({}, 0)
    values = (
        row[0]
        for row in sheet.iter_rows(min_row=1, max_row=last, min_col=1, max_col=1, values_only=True)
    )
    return RowIndex.from_column(values)


# ---------- cell writers ----------

def set_text_cell(sheet, address: str, value: str, align_left: bool = False, explicit_text: bool = False) -> None:
    cell = sheet[address]
    text = (value or "").strip()
    cell.value = text or None
    if text:
        # keep "=..." as literal text, not a formula
        cell.data_type = "s"
    if explicit_text:
        cell.number_format = TEXT_FORMAT
    if align_left:
        cell.alignment = Alignment(horizontal="left")


def set_amount_cell(sheet, address: str, value: str) -> None:
    cell = sheet[address]
    parsed = parse_formatted(value)
    if parsed is None:
        cell.value = None
        return
    cell.value = parsed
    cell.number_format = AMOUNT_FORMAT


def write_record(sheet, row: int, extracted: ExtractedData, default_ia: str, default_division: str) -> None:
    r = str(row)
    sheet[ID_COL + r].value = int(extracted.file_id)

    account = extracted.account_details[0] if extracted.account_details else None
    if account is not None:
        owner_last, owner_first, farmer_last, farmer_first = split_name(account)
        set_text_cell(sheet, LOT_COL + r, account.lot_no, align_left=True, explicit_text=True)
        set_text_cell(sheet, OWNER_LAST_COL + r, owner_last)
        set_text_cell(sheet, OWNER_FIRST_COL + r, owner_first)
        set_text_cell(sheet, RESERVED_COL + r, "")
        set_text_cell(sheet, FARMER_LAST_COL + r, farmer_last)
        set_text_cell(sheet, FARMER_FIRST_COL + r, farmer_first)

    if extracted.soa_details:
        soa = extracted.soa_details[0]
        amounts = (soa.area, soa.principal, soa.penalty, soa.old_account, soa.total)
        for col, amount in zip(AMOUNT_COLS, amounts):
            set_amount_cell(sheet, col + r, amount)

    ia = (account.name_of_ia.strip() if account else "") or default_ia
    division = (account.division.strip() if account else "") or default_division
    set_text_cell(sheet, IA_COL + r, ia)
    sheet[DIVISION_COL + r].value = int(digits_only(division) or 0)


# ---------- engine ----------

def consolidate(
    template: bytes,
    input_files: Sequence[InputFile],
    output_name: Optional[str] = None,
    default_division: str = "",
    default_ia: str = "",
    sheet_name: Optional[str] = None,
) -> ConsolidationResult:
    """
    Fold IFR workbooks into the template, one row per file ID.

    Files are processed one at a time in ascending file-ID order; the row
    index is shared state across files. Per-file problems become skipped
    details. Raises TemplateUnreadableError or NothingConsolidatedError.
    """
    workbook, target = open_template(template, sheet_name)
    state = seed_row_index(target)
    division_value = digits_only(default_division) or "0"
    ia_value = (default_ia or "").strip() or "IA"

    logger.info(
        "consolidating %d file(s) into sheet %r (%d existing IDs, last row %d)",
        len(input_files), target.title, len(state.rows), state.frontier,
    )

    consolidated = 0
    skipped: List[ConsolidationSkippedDetail] = []

    for item in sorted(input_files, key=lambda f: sort_key(f.file_name)):
        try:
            sheets = parse_excel_file(item.buffer)
        except SheetParseError as e:
            logger.info("%s: %s", item.file_name, e)
            sheets = []
        if not sheets:
            skipped.append(ConsolidationSkippedDetail(
                file_name=item.file_name,
                reason="No readable worksheet data found in file.",
            ))
            continue

        extracted = extract_data(sheets, item.file_name)
        if not extracted.file_id:
            skipped.append(ConsolidationSkippedDetail(
                file_name=item.file_name,
                reason="Cannot extract file ID from filename prefix.",
            ))
            continue

        try:
            state, row = assign_row(state, extracted.file_id)
        except RowAssignmentError as e:
            skipped.append(ConsolidationSkippedDetail(
                file_name=item.file_name, file_id=extracted.file_id, reason=str(e),
            ))
            continue

        write_record(target, row, extracted, ia_value, division_value)
        consolidated += 1
        logger.debug("%s -> row %d (file ID %s)", item.file_name, row, extracted.file_id)

    if consolidated == 0:
        raise NothingConsolidatedError(
            "No files were consolidated. Check that filenames start with a numeric file ID.",
            skipped,
        )

    out = io.BytesIO()
    workbook.save(out)
    logger.info("consolidated %d file(s), skipped %d", consolidated, len(skipped))

    return ConsolidationResult(
        output_buffer=out.getvalue(),
        output_name=output_filename(output_name),
        consolidated_count=consolidated,
        skipped_details=skipped,
    )
