from __future__ import annotations

from typing import Any, Dict

from ..integrations import SheetParseError, extract_data, parse_excel_file


class ExtractionFailed(Exception):
    pass


def extract(buffer: bytes, file_name: str) -> Dict[str, Any]:
    """
    Run field extraction on a single IFR workbook.

    Returns the ExtractedData as a plain dict, plus the sheet names seen, so
    callers can preview what a consolidation would write for this file.
    """
    try:
        sheets = parse_excel_file(buffer)
    except SheetParseError as e:
        raise ExtractionFailed(str(e)) from e
    if not sheets:
        raise ExtractionFailed("No readable worksheet data found in file.")

    out = extract_data(sheets, file_name).model_dump()
    out["sheets"] = [s.name for s in sheets]
    return out
