# IFR consolidation engine.
#
# - sheets.py:        workbook bytes -> positional grids (openpyxl)
# - extractor.py:     grids -> ExtractedData
# - consolidation.py: template + IFR files -> consolidated workbook
from .consolidation import (
    ConsolidationError,
    InputFile,
    NothingConsolidatedError,
    TemplateUnreadableError,
    consolidate,
)
from .extractor import extract_data
from .models import ConsolidationResult, ConsolidationSkippedDetail, ExtractedData
from .rows import RowAssignmentError, RowIndex, assign_row
from .sheets import ParsedSheet, SheetParseError, get_cell_by_address, parse_excel_file

__all__ = [
    "ConsolidationError",
    "ConsolidationResult",
    "ConsolidationSkippedDetail",
    "ExtractedData",
    "InputFile",
    "NothingConsolidatedError",
    "ParsedSheet",
    "RowAssignmentError",
    "RowIndex",
    "SheetParseError",
    "TemplateUnreadableError",
    "assign_row",
    "consolidate",
    "extract_data",
    "get_cell_by_address",
    "parse_excel_file",
]
