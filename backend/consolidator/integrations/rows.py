from __future__ import annotations

from typing import Any, Dict, Iterable, NamedTuple, Tuple

from .cursor import normalize_id

# last addressable worksheet row in the xlsx format
MAX_SHEET_ROW = 1048576


class RowAssignmentError(ValueError):
    pass


class RowIndex(NamedTuple):
    """Identifier -> destination row for one consolidation call."""

    rows: Dict[str, int]
    frontier: int

    @classmethod
    def from_column(cls, values: Iterable[Any], first_row: int = 1) -> "RowIndex":
        rows: Dict[str, int] = {}
        last = 0
        for offset, value in enumerate(values):
            file_id = normalize_id(value)
            if not file_id:
                continue
            row = first_row + offset
            rows[file_id] = row
            last = max(last, row)
        return cls(rows, last)


def assign_row(state: RowIndex, file_id: str) -> Tuple[RowIndex, int]:
    """
    Resolve the destination row for file_id.

    Known identifiers keep their row. A new identifier goes to
    max(frontier + 1, numeric id), which becomes the new frontier. Rows past
    MAX_SHEET_ROW cannot be written and are refused.

    The held-row check only fires for a RowIndex whose frontier is below one
    of its own rows, i.e. a state not built by from_column/assign_row.
    """
    existing = state.rows.get(file_id)
    if existing is not None:
        return state, existing

    try:
        numeric = int(file_id)
    except (TypeError, ValueError):
        raise RowAssignmentError(f"Cannot assign row for file ID {file_id}.") from None
    if numeric <= 0:
        raise RowAssignmentError(f"Cannot assign row for file ID {file_id}.")

    row = max(state.frontier + 1, numeric)
    if row > MAX_SHEET_ROW:
        raise RowAssignmentError(f"Cannot assign row for file ID {file_id}.")
    holder = next((k for k, v in state.rows.items() if v == row), None)
    if holder is not None:
        raise RowAssignmentError(
            f"Cannot assign row for file ID {file_id}: row {row} already holds file ID {holder}."
        )

    rows = dict(state.rows)
    rows[file_id] = row
    return RowIndex(rows, max(state.frontier, row)), row
