"""Header discovery for imported sheets.

Real sheets carry a variable number of title and blank rows above the
column headers, so the header row is found by looking for a known label in
the first few rows instead of assuming row 0.
"""
from typing import Any, List, Optional, Sequence

from chequebook.config import HEADER_ANCHOR, HEADER_SCAN_ROWS
from chequebook.data_structures import SheetRow, normalize_label


def find_header_row(grid: Sequence[Sequence[Any]], anchor: str = HEADER_ANCHOR,
                    max_rows: int = HEADER_SCAN_ROWS) -> Optional[int]:
    """Return the index of the first row holding ``anchor``, or None.

    Only the first ``max_rows`` rows are scanned. A cell matches when it is
    text equal to the anchor once trimmed and upper-cased.
    """
    target = normalize_label(anchor)
    for index, row in enumerate(grid[:max_rows]):
        if not row:
            continue
        for cell in row:
            if isinstance(cell, str) and normalize_label(cell) == target:
                return index
    return None


def header_labels(grid: Sequence[Sequence[Any]], header_index: int) -> List[Optional[str]]:
    """Normalized labels of the header row; None for blank header cells."""
    labels = []
    for cell in grid[header_index]:
        label = normalize_label(cell) if cell is not None else ""
        labels.append(label or None)
    return labels


def build_rows(grid: Sequence[Sequence[Any]], header_index: int) -> List[SheetRow]:
    """Map every data row below the header to a SheetRow.

    Columns without a header are ignored; when two headers normalize to the
    same label the leftmost one wins. Rows with no content are dropped.
    """
    labels = header_labels(grid, header_index)
    rows = []
    for offset, raw in enumerate(grid[header_index + 1:], start=header_index + 1):
        cells = {}
        for label, value in zip(labels, raw or ()):
            if label is None or label in cells:
                continue
            cells[label] = value
        for label in labels:
            if label is not None:
                cells.setdefault(label, None)
        row = SheetRow(cells, line=offset + 1)
        if not row.is_empty():
            rows.append(row)
    return rows
