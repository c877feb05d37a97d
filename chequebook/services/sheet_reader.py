"""Workbook decoding for the spreadsheet import.

Only the first sheet is read, as a raw grid: no header inference, every
cell kept as the engine returns it, empty cells as None.
"""
import io
import logging
import os

import numpy as np
import pandas as pd

from chequebook.exceptions import PasswordProtectedFileError, UnreadableFileError

logger = logging.getLogger(__name__)

# Magic number of an OLE2 compound file; encrypted .xlsx packages use it
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ZIP_EXTENSIONS = (".xlsx", ".xlsm")
PASSWORD_MARKERS = ("password", "encrypt")


def classify_read_error(error: Exception):
    """Map a decoding failure to PasswordProtectedFileError or UnreadableFileError."""
    message = str(error)
    lowered = message.lower()
    if any(marker in lowered for marker in PASSWORD_MARKERS):
        return PasswordProtectedFileError(f"Workbook is password protected: {message}")
    return UnreadableFileError(f"Workbook could not be read: {message}",
                               {'error_type': type(error).__name__})


def _head_bytes(source, size=8):
    if isinstance(source, (bytes, bytearray)):
        return bytes(source[:size])
    if hasattr(source, "read") and hasattr(source, "seek"):
        pos = source.tell()
        head = source.read(size)
        source.seek(pos)
        return head
    with open(source, "rb") as fh:
        return fh.read(size)


def _check_encrypted(source):
    name = source if isinstance(source, (str, os.PathLike)) else getattr(source, "name", "")
    if not str(name).lower().endswith(ZIP_EXTENSIONS):
        return
    if _head_bytes(source) == OLE2_SIGNATURE:
        raise ValueError("Workbook is encrypted")


def _clean_cell(value):
    if value is None:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def read_workbook_grid(source):
    """Read the first sheet of a workbook as a list of rows.

    Args:
        source: File path, raw bytes or a binary file object.

    Returns:
        List of lists of cell values (numbers, strings, datetimes or None).

    Raises:
        PasswordProtectedFileError: If the workbook is encrypted.
        UnreadableFileError: If it cannot be decoded as a spreadsheet.
    """
    try:
        _check_encrypted(source)
        data = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
        frame = pd.read_excel(data, sheet_name=0, header=None, dtype=object)
    except Exception as e:
        logger.warning("Failed to read workbook: %s", e)
        raise classify_read_error(e)

    grid = [[_clean_cell(v) for v in row] for row in frame.itertuples(index=False, name=None)]
    logger.debug("Read %d rows from workbook", len(grid))
    return grid
