"""Value normalizers for spreadsheet cells.

Cells arrive untyped: numbers, strings, dates (openpyxl converts
date-formatted cells) or nothing at all. The functions here turn them into
currency amounts and calendar dates without ever raising, so one bad cell
never aborts a row before the row's own validation runs.
"""
import math
import re
from datetime import date, datetime, timedelta

from chequebook.config import EXCEL_EPOCH_SERIAL, CURRENCY_SYMBOL
from chequebook.result import Result

_NON_NUMERIC = re.compile(r"[^0-9,\-]+")
_LEADING_NUMBER = re.compile(r"-?(\d+(\.\d*)?|\.\d+)")

_UNIX_EPOCH = datetime(1970, 1, 1)
_MS_PER_DAY = 86400 * 1000


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def normalize_currency(value) -> Result:
    """Normalize a currency cell.

    Numbers are returned as-is. Strings lose every character that is not a
    digit, comma or hyphen (currency symbols, spaces and thousands dots), the
    comma becomes the decimal separator and the leading number is parsed.

    Returns:
        Result with the amount; defaulted to 0.0 when the cell is blank or
        not a number.
    """
    if _is_blank(value):
        return Result.defaulted(0.0, "Empty currency cell")
    if _is_number(value):
        return Result.ok(value)
    if isinstance(value, str):
        clean = _NON_NUMERIC.sub("", value.replace("−", "-")).replace(",", ".", 1)
        match = _LEADING_NUMBER.match(clean)
        if match:
            return Result.ok(float(match.group(0)))
    return Result.defaulted(0.0, f"Not a currency value: {value!r}")


def parse_currency(value) -> float:
    """Parse a currency cell, defaulting to 0.0.

    >>> parse_currency("R$ 1.200,50")
    1200.5
    """
    return normalize_currency(value).value


def serial_to_date(serial: float) -> date:
    """Convert a spreadsheet day serial to its calendar date (UTC, time dropped)."""
    millis = round((serial - EXCEL_EPOCH_SERIAL) * _MS_PER_DAY)
    return (_UNIX_EPOCH + timedelta(milliseconds=millis)).date()


def normalize_date(value, today: date = None) -> Result:
    """Normalize a date cell.

    Accepts day serials, ``D/M/Y`` strings and date/datetime objects.
    Anything else defaults to ``today`` (the current date when not given).
    """
    if today is None:
        today = date.today()

    if isinstance(value, datetime):
        return Result.ok(value.date())
    if isinstance(value, date):
        return Result.ok(value)
    if _is_number(value) and not math.isnan(value):
        try:
            return Result.ok(serial_to_date(value))
        except OverflowError:
            return Result.defaulted(today, f"Date serial out of range: {value!r}")
    if isinstance(value, str):
        parts = value.split("/")
        if len(parts) == 3:
            try:
                day, month, year = (int(p.strip()) for p in parts)
                return Result.ok(date(year, month, day))
            except ValueError:
                return Result.defaulted(today, f"Invalid D/M/Y date: {value!r}")

    return Result.defaulted(today, f"Not a date: {value!r}")


def parse_excel_date(value, today: date = None) -> date:
    """Parse a date cell, defaulting to today."""
    return normalize_date(value, today).value


def format_currency(value: float) -> str:
    """Format an amount in the Brazilian convention, e.g. ``R$ 1.234,56``."""
    text = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL} {text}"
