"""Financial calculations shared by manual entry and the spreadsheet import.

All functions are pure: the same inputs always give the same outputs.
"""
from datetime import date
from dateutil.relativedelta import relativedelta
from typing import Optional

from chequebook.config import DEFAULT_INTEREST_RATE, DEFAULT_TERM_DAYS
from chequebook.data_structures import LoanQuote


def term_days(loan_date: Optional[date], due_date: Optional[date]) -> int:
    """Whole days between loan date and due date, never negative.

    Returns 0 when either date is missing.
    """
    if not loan_date or not due_date:
        return 0
    days = (due_date - loan_date).days
    return days if days > 0 else 0


def interest_amount(principal: float, rate: float) -> float:
    """Interest for a percentage ``rate`` over the whole term."""
    return principal * (rate / 100)


def total_amount(principal: float, interest: float, explicit_total: float = None) -> float:
    """Total payable. A non-zero explicit total (from a spreadsheet) wins."""
    if explicit_total:
        return explicit_total
    return principal + interest


def effective_rate(principal: float, interest: float) -> float:
    """Back-calculate the percentage rate from an interest amount."""
    if principal <= 0:
        return 0.0
    return round((interest / principal) * 100, 2)


def quote_loan(principal: float, rate: float = None, loan_date: date = None,
               due_date: date = None) -> LoanQuote:
    """Derive term, interest and total for a loan entered by hand.

    Args:
        principal: Loan amount.
        rate: Interest rate as a percentage (default: DEFAULT_INTEREST_RATE).
        loan_date: Date the loan was issued.
        due_date: Date the loan is due.
    """
    if rate is None:
        rate = DEFAULT_INTEREST_RATE
    interest = interest_amount(principal, rate)
    return LoanQuote(
        term_days=term_days(loan_date, due_date),
        interest_rate=rate,
        interest_value=interest,
        total_amount=total_amount(principal, interest),
    )


def quote_imported_loan(principal: float, interest: float, loan_date: date,
                        due_date: date, explicit_total: float = None) -> LoanQuote:
    """Derive the stored fields of a loan read from a spreadsheet.

    The sheet carries the interest amount rather than the rate, so the rate
    is back-calculated; a total present in the sheet is kept as-is.
    """
    return LoanQuote(
        term_days=term_days(loan_date, due_date),
        interest_rate=effective_rate(principal, interest),
        interest_value=interest,
        total_amount=total_amount(principal, interest, explicit_total),
    )


def suggest_due_date(loan_date: date) -> date:
    """Default due date offered when a loan date is picked."""
    return loan_date + relativedelta(days=DEFAULT_TERM_DAYS)
