"""
Portfolio reporting module for chequebook.
Handles filtering, pagination and totals of the loan listing.
"""
import math
from datetime import datetime, date

import pandas as pd

from chequebook.config import ITEMS_PER_PAGE, STATUS_PAID


class PortfolioReport:
    def __init__(self, loans):
        self.loans = list(loans)

    @staticmethod
    def _loan_year(loan):
        value = loan.get('loan_date')
        if not value:
            return None
        if isinstance(value, (datetime, date)):
            return value.year
        try:
            return datetime.strptime(str(value)[:10], "%Y-%m-%d").year
        except ValueError:
            return None

    def available_years(self, today=None):
        """Years present in the loans plus the current year, newest first."""
        if today is None:
            today = date.today()
        years = {today.year}
        for loan in self.loans:
            year = self._loan_year(loan)
            if year:
                years.add(year)
        return sorted(years, reverse=True)

    def filter(self, search="", year="all"):
        """
        Return a new report restricted to loans matching the search text
        (client name or document number) and the loan year.
        A year of "all" (or None) keeps every year; loans without a loan date
        are dropped by any specific year.
        """
        term = (search or "").strip().lower()
        keep = []
        for loan in self.loans:
            if term:
                name = (loan.get('client_name') or "").lower()
                document = (loan.get('document_number') or "").lower()
                if term not in name and term not in document:
                    continue
            if year not in (None, "all"):
                if self._loan_year(loan) != int(year):
                    continue
            keep.append(loan)
        return PortfolioReport(keep)

    def to_frame(self):
        columns = ["id", "client_name", "document_number", "loan_date", "due_date",
                   "amount", "interest_value", "total_amount", "status"]
        if not self.loans:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame(self.loans).reindex(columns=columns)

    def summary(self):
        """Totals of the portfolio: everything, received (paid) and pending."""
        df = self.to_frame()
        if df.empty:
            return {"total": 0.0, "received": 0.0, "pending": 0.0, "count": 0}

        totals = pd.to_numeric(df["total_amount"], errors="coerce").fillna(0.0)
        total = float(totals.sum())
        received = float(totals[df["status"] == STATUS_PAID].sum())
        return {
            "total": total,
            "received": received,
            "pending": total - received,
            "count": len(df),
        }

    def total_pages(self, per_page=ITEMS_PER_PAGE):
        return math.ceil(len(self.loans) / per_page)

    def page(self, number, per_page=ITEMS_PER_PAGE):
        """Loans on 1-based page ``number``."""
        start = (max(number, 1) - 1) * per_page
        return self.loans[start:start + per_page]
