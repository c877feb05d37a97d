"""Loan lifecycle service for chequebook.

This service handles the manually entered side of a loan's life:
- Issuance with a live quote of interest and total
- Full edits, which recompute every derived field
- Marking a loan as paid
- Reversing a payment
"""
import logging
from datetime import date

from chequebook import calculator
from chequebook.config import DEFAULT_INTEREST_RATE, STATUS_PAID, STATUS_PENDING
from chequebook.data_structures import Loan
from chequebook.exceptions import ClientNotFoundError, LoanNotFoundError, ValidationError
from chequebook.session import require_admin
from chequebook.store import CLEAR

logger = logging.getLogger(__name__)


class LoanService:
    """Handles loan lifecycle operations.

    Every write requires an admin session.
    """

    def __init__(self, db_manager, session=None):
        """Initialize LoanService.

        Args:
            db_manager: RecordStore instance for data persistence.
            session: Current Session.
        """
        self.db = db_manager
        self.session = session

    @property
    def default_rate(self):
        """Default interest rate, overridable through the settings table."""
        value = self.db.get_setting("default_interest_rate")
        try:
            return float(value) if value is not None else DEFAULT_INTEREST_RATE
        except ValueError:
            logger.warning("Ignoring invalid default_interest_rate setting %r", value)
            return DEFAULT_INTEREST_RATE

    def get_loans(self):
        return self.db.get_loans()

    def get_loans_by_client(self, client_id):
        return self.db.get_loans_by_client(client_id)

    def get_loan(self, loan_id):
        loan = self.db.get_loan(loan_id)
        if loan is None:
            raise LoanNotFoundError(loan_id)
        return loan

    def preview(self, amount, loan_date, due_date, interest_rate=None):
        """Quote term, interest and total for the entry form."""
        if interest_rate is None:
            interest_rate = self.default_rate
        return calculator.quote_loan(amount or 0, interest_rate, loan_date, due_date)

    def add_loan(self, client_id, amount, loan_date, due_date, interest_rate=None, document_number=""):
        """Issue a new loan.

        Args:
            client_id: ID of the borrowing client.
            amount: Principal, must be positive.
            loan_date: Issue date.
            due_date: Due date.
            interest_rate: Rate in percent (default: the configured default rate).
            document_number: Optional cheque/document reference.

        Returns:
            The id of the new loan.
        """
        require_admin(self.session, "add loan")
        loan = self._build(client_id, amount, loan_date, due_date, interest_rate, document_number)
        loan_id = self.db.add_loan(loan.to_record())
        logger.info("Loan %s issued to %s: %.2f", loan_id, loan.client_name, loan.amount)
        return loan_id

    def update_loan(self, loan_id, client_id, amount, loan_date, due_date, interest_rate=None,
                    document_number=""):
        """Replace a loan's fields, recomputing every derived value.

        The status and payment date are left untouched; they only change
        through mark_paid and reverse_payment.
        """
        require_admin(self.session, "update loan")
        current = self.get_loan(loan_id)
        loan = self._build(client_id, amount, loan_date, due_date, interest_rate, document_number)
        fields = loan.to_record()
        fields['status'] = current.get('status', STATUS_PENDING)
        self.db.update_loan(loan_id, fields)

    def mark_paid(self, loan_id, payment_date=None):
        """Set a loan as paid on ``payment_date`` (today when omitted)."""
        require_admin(self.session, "mark loan paid")
        self.get_loan(loan_id)
        if payment_date is None:
            payment_date = date.today()
        self.db.update_loan(loan_id, {'status': STATUS_PAID, 'payment_date': payment_date})
        logger.info("Loan %s marked paid on %s", loan_id, payment_date)

    def reverse_payment(self, loan_id):
        """Return a paid loan to pending and remove its payment date."""
        require_admin(self.session, "reverse payment")
        self.get_loan(loan_id)
        self.db.update_loan(loan_id, {'status': STATUS_PENDING, 'payment_date': CLEAR})
        logger.info("Payment of loan %s reversed", loan_id)

    def _build(self, client_id, amount, loan_date, due_date, interest_rate, document_number):
        if not client_id:
            raise ValidationError("A client is required", "client_id")
        if not amount or amount <= 0:
            raise ValidationError("Amount must be greater than zero", "amount")
        if not loan_date:
            raise ValidationError("Loan date is required", "loan_date")
        if not due_date:
            raise ValidationError("Due date is required", "due_date")

        client = self.db.get_client(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)

        quote = self.preview(amount, loan_date, due_date, interest_rate)
        return Loan(
            client_id=client_id,
            client_name=client['name'],
            document_number=document_number or "",
            loan_date=loan_date,
            amount=amount,
            due_date=due_date,
            term_days=quote.term_days,
            interest_rate=quote.interest_rate,
            interest_value=quote.interest_value,
            total_amount=quote.total_amount,
        )
