"""Row ingestion for the spreadsheet import.

Turns one SheetRow into a stored loan, resolving or creating the owning
client against the batch's in-memory client snapshot.
"""
import logging
from datetime import date
from typing import Callable, Dict, List, Optional

from chequebook import calculator
from chequebook import config
from chequebook.data_structures import (
    Client, Loan, RowOutcome, RowStatus, SheetRow, normalize_label,
)
from chequebook.normalizers import normalize_currency, normalize_date

logger = logging.getLogger(__name__)


def holder_name(row: SheetRow) -> str:
    """The row's holder name, trimmed and upper-cased; '' when not text."""
    raw = row.get(config.COL_HOLDER)
    if not isinstance(raw, str):
        return ""
    return normalize_label(raw)


def _is_valid_amount(amount) -> bool:
    """A principal must be a positive number; NaN compares false."""
    return amount > 0


class ClientSnapshot:
    """In-memory copy of the client collection, taken once per batch.

    Lookups never go back to the store; clients created during the batch are
    added as they are created so later rows reuse them.
    """

    def __init__(self, clients: List[Dict]):
        self._by_key: Dict[str, Dict] = {}
        for client in clients:
            self._by_key.setdefault(normalize_label(client.get('name')), client)

    def find(self, name: str) -> Optional[Dict]:
        return self._by_key.get(normalize_label(name))

    def add(self, client: Dict) -> None:
        self._by_key.setdefault(normalize_label(client.get('name')), client)

    def __len__(self):
        return len(self._by_key)


class RowIngestor:
    """Maps sheet rows to loans and persists them.

    Attributes:
        db: RecordStore receiving new clients and loans.
        clients: ClientSnapshot shared across the batch.
        log: Callback receiving user-facing log lines.
        today: Fallback date for unparseable due dates.
    """

    def __init__(self, db_manager, clients: ClientSnapshot,
                 log: Callable[[str], None] = None, today: date = None):
        self.db = db_manager
        self.clients = clients
        self.log = log or (lambda line: None)
        self.today = today

    def ingest(self, row: SheetRow) -> RowOutcome:
        """Ingest one row.

        Returns:
            RowOutcome: SKIPPED for rows without a holder, INVALID for rows
            without a positive principal or loan date, IMPORTED otherwise.

        Raises:
            Any store error, so the caller can count the row as failed.
        """
        name = holder_name(row)
        if not name:
            return RowOutcome(RowStatus.SKIPPED)

        amount = normalize_currency(row.get(config.COL_AMOUNT)).value
        interest = normalize_currency(row.get(config.COL_INTEREST)).value
        explicit_total = normalize_currency(row.get(config.COL_TOTAL)).unwrap_or(None)
        loan_date = normalize_date(row.get(config.COL_LOAN_DATE), self.today)
        due_date = normalize_date(row.get(config.COL_DUE_DATE), self.today)

        if not _is_valid_amount(amount) or not loan_date.success:
            logger.info("Row %s (%s) rejected: amount=%r loan_date=%s",
                        row.line, name, amount, loan_date.error or loan_date.value)
            self.log(config.MSG_INVALID_ROW.format(name=name))
            return RowOutcome(RowStatus.INVALID, name=name)

        if not due_date.success:
            self.log(config.MSG_DUE_DATE_DEFAULTED.format(name=name))

        quote = calculator.quote_imported_loan(
            amount, interest, loan_date.value, due_date.value, explicit_total)

        client_id, created = self._resolve_client(name)

        loan = Loan(
            client_id=client_id,
            client_name=name,
            loan_date=loan_date.value,
            amount=amount,
            due_date=due_date.value,
            term_days=quote.term_days,
            interest_rate=quote.interest_rate,
            interest_value=interest,
            total_amount=quote.total_amount,
        )
        loan_id = self.db.add_loan(loan.to_record())
        return RowOutcome(RowStatus.IMPORTED, name=name, loan_id=loan_id,
                          total_amount=quote.total_amount, client_created=created)

    def _resolve_client(self, name):
        """Return (client_id, created) for ``name``, creating the client on a miss."""
        existing = self.clients.find(name)
        if existing is not None:
            return existing['id'], False

        self.log(config.MSG_CREATING_CLIENT.format(name=name))
        client = Client(name=name)
        client_id = self.db.add_client(client.to_record())
        record = client.to_record()
        record['id'] = client_id
        self.clients.add(record)
        logger.info("Created client %s (id=%s) during import", name, client_id)
        return client_id, True
