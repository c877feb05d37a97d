from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Dict, Any, Optional

from chequebook.config import STATUS_PENDING, STATUS_PAID, LOAN_STATUSES
from chequebook.exceptions import ValidationError


def normalize_label(label) -> str:
    """Normalize a header label or lookup key: trimmed and upper-cased."""
    if label is None:
        return ""
    return str(label).strip().upper()


@dataclass
class Client:
    """DTO for a client record as written to the store."""
    name: str
    phone: str = ""
    email: str = ""
    cpf: str = ""
    address: str = ""
    id: Optional[int] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'cpf': self.cpf,
            'address': self.address,
        }


@dataclass
class Loan:
    """DTO for a loan record as written to the store.

    ``client_name`` is a copy of the client's name at creation time and is not
    kept in sync with later renames.
    """
    client_id: int
    client_name: str
    loan_date: date
    amount: float
    due_date: date
    term_days: int
    interest_rate: float
    interest_value: float
    total_amount: float
    document_number: str = ""
    status: str = STATUS_PENDING
    payment_date: Optional[date] = None
    id: Optional[int] = None

    def __post_init__(self):
        if self.status not in LOAN_STATUSES:
            raise ValidationError(f"Unknown loan status '{self.status}'", "status")
        if self.status == STATUS_PENDING and self.payment_date is not None:
            raise ValidationError("A pending loan cannot have a payment date", "payment_date")
        if self.term_days < 0:
            raise ValidationError("Term cannot be negative", "term_days")

    def to_record(self) -> Dict[str, Any]:
        record = {
            'client_id': self.client_id,
            'client_name': self.client_name,
            'document_number': self.document_number,
            'loan_date': self.loan_date,
            'amount': self.amount,
            'due_date': self.due_date,
            'term_days': self.term_days,
            'interest_rate': self.interest_rate,
            'interest_value': self.interest_value,
            'total_amount': self.total_amount,
            'status': self.status,
        }
        if self.status == STATUS_PAID and self.payment_date is not None:
            record['payment_date'] = self.payment_date
        return record


@dataclass
class LoanQuote:
    """Derived financial fields of a loan."""
    term_days: int
    interest_rate: float
    interest_value: float
    total_amount: float


class SheetRow:
    """One data row of an imported sheet, keyed by normalized header label."""

    def __init__(self, cells: Dict[str, Any], line: int = None):
        self._cells = {normalize_label(k): v for k, v in cells.items()}
        self.line = line

    def get(self, label: str, default=None):
        """Look up a cell by header label, ignoring case and surrounding spaces."""
        return self._cells.get(normalize_label(label), default)

    @property
    def labels(self) -> List[str]:
        return list(self._cells.keys())

    def is_empty(self) -> bool:
        return all(v is None or (isinstance(v, str) and not v.strip()) for v in self._cells.values())

    def __repr__(self):
        return f"SheetRow(line={self.line}, cells={self._cells!r})"


class ImportState(str, Enum):
    IDLE = "idle"
    LOCATING_HEADER = "locating-header"
    PARSING_ROWS = "parsing-rows"
    INGESTING = "ingesting"
    SUMMARIZING = "summarizing"
    DONE = "done"
    FAILED = "failed"


class RowStatus(str, Enum):
    IMPORTED = "imported"
    SKIPPED = "skipped"
    INVALID = "invalid"


@dataclass
class RowOutcome:
    status: RowStatus
    name: str = ""
    loan_id: Optional[int] = None
    total_amount: float = 0.0
    client_created: bool = False


@dataclass
class ImportReport:
    """Summary of one import batch.

    ``log`` is the ordered sequence of human-readable lines shown while the
    batch runs; ``alert`` is only set for file-level failures.
    """
    state: ImportState = ImportState.IDLE
    log: List[str] = field(default_factory=list)
    success_count: int = 0
    error_count: int = 0
    total_sum: float = 0.0
    header_row: Optional[int] = None
    clients_created: int = 0
    failure_kind: Optional[str] = None
    alert: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == ImportState.DONE and self.success_count > 0
