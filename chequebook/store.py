"""Record store interface for chequebook.

Services talk to persistence only through RecordStore, so the concrete
backend (sqlite in DatabaseManager) can be swapped for a hosted document
store without touching the import pipeline.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class _Clear:
    """Sentinel marking a field to be removed by an update."""

    def __repr__(self):
        return "CLEAR"


CLEAR = _Clear()


class RecordStore(ABC):
    """Abstract create/read/update operations over clients and loans.

    Records are plain dicts. Reads never include a key for a field that was
    cleared or never set (``payment_date`` in particular). There is no
    delete operation.
    """

    # Clients
    @abstractmethod
    def add_client(self, record: Dict[str, Any]) -> int:
        """Create a client and return its assigned id."""
        pass

    @abstractmethod
    def get_client(self, client_id) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def get_clients(self) -> List[Dict[str, Any]]:
        """All clients ordered by name ascending."""
        pass

    @abstractmethod
    def update_client(self, client_id, fields: Dict[str, Any]) -> None:
        pass

    # Loans
    @abstractmethod
    def add_loan(self, record: Dict[str, Any]) -> int:
        """Create a loan and return its assigned id."""
        pass

    @abstractmethod
    def get_loan(self, loan_id) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def get_loans(self) -> List[Dict[str, Any]]:
        """All loans ordered by loan date descending."""
        pass

    @abstractmethod
    def get_loans_by_client(self, client_id) -> List[Dict[str, Any]]:
        """Loans of one client ordered by loan date descending."""
        pass

    @abstractmethod
    def update_loan(self, loan_id, fields: Dict[str, Any]) -> None:
        """Partial update; a field set to CLEAR is removed."""
        pass

    # User profiles
    @abstractmethod
    def get_user(self, uid: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def add_user(self, uid: str, email: str, name: str, role: str) -> None:
        pass

    @abstractmethod
    def set_user_role(self, uid: str, role: str) -> None:
        pass

    @abstractmethod
    def has_admin(self) -> bool:
        """Whether any user profile holds the admin role."""
        pass

    # Settings
    @abstractmethod
    def get_setting(self, key: str, default=None):
        pass

    @abstractmethod
    def set_setting(self, key: str, value) -> None:
        pass

    # Atomicity
    @abstractmethod
    def transaction(self):
        """Context manager committing the writes of its block together."""
        pass
