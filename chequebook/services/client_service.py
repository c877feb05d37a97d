"""Client service for chequebook.

Clients are created by hand or on first appearance in an import; only manual
edits ever change their contact fields.
"""
import logging

from chequebook.data_structures import Client
from chequebook.exceptions import ClientNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class ClientService:
    """Handles client registration and lookup."""

    def __init__(self, db_manager, session=None):
        """Initialize ClientService.

        Args:
            db_manager: RecordStore instance for data persistence.
            session: Current Session (any signed-in user may manage clients).
        """
        self.db = db_manager
        self.session = session

    def get_clients(self):
        """All clients ordered by name."""
        return self.db.get_clients()

    def get_client(self, client_id):
        client = self.db.get_client(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)
        return client

    def add_client(self, name, phone="", email="", cpf="", address=""):
        """Register a client.

        Returns:
            The id assigned by the store.

        Raises:
            ValidationError: If the name is blank.
        """
        client = self._build(name, phone, email, cpf, address)
        client_id = self.db.add_client(client.to_record())
        logger.info("Client %s created (id=%s)", client.name, client_id)
        return client_id

    def update_client(self, client_id, name, phone="", email="", cpf="", address=""):
        """Replace a client's name and contact fields.

        Loans keep the client name they were created with.
        """
        self.get_client(client_id)
        client = self._build(name, phone, email, cpf, address)
        self.db.update_client(client_id, client.to_record())

    def search_clients(self, term):
        """Clients whose name or email contains ``term`` (case-insensitive)."""
        clients = self.get_clients()
        term = (term or "").strip().lower()
        if not term:
            return clients
        return [
            c for c in clients
            if term in (c.get('name') or "").lower() or term in (c.get('email') or "").lower()
        ]

    @staticmethod
    def _build(name, phone, email, cpf, address):
        name = (name or "").strip()
        if not name:
            raise ValidationError("Client name is required", "name")
        return Client(name=name, phone=phone or "", email=email or "",
                      cpf=cpf or "", address=address or "")
