"""Database management module for chequebook."""
import logging
import sqlite3
from datetime import date, datetime
from contextlib import contextmanager

from chequebook.config import DATE_FORMAT_STORAGE, ROLE_ADMIN, STATUS_PENDING
from chequebook.exceptions import DatabaseError, TransactionError
from chequebook.store import RecordStore, CLEAR

logger = logging.getLogger(__name__)

CLIENT_FIELDS = ("name", "phone", "email", "cpf", "address")
LOAN_FIELDS = (
    "client_id", "client_name", "document_number", "loan_date", "amount",
    "due_date", "term_days", "interest_rate", "interest_value", "total_amount",
    "status", "payment_date",
)
# Columns that are dropped from a record when NULL
OPTIONAL_LOAN_FIELDS = ("payment_date",)


def _to_db(value):
    if isinstance(value, datetime):
        return value.strftime(DATE_FORMAT_STORAGE)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT_STORAGE)
    return value


class DatabaseManager(RecordStore):
    """Handles all SQLite database operations."""

    def __init__(self, db_name="chequebook.db"):
        self.db_name = db_name
        try:
            self.conn = sqlite3.connect(db_name)
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot open database: {e}", {'db_name': db_name})
        self._closed = False
        self._in_transaction = False
        self.create_tables()

    def close(self):
        """Close the database connection."""
        if self.conn and not self._closed:
            self.conn.close()
            self._closed = True

    def __del__(self):
        """Ensure connection is closed on garbage collection."""
        if hasattr(self, "conn"):
            self.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with proper cleanup."""
        self.close()
        return False

    @contextmanager
    def transaction(self):
        """Group store writes into one commit, rolled back if the block raises.

        Usage:
            with db.transaction():
                db.add_user(...)
                db.set_user_role(...)

        Writes made through the store methods inside the block are committed
        together when it exits. Nested blocks join the outer transaction.
        """
        if self._in_transaction:
            yield
            return

        self._in_transaction = True
        try:
            yield
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise TransactionError(f"Transaction failed: {str(e)}")
        except Exception:
            self.conn.rollback()
            raise
        finally:
            self._in_transaction = False

    def _execute(self, query, params=()):
        """Run a write statement, wrapping sqlite errors.

        Commits immediately unless a transaction() block is open.
        """
        try:
            cursor = self.conn.cursor()
            cursor.execute(query, params)
            if not self._in_transaction:
                self.conn.commit()
            return cursor
        except sqlite3.Error as e:
            if not self._in_transaction:
                self.conn.rollback()
            logger.error("Database write failed: %s", e)
            raise DatabaseError(f"Database write failed: {e}", {'query': query.split()[0]})

    def _fetch(self, query, params=()):
        try:
            cursor = self.conn.cursor()
            cursor.execute(query, params)
            cols = [description[0] for description in cursor.description]
            return [dict(zip(cols, row)) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise DatabaseError(f"Database read failed: {e}")

    def create_tables(self):
        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS clients (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                phone TEXT DEFAULT '',
                email TEXT DEFAULT '',
                cpf TEXT DEFAULT '',
                address TEXT DEFAULT '',
                created_at TEXT
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS loans (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                client_id INTEGER,
                client_name TEXT,
                document_number TEXT DEFAULT '',
                loan_date TEXT,
                amount REAL,
                due_date TEXT,
                term_days INTEGER DEFAULT 0,
                interest_rate REAL DEFAULT 0,
                interest_value REAL DEFAULT 0,
                total_amount REAL DEFAULT 0,
                status TEXT DEFAULT 'pending',
                payment_date TEXT,
                created_at TEXT,
                FOREIGN KEY(client_id) REFERENCES clients(id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS users (
                uid TEXT PRIMARY KEY,
                email TEXT,
                name TEXT,
                role TEXT DEFAULT 'user',
                created_at TEXT
            )
        """)

        # Settings Table
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)

        self.conn.commit()

    @staticmethod
    def _now():
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    @staticmethod
    def _set_clauses(fields, allowed):
        """Build a parameterized SET clause from a partial record."""
        unknown = set(fields) - set(allowed)
        if unknown:
            raise DatabaseError("Unknown fields in update", {'fields': sorted(unknown)})

        set_clauses = []
        params = []
        for key, value in fields.items():
            set_clauses.append(f"{key}=?")
            params.append(None if value is CLEAR else _to_db(value))
        return set_clauses, params

    # Client operations
    def add_client(self, record):
        values = [record.get(f, "") or "" for f in CLIENT_FIELDS]
        if not values[0]:
            raise DatabaseError("Client name is required")
        cursor = self._execute(
            "INSERT INTO clients (name, phone, email, cpf, address, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (*values, self._now()))
        return cursor.lastrowid

    def get_client(self, client_id):
        rows = self._fetch("SELECT * FROM clients WHERE id=?", (client_id,))
        return rows[0] if rows else None

    def get_clients(self):
        return self._fetch("SELECT * FROM clients ORDER BY name, id")

    def update_client(self, client_id, fields):
        if not fields:
            return
        set_clauses, params = self._set_clauses(fields, CLIENT_FIELDS)
        params.append(client_id)
        self._execute(f"UPDATE clients SET {', '.join(set_clauses)} WHERE id=?", tuple(params))

    # Loan operations
    def _loan_from_row(self, row):
        for key in OPTIONAL_LOAN_FIELDS:
            if row.get(key) is None:
                row.pop(key, None)
        return row

    def add_loan(self, record):
        record = {k: v for k, v in record.items() if v is not CLEAR}
        record.setdefault("status", STATUS_PENDING)
        unknown = set(record) - set(LOAN_FIELDS)
        if unknown:
            raise DatabaseError("Unknown loan fields", {'fields': sorted(unknown)})

        cols = list(record.keys()) + ["created_at"]
        params = [_to_db(record[k]) for k in record] + [self._now()]
        placeholders = ", ".join(["?"] * len(cols))
        cursor = self._execute(
            f"INSERT INTO loans ({', '.join(cols)}) VALUES ({placeholders})", tuple(params))
        return cursor.lastrowid

    def get_loan(self, loan_id):
        rows = self._fetch("SELECT * FROM loans WHERE id=?", (loan_id,))
        return self._loan_from_row(rows[0]) if rows else None

    def get_loans(self):
        rows = self._fetch("SELECT * FROM loans ORDER BY loan_date DESC, id DESC")
        return [self._loan_from_row(r) for r in rows]

    def get_loans_by_client(self, client_id):
        rows = self._fetch(
            "SELECT * FROM loans WHERE client_id=? ORDER BY loan_date DESC, id DESC", (client_id,))
        return [self._loan_from_row(r) for r in rows]

    def update_loan(self, loan_id, fields):
        """Update a loan with parameterized queries (SQL injection safe)."""
        if not fields:
            return
        set_clauses, params = self._set_clauses(fields, LOAN_FIELDS)
        params.append(loan_id)
        self._execute(f"UPDATE loans SET {', '.join(set_clauses)} WHERE id=?", tuple(params))

    # User profiles
    def get_user(self, uid):
        rows = self._fetch("SELECT * FROM users WHERE uid=?", (uid,))
        return rows[0] if rows else None

    def add_user(self, uid, email, name, role):
        self._execute("INSERT INTO users (uid, email, name, role, created_at) VALUES (?, ?, ?, ?, ?)",
                      (uid, email, name, role, self._now()))

    def set_user_role(self, uid, role):
        self._execute("UPDATE users SET role=? WHERE uid=?", (role, uid))

    def has_admin(self):
        return bool(self._fetch("SELECT 1 FROM users WHERE role=? LIMIT 1", (ROLE_ADMIN,)))

    # Settings
    def get_setting(self, key, default=None):
        """Stored value of a setting (as text), or ``default`` when unset."""
        rows = self._fetch("SELECT value FROM settings WHERE key=?", (key,))
        return rows[0]["value"] if rows else default

    def set_setting(self, key, value):
        """Set a setting value."""
        self._execute("INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", (key, str(value)))
