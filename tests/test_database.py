"""Tests for the sqlite record store."""
import os
import sys
import tempfile
import unittest
from datetime import date

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from chequebook.database import DatabaseManager
from chequebook.exceptions import DatabaseError, TransactionError
from chequebook.store import CLEAR, RecordStore


def loan_record(client_id, client_name, loan_date, **overrides):
    record = {
        'client_id': client_id,
        'client_name': client_name,
        'loan_date': loan_date,
        'amount': 1000.0,
        'due_date': date(2024, 12, 31),
        'term_days': 30,
        'interest_rate': 1.2,
        'interest_value': 12.0,
        'total_amount': 1012.0,
    }
    record.update(overrides)
    return record


class TestClientStore(unittest.TestCase):

    def setUp(self):
        self.db = DatabaseManager(":memory:")

    def tearDown(self):
        self.db.close()

    def test_is_record_store(self):
        self.assertIsInstance(self.db, RecordStore)

    def test_clients_ordered_by_name(self):
        self.db.add_client({'name': 'ZECA'})
        self.db.add_client({'name': 'ANA', 'phone': '123'})
        self.db.add_client({'name': 'MARIA'})

        names = [c['name'] for c in self.db.get_clients()]
        self.assertEqual(names, ['ANA', 'MARIA', 'ZECA'])

    def test_add_returns_id_and_stamps_created_at(self):
        client_id = self.db.add_client({'name': 'ANA', 'email': 'ana@test.com'})
        client = self.db.get_client(client_id)
        self.assertEqual(client['email'], 'ana@test.com')
        self.assertEqual(client['phone'], '')
        self.assertTrue(client['created_at'])

    def test_partial_update(self):
        client_id = self.db.add_client({'name': 'ANA', 'phone': '111'})
        self.db.update_client(client_id, {'phone': '222'})
        client = self.db.get_client(client_id)
        self.assertEqual(client['phone'], '222')
        self.assertEqual(client['name'], 'ANA')

    def test_update_rejects_unknown_field(self):
        client_id = self.db.add_client({'name': 'ANA'})
        with self.assertRaises(DatabaseError):
            self.db.update_client(client_id, {'name = 1; --': 'x'})

    def test_missing_name_rejected(self):
        with self.assertRaises(DatabaseError):
            self.db.add_client({'name': ''})


class TestLoanStore(unittest.TestCase):

    def setUp(self):
        self.db = DatabaseManager(":memory:")
        self.ana = self.db.add_client({'name': 'ANA'})
        self.bia = self.db.add_client({'name': 'BIA'})

    def tearDown(self):
        self.db.close()

    def test_loans_ordered_by_loan_date_desc(self):
        self.db.add_loan(loan_record(self.ana, 'ANA', date(2024, 1, 10)))
        self.db.add_loan(loan_record(self.bia, 'BIA', date(2024, 3, 5)))
        self.db.add_loan(loan_record(self.ana, 'ANA', date(2023, 12, 1)))

        dates = [l['loan_date'] for l in self.db.get_loans()]
        self.assertEqual(dates, ['2024-03-05', '2024-01-10', '2023-12-01'])

    def test_loans_by_client(self):
        self.db.add_loan(loan_record(self.ana, 'ANA', date(2024, 1, 10)))
        self.db.add_loan(loan_record(self.bia, 'BIA', date(2024, 3, 5)))
        self.db.add_loan(loan_record(self.ana, 'ANA', date(2024, 2, 1)))

        loans = self.db.get_loans_by_client(self.ana)
        self.assertEqual(len(loans), 2)
        self.assertEqual([l['loan_date'] for l in loans], ['2024-02-01', '2024-01-10'])
        self.assertTrue(all(l['client_id'] == self.ana for l in loans))

    def test_new_loan_is_pending_without_payment_date(self):
        loan_id = self.db.add_loan(loan_record(self.ana, 'ANA', date(2024, 1, 10)))
        loan = self.db.get_loan(loan_id)
        self.assertEqual(loan['status'], 'pending')
        self.assertNotIn('payment_date', loan)

    def test_clear_removes_payment_date(self):
        loan_id = self.db.add_loan(loan_record(self.ana, 'ANA', date(2024, 1, 10)))
        self.db.update_loan(loan_id, {'status': 'paid', 'payment_date': date(2024, 2, 1)})
        self.assertEqual(self.db.get_loan(loan_id)['payment_date'], '2024-02-01')

        self.db.update_loan(loan_id, {'status': 'pending', 'payment_date': CLEAR})
        loan = self.db.get_loan(loan_id)
        self.assertEqual(loan['status'], 'pending')
        self.assertNotIn('payment_date', loan)

    def test_unknown_loan_is_none(self):
        self.assertIsNone(self.db.get_loan(999))


class TestSettingsAndUsers(unittest.TestCase):

    def setUp(self):
        self.db = DatabaseManager(":memory:")

    def tearDown(self):
        self.db.close()

    def test_settings_round_trip(self):
        self.assertEqual(self.db.get_setting("default_interest_rate", "1.2"), "1.2")
        self.db.set_setting("default_interest_rate", 2.5)
        self.assertEqual(self.db.get_setting("default_interest_rate"), "2.5")

    def test_user_profile(self):
        self.assertIsNone(self.db.get_user("u1"))
        self.db.add_user("u1", "u1@test.com", "User One", "user")
        self.db.set_user_role("u1", "admin")
        self.assertEqual(self.db.get_user("u1")['role'], 'admin')

    def test_has_admin(self):
        self.assertFalse(self.db.has_admin())
        self.db.add_user("u1", "", "", "user")
        self.assertFalse(self.db.has_admin())
        self.db.set_user_role("u1", "admin")
        self.assertTrue(self.db.has_admin())


class TestConnectionManagement(unittest.TestCase):
    """Test database connection management."""

    def test_context_manager(self):
        """Test that DatabaseManager works as a context manager."""
        with DatabaseManager(":memory:") as db:
            db.add_client({'name': 'Context Test'})
            self.assertEqual(len(db.get_clients()), 1)

        self.assertTrue(db._closed)

    def test_explicit_close(self):
        db = DatabaseManager(":memory:")
        db.close()
        self.assertTrue(db._closed)
        # Calling close again should not raise
        db.close()

    def test_transaction_rolls_back_store_writes(self):
        db = DatabaseManager(":memory:")
        with self.assertRaises(RuntimeError):
            with db.transaction():
                db.add_client({'name': 'ANA'})
                db.add_user("u1", "", "", "admin")
                raise RuntimeError("abort")
        self.assertEqual(db.get_clients(), [])
        self.assertIsNone(db.get_user("u1"))
        db.close()

    def test_transaction_commits_on_success(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "store.db")
            with DatabaseManager(path) as db:
                with db.transaction():
                    db.add_client({'name': 'ANA'})
                    with db.transaction():
                        db.add_client({'name': 'BIA'})
            with DatabaseManager(path) as db:
                self.assertEqual([c['name'] for c in db.get_clients()], ['ANA', 'BIA'])

    def test_transaction_wraps_sqlite_error(self):
        db = DatabaseManager(":memory:")
        with self.assertRaises(TransactionError):
            with db.transaction():
                db.add_client({'name': 'ANA'})
                db.conn.execute("INSERT INTO missing_table VALUES (1)")
        self.assertEqual(db.get_clients(), [])
        db.close()

    def test_failed_write_inside_transaction_rolls_back_block(self):
        db = DatabaseManager(":memory:")
        with self.assertRaises(DatabaseError):
            with db.transaction():
                db.add_client({'name': 'ANA'})
                db.add_user("u1", "", "", "user")
                db.add_user("u1", "", "", "user")
        self.assertEqual(db.get_clients(), [])
        db.close()

    def test_reopening_existing_file_keeps_schema_and_data(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "store.db")
            with DatabaseManager(path) as db:
                client_id = db.add_client({'name': 'ANA', 'email': 'ana@test.com'})
                db.add_loan(loan_record(client_id, 'ANA', date(2024, 1, 1), document_number='CHQ-1'))
            with DatabaseManager(path) as db:
                cols = [row[1] for row in db.conn.execute("PRAGMA table_info(loans)")]
                self.assertEqual(cols.count('payment_date'), 1)
                self.assertEqual(db.get_clients()[0]['email'], 'ana@test.com')
                self.assertEqual(db.get_loans()[0]['document_number'], 'CHQ-1')


if __name__ == '__main__':
    unittest.main()
