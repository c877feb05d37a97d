import io
import os
import shutil
import sys
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr
from datetime import date

import openpyxl

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from chequebook.database import DatabaseManager
from chequebook.main import main


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.tmpdir, "test.db")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def run_cli(self, *args):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(["--db", self.db_path, *args])
        return code, out.getvalue(), err.getvalue()

    def test_loan_lifecycle(self):
        self.assertEqual(self.run_cli("set-role", "admin", "admin")[0], 0)

        code, out, _ = self.run_cli("--uid", "admin", "add-client", "Ana")
        self.assertEqual(code, 0)
        client_id = out.strip()

        code, out, _ = self.run_cli("--uid", "admin", "add-loan", client_id, "1000",
                                    "31/01/2024", "--loan-date", "2024-01-01")
        self.assertEqual(code, 0)
        loan_id = out.strip()

        self.assertEqual(self.run_cli("--uid", "admin", "pay", loan_id, "--date", "2024-01-20")[0], 0)

        code, out, _ = self.run_cli("loans", "--year", "2024")
        self.assertIn("R$ 1.012,00", out)
        self.assertIn("paid", out)

        with DatabaseManager(self.db_path) as db:
            self.assertEqual(db.get_loan(int(loan_id))['payment_date'], "2024-01-20")

    def test_add_loan_suggests_due_date(self):
        self.run_cli("set-role", "admin", "admin")
        client_id = self.run_cli("--uid", "admin", "add-client", "Ana")[1].strip()
        loan_id = self.run_cli("--uid", "admin", "add-loan", client_id, "500",
                               "--loan-date", "15/01/2024")[1].strip()

        with DatabaseManager(self.db_path) as db:
            loan = db.get_loan(int(loan_id))
        self.assertEqual(loan['due_date'], "2024-02-14")
        self.assertEqual(loan['term_days'], 30)

    def test_set_role_requires_admin_once_bootstrapped(self):
        self.assertEqual(self.run_cli("set-role", "admin", "admin")[0], 0)

        code, _, err = self.run_cli("--uid", "mallory", "set-role", "mallory", "admin")
        self.assertEqual(code, 2)
        self.assertIn("Permission denied", err)
        code, _, _ = self.run_cli("set-role", "mallory", "admin")
        self.assertEqual(code, 2)

        self.assertEqual(self.run_cli("--uid", "admin", "set-role", "bia", "admin")[0], 0)
        with DatabaseManager(self.db_path) as db:
            self.assertEqual(db.get_user("mallory")['role'], "user")
            self.assertEqual(db.get_user("bia")['role'], "admin")

    def test_loans_default_to_current_year(self):
        self.run_cli("set-role", "admin", "admin")
        client_id = self.run_cli("--uid", "admin", "add-client", "Ana")[1].strip()
        today = date.today()
        self.run_cli("--uid", "admin", "add-loan", client_id, "100", "--loan-date", today.isoformat())
        self.run_cli("--uid", "admin", "add-loan", client_id, "200", "--loan-date", "2020-01-01")

        out = self.run_cli("loans")[1]
        self.assertIn(today.isoformat(), out)
        self.assertNotIn("2020-01-01", out)

        out = self.run_cli("loans", "--year", "all")[1]
        self.assertIn("2020-01-01", out)

    def test_invalid_year_is_a_usage_error(self):
        with self.assertRaises(SystemExit) as cm:
            self.run_cli("loans", "--year", "abc")
        self.assertEqual(cm.exception.code, 2)

    def test_permission_error_exit_code(self):
        self.run_cli("add-client", "Ana")
        code, _, err = self.run_cli("--uid", "someone", "add-loan", "1", "100", "31/01/2024")
        self.assertEqual(code, 2)
        self.assertIn("Permission denied", err)

    def test_import_command(self):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["TITULAR", "VALORES", "VALOR DO JUROS", "TOTAL",
                   "DATA DO EMPRESTIMO", "DATA DO VENCIMENTO"])
        ws.append(["ANA", 1000, 12, None, "01/01/2024", "31/01/2024"])
        path = os.path.join(self.tmpdir, "import.xlsx")
        wb.save(path)

        self.run_cli("set-role", "admin", "admin")
        code, out, _ = self.run_cli("--uid", "admin", "import", path)

        self.assertEqual(code, 0)
        self.assertIn("Concluído! 1 importados, 0 erros.", out)

    def test_import_unreadable_file(self):
        path = os.path.join(self.tmpdir, "broken.xlsx")
        with open(path, "wb") as fh:
            fh.write(b"garbage")

        self.run_cli("set-role", "admin", "admin")
        code, _, err = self.run_cli("--uid", "admin", "import", path)

        self.assertEqual(code, 1)
        self.assertIn("Verifique se é um Excel válido", err)


if __name__ == '__main__':
    unittest.main()
