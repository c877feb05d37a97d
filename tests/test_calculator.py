import os
import sys
import unittest
from datetime import date

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from chequebook import calculator


class TestFinancialCalculator(unittest.TestCase):

    def test_default_rate_quote(self):
        quote = calculator.quote_loan(1000, loan_date=date(2024, 1, 1), due_date=date(2024, 1, 31))
        self.assertEqual(quote.interest_rate, 1.2)
        self.assertAlmostEqual(quote.interest_value, 12.0)
        self.assertAlmostEqual(quote.total_amount, 1012.0)
        self.assertEqual(quote.term_days, 30)

    def test_term_clamped_to_zero(self):
        self.assertEqual(calculator.term_days(date(2024, 1, 31), date(2024, 1, 1)), 0)
        self.assertEqual(calculator.term_days(date(2024, 1, 1), None), 0)

    def test_explicit_total_wins(self):
        self.assertEqual(calculator.total_amount(1000, 12, explicit_total=1100), 1100)
        self.assertEqual(calculator.total_amount(1000, 12, explicit_total=0), 1012)
        self.assertEqual(calculator.total_amount(1000, 12), 1012)

    def test_effective_rate(self):
        self.assertEqual(calculator.effective_rate(1000, 12), 1.2)
        self.assertEqual(calculator.effective_rate(3000, 100), 3.33)
        self.assertEqual(calculator.effective_rate(0, 100), 0.0)

    def test_imported_quote(self):
        quote = calculator.quote_imported_loan(2000, 50, date(2024, 3, 1), date(2024, 3, 31))
        self.assertEqual(quote.interest_rate, 2.5)
        self.assertEqual(quote.total_amount, 2050)
        self.assertEqual(quote.term_days, 30)

        quote = calculator.quote_imported_loan(2000, 50, date(2024, 3, 1), date(2024, 3, 31),
                                               explicit_total=2100)
        self.assertEqual(quote.total_amount, 2100)

    def test_suggest_due_date(self):
        self.assertEqual(calculator.suggest_due_date(date(2024, 1, 15)), date(2024, 2, 14))

    def test_deterministic(self):
        args = (1500, 2.0, date(2024, 5, 1), date(2024, 6, 1))
        self.assertEqual(calculator.quote_loan(*args), calculator.quote_loan(*args))


if __name__ == '__main__':
    unittest.main()
