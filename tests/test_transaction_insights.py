"""Tests for per-merchant transaction tagging."""
import unittest
from datetime import date, timedelta

from finwise.insights.transactions import tag_transactions

from helpers import make_transaction


class TestTagTransactions(unittest.TestCase):
    """Test recurring and large purchase detection."""

    def test_recurring_group(self):
        transactions = [
            make_transaction(date(2024, 4, 5), 199, merchant="Netflix"),
            make_transaction(date(2024, 5, 5), 199, merchant="Netflix"),
            make_transaction(date(2024, 6, 5), 205, merchant="Netflix"),
        ]
        insights = tag_transactions(transactions)

        self.assertEqual(len(insights), 3)
        for insight in insights:
            self.assertTrue(insight.insights.is_recurring)
            self.assertEqual(insight.insights.recurring_frequency, "monthly")
            self.assertEqual(insight.insights.tags, ["Recurring", "Expense"])
        self.assertEqual(insights[0].transaction_id, "2024-04-05-Netflix-199")

    def test_large_purchase_breaks_recurrence(self):
        transactions = [
            make_transaction(date(2024, 6, 1), 100, merchant="Amazon"),
            make_transaction(date(2024, 6, 2), 100, merchant="Amazon"),
            make_transaction(date(2024, 6, 3), 100, merchant="Amazon"),
            make_transaction(date(2024, 6, 4), 1000, merchant="Amazon"),
        ]
        insights = tag_transactions(transactions)

        self.assertEqual([i.insights.is_large_purchase for i in insights], [False, False, False, True])
        self.assertFalse(any(i.insights.is_recurring for i in insights))
        self.assertEqual(insights[0].insights.tags, ["One-time", "Expense"])
        self.assertIsNone(insights[0].insights.recurring_frequency)

    def test_single_transactions_are_ignored(self):
        transactions = [
            make_transaction(date(2024, 6, 1), 100, merchant="A"),
            make_transaction(date(2024, 6, 2), 100, merchant="B"),
        ]
        self.assertEqual(tag_transactions(transactions), [])

    def test_income_tag(self):
        transactions = [
            make_transaction(date(2024, 5, 1), 50000, merchant="Acme", type="income"),
            make_transaction(date(2024, 6, 1), 50000, merchant="Acme", type="income"),
        ]
        self.assertEqual(tag_transactions(transactions)[0].insights.tags, ["Recurring", "Income"])

    def test_capped_in_insertion_order(self):
        start = date(2024, 1, 1)
        transactions = []
        for m in range(30):
            transactions.append(make_transaction(start + timedelta(days=m), 10, merchant=f"m{m}"))
            transactions.append(make_transaction(start + timedelta(days=m + 40), 10, merchant=f"m{m}"))

        insights = tag_transactions(transactions)

        self.assertEqual(len(insights), 50)
        self.assertEqual(insights[0].transaction.merchant, "m0")
        self.assertEqual(insights[1].transaction.merchant, "m0")
        self.assertEqual(insights[-1].transaction.merchant, "m24")


if __name__ == "__main__":
    unittest.main()
