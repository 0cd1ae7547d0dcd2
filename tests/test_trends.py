"""Tests for behavioral trend detection."""
import unittest

from finwise.insights.trends import detect_trends

from helpers import MONDAY, SATURDAY, SUNDAY, TUESDAY, make_transaction


class TestWeekendTrend(unittest.TestCase):
    """Test weekend vs weekday spending comparison."""

    def test_weekend_below_weekday_is_medium(self):
        transactions = [
            make_transaction(SATURDAY, 1000),
            make_transaction(MONDAY, 2000),
        ]
        trends = detect_trends(transactions)

        self.assertEqual(len(trends), 1)
        self.assertEqual(trends[0].type, "weekend-overspending")
        self.assertEqual(trends[0].severity, "medium")

    def test_weekend_above_weekday_is_high(self):
        transactions = [
            make_transaction(SATURDAY, 1500),
            make_transaction(SUNDAY, 1000),
            make_transaction(MONDAY, 2000),
        ]
        trends = detect_trends(transactions)

        self.assertEqual(trends[0].severity, "high")
        self.assertEqual(trends[0].occurrences, 1)
        self.assertEqual(trends[0].average_amount, 2500)

    def test_below_threshold(self):
        transactions = [
            make_transaction(SATURDAY, 400),
            make_transaction(MONDAY, 2000),
            make_transaction(TUESDAY, 1000),
        ]
        self.assertEqual(detect_trends(transactions), [])

    def test_income_is_ignored(self):
        transactions = [
            make_transaction(SATURDAY, 50000, type="income"),
            make_transaction(MONDAY, 2000),
        ]
        self.assertEqual(detect_trends(transactions), [])

    def test_no_weekend_transactions(self):
        self.assertEqual(detect_trends([make_transaction(MONDAY, 10)]), [])

    def test_empty(self):
        self.assertEqual(detect_trends([]), [])


if __name__ == "__main__":
    unittest.main()
