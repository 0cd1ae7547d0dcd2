"""Tests for the LLM response validation boundary."""
import unittest
from datetime import date

from finwise.llm import schemas
from finwise.utils.exceptions import LLMError, MalformedResponseError

from helpers import SAMPLE_ANALYSIS, SAMPLE_CLASSIFIED, SAMPLE_PARSED, SAMPLE_RECOMMENDATIONS, SAMPLE_REMINDERS


class TestParseTransactions(unittest.TestCase):
    """Test parser agent replies."""

    def test_valid_reply(self):
        transactions = schemas.parse_transactions(SAMPLE_PARSED)

        self.assertEqual(len(transactions), 3)
        self.assertEqual(transactions[0].date, date(2024, 6, 1))
        self.assertEqual(transactions[0].merchant, "Swiggy")

    def test_normalizes_type_and_amount(self):
        transactions = schemas.parse_transactions(SAMPLE_PARSED)

        self.assertEqual(transactions[1].type, "income")
        self.assertEqual(transactions[2].type, "expense")
        self.assertEqual(transactions[2].amount, 199)
        self.assertEqual(transactions[2].category, "uncategorized")

    def test_bare_list_accepted(self):
        transactions = schemas.parse_transactions([{"date": "2024-01-02", "amount": 5}])
        self.assertEqual(len(transactions), 1)
        self.assertEqual(transactions[0].merchant, "Unknown")

    def test_invalid_rows_are_skipped(self):
        data = {"transactions": [
            {"date": "2024-01-02", "amount": 5},
            {"date": "yesterday", "amount": 5},
            {"amount": 7},
        ]}
        self.assertEqual(len(schemas.parse_transactions(data)), 1)

    def test_missing_envelope_is_malformed(self):
        with self.assertRaises(MalformedResponseError):
            schemas.parse_transactions({"rows": []})

    def test_non_object_is_malformed(self):
        with self.assertRaises(MalformedResponseError) as ctx:
            schemas.parse_transactions("just text")
        self.assertIsInstance(ctx.exception, LLMError)


class TestParseClassification(unittest.TestCase):
    """Test classifier agent replies."""

    def test_rows_and_patterns(self):
        rows, patterns = schemas.parse_classification(SAMPLE_CLASSIFIED)

        self.assertEqual([r.category for r in rows], [
            "Dining & Restaurants", "Salary & Income", "Entertainment & Subscriptions"
        ])
        self.assertTrue(rows[2].is_recurring)
        self.assertEqual(patterns[0].merchant, "Netflix")

    def test_row_without_category_keeps_position(self):
        rows, _ = schemas.parse_classification({
            "categorizedTransactions": [{"merchant": "A"}, {"category": "Transfers"}]
        })
        self.assertIsNone(rows[0])
        self.assertEqual(rows[1].category, "Transfers")

    def test_missing_list_is_malformed(self):
        with self.assertRaises(MalformedResponseError):
            schemas.parse_classification({"categoryTotals": {}})


class TestParseOtherAgents(unittest.TestCase):
    """Test analyzer, recommendation and reminder replies."""

    def test_analysis(self):
        analysis = schemas.parse_analysis(SAMPLE_ANALYSIS)

        self.assertEqual(analysis.metrics.total_income, 50000)
        self.assertEqual(analysis.issues[0].severity, "low")
        self.assertEqual(analysis.categorized_expenses["Entertainment & Subscriptions"], 199)

    def test_analysis_without_metrics_is_malformed(self):
        with self.assertRaises(MalformedResponseError):
            schemas.parse_analysis({"issues": []})

    def test_recommendations_skip_invalid(self):
        recommendations = schemas.parse_recommendations(SAMPLE_RECOMMENDATIONS)

        self.assertEqual(len(recommendations), 1)
        self.assertEqual(recommendations[0].impact, "medium")
        self.assertEqual(recommendations[0].estimated_monthly_savings, 1200)

    def test_reminders(self):
        reminders = schemas.parse_reminders(SAMPLE_REMINDERS)

        self.assertEqual(len(reminders), 2)
        self.assertEqual(reminders[1].type, "custom")
        self.assertIsNotNone(reminders[0].time.tzinfo)

    def test_reminders_wrong_shape(self):
        with self.assertRaises(MalformedResponseError):
            schemas.parse_reminders({"reminders": "tomorrow"})


if __name__ == "__main__":
    unittest.main()
