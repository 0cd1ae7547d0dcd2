"""Shared fixtures: a scripted LLM transport and sample data."""
import json
from datetime import date

from finwise.models import AnalysisMetrics, AnalysisResult, Transaction
from finwise.utils.exceptions import LLMTransportError


class FakeTransport:
    """Answers gateway requests from a script keyed by agent name.

    A reply may be a string (returned as-is), a JSON-able object, an
    exception (raised) or a callable taking the request and returning one of
    those.
    """

    def __init__(self, replies=None):
        self.replies = replies or {}
        self.requests = []

    def send(self, request):
        self.requests.append(request)
        system = request["prompt"]["system"]

        for agent, reply in self.replies.items():
            if agent in system:
                break
        else:
            raise LLMTransportError("No scripted reply")

        if callable(reply) and not isinstance(reply, type):
            reply = reply(request)
        if isinstance(reply, Exception):
            raise reply
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        return {"choices": [{"message": {"role": "assistant", "content": reply}}]}

    def calls_to(self, agent):
        return [r for r in self.requests if agent in r["prompt"]["system"]]


def make_transaction(day, amount, merchant="Shop", category="Food", type="expense", **extra):
    return Transaction(date=day, amount=amount, merchant=merchant, category=category, type=type, **extra)


def make_analysis(total_income=100000.0, total_expense=70000.0, savings_rate=30.0, categorized=None):
    return AnalysisResult(
        metrics=AnalysisMetrics(
            total_income=total_income,
            total_expense=total_expense,
            savings_rate=savings_rate,
        ),
        categorized_expenses=categorized or {},
    )


SAMPLE_PARSED = {
    "transactions": [
        {"date": "2024-06-01", "amount": 450, "merchant": "Swiggy", "type": "expense", "category": "uncategorized"},
        {"date": "2024-06-03", "amount": 50000, "merchant": "Acme Corp", "type": "credit", "category": "uncategorized"},
        {"date": "2024-06-05", "amount": -199, "merchant": "Netflix", "type": "debit"},
    ],
    "summary": {"totalTransactions": 3},
}

SAMPLE_CLASSIFIED = {
    "categorizedTransactions": [
        {"date": "2024-06-01", "amount": 450, "merchant": "Swiggy", "category": "Dining & Restaurants", "confidence": 0.9},
        {"date": "2024-06-03", "amount": 50000, "merchant": "Acme Corp", "category": "Salary & Income", "confidence": 0.95},
        {"date": "2024-06-05", "amount": 199, "merchant": "Netflix", "category": "Entertainment & Subscriptions",
         "isRecurring": True, "confidence": 0.99},
    ],
    "categoryTotals": {"Dining & Restaurants": 450},
    "recurringPatterns": [{"merchant": "Netflix", "amount": 199, "frequency": "monthly"}],
}

SAMPLE_ANALYSIS = {
    "monthlySummary": [{"month": "2024-06", "income": 50000, "expense": 649, "net": 49351, "savingsRate": 98.7}],
    "issues": [{"id": "i1", "severity": "Low", "category": "subscription", "description": "Streaming services"}],
    "metrics": {
        "totalIncome": 50000,
        "totalExpense": 649,
        "savingsRate": 98.7,
        "topCategories": [{"category": "Dining & Restaurants", "amount": 450}],
        "topMerchants": [{"merchant": "Swiggy", "amount": 450, "transactions": 1}],
    },
    "categorizedExpenses": {"Dining & Restaurants": 450, "Entertainment & Subscriptions": 199},
    "insights": ["Dining is your largest expense"],
}

SAMPLE_RECOMMENDATIONS = {
    "recommendations": [
        {"id": "r1", "title": "Cook at home twice a week", "category": "saving", "impact": "Medium",
         "steps": ["Plan meals on Sunday"], "estimatedMonthlySavings": 1200},
        {"title": "Missing id is skipped"},
    ],
    "quickWins": ["Cancel one streaming plan"],
}

SAMPLE_REMINDERS = {
    "reminders": [
        {"id": "rem1", "time": "2024-07-01T09:00:00+05:30", "text": "Pay rent", "type": "bill", "completed": True},
        {"id": "rem2", "time": "2024-07-05T09:00:00+05:30", "text": "Move savings", "type": "weekly-thing"},
    ]
}


def pipeline_replies(**overrides):
    replies = {
        "Parser Agent": SAMPLE_PARSED,
        "Classifier Agent": SAMPLE_CLASSIFIED,
        "Analyzer Agent": SAMPLE_ANALYSIS,
        "Recommendation Agent": SAMPLE_RECOMMENDATIONS,
        "Reminder Agent": SAMPLE_REMINDERS,
    }
    replies.update(overrides)
    return replies


SATURDAY = date(2024, 6, 1)
SUNDAY = date(2024, 6, 2)
MONDAY = date(2024, 6, 3)
TUESDAY = date(2024, 6, 4)
