"""Per-merchant transaction tagging (recurring payments, large purchases)."""
from typing import Dict, List, Sequence

from finwise.models import InsightFlags, Transaction, TransactionInsight

INSIGHT_LIMIT = 50
RECURRING_TOLERANCE = 0.1
LARGE_PURCHASE_FACTOR = 2


def tag_transactions(transactions: Sequence[Transaction], limit: int = INSIGHT_LIMIT) -> List[TransactionInsight]:
    """Tag every transaction of merchants seen at least twice.

    A merchant group is recurring when every amount lies within 10% of the
    group mean; a transaction above twice the mean is a large purchase.
    Output follows first-seen merchant order and is cut at ``limit``.
    """
    groups: Dict[str, List[Transaction]] = {}
    for t in transactions:
        groups.setdefault(t.merchant, []).append(t)

    insights = []
    for group in groups.values():
        if len(group) < 2:
            continue

        mean = sum(t.amount for t in group) / len(group)
        recurring = all(abs(t.amount - mean) < mean * RECURRING_TOLERANCE for t in group)

        for t in group:
            insights.append(TransactionInsight(
                transaction_id=t.key,
                transaction=t,
                insights=InsightFlags(
                    is_recurring=recurring,
                    recurring_frequency="monthly" if recurring else None,
                    is_large_purchase=t.amount > mean * LARGE_PURCHASE_FACTOR,
                    is_unusual=False,
                    merchant_category=t.category,
                    tags=[
                        "Recurring" if recurring else "One-time",
                        "Expense" if t.is_expense else "Income",
                    ],
                ),
            ))

    return insights[:limit]
