"""Behavioral spending trends."""
import math
from datetime import datetime
from typing import List, Optional, Sequence

from finwise.models import BehavioralTrend, Transaction, utc_now

WEEKEND_RATIO = 0.4


def _is_weekend(transaction: Transaction) -> bool:
    # Saturday=5, Sunday=6
    return transaction.date.weekday() >= 5


def detect_trends(transactions: Sequence[Transaction], now: Optional[datetime] = None) -> List[BehavioralTrend]:
    """Flag weekend overspending when weekend expenses exceed 40% of weekday expenses."""
    if not transactions:
        return []

    weekend = [t for t in transactions if _is_weekend(t)]
    if not weekend:
        return []

    weekend_total = sum(t.amount for t in weekend if t.is_expense)
    weekday_total = sum(t.amount for t in transactions if t.is_expense and not _is_weekend(t))

    if weekend_total <= weekday_total * WEEKEND_RATIO:
        return []

    now = now or utc_now()
    return [BehavioralTrend(
        id=f"trend-{int(now.timestamp() * 1000)}-weekend",
        type="weekend-overspending",
        title="Weekend Overspending Pattern",
        description="You tend to spend significantly more on weekends compared to weekdays.",
        frequency="Weekly",
        average_amount=weekend_total / max(len(weekend) / 7, 1),
        occurrences=math.ceil(len(weekend) / 2),
        suggestion="Plan weekend activities with a budget. Consider free or low-cost entertainment options.",
        severity="high" if weekend_total > weekday_total else "medium",
    )]
