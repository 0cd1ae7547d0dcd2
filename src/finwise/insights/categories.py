"""Per-category expense aggregation."""
from typing import Dict, List, Sequence

from finwise.models import (
    CategoryDetail,
    DatePoint,
    EssentialSplit,
    MerchantBreakdown,
    Transaction,
)

ESSENTIAL_CATEGORIES = frozenset({"Food", "Bills", "Healthcare", "Transport"})
TOP_MERCHANTS = 5


def category_details(transactions: Sequence[Transaction]) -> List[CategoryDetail]:
    """Group expenses by category, largest total first."""
    groups: Dict[str, List[Transaction]] = {}
    for t in transactions:
        if t.is_expense:
            groups.setdefault(t.category, []).append(t)

    details = []
    for category, group in groups.items():
        total = sum(t.amount for t in group)

        merchants: Dict[str, MerchantBreakdown] = {}
        for t in group:
            entry = merchants.setdefault(t.merchant, MerchantBreakdown(merchant=t.merchant, amount=0, count=0))
            entry.amount += t.amount
            entry.count += 1
        breakdown = sorted(merchants.values(), key=lambda m: m.amount, reverse=True)[:TOP_MERCHANTS]

        # Exact name match only: "Food & Groceries" counts as non-essential.
        essential = category in ESSENTIAL_CATEGORIES
        details.append(CategoryDetail(
            category=category,
            total_amount=total,
            transaction_count=len(group),
            merchant_breakdown=breakdown,
            date_pattern=[DatePoint(date=t.date, amount=t.amount) for t in group],
            essential_vs_non_essential=EssentialSplit(
                essential=total if essential else 0,
                non_essential=0 if essential else total,
            ),
        ))

    return sorted(details, key=lambda d: d.total_amount, reverse=True)
