"""Rule-based risk alerts computed from an analysis result."""
from datetime import datetime
from typing import List, Optional

from finwise.models import AnalysisResult, RiskAlert, utc_now

LOW_SAVINGS_THRESHOLD = 10.0
SUBSCRIPTION_SHARE = 0.1
EMI_SHARE = 0.4

SUBSCRIPTION_CATEGORIES = ("Subscriptions", "Entertainment", "Software")
EMI_RISK_CATEGORIES = ("EMI", "Loan", "Credit Card")


def _category_spend(analysis: AnalysisResult, needles) -> float:
    return sum(
        amount for category, amount in analysis.categorized_expenses.items()
        if any(needle in category for needle in needles)
    )


def detect_risks(analysis: Optional[AnalysisResult], now: Optional[datetime] = None) -> List[RiskAlert]:
    """Return every risk whose rule fires; the rules are independent of each other."""
    if analysis is None or analysis.metrics is None:
        return []

    now = now or utc_now()
    stamp = int(now.timestamp() * 1000)
    metrics = analysis.metrics
    risks = []

    if metrics.savings_rate < LOW_SAVINGS_THRESHOLD:
        risks.append(RiskAlert(
            id=f"risk-{stamp}-savings",
            type="overspending",
            title="Low Savings Rate",
            description=(
                f"Your savings rate is only {metrics.savings_rate:.1f}%. "
                "This is below the recommended 20% minimum."
            ),
            severity="high",
            affected_amount=metrics.total_expense - metrics.total_income * 0.8,
            detected_at=now,
            action_items=[
                "Review non-essential expenses and identify areas to cut back",
                "Set up automatic savings transfers",
                "Track daily spending to stay within budget",
            ],
        ))

    subscriptions = _category_spend(analysis, SUBSCRIPTION_CATEGORIES)
    if subscriptions > metrics.total_income * SUBSCRIPTION_SHARE:
        risks.append(RiskAlert(
            id=f"risk-{stamp}-subscription",
            type="subscription",
            title="High Subscription Spending",
            description="Your subscription costs are consuming over 10% of your income.",
            severity="medium",
            affected_amount=subscriptions,
            affected_category="Subscriptions",
            detected_at=now,
            action_items=[
                "Review all active subscriptions and cancel unused ones",
                "Look for family plans or annual discounts",
                "Consider free alternatives for non-essential services",
            ],
        ))

    emi = _category_spend(analysis, EMI_RISK_CATEGORIES)
    if emi > 0 and emi > metrics.total_income * EMI_SHARE:
        risks.append(RiskAlert(
            id=f"risk-{stamp}-emi",
            type="high-emi",
            title="High EMI Burden",
            description="Loan and card repayments take more than 40% of your income.",
            severity="high",
            affected_amount=emi,
            affected_category="EMI & Loans",
            detected_at=now,
            action_items=[
                "List every loan with its interest rate and outstanding balance",
                "Prepay or refinance the most expensive loan first",
                "Avoid taking on new credit until repayments fall below 40% of income",
            ],
        ))

    return risks
