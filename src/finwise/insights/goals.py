"""Goal projection and goal progress tracking.

Goals are suggested once from the first analysis and then kept as they are.
Whether suggestions were already made is tracked by
``AppState.goals_initialized``; deleting every goal does not bring the
suggestions back unless the flag is reset explicitly.
"""
import math
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from finwise.models import AnalysisResult, AppState, FinancialGoal, Transaction, utc_now
from finwise.utils.logger import get_logger

logger = get_logger()

HISTORY_MONTHS = 6
# Substring match. Unlike EMI_RISK_CATEGORIES, a plain "Loan" category does not count toward the debt goal.
DEBT_GOAL_CATEGORIES = ("Loans & EMI", "Credit Card", "EMI")
DEFAULT_EMERGENCY_FUND = 100000


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _goal(stamp: int, suffix: str, title: str, target: float, current: float,
          now: datetime, days: int, category: str, weeks: int) -> FinancialGoal:
    goal_id = f"goal-{stamp}-{suffix}" if suffix else f"goal-{stamp}"
    return FinancialGoal(
        id=goal_id,
        title=title,
        target_amount=target,
        current_amount=current,
        deadline=now + timedelta(days=days),
        category=category,
        created_at=now,
        status="on-track",
        weekly_target=target / weeks,
    )


def monthly_emi(analysis: AnalysisResult, history_months: int = HISTORY_MONTHS) -> float:
    """Average monthly spend in loan/EMI/credit-card categories."""
    total = sum(
        amount for category, amount in analysis.categorized_expenses.items()
        if any(emi in category for emi in DEBT_GOAL_CATEGORIES)
    )
    return total / history_months


def project_goals(
    analysis: Optional[AnalysisResult],
    transactions: Optional[Sequence[Transaction]],
    now: Optional[datetime] = None,
    history_months: int = HISTORY_MONTHS
) -> List[FinancialGoal]:
    """Suggest up to five goals from income and expense totals."""
    now = now or utc_now()
    stamp = int(now.timestamp() * 1000)

    if analysis is None or transactions is None:
        return [_goal(stamp, "", "Emergency Fund", DEFAULT_EMERGENCY_FUND, 0, now, 365, "emergency-fund", 52)]

    # Totals are assumed to cover the last `history_months` months.
    divisor = history_months if transactions else 1
    monthly_income = analysis.metrics.total_income / divisor
    monthly_expense = analysis.metrics.total_expense / divisor
    monthly_savings = monthly_income - monthly_expense

    goals = []

    emergency_target = _round_half_up(monthly_expense * 6)
    goals.append(_goal(
        stamp, "1", "Emergency Fund (6 Months)", emergency_target,
        _round_half_up(monthly_savings * 0.2), now, 365, "emergency-fund", 52
    ))

    emi = monthly_emi(analysis, history_months)
    if emi > 0:
        goals.append(_goal(
            stamp, "2", "Clear Outstanding Debt", _round_half_up(emi * 12),
            0, now, 365, "debt-clearance", 52
        ))

    if monthly_savings > 0:
        goals.append(_goal(
            stamp, "3", "Annual Savings Target", _round_half_up(monthly_savings * 12),
            _round_half_up(monthly_savings * 2), now, 365, "savings", 52
        ))

    if monthly_savings > monthly_expense * 0.1:
        goals.append(_goal(
            stamp, "4", "Start Investment Portfolio", _round_half_up(monthly_savings * 6),
            0, now, 180, "investment", 26
        ))

    goals.append(_goal(
        stamp, "5", "Dream Vacation Fund", _round_half_up(monthly_income * 2),
        0, now, 365, "custom", 52
    ))

    logger.info(f"Projected {len(goals)} goals (monthly income {monthly_income:.0f}, expense {monthly_expense:.0f})")
    return goals


def load_or_create_goals(
    state: AppState,
    analysis: Optional[AnalysisResult],
    transactions: Optional[Sequence[Transaction]],
    now: Optional[datetime] = None,
    history_months: int = HISTORY_MONTHS
) -> List[FinancialGoal]:
    """Return the stored goals, or project new ones if none were ever created."""
    if state.goals_initialized:
        return list(state.goals)
    return project_goals(analysis, transactions, now, history_months)


def evaluate_goal(goal: FinancialGoal, now: Optional[datetime] = None) -> FinancialGoal:
    """Recompute status and predicted completion from the saving pace so far."""
    now = now or utc_now()
    update = {}

    if goal.current_amount >= goal.target_amount:
        update["status"] = "completed"
        update["predicted_completion_date"] = goal.predicted_completion_date or now
    elif now > goal.deadline:
        update["status"] = "overdue"
    else:
        remaining = goal.target_amount - goal.current_amount
        elapsed_weeks = (now - goal.created_at).total_seconds() / (7 * 24 * 3600)
        if elapsed_weeks >= 1 and goal.current_amount > 0:
            weeks_left = remaining / (goal.current_amount / elapsed_weeks)
        elif goal.weekly_target:
            weeks_left = remaining / goal.weekly_target
        else:
            weeks_left = None

        if weeks_left is None:
            update["predicted_completion_date"] = None
            update["status"] = "on-track"
        else:
            predicted = _project(now, weeks_left)
            update["predicted_completion_date"] = predicted
            # No representable completion date means the pace never reaches the target.
            update["status"] = "at-risk" if predicted is None or predicted > goal.deadline else "on-track"

    return goal.model_copy(update=update)


def _project(now: datetime, weeks: float) -> Optional[datetime]:
    try:
        return now + timedelta(weeks=weeks)
    except OverflowError:
        logger.warning(f"Goal completion {weeks:.0f} weeks after {now:%Y-%m-%d} is past the last representable date")
        return None


def update_goal_progress(goal: FinancialGoal, current_amount: float, now: Optional[datetime] = None) -> FinancialGoal:
    """Record a new saved amount for a goal and re-evaluate it."""
    return evaluate_goal(goal.model_copy(update={"current_amount": current_amount}), now)
