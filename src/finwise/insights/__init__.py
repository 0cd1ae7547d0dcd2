from .risks import detect_risks
from .trends import detect_trends
from .transactions import tag_transactions
from .categories import category_details
from .goals import (
    evaluate_goal,
    load_or_create_goals,
    project_goals,
    update_goal_progress,
)
from .reminders import due_reminders

__all__ = [
    "detect_risks",
    "detect_trends",
    "tag_transactions",
    "category_details",
    "project_goals",
    "load_or_create_goals",
    "evaluate_goal",
    "update_goal_progress",
    "due_reminders",
]
