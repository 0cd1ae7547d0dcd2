"""Read-modify-write helpers over a StateRepository.

Every helper loads the whole state, changes one part and saves the whole
state back.
"""
import json
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from pydantic import ValidationError

from finwise.insights.goals import update_goal_progress
from finwise.models import (
    AnalysisResult,
    AppState,
    BehavioralTrend,
    CategoryDetail,
    ChatMessage,
    FinancialGoal,
    ParsedFileRecord,
    Recommendation,
    Reminder,
    RiskAlert,
    Transaction,
    TransactionInsight,
    UserProfile,
    UserSettings,
    utc_now,
)
from finwise.storage.repository import StateRepository
from finwise.utils.logger import get_logger
from finwise.utils.exceptions import StorageError

logger = get_logger()


class StateStore:
    """Domain operations on the persisted AppState."""

    def __init__(self, repository: StateRepository):
        self.repository = repository

    def load(self) -> AppState:
        return self.repository.load()

    def save(self, state: AppState) -> None:
        self.repository.save(state)

    # Transactions

    def add_transactions(self, transactions: Sequence[Transaction]) -> int:
        """Append transactions; return the index of the first one added."""
        state = self.load()
        offset = len(state.transactions)
        state.transactions.extend(transactions)
        self.save(state)
        return offset

    def replace_transactions(self, offset: int, count: int, transactions: Sequence[Transaction]) -> None:
        """Replace ``count`` stored transactions starting at ``offset``."""
        state = self.load()
        state.transactions[offset:offset + count] = list(transactions)
        self.save(state)

    def add_parsed_file(self, record: ParsedFileRecord) -> None:
        state = self.load()
        state.parsed_files.append(record)
        self.save(state)

    # Pipeline results

    def save_analysis(self, analysis: AnalysisResult) -> None:
        state = self.load()
        state.analysis_result = analysis
        self.save(state)

    def save_recommendations(self, recommendations: Sequence[Recommendation]) -> None:
        state = self.load()
        state.recommendations = list(recommendations)
        self.save(state)

    def add_reminders(self, reminders: Sequence[Reminder]) -> None:
        state = self.load()
        state.reminders.extend(reminders)
        self.save(state)

    def save_insights(
        self,
        risks: Sequence[RiskAlert],
        behavioral_trends: Sequence[BehavioralTrend],
        transaction_insights: Sequence[TransactionInsight],
        category_details: Sequence[CategoryDetail],
        goals: Sequence[FinancialGoal]
    ) -> None:
        """Overwrite derived insights and goals; marks goals as initialized."""
        state = self.load()
        state.risks = list(risks)
        state.behavioral_trends = list(behavioral_trends)
        state.transaction_insights = list(transaction_insights)
        state.category_details = list(category_details)
        state.goals = list(goals)
        state.goals_initialized = True
        self.save(state)

    # Reminders

    def update_reminder(self, reminder_id: str, completed: bool) -> bool:
        state = self.load()
        for reminder in state.reminders:
            if reminder.id == reminder_id:
                reminder.completed = completed
                self.save(state)
                return True
        logger.warning(f"Reminder {reminder_id} not found")
        return False

    def delete_reminder(self, reminder_id: str) -> bool:
        state = self.load()
        remaining = [r for r in state.reminders if r.id != reminder_id]
        if len(remaining) == len(state.reminders):
            logger.warning(f"Reminder {reminder_id} not found")
            return False
        state.reminders = remaining
        self.save(state)
        return True

    # Goals

    def update_goal_progress(
        self,
        goal_id: str,
        current_amount: float,
        now: Optional[datetime] = None
    ) -> Optional[FinancialGoal]:
        """Set a goal's saved amount and re-evaluate its status."""
        state = self.load()
        for index, goal in enumerate(state.goals):
            if goal.id == goal_id:
                updated = update_goal_progress(goal, current_amount, now)
                state.goals[index] = updated
                self.save(state)
                return updated
        logger.warning(f"Goal {goal_id} not found")
        return None

    def reset_goals(self) -> None:
        """Drop all goals and allow them to be suggested again on the next run."""
        state = self.load()
        state.goals = []
        state.goals_initialized = False
        self.save(state)

    # Profile, settings, chat

    def update_settings(self, **changes) -> UserSettings:
        state = self.load()
        state.settings = _merged(state.settings, changes)
        self.save(state)
        return state.settings

    def update_user_profile(self, **changes) -> UserProfile:
        state = self.load()
        changes["updated_at"] = utc_now()
        state.user_profile = _merged(state.user_profile, changes)
        self.save(state)
        return state.user_profile

    def add_chat_messages(self, messages: Iterable[ChatMessage]) -> None:
        state = self.load()
        state.chat_history.extend(messages)
        self.save(state)

    def chat_history(self) -> List[ChatMessage]:
        return self.load().chat_history

    # Import / export

    def export_data(self) -> str:
        """The whole state as pretty-printed JSON."""
        return self.load().model_dump_json(by_alias=True, exclude_none=True, indent=2)

    def import_data(self, data: str) -> AppState:
        """Validate a previously exported document and make it the stored state."""
        try:
            state = AppState.model_validate(json.loads(data))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to import data: {e}")
            raise StorageError("Invalid data format")
        self.save(state)
        return state

    def clear_all_data(self) -> None:
        self.repository.clear()
        logger.info("All stored data cleared")


def _merged(model, changes):
    """Apply field changes to a model, validating the result before it is stored."""
    unknown = set(changes) - set(type(model).model_fields)
    if unknown:
        raise StorageError(f"Unknown {type(model).__name__} field(s): {', '.join(sorted(unknown))}")
    try:
        return type(model).model_validate({**model.model_dump(), **changes})
    except ValidationError as e:
        logger.error(f"Rejected {type(model).__name__} update: {e}")
        raise StorageError(f"Invalid {type(model).__name__} value: {e}")
