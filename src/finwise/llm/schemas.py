"""Validation boundary for LLM JSON replies.

Each ``parse_*`` function takes the decoded JSON of one agent reply and
returns typed models, or raises ``MalformedResponseError`` when the reply
envelope does not have the expected shape. Individual list rows that fail
validation are skipped with a warning.
"""
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from finwise.models import (
    AnalysisResult,
    FinWiseModel,
    Recommendation,
    Reminder,
    Transaction,
)
from finwise.utils.logger import get_logger
from finwise.utils.exceptions import MalformedResponseError

logger = get_logger()

M = TypeVar("M", bound=BaseModel)


class ParserResponse(FinWiseModel):
    transactions: List[Dict[str, Any]]
    summary: Optional[Dict[str, Any]] = None


class ClassifiedTransaction(FinWiseModel):
    """One classifier row; only the fields merged back are kept."""
    category: str
    confidence: Optional[float] = None
    is_recurring: Optional[bool] = None
    merchant: Optional[str] = None
    amount: Optional[float] = None


class RecurringPattern(FinWiseModel):
    merchant: str
    amount: Optional[float] = None
    frequency: Optional[str] = None
    category: Optional[str] = None


class ClassifierResponse(FinWiseModel):
    categorized_transactions: List[Dict[str, Any]]
    category_totals: Dict[str, float] = Field(default_factory=dict)
    recurring_patterns: List[Dict[str, Any]] = Field(default_factory=list)


class RecommendationResponse(FinWiseModel):
    recommendations: List[Dict[str, Any]]
    quick_wins: List[str] = Field(default_factory=list)


class ReminderResponse(FinWiseModel):
    reminders: List[Dict[str, Any]]


def _envelope(model: Type[M], data: Any, agent: str) -> M:
    if not isinstance(data, dict):
        raise MalformedResponseError(f"{agent} agent returned {type(data).__name__}, expected an object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"{agent} agent response validation failed: {e}")
        raise MalformedResponseError(f"{agent} agent response does not match expected schema")


def _valid_items(model: Type[M], items: List[Dict[str, Any]], agent: str) -> List[M]:
    valid = []
    for index, item in enumerate(items):
        try:
            valid.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping invalid {agent} item #{index}: {e.error_count()} error(s)")
    return valid


def parse_transactions(data: Any) -> List[Transaction]:
    """Parser agent reply -> transactions. A bare JSON array is accepted too."""
    if isinstance(data, list):
        data = {"transactions": data}
    response = _envelope(ParserResponse, data, "Parser")
    return _valid_items(Transaction, response.transactions, "transaction")


def parse_classification(data: Any) -> tuple[List[Optional[ClassifiedTransaction]], List[RecurringPattern]]:
    """Classifier agent reply -> per-row classifications (None for unusable rows) and patterns."""
    response = _envelope(ClassifierResponse, data, "Classifier")

    rows: List[Optional[ClassifiedTransaction]] = []
    for index, item in enumerate(response.categorized_transactions):
        try:
            rows.append(ClassifiedTransaction.model_validate(item))
        except ValidationError:
            logger.warning(f"Classifier row #{index} has no usable category, keeping original")
            rows.append(None)

    patterns = _valid_items(RecurringPattern, response.recurring_patterns, "recurring pattern")
    return rows, patterns


def parse_analysis(data: Any) -> AnalysisResult:
    """Analyzer agent reply -> AnalysisResult (validated as a whole)."""
    return _envelope(AnalysisResult, data, "Analyzer")


def parse_recommendations(data: Any) -> List[Recommendation]:
    response = _envelope(RecommendationResponse, data, "Recommendation")
    return _valid_items(Recommendation, response.recommendations, "recommendation")


def parse_reminders(data: Any) -> List[Reminder]:
    response = _envelope(ReminderResponse, data, "Reminder")
    return _valid_items(Reminder, response.reminders, "reminder")
