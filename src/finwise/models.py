"""Domain models for the persisted application state.

Every model serialises with camelCase keys so the state document keeps the
shape the dashboard reads (``sourceFile``, ``analyzedAt``, ...). Python code
uses the snake_case attribute names.
"""
import datetime as dt
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def utc_now() -> dt.datetime:
    """Current time as an aware UTC datetime."""
    return dt.datetime.now(dt.timezone.utc)


class FinWiseModel(BaseModel):
    """Base model: camelCase aliases, unknown keys ignored."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_dict(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


TransactionType = Literal["expense", "income", "transfer"]
Severity = Literal["low", "medium", "high"]

_TYPE_SYNONYMS = {
    "debit": "expense",
    "credit": "income",
    "withdrawal": "expense",
    "deposit": "income",
}


class Transaction(FinWiseModel):
    """A single statement line as extracted by the parser agent."""
    date: dt.date
    amount: float
    currency: str = "INR"
    merchant: str = "Unknown"
    type: TransactionType = "expense"
    category: str = "uncategorized"
    description: Optional[str] = None
    raw_line: Optional[str] = None
    source_file: Optional[str] = None
    confidence: Optional[float] = None
    is_recurring: Optional[bool] = None

    @field_validator("amount")
    @classmethod
    def _magnitude(cls, value: float) -> float:
        return abs(value)

    @field_validator("merchant", "category", "currency", mode="before")
    @classmethod
    def _blank_to_default(cls, value, info):
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return _TYPE_SYNONYMS.get(value, value)
        return value

    @property
    def is_expense(self) -> bool:
        return self.type == "expense"

    @property
    def key(self) -> str:
        """Identifier built from date, merchant and amount (not unique)."""
        amount = int(self.amount) if float(self.amount).is_integer() else self.amount
        return f"{self.date.isoformat()}-{self.merchant}-{amount}"


class ParsedFile(FinWiseModel):
    """Raw text extracted from an uploaded statement."""
    filename: str
    text: str
    file_type: str
    uploaded_at: dt.datetime = Field(default_factory=utc_now)


class ParsedFileRecord(FinWiseModel):
    """Persisted metadata of a processed file (the text itself is not kept)."""
    filename: str
    file_type: str
    uploaded_at: dt.datetime
    transaction_count: int = 0


class UserProfile(FinWiseModel):
    name: Optional[str] = None
    timezone: str = "UTC"
    currency: str = "INR"
    monthly_goal: Optional[float] = None
    created_at: dt.datetime = Field(default_factory=utc_now)
    updated_at: dt.datetime = Field(default_factory=utc_now)


class MonthlySummary(FinWiseModel):
    month: str
    income: float = 0.0
    expense: float = 0.0
    net: float = 0.0
    savings_rate: float = 0.0


class Issue(FinWiseModel):
    id: str
    severity: Severity = "medium"
    category: str = "other"
    description: str
    impact: Optional[str] = None
    recommendation: Optional[str] = None

    @field_validator("severity", mode="before")
    @classmethod
    def _lower(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class CategoryAmount(FinWiseModel):
    category: str
    amount: float = 0.0
    percentage: Optional[float] = None


class MerchantAmount(FinWiseModel):
    merchant: str
    amount: float = 0.0
    transactions: Optional[int] = None


class AnalysisMetrics(FinWiseModel):
    """Aggregate figures; savings_rate is a percentage (0-100)."""
    total_income: float = 0.0
    total_expense: float = 0.0
    savings_rate: float = 0.0
    avg_monthly_income: Optional[float] = None
    avg_monthly_expense: Optional[float] = None
    top_categories: List[CategoryAmount] = Field(default_factory=list)
    top_merchants: List[MerchantAmount] = Field(default_factory=list)


class AnalysisResult(FinWiseModel):
    monthly_summary: List[MonthlySummary] = Field(default_factory=list)
    issues: List[Issue] = Field(default_factory=list)
    metrics: AnalysisMetrics
    categorized_expenses: Dict[str, float] = Field(default_factory=dict)
    insights: List[str] = Field(default_factory=list)
    analyzed_at: Optional[dt.datetime] = None


class Recommendation(FinWiseModel):
    id: str
    title: str
    category: str = "saving"
    steps: List[str] = Field(default_factory=list)
    impact: Severity = "medium"
    estimated_monthly_savings: Optional[float] = None
    priority: Optional[int] = None
    difficulty: Optional[str] = None

    @field_validator("impact", mode="before")
    @classmethod
    def _lower(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


ReminderType = Literal["bill", "saving", "subscription", "review", "custom"]


class Reminder(FinWiseModel):
    id: str
    time: dt.datetime
    text: str
    type: ReminderType = "custom"
    completed: bool = False
    related_transaction: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            if value not in ("bill", "saving", "subscription", "review", "custom"):
                return "custom"
        return value


class RiskAlert(FinWiseModel):
    id: str
    type: Literal["overspending", "subscription", "irregular-income", "high-emi", "low-balance"]
    title: str
    description: str
    severity: Literal["low", "medium", "high", "critical"]
    affected_amount: Optional[float] = None
    affected_category: Optional[str] = None
    detected_at: dt.datetime
    action_items: List[str] = Field(default_factory=list)


class BehavioralTrend(FinWiseModel):
    id: str
    type: Literal[
        "weekend-overspending", "impulse-shopping", "subscription-creep",
        "seasonal-spike", "recurring-pattern"
    ]
    title: str
    description: str
    frequency: str
    average_amount: float
    occurrences: int
    suggestion: str
    severity: Severity


class InsightFlags(FinWiseModel):
    is_recurring: bool = False
    recurring_frequency: Optional[Literal["daily", "weekly", "monthly", "yearly"]] = None
    is_large_purchase: bool = False
    is_unusual: bool = False
    merchant_category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class TransactionInsight(FinWiseModel):
    transaction_id: str
    transaction: Transaction
    insights: InsightFlags


class MerchantBreakdown(FinWiseModel):
    merchant: str
    amount: float
    count: int


class DatePoint(FinWiseModel):
    date: dt.date
    amount: float


class EssentialSplit(FinWiseModel):
    essential: float = 0.0
    non_essential: float = 0.0


class CategoryDetail(FinWiseModel):
    category: str
    total_amount: float
    transaction_count: int
    merchant_breakdown: List[MerchantBreakdown] = Field(default_factory=list)
    date_pattern: List[DatePoint] = Field(default_factory=list)
    essential_vs_non_essential: EssentialSplit = Field(default_factory=EssentialSplit)


GoalStatus = Literal["on-track", "at-risk", "completed", "overdue"]


class FinancialGoal(FinWiseModel):
    id: str
    title: str
    target_amount: float
    current_amount: float = 0.0
    deadline: dt.datetime
    category: Literal["savings", "emergency-fund", "debt-clearance", "investment", "custom"]
    created_at: dt.datetime = Field(default_factory=utc_now)
    status: GoalStatus = "on-track"
    weekly_target: Optional[float] = None
    predicted_completion_date: Optional[dt.datetime] = None


class ChatMessage(FinWiseModel):
    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: dt.datetime = Field(default_factory=utc_now)


class UserSettings(FinWiseModel):
    auto_process: bool = True
    enable_reminders: bool = True
    privacy_mode: Literal["browser-only", "server-allowed"] = "server-allowed"
    custom_api_key: Optional[str] = None


class AppState(FinWiseModel):
    """Aggregate root: the whole persisted document."""
    user_profile: UserProfile = Field(default_factory=UserProfile)
    parsed_files: List[ParsedFileRecord] = Field(default_factory=list)
    transactions: List[Transaction] = Field(default_factory=list)
    analysis_result: Optional[AnalysisResult] = None
    recommendations: List[Recommendation] = Field(default_factory=list)
    reminders: List[Reminder] = Field(default_factory=list)
    goals: List[FinancialGoal] = Field(default_factory=list)
    goals_initialized: bool = False
    risks: List[RiskAlert] = Field(default_factory=list)
    behavioral_trends: List[BehavioralTrend] = Field(default_factory=list)
    transaction_insights: List[TransactionInsight] = Field(default_factory=list)
    category_details: List[CategoryDetail] = Field(default_factory=list)
    chat_history: List[ChatMessage] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)
    last_updated: dt.datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _documents_with_goals_are_initialized(self) -> "AppState":
        # Older documents carry goals but no flag.
        if self.goals and not self.goals_initialized:
            self.goals_initialized = True
        return self
