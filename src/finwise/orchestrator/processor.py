"""Agent pipeline: parse -> classify -> analyze -> recommend -> remind -> insights.

Each stage persists its result as soon as it succeeds, so a failed run
leaves the work of the earlier stages in the stored state. Parse and
classify failures are recoverable; analyze, recommend and remind failures
abort the run.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from finwise.config.settings import AppSettings, get_settings
from finwise.insights import (
    category_details,
    detect_risks,
    detect_trends,
    load_or_create_goals,
    tag_transactions,
)
from finwise.llm import prompts, schemas
from finwise.llm.gateway import LLMGateway, parse_json
from finwise.models import (
    AnalysisResult,
    BehavioralTrend,
    CategoryDetail,
    FinancialGoal,
    ParsedFile,
    ParsedFileRecord,
    Recommendation,
    Reminder,
    RiskAlert,
    Transaction,
    TransactionInsight,
    UserProfile,
    utc_now,
)
from finwise.orchestrator.status import ProcessingStatus, Stage, StatusChannel
from finwise.storage.store import StateStore
from finwise.utils.logger import get_logger, set_run_context
from finwise.utils.exceptions import LLMError

logger = get_logger()


@dataclass
class ProcessingOutcome:
    run_id: str
    files_processed: int = 0
    files_failed: int = 0
    transactions: List[Transaction] = field(default_factory=list)
    analysis: Optional[AnalysisResult] = None
    recommendations: List[Recommendation] = field(default_factory=list)
    reminders: List[Reminder] = field(default_factory=list)
    risks: List[RiskAlert] = field(default_factory=list)
    behavioral_trends: List[BehavioralTrend] = field(default_factory=list)
    transaction_insights: List[TransactionInsight] = field(default_factory=list)
    category_details: List[CategoryDetail] = field(default_factory=list)
    goals: List[FinancialGoal] = field(default_factory=list)


class AgentOrchestrator:
    """Runs the agent pipeline over a batch of uploaded files."""

    def __init__(
        self,
        gateway: LLMGateway,
        store: StateStore,
        user_profile: Optional[UserProfile] = None,
        settings: Optional[AppSettings] = None,
        on_status_update: Optional[Callable[[ProcessingStatus], None]] = None
    ):
        self.gateway = gateway
        self.store = store
        self.user_profile = user_profile
        self.settings = settings or get_settings()
        self.status = StatusChannel()
        if on_status_update is not None:
            self.status.subscribe(on_status_update)

    def process_files(self, files: Sequence[ParsedFile]) -> ProcessingOutcome:
        """Run every stage in order and return what each produced.

        Raises the underlying error after publishing an ``error`` status when
        analysis, recommendations or reminders cannot be produced.
        """
        outcome = ProcessingOutcome(run_id=uuid.uuid4().hex[:8])
        set_run_context(outcome.run_id)
        self.status.reset()
        logger.info(f"Starting processing run for {len(files)} file(s)")

        try:
            profile = self.user_profile or self.store.load().user_profile

            self.status.publish(Stage.PARSING, 10, "Parsing uploaded files...")
            offset = len(self.store.load().transactions)
            parsed = self._parse_files(files, outcome)

            self.status.publish(Stage.CLASSIFYING, 30, "Classifying transactions...")
            outcome.transactions = self._classify(parsed, offset)

            self.status.publish(Stage.ANALYZING, 60, "Analyzing spending patterns...")
            outcome.analysis = self._analyze(outcome.transactions, profile)

            self.status.publish(Stage.RECOMMENDING, 80, "Generating recommendations...")
            outcome.recommendations = self._recommend(outcome.analysis, profile)

            self.status.publish(Stage.RECOMMENDING, 90, "Creating reminders...", current_task="reminders")
            outcome.reminders = self._remind(outcome.recommendations, outcome.transactions)

            self.status.publish(Stage.RECOMMENDING, 95, "Generating insights...", current_task="insights")
            self._generate_insights(outcome)

            self.status.publish(Stage.COMPLETED, 100, "Processing complete!")
            logger.info(
                f"Run finished: {outcome.files_processed} file(s) parsed, {outcome.files_failed} failed, "
                f"{len(outcome.transactions)} transactions, {len(outcome.recommendations)} recommendations"
            )
            return outcome

        except Exception as e:
            logger.error(f"Processing failed: {e}")
            self.status.publish(Stage.ERROR, 0, f"Error: {e}")
            raise
        finally:
            set_run_context(None)

    def _ask(self, stage: str, prompt: prompts.PromptPair) -> Any:
        params = self.settings.stage(stage)
        reply = self.gateway.call(
            prompt.system,
            prompt.user,
            max_tokens=params.max_tokens,
            temperature=params.temperature
        )
        return parse_json(reply)

    def _parse_files(self, files: Sequence[ParsedFile], outcome: ProcessingOutcome) -> List[Transaction]:
        """Parse each file on its own; a failing file is logged and skipped."""
        transactions: List[Transaction] = []

        for parsed_file in files:
            self.status.publish(
                Stage.PARSING, 10, "Parsing uploaded files...", current_task=f"Parsing {parsed_file.filename}"
            )
            try:
                prompt = prompts.parser_prompt(
                    parsed_file.text, parsed_file.filename, parsed_file.file_type, self.settings.file_text_limit
                )
                batch = schemas.parse_transactions(self._ask("parse", prompt))
            except LLMError as e:
                logger.error(f"Failed to parse {parsed_file.filename}: {e}")
                outcome.files_failed += 1
                continue

            batch = [t.model_copy(update={"source_file": parsed_file.filename}) for t in batch]
            self.store.add_transactions(batch)
            self.store.add_parsed_file(ParsedFileRecord(
                filename=parsed_file.filename,
                file_type=parsed_file.file_type,
                uploaded_at=parsed_file.uploaded_at,
                transaction_count=len(batch)
            ))

            transactions.extend(batch)
            outcome.files_processed += 1
            logger.info(f"Extracted {len(batch)} transactions from {parsed_file.filename}")

        return transactions

    def _classify(self, transactions: List[Transaction], offset: int) -> List[Transaction]:
        """Categorize transactions; on failure they are returned unchanged."""
        if not transactions:
            return []

        limit = self.settings.classify_transaction_limit
        try:
            prompt = prompts.classifier_prompt(transactions, limit)
            rows, patterns = schemas.parse_classification(self._ask("classify", prompt))
        except LLMError as e:
            logger.warning(f"Classification failed, keeping original categories: {e}")
            return transactions

        recurring = {p.merchant.lower() for p in patterns}
        classified = []
        for index, transaction in enumerate(transactions):
            row = rows[index] if index < min(len(rows), limit) else None
            update = {}
            if row is not None and row.category.strip():
                update["category"] = row.category.strip()
                if row.confidence is not None:
                    update["confidence"] = row.confidence
                if row.is_recurring is not None:
                    update["is_recurring"] = row.is_recurring
            if "is_recurring" not in update and transaction.merchant.lower() in recurring:
                update["is_recurring"] = True
            classified.append(transaction.model_copy(update=update) if update else transaction)

        if len(rows) != min(len(transactions), limit):
            logger.warning(f"Classifier returned {len(rows)} rows for {min(len(transactions), limit)} transactions")

        self.store.replace_transactions(offset, len(transactions), classified)
        return classified

    def _analyze(self, transactions: List[Transaction], profile: UserProfile) -> AnalysisResult:
        prompt = prompts.analyzer_prompt(transactions, profile, self.settings.analyze_transaction_limit)
        analysis = schemas.parse_analysis(self._ask("analyze", prompt))
        analysis = analysis.model_copy(update={"analyzed_at": utc_now()})
        self.store.save_analysis(analysis)
        return analysis

    def _recommend(self, analysis: AnalysisResult, profile: UserProfile) -> List[Recommendation]:
        prompt = prompts.recommendation_prompt(analysis, profile)
        recommendations = schemas.parse_recommendations(self._ask("recommend", prompt))
        self.store.save_recommendations(recommendations)
        return recommendations

    def _remind(self, recommendations: List[Recommendation], transactions: List[Transaction]) -> List[Reminder]:
        prompt = prompts.reminder_prompt(recommendations, transactions, self.settings.reminder_transaction_limit)
        reminders = [
            r.model_copy(update={"completed": False})
            for r in schemas.parse_reminders(self._ask("remind", prompt))
        ]
        self.store.add_reminders(reminders)
        return reminders

    def _generate_insights(self, outcome: ProcessingOutcome) -> None:
        now = utc_now()
        transactions = outcome.transactions

        outcome.risks = detect_risks(outcome.analysis, now)
        outcome.behavioral_trends = detect_trends(transactions, now)
        outcome.transaction_insights = tag_transactions(transactions, self.settings.insight_limit)
        outcome.category_details = category_details(transactions)
        outcome.goals = load_or_create_goals(
            self.store.load(), outcome.analysis, transactions, now, self.settings.history_months
        )

        self.store.save_insights(
            outcome.risks,
            outcome.behavioral_trends,
            outcome.transaction_insights,
            outcome.category_details,
            outcome.goals
        )
