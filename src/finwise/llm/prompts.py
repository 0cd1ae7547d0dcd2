"""Prompt templates for the agent pipeline.

Every template returns a ``PromptPair``. The system prompt describes the
JSON the agent must return; the user prompt carries the (truncated) data.
"""
import json
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from finwise.models import AnalysisResult, Recommendation, Transaction, UserProfile

FILE_TEXT_LIMIT = 2000
CLASSIFY_LIMIT = 100
ANALYZE_LIMIT = 100
REMINDER_LIMIT = 50
CHAT_LIMIT = 10

JSON_ONLY = "Return ONLY valid JSON, no explanatory text."

CATEGORIES = [
    "Food & Groceries",
    "Dining & Restaurants",
    "Transportation & Travel",
    "Shopping & Retail",
    "Entertainment & Subscriptions",
    "Bills & Utilities",
    "Healthcare & Medical",
    "Education",
    "EMI & Loans",
    "Salary & Income",
    "Freelance & Side Income",
    "Investments & Savings",
    "Transfers",
    "Others",
]


class PromptPair(NamedTuple):
    system: str
    user: str


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _transactions_json(transactions: Sequence[Transaction], limit: int) -> str:
    return _dump([t.to_dict() for t in transactions[:limit]])


def parser_prompt(file_text: str, filename: str, file_type: str, limit: int = FILE_TEXT_LIMIT) -> PromptPair:
    """Extract transactions from the text of one statement."""
    system = f"""You are the Parser Agent. Extract financial transaction data from text.

Your task:
- Extract transaction-like entries (date, amount, merchant, description)
- Standardize dates to YYYY-MM-DD format
- Standardize amounts as positive numbers
- Identify transaction type hints (income/expense keywords)
- Handle multiple formats and layouts

{JSON_ONLY} Use this format:
{{
  "transactions": [
    {{
      "date": "YYYY-MM-DD",
      "amount": 123.45,
      "currency": "INR",
      "merchant": "merchant name",
      "type": "expense|income|transfer",
      "category": "initial guess or 'uncategorized'",
      "description": "transaction description",
      "rawLine": "original text"
    }}
  ],
  "summary": {{
    "totalTransactions": 0,
    "dateRange": {{"start": "YYYY-MM-DD", "end": "YYYY-MM-DD"}},
    "fileProcessed": "filename"
  }}
}}

No markdown, no explanations. ONLY JSON."""

    user = f"""File: {filename}
Type: {file_type}

Content (first {limit} chars):
{file_text[:limit]}

Extract all transactions from this financial document."""
    return PromptPair(system, user)


def classifier_prompt(transactions: Sequence[Transaction], limit: int = CLASSIFY_LIMIT) -> PromptPair:
    """Categorize transactions and spot recurring payments."""
    categories = "\n".join(f"- {name}" for name in CATEGORIES)
    system = f"""You are the Classifier Agent. Categorize financial transactions accurately.

Categories to use:
{categories}

Return one entry per input transaction, in the same order as the input.

{JSON_ONLY} Use this format:
{{
  "categorizedTransactions": [
    {{
      "date": "YYYY-MM-DD",
      "amount": 123.45,
      "merchant": "name",
      "type": "expense|income|transfer",
      "category": "category from list above",
      "isRecurring": true,
      "confidence": 0.9
    }}
  ],
  "categoryTotals": {{
    "Food & Groceries": 12345.67
  }},
  "recurringPatterns": [
    {{
      "merchant": "Netflix",
      "amount": 199,
      "frequency": "monthly",
      "category": "Entertainment & Subscriptions"
    }}
  ]
}}"""

    user = f"""Transactions to categorize:
{_transactions_json(transactions, limit)}

Categorize these transactions and identify recurring patterns."""
    return PromptPair(system, user)


def analyzer_prompt(
    transactions: Sequence[Transaction],
    profile: UserProfile,
    limit: int = ANALYZE_LIMIT
) -> PromptPair:
    """Monthly cashflow, issues and headline metrics."""
    system = f"""You are the Analyzer Agent. Perform comprehensive financial analysis.

Analyze:
1. Monthly income vs expenses (calculate net cashflow and savings rate)
2. Spending trends across categories
3. Top merchants by spending
4. Cash flow risks (months with negative balance, low reserves)
5. Debt/EMI burden (if EMI > 40% of income = high risk)
6. Unusual spending patterns or anomalies
7. Subscription waste (unused services)
8. Opportunity areas for savings

Savings rates are percentages between 0 and 100 (30 means 30%).
categorizedExpenses maps every expense category to its total amount.

{JSON_ONLY} Use this format:
{{
  "monthlySummary": [
    {{"month": "YYYY-MM", "income": 50000, "expense": 35000, "net": 15000, "savingsRate": 30}}
  ],
  "issues": [
    {{
      "id": "unique_id",
      "severity": "low|medium|high",
      "category": "overspending|subscription|debt|cashflow|irregular_income",
      "description": "detailed issue description",
      "impact": "financial impact description",
      "recommendation": "brief fix suggestion"
    }}
  ],
  "metrics": {{
    "totalIncome": 150000,
    "totalExpense": 105000,
    "savingsRate": 30,
    "avgMonthlyIncome": 50000,
    "avgMonthlyExpense": 35000,
    "topCategories": [{{"category": "Food & Groceries", "amount": 15000, "percentage": 14.3}}],
    "topMerchants": [{{"merchant": "Swiggy", "amount": 8500, "transactions": 42}}]
  }},
  "categorizedExpenses": {{"Food & Groceries": 15000}},
  "insights": ["Your food delivery spending increased 46% this month"]
}}"""

    goal_line = f"Monthly Goal: {profile.monthly_goal}\n" if profile.monthly_goal else ""
    user = f"""User Currency: {profile.currency}
{goal_line}
Transactions ({len(transactions)} total):
{_transactions_json(transactions, limit)}

Perform comprehensive financial analysis and identify all risks and opportunities."""
    return PromptPair(system, user)


def recommendation_prompt(analysis: AnalysisResult, profile: UserProfile) -> PromptPair:
    """SMART recommendations derived from the analysis."""
    system = f"""You are the Recommendation Agent. Create SMART, actionable financial recommendations.

Each recommendation must be:
- Specific (exact actions)
- Measurable (quantified impact)
- Achievable (realistic for user)
- Relevant (high ROI)
- Time-bound (clear timeline)

{JSON_ONLY} Use this format:
{{
  "recommendations": [
    {{
      "id": "unique_id",
      "title": "short actionable title",
      "category": "saving|budgeting|debt|income|subscription",
      "priority": 10,
      "impact": "low|medium|high",
      "steps": ["Step 1: specific action", "Step 2: specific action"],
      "estimatedMonthlySavings": 1200,
      "difficulty": "easy|medium|hard"
    }}
  ],
  "quickWins": ["Cancel unused streaming subscription - save 99/month"]
}}"""

    user = f"""User Profile: {_dump(profile.to_dict())}

Analysis Results:
{_dump(analysis.to_dict())}

Generate top 5-7 personalized, high-impact recommendations with clear action steps."""
    return PromptPair(system, user)


def reminder_prompt(
    recommendations: Sequence[Recommendation],
    transactions: Sequence[Transaction],
    limit: int = REMINDER_LIMIT
) -> PromptPair:
    """Reminders for the next 30 days."""
    system = f"""You are the Reminder Agent. Create timely, actionable financial reminders.

Reminder types:
- Bill payments (detect due dates from transaction history)
- Savings transfers (weekly/monthly)
- Subscription renewals
- Budget reviews
- Spending alerts

{JSON_ONLY} Use this format:
{{
  "reminders": [
    {{
      "id": "unique_id",
      "time": "ISO 8601 datetime (e.g., 2025-12-01T09:00:00+05:30)",
      "text": "short reminder text",
      "type": "bill|saving|subscription|review|custom",
      "relatedTransaction": "merchant or category if applicable"
    }}
  ]
}}

Create reminders for the next 30 days based on patterns and recommendations."""

    user = f"""Recommendations: {_dump([r.to_dict() for r in recommendations])}

Recent Transactions (for pattern detection):
{_transactions_json(transactions, limit)}

Create smart reminders for the next 30 days."""
    return PromptPair(system, user)


def chat_prompt(
    question: str,
    profile: UserProfile,
    transactions: Sequence[Transaction],
    analysis: Optional[AnalysisResult] = None,
    recommendations: Optional[List[Recommendation]] = None,
    limit: int = CHAT_LIMIT
) -> PromptPair:
    """Conversational answer grounded in the user's data. The reply is prose, not JSON."""
    system = """You are FinWise Chat Assistant. Answer user questions about their finances based on their data.

Guidelines:
- Be concise and actionable
- Use specific numbers from their data
- Reference actual transactions when relevant
- Suggest concrete next steps
- Be encouraging and supportive
- Maintain privacy (never expose raw transaction details unless asked)

Return a natural conversational response (NOT JSON)."""

    context_lines = [
        f"- Currency: {profile.currency}",
        f"- Total Transactions: {len(transactions)}",
    ]
    if analysis is not None:
        context_lines.append(f"- Savings Rate: {analysis.metrics.savings_rate:.1f}%")
        top = ", ".join(c.category for c in analysis.metrics.top_categories[:3])
        if top:
            context_lines.append(f"- Top Spending Categories: {top}")
    if recommendations:
        context_lines.append(f"- Active Recommendations: {len(recommendations)}")

    recent: List[Dict[str, Any]] = [
        {
            "date": t.date.isoformat(),
            "amount": t.amount,
            "merchant": t.merchant,
            "category": t.category,
        }
        for t in transactions[:limit]
    ]
    context = "\n".join(context_lines)

    user = f"""User Question: "{question}"

Context:
{context}

Recent Transactions (last {limit}):
{_dump(recent)}

Answer the user's question based on their actual financial data."""
    return PromptPair(system, user)
