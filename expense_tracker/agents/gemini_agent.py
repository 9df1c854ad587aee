"""
Gemini Insight Engine

DESIGN DECISION: Both calls are single-shot. There is no retry, no
backoff and no timeout beyond the client library defaults; a failure is
reported once as a canned message (insights) or None (parsing).

CRITICAL BOUNDARIES:

1. INSIGHTS:
   - CAN: Read a summary of the 50 most recent expenses
   - CANNOT: See ids, account numbers or anything beyond names/amounts
   - Output is free text shown as-is

2. EXPENSE PARSING:
   - CAN: Pick an account/category id from the catalog it is shown
   - CANNOT: Persist anything - the caller validates and saves
   - Output is constrained to a fixed JSON schema
"""

import datetime as dt
import json
from typing import Any, Optional, Sequence

import google.generativeai as genai
from pydantic import ValidationError

from expense_tracker.agents.interface import (
    EMPTY_INSIGHTS_MESSAGE,
    INSIGHTS_FAILED_MESSAGE,
    NO_EXPENSES_MESSAGE,
    InsightEngine,
)
from expense_tracker.analytics import resolve_account_name, resolve_category_name
from expense_tracker.config import GeminiSettings, get_settings
from expense_tracker.log import get_logger
from expense_tracker.models import Account, Category, Expense, ParsedExpense


ADVISOR_INSTRUCTION = (
    "You are a professional financial advisor. Analyze the given spending data "
    "and provide short, impactful, actionable financial advice. "
    "Focus on patterns and potential savings."
)

# Response schema for natural-language parsing (Gemini OpenAPI subset)
PARSED_EXPENSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "amount": {"type": "NUMBER"},
        "date": {"type": "STRING", "description": "YYYY-MM-DD"},
        "accountId": {"type": "STRING"},
        "categoryId": {"type": "STRING"},
        "subCategory": {"type": "STRING"},
        "description": {"type": "STRING"},
    },
    "required": ["amount", "accountId", "categoryId"],
}

logger = get_logger(__name__)


def summarize_expenses(
    expenses: Sequence[Expense],
    accounts: Sequence[Account],
    categories: Sequence[Category],
    limit: int,
) -> list[dict[str, Any]]:
    """
    Compact, name-resolved rows for the most recent `limit` expenses.

    Ids are replaced by names so the model never sees internal keys.
    """
    recent = sorted(expenses, key=lambda e: e.date, reverse=True)[:limit]
    rows = []
    for expense in recent:
        row = {
            "amount": expense.amount,
            "date": expense.date.isoformat(),
            "category": resolve_category_name(expense.category_id, categories),
            "account": resolve_account_name(expense.account_id, accounts),
            "personal": expense.is_personal,
            "desc": expense.description,
        }
        if expense.sub_category:
            row["subCategory"] = expense.sub_category
        rows.append(row)
    return rows


def extract_json_object(text: str) -> Optional[dict[str, Any]]:
    """Pull the first JSON object out of model text (tolerates code fences)."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        return None
    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class GeminiInsightEngine(InsightEngine):
    """
    Insight engine backed by Google Gemini.

    Models can be injected for testing; otherwise they are built from
    GeminiSettings.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        insight_model: Any = None,
        parse_model: Any = None,
        expense_limit: Optional[int] = None,
    ):
        self._expense_limit = expense_limit or get_settings().app.insight_expense_limit
        if insight_model is None or parse_model is None:
            self._settings = settings or get_settings().gemini
            self._configure_genai()
        if insight_model is not None:
            self._insight_model = insight_model
        if parse_model is not None:
            self._parse_model = parse_model

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._insight_model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            system_instruction=ADVISOR_INSTRUCTION,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            },
        )
        self._parse_model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": 0.1,  # Low temperature for consistency
                "max_output_tokens": 512,
                "response_mime_type": "application/json",
                "response_schema": PARSED_EXPENSE_SCHEMA,
            },
        )

    async def get_spending_insights(
        self,
        expenses: Sequence[Expense],
        accounts: Sequence[Account],
        categories: Sequence[Category],
    ) -> str:
        if not expenses:
            return NO_EXPENSES_MESSAGE

        summary = summarize_expenses(expenses, accounts, categories, self._expense_limit)

        prompt = f"""Analyze these expenses for me and provide 2-3 actionable pieces of advice to save money or manage better.
Keep it concise and professional.

Data: {json.dumps(summary, ensure_ascii=False)}"""

        try:
            response = await self._insight_model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            logger.error("gemini_insights_failed", error=str(e))
            return INSIGHTS_FAILED_MESSAGE

        logger.info("gemini_insights_generated", expenses=len(summary))
        return text or EMPTY_INSIGHTS_MESSAGE

    async def parse_natural_language_expense(
        self,
        text: str,
        accounts: Sequence[Account],
        categories: Sequence[Category],
        today: Optional[dt.date] = None,
    ) -> Optional[ParsedExpense]:
        today = today or dt.date.today()

        account_catalog = [
            {"id": a.id, "name": a.name, "nickname": a.nickname, "type": a.type.value}
            for a in accounts
        ]
        category_catalog = [
            {"id": c.id, "name": c.name, "subCategories": c.sub_categories}
            for c in categories
        ]

        prompt = f"""Extract a single expense from the user's sentence.

Sentence: "{text}"
Today's date: {today.isoformat()}

Available accounts: {json.dumps(account_catalog, ensure_ascii=False)}
Available categories: {json.dumps(category_catalog, ensure_ascii=False)}

Rules:
- amount is a plain number without currency symbols
- accountId and categoryId MUST be ids from the lists above
- date is YYYY-MM-DD; resolve words like "yesterday" against today's date; omit if not mentioned
- subCategory should be one of the chosen category's subCategories when one fits
- description is a short summary of what was bought

Respond with ONLY the JSON object."""

        try:
            response = await self._parse_model.generate_content_async(prompt)
            data = extract_json_object(response.text or "")
        except Exception as e:
            logger.error("gemini_parse_failed", error=str(e))
            return None

        if data is None:
            logger.warning("gemini_parse_unreadable")
            return None

        try:
            return ParsedExpense.model_validate(data)
        except ValidationError as e:
            logger.warning("gemini_parse_invalid", error=str(e))
            return None
