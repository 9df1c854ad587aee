"""AI Agents package."""

from expense_tracker.agents.interface import (
    EMPTY_INSIGHTS_MESSAGE,
    INSIGHTS_FAILED_MESSAGE,
    NO_EXPENSES_MESSAGE,
    InsightEngine,
)
from expense_tracker.agents.gemini_agent import GeminiInsightEngine

__all__ = [
    "EMPTY_INSIGHTS_MESSAGE",
    "GeminiInsightEngine",
    "INSIGHTS_FAILED_MESSAGE",
    "InsightEngine",
    "NO_EXPENSES_MESSAGE",
]
