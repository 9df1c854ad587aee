"""
Expense Tracker - Source Package

A personal expense tracker: accounts, categories and expenses stored per
user in Firestore, with dashboard analytics and Gemini-powered insights.

DESIGN PRINCIPLES:
1. Aggregation is pure and framework-independent
2. Every external service sits behind a narrow, swappable interface
3. Session state is passed explicitly, never read from a global
4. AI output is checked before it becomes a record
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
