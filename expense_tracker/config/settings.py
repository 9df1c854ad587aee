"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageBackend(str, Enum):
    """Where user documents live."""
    FIRESTORE = "firestore"
    MEMORY = "memory"


class ErrorPolicy(str, Enum):
    """
    What the repository does with a permission failure.

    SWALLOW: log a warning and fall back to defaults (reads) or False (writes)
    RAISE: propagate the error so the page can show a blocking alert
    """
    SWALLOW = "swallow"
    RAISE = "raise"


class FirebaseSettings(BaseSettings):
    """Firebase (Firestore + Authentication) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Firebase service account credentials JSON"
    )
    project_id: Optional[str] = Field(
        default=None,
        description="Firebase project ID (taken from credentials if unset)"
    )
    web_api_key: str = Field(
        ...,
        description="Web API key used for the Identity Toolkit REST API"
    )
    request_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Timeout for identity requests (None = transport default)"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Firebase credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature for insight generation"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Backends
    storage_backend: StorageBackend = Field(
        default=StorageBackend.FIRESTORE,
        description="Document store implementation to use"
    )
    persistence_error_mode: ErrorPolicy = Field(
        default=ErrorPolicy.SWALLOW,
        description="Default handling of storage permission errors"
    )

    # AI behaviour
    validate_ai_references: bool = Field(
        default=True,
        description="Reject AI-parsed expenses whose account/category ids are unknown"
    )
    insight_expense_limit: int = Field(
        default=50,
        ge=1,
        le=500,
        description="How many recent expenses are sent for insights"
    )

    # Display
    recent_activity_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of expenses shown under recent activity"
    )
    budget_threshold: float = Field(
        default=50000.0,
        gt=0,
        description="Spending level at which the dashboard shows a warning"
    )
    currency_symbol: str = Field(
        default="₹",
        description="Symbol used when formatting amounts"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def firebase(self) -> FirebaseSettings:
        return FirebaseSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("firebase", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
