"""Configuration package."""

from expense_tracker.config.settings import (
    AppSettings,
    ErrorPolicy,
    FirebaseSettings,
    GeminiSettings,
    Settings,
    StorageBackend,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ErrorPolicy",
    "FirebaseSettings",
    "GeminiSettings",
    "Settings",
    "StorageBackend",
    "get_settings",
    "validate_all_settings",
]
