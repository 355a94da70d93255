"""Configuration package."""

from church_office.config.settings import (
    DEFAULT_CREDENTIALS,
    AppSettings,
    DatabaseSettings,
    OperatorCredential,
    SessionSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DEFAULT_CREDENTIALS",
    "AppSettings",
    "DatabaseSettings",
    "OperatorCredential",
    "SessionSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
