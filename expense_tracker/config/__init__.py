"""Configuration package."""

from expense_tracker.config.settings import (
    AppSettings,
    LocalStoreSettings,
    RemoteApiSettings,
    ServerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "LocalStoreSettings",
    "RemoteApiSettings",
    "ServerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
