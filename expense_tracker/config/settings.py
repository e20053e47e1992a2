"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment
variables and an optional .env file.

All configuration is centralized here: where the local slot file lives,
which endpoint the remote backend talks to, how the API server reaches
MongoDB, and the application defaults (starting mode, categories, logging).
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from expense_tracker.models.expense import StorageMode


class LocalStoreSettings(BaseSettings):
    """Local key-value slot configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOCAL_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    path: str = Field(
        default=".expense_tracker/local_storage.json",
        description="File holding the key-value slots"
    )
    storage_key: str = Field(
        default="expenses",
        min_length=1,
        description="Slot key the expense collection is stored under"
    )


class RemoteApiSettings(BaseSettings):
    """Remote expense service configuration (client side)."""

    model_config = SettingsConfigDict(
        env_prefix="REMOTE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://127.0.0.1:5000/api/expenses",
        description="Collection endpoint of the expense service"
    )
    request_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-request timeout; unset means wait indefinitely"
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Remote API base URL must be http(s): {v}")
        return v.rstrip("/")


class ServerSettings(BaseSettings):
    """Expense API server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_SERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string"
    )
    db_name: str = Field(
        default="expense_tracker",
        description="Database name"
    )
    collection_name: str = Field(
        default="expenses",
        description="Collection holding expense documents"
    )
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5000, ge=1, le=65535)
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


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

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON lines instead of console output"
    )

    # Behaviour
    default_mode: StorageMode = Field(
        default=StorageMode.LOCAL,
        description="Backend active when a session starts"
    )
    currency_symbol: str = Field(
        default="₹",
        description="Prefix shown before amounts"
    )
    categories: str = Field(
        default="Food,Transport,Shopping,Bills,Entertainment,Health,Other",
        description="Comma-separated categories offered in the form"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def categories_list(self) -> list[str]:
        """Get categories as a list, duplicates removed, order kept."""
        seen: dict[str, None] = {}
        for cat in self.categories.split(","):
            if cat.strip():
                seen.setdefault(cat.strip(), None)
        return list(seen)


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

    @property
    def local_store(self) -> LocalStoreSettings:
        return LocalStoreSettings()

    @property
    def remote_api(self) -> RemoteApiSettings:
        return RemoteApiSettings()

    @property
    def server(self) -> ServerSettings:
        return ServerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus `<name>_error`
    entries for the ones that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("local_store", "remote_api", "server", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
