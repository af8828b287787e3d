"""Application configuration settings."""

import typing as t

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "GroceryWatch"
    app_version: str = "1.0.0"
    app_url: str = "http://localhost:8000"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./grocerywatch.db"

    # Expiry monitoring
    expiring_window_days: int = (
        3  # Sweep broadcasts and new-item alerts look this far ahead
    )
    expiring_lookahead_days: int = (
        5  # Wider window used when gathering ingredients for suggestions
    )
    check_expiration_interval_hours: int = (
        24  # How often the background sweep reconciles the inventory
    )

    # Real-time notifications
    notifier_queue_size: int = 100
    reconnect_interval_seconds: float = 5.0
    reconnect_backoff_multiplier: float = 2.0
    reconnect_max_interval_seconds: float = 60.0
    reconnect_max_attempts: int = 5

    # CORS
    cors_origins: t.List[str] = ["*"]

    # Email digest (optional)
    smtp_enabled: bool = False
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from_email: str = "grocerywatch@localhost"
    digest_recipient_email: str = ""

    # Content generation (optional, falls back to offline content)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    azure_openai_endpoint: str = ""
    azure_openai_api_version: str = "2024-02-15-preview"
    openai_timeout_seconds: float = 60.0


SETTINGS = Settings()
