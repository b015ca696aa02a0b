"""Application settings using Pydantic BaseSettings."""

import os
import re

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./contact_ledger.db"


def get_async_database_url(url: str | None = None) -> str:
    """Get database URL converted for an async driver."""
    if url is None:
        url = os.environ.get("DATABASE_URL", "") or settings.database_url
    # Convert postgres:// to postgresql+asyncpg:// for SQLAlchemy async
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    # asyncpg doesn't support sslmode, it uses ssl parameter
    if "sslmode=" in url:
        url = re.sub(r'[?&]sslmode=[^&]*', '', url)
        url = url.rstrip('?&')
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = DEFAULT_DATABASE_URL

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"

    # Scoring
    trusted_source_systems: list[str] = ["INVOICE", "ZOHO"]
    unknown_company_sentinel: str = "Unknown"

    # Merge ledger
    system_actor: str = "SYSTEM"
    email_source_systems: list[str] = [
        "GMAIL",
        "OUTLOOK",
        "YAHOO",
        "ZOHO",
        "EXCHANGE",
        "THUNDERBIRD",
        "APPLE_MAIL",
        "PROTONMAIL",
    ]
    recent_merge_window_days: int = 7

    # Tags
    default_tag_color: str = "#3B82F6"

    # Pagination
    default_page_limit: int = 20
    max_page_limit: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
