"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = "Restaurant Back Office"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./restaurant.db"

    # Pagination
    default_page_limit: int = 20
    max_page_limit: int = 100

    # Orders
    order_number_max_attempts: int = 25
    top_sellers_default_limit: int = 5

    # Menu seed data (YAML), loaded on startup when set
    seed_menu_file: Optional[str] = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
