# backend/maestro/core/config.py
import logging
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Runtime configuration, populated from environment variables."""

    model_config = SettingsConfigDict(
        env_file=None,
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Maestro Academy API"
    environment: str = Field(default="development", description="development, test or production")
    log_level: str = "INFO"

    database_url: str = "sqlite:///./maestro.db"
    test_database_url: str = "sqlite://"
    sql_echo: bool = False
    is_testing: bool = False

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    prometheus_enabled: bool = True

    # Workflow tunables
    mentorship_message_min_length: int = Field(default=10, ge=1)
    default_classroom_capacity: int = Field(default=50, ge=1)
    default_schedule_capacity: int = Field(default=20, ge=1)
    default_session_minutes: int = Field(default=60, ge=1)
    slow_operation_seconds: float = 1.0

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("environment")
    @classmethod
    def _normalize_environment(cls, v: str) -> str:
        return (v or "development").strip().lower()

    def get_database_url(self) -> str:
        """Return the database URL for the current mode (test suites get the test URL)."""
        if self.is_testing or is_running_tests():
            return self.test_database_url
        return self.database_url

    @property
    def is_sqlite(self) -> bool:
        return self.get_database_url().startswith("sqlite")


settings = Settings()
