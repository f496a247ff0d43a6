# backend/slotengine/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

logger = logging.getLogger(__name__)

_BACKEND_ROOT = Path(__file__).resolve().parents[2]


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


class Settings(BaseSettings):
    """Runtime configuration for the scheduling backend."""

    model_config = SettingsConfigDict(
        env_file=str(_BACKEND_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "test", "staging", "production"] = "development"
    log_level: str = "INFO"
    is_testing: bool = False

    # Database
    database_url: str = "sqlite:///./slotengine.db"
    database_echo: bool = False
    storage_timeout_seconds: float = Field(
        default=5.0,
        description="Deadline applied to storage reads (statement_timeout on PostgreSQL)",
    )

    # Scheduling
    default_timezone: str = Field(
        default="UTC",
        description="Timezone recorded for bookings that omit booker_timezone",
    )

    # Advisory booking lock (Redis)
    redis_url: str = "redis://localhost:6379/0"
    booking_lock_enabled: bool = False
    booking_lock_ttl_seconds: int = 30
    lock_namespace: str = "slotengine"

    # HTTP
    api_prefix: str = "/api/v1"

    @field_validator("default_timezone")
    @classmethod
    def validate_default_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("storage_timeout_seconds")
    @classmethod
    def validate_storage_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("storage_timeout_seconds must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def storage_timeout_ms(self) -> int:
        return int(self.storage_timeout_seconds * 1000)


settings = Settings()

if is_running_tests():
    settings.is_testing = True
