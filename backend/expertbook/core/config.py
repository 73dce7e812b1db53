# backend/expertbook/core/config.py
import logging
import os
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .constants import DEFAULT_PACKAGE_HOURS

_BACKEND_ROOT = Path(__file__).resolve().parents[2]

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


class Settings(BaseSettings):
    environment: Literal["development", "testing", "production"] = "development"
    log_level: str = Field(default="INFO", description="Root log level for the API process")

    database_url: str = Field(
        default="sqlite:///./expertbook.db",
        description="SQLAlchemy URL of the record store",
    )
    database_echo: bool = False

    # Booking rules
    package_hours: Annotated[list[int], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_PACKAGE_HOURS),
        description="Hour packages a client can purchase",
    )
    cancellation_notice_hours: int = Field(
        default=24,
        description="Minimum hours between cancellation and session start",
    )

    # Meeting links
    meeting_link_base_url: str = "https://meet.example.com"
    meeting_link_token_length: int = 8

    # Critical sections
    lock_timeout_seconds: float = Field(
        default=10.0,
        description="Maximum wait for a booking/purchase lock before giving up",
    )

    model_config = SettingsConfigDict(
        env_prefix="EXPERTBOOK_",
        env_file=_BACKEND_ROOT / ".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("package_hours", mode="before")
    @classmethod
    def _parse_package_hours(cls, value: object) -> list[int] | object:
        if isinstance(value, str):
            return [int(token) for token in value.split(",") if token.strip()]
        return value

    @field_validator("package_hours")
    @classmethod
    def _validate_package_hours(cls, value: list[int]) -> list[int]:
        if not value or any(hours <= 0 for hours in value):
            raise ValueError("package_hours must be a non-empty list of positive integers")
        return sorted(set(value))

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
