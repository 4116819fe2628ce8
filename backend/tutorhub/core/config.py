# backend/tutorhub/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


PRODUCTION_DATABASE_INDICATORS = [
    "amazonaws.com",
    "supabase.co",
    "supabase.com",
    "neon.tech",
    "render.com",
    "railway.app",
]


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )
    api_title: str = Field(default=f"{BRAND_NAME} API", description="OpenAPI title")
    log_level: str = Field(default="INFO", description="Root log level")

    # Database
    database_url: str = Field(
        default="sqlite:///./tutorhub.db",
        description="SQLAlchemy URL for the primary database",
    )
    test_database_url: str = Field(
        default="sqlite://",
        description="SQLAlchemy URL used by the test suite",
    )
    database_echo: bool = False

    # Payments
    stripe_secret_key: Optional[SecretStr] = Field(
        default=None,
        description="Stripe secret key; mock payment mode when unset",
    )
    currency: str = Field(default="usd", min_length=3, max_length=3)
    platform_fee_percentage: int = Field(
        default=15,
        ge=0,
        le=100,
        description="Platform commission (15 means 15%, not 0.15)",
    )
    payment_timeout_seconds: int = Field(
        default=8,
        ge=1,
        description="Network timeout applied to every payment processor call",
    )
    payment_max_network_retries: int = Field(default=1, ge=0)

    # Booking policy
    late_cancellation_hours: int = Field(
        default=24,
        ge=0,
        description="Parents cannot cancel a paid booking closer than this to its start",
    )

    # Legacy flags for backward compatibility
    is_testing: bool = False  # Set to True when running tests

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("test_database_url")
    @classmethod
    def validate_test_database(cls, v: str, info: ValidationInfo) -> str:
        """Ensure test database is not a production database."""
        for indicator in PRODUCTION_DATABASE_INDICATORS:
            if indicator in v.lower():
                raise ValueError(
                    f"Test database URL contains production indicator '{indicator}'. "
                    f"Tests must not use production databases!"
                )
        return v

    @field_validator("currency")
    @classmethod
    def _normalize_currency(cls, v: str) -> str:
        return v.lower()

    @property
    def stripe_configured(self) -> bool:
        return bool(self.stripe_secret_key and self.stripe_secret_key.get_secret_value())

    def get_database_url(self) -> str:
        """Get the appropriate database URL based on context."""
        if self.is_testing or is_running_tests():
            return self.test_database_url
        return self.database_url


settings = Settings()
