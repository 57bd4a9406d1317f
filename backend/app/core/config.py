# backend/app/core/config.py
import logging
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_BACKEND_ROOT = Path(__file__).resolve().parents[2]

load_dotenv(_BACKEND_ROOT / ".env")

logger = logging.getLogger(__name__)

# Mon-Fri 09:00-17:00, Sat 09:00-13:00 (day_of_week: 0 = Sunday)
DEFAULT_AVAILABILITY: List[Dict[str, Any]] = [
    *(
        {"day_of_week": day, "start_time": "09:00", "end_time": "17:00"}
        for day in range(1, 6)
    ),
    {"day_of_week": 6, "start_time": "09:00", "end_time": "13:00"},
]


class Settings(BaseSettings):
    environment: str = "development"

    database_url: str = Field(
        default="sqlite:///./bookings.db",
        description="SQLAlchemy database URL (PostgreSQL in production)",
    )
    database_echo: bool = False

    # Bearer tokens are issued by the auth service; we only verify them
    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-key-change-in-production"),
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    # Reservations
    reference_code_length: int = Field(default=8, ge=6, le=16)
    reservation_max_attempts: int = Field(default=5, ge=1, le=20)

    # Listings
    upcoming_window_days: int = Field(default=7, ge=1)
    available_dates_horizon_days: int = Field(default=30, ge=1, le=366)
    default_availability: List[Dict[str, Any]] = Field(
        default_factory=lambda: [dict(rule) for rule in DEFAULT_AVAILABILITY]
    )

    # Public booking page origins
    cors_allowed_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Event outbox delivery
    event_dispatch_batch_size: int = 100
    event_max_attempts: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        # Hosted providers still hand out the legacy scheme
        if value.startswith("postgres://"):
            return "postgresql://" + value[len("postgres://") :]
        return value


settings = Settings()
logger.info(
    "[CONFIG] environment=%s dialect=%s",
    settings.environment,
    settings.database_url.split(":", 1)[0],
)
