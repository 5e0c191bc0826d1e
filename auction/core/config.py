"""
Application configuration.
"""

from typing import Any, List, Optional

from loguru import logger
from pydantic import PostgresDsn, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_admin_ids(raw: str) -> List[int]:
    """Parse a comma separated list of admin identities, skipping bad entries."""
    admins = []
    for entry in raw.split(","):
        trimmed = entry.strip()
        if not trimmed:
            continue
        try:
            admins.append(int(trimmed))
        except ValueError as e:
            logger.warning(f"Invalid ADMIN_IDS entry {trimmed!r}: {e}")
    return admins


class Settings(BaseSettings):
    """
    Application settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        validate_default=True,
    )

    # Core Settings
    PROJECT_NAME: str = "Auction Backend"
    PROJECT_DESCRIPTION: str = "Bid-consistency and auction lifecycle service for the auction bot"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # API Settings
    API_PREFIX: str = "/api"
    CORS_ORIGINS_STR: str = "*"

    # Database Settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "auction"
    POSTGRES_PORT: str = "5432"
    DATABASE_URI: Optional[str] = None

    @field_validator("DATABASE_URI", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str) and v:
            return v

        data = info.data
        if not data:
            raise ValueError("Missing data for DATABASE_URI")

        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=data.get("POSTGRES_USER"),
                password=data.get("POSTGRES_PASSWORD"),
                host=data.get("POSTGRES_SERVER"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=f"{data.get('POSTGRES_DB') or ''}",
            )
        )

    # Auction Settings
    ADMIN_IDS: str = ""
    CURRENCY_LABEL: str = "AED"

    @property
    def admin_ids(self) -> List[int]:
        return parse_admin_ids(self.ADMIN_IDS)

    def is_admin(self, user_id: int) -> bool:
        return user_id in self.admin_ids

    # Sentry Settings
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    # Prometheus Metrics
    ENABLE_METRICS: bool = True

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Tracing Settings
    ENABLE_TRACING: bool = False
    OTLP_ENDPOINT: Optional[str] = None
    TRACE_SAMPLE_RATIO: float = 0.1


settings = Settings()
