"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
This ensures consistent configuration across the application.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Optional
from dotenv import load_dotenv

from schemas import DayOfWeek

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Database Configuration
    # DATABASE_URL wins when set (tests use sqlite://)
    DATABASE_URL: Optional[str] = Field(default=None)
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: str = Field(default="postgres")
    POSTGRES_DB: str = Field(default="healthily_fit")
    POSTGRES_HOST: str = Field(default="postgres")
    POSTGRES_PORT: int = Field(default=5432)

    # Database Pool Configuration
    DB_POOL_SIZE: int = Field(default=10)
    DB_MAX_OVERFLOW: int = Field(default=10)
    DB_POOL_TIMEOUT: int = Field(default=30)
    DB_POOL_RECYCLE: int = Field(default=3600)  # 1 hour

    # JWT Authentication - REQUIRED for token signing
    # Must be set via environment variable, never use default in production
    SECRET_KEY: str = Field(
        default=...,  # Required - no default
        description="JWT signing key. Must be cryptographically secure (32+ chars). "
                    "Generate with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=7 * 24 * 60, ge=5)  # 7 days

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    API_RELOAD: bool = Field(default=False)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # CORS - comma-separated list of allowed origins for production
    # e.g., "https://healthily.fit,https://www.healthily.fit"
    CORS_ORIGINS: Optional[str] = Field(default=None)

    # UI theme handed to clients with the session. The web app ships light only.
    UI_THEME: str = Field(default="light")

    # Plan generation policy defaults
    PLAN_TOTAL_WEEKS: int = Field(default=4, ge=1, le=52)
    PLAN_WORKOUT_DAYS: str = Field(default="monday,wednesday,friday")

    # Sentry Error Tracking
    SENTRY_DSN: Optional[str] = Field(default=None)
    SENTRY_TRACES_SAMPLE_RATE: float = Field(default=0.1)  # 10% of transactions
    SENTRY_PROFILES_SAMPLE_RATE: float = Field(default=0.1)

    @field_validator("PLAN_WORKOUT_DAYS")
    @classmethod
    def _parse_workout_days(cls, value: str) -> str:
        """Fail at startup on unknown day names instead of on every plan request."""
        days = [d.strip().lower() for d in value.split(",") if d.strip()]
        if not days:
            raise ValueError("PLAN_WORKOUT_DAYS must name at least one day")
        valid = {d.value for d in DayOfWeek}
        unknown = [d for d in days if d not in valid]
        if unknown:
            raise ValueError(f"Unknown workout days: {', '.join(unknown)}")
        return ",".join(days)

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            # Some hosts still hand out the legacy scheme
            if self.DATABASE_URL.startswith("postgres://"):
                return self.DATABASE_URL.replace("postgres://", "postgresql://", 1)
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:"
            f"{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:"
            f"{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )

    @property
    def plan_workout_days(self) -> List[str]:
        return [d.strip().lower() for d in self.PLAN_WORKOUT_DAYS.split(",") if d.strip()]

    @property
    def cors_origins(self) -> List[str]:
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


# Global settings instance
settings = Settings()
