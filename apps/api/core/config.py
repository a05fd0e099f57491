"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
This ensures consistent configuration across the application.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from dotenv import load_dotenv

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
    # DATABASE_URL wins when set (e.g. sqlite:// for local runs and tests).
    DATABASE_URL: Optional[str] = Field(default=None)
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: str = Field(default="postgres")
    POSTGRES_DB: str = Field(default="gymbuddy")
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
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=30 * 24 * 60)  # 30 days

    # Language model (Anthropic Messages API)
    ANTHROPIC_API_KEY: Optional[str] = Field(default=None)
    AI_MODEL: str = Field(default="claude-sonnet-4-5-20250929")
    AI_MODEL_GENERATE_PROGRAM: Optional[str] = Field(default=None)
    AI_MODEL_ANALYZE_WORKOUT: Optional[str] = Field(default=None)
    AI_MODEL_WEEKLY_DIGEST: Optional[str] = Field(default=None)
    AI_REQUEST_TIMEOUT_S: float = Field(default=120.0)

    # AI quota (per user, per UTC day)
    AI_DAILY_CALL_LIMIT: int = Field(default=10, ge=1)
    AI_WARNING_THRESHOLD: int = Field(default=8, ge=0)

    # Cost estimate rates, EUR per million tokens
    AI_COST_INPUT_PER_MTOK: float = Field(default=3.0)
    AI_COST_OUTPUT_PER_MTOK: float = Field(default=15.0)

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # CORS - comma-separated list of allowed origins, "*" for any
    CORS_ORIGINS: str = Field(default="*")

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:"
            f"{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:"
            f"{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )

    def model_for(self, function_name: str) -> str:
        """Model to use for one AI function, honoring per-function overrides."""
        overrides = {
            "generate-program": self.AI_MODEL_GENERATE_PROGRAM,
            "analyze-workout": self.AI_MODEL_ANALYZE_WORKOUT,
            "weekly-digest": self.AI_MODEL_WEEKLY_DIGEST,
        }
        return overrides.get(function_name) or self.AI_MODEL


# Global settings instance
settings = Settings()
