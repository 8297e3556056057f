"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List

DEFAULT_SECRET_KEY = "dev-insecure-key-change-me"


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Built once at import time. Components that need configuration get the
    relevant values passed in explicitly (see ``api.dependencies``) instead
    of reading this object on their own.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./typecraft.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(default=5, description="Number of persistent database connections")
    db_max_overflow: int = Field(default=10, description="Extra connections allowed during traffic bursts")
    db_pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    db_pool_recycle: int = Field(default=1800, description="Seconds before a connection is recycled")

    # Sessions
    # The login token doubles as the session: it is returned to API clients
    # and stored in an HTTP-only cookie for browsers.
    secret_key: str = Field(
        default=DEFAULT_SECRET_KEY,
        description="Token signing secret (override in production)"
    )
    token_expiry_hours: int = Field(
        default=24 * 7,
        description="Hours before a login token expires"
    )
    session_cookie_name: str = Field(
        default="typecraft_session",
        description="Cookie that carries the login token for browser clients"
    )

    # Rate Limiting (login and registration only)
    rate_limit_per_minute: int = Field(
        default=20,
        description="Maximum credential attempts per client per minute (0 = unlimited)"
    )

    # PDF extraction
    pdftotext_command: str = Field(
        default="pdftotext",
        description="Executable used to extract text from uploaded PDFs"
    )
    pdf_extraction_timeout: float = Field(
        default=60.0,
        description="Seconds before a running extraction is abandoned"
    )
    max_upload_mb: int = Field(
        default=20,
        description="Largest accepted PDF upload in megabytes"
    )

    # Text submission
    strict_category_ids: bool = Field(
        default=False,
        description="Reject unknown folder ids instead of filing the text at the root"
    )

    # AI summaries
    # LiteLLM model string, e.g. "gemini/gemini-1.5-flash" or "openai/gpt-4o-mini".
    # Empty string = summaries disabled.
    summary_model: str = Field(default="", description="LiteLLM model for summaries (empty = disabled)")
    summary_api_key: str = Field(default="", description="API key for the summary provider")
    summary_api_base: str = Field(default="", description="Base URL for the summary provider (optional)")
    summary_timeout: int = Field(default=60, description="Seconds to wait for a summary")

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Logging output format: 'json' for structured, 'text' for human-readable"
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def summaries_enabled(self) -> bool:
        return bool(self.summary_model and self.summary_api_key)

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('pdf_extraction_timeout')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("PDF_EXTRACTION_TIMEOUT must be positive")
        return v

    def validate_production_config(self) -> None:
        """Fail startup in production when security-critical settings use insecure defaults.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.secret_key == DEFAULT_SECRET_KEY:
            errors.append(
                "SECRET_KEY is using the default insecure value. "
                "Generate a secure key: openssl rand -hex 32"
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
