"""Configuration management for todo-backend."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="./data/todo.db", description="Path to the SQLite database file")

    # Session Configuration
    session_ttl_minutes: int = Field(default=1800, description="Lifetime of a login session in minutes")
    session_sweep_interval_minutes: int = Field(
        default=10, description="Interval for the expired-session sweep job (0 disables it)"
    )

    # Password Hashing
    bcrypt_rounds: int = Field(default=12, description="bcrypt cost factor used when hashing passwords")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Deployment
    environment: str = Field(default="development", description="Deployment environment name")

    # Sample task generation
    sample_tasks_min: int = Field(default=100, description="Minimum number of generated sample tasks")
    sample_tasks_max: int = Field(default=1000, description="Maximum number of generated sample tasks")

    @model_validator(mode="after")
    def _check_sample_bounds(self) -> "Settings":
        if self.sample_tasks_min < 0 or self.sample_tasks_min > self.sample_tasks_max:
            msg = (
                f"sample_tasks_min ({self.sample_tasks_min}) must be between 0 "
                f"and sample_tasks_max ({self.sample_tasks_max})"
            )
            raise ValueError(msg)
        return self

    @property
    def is_production(self) -> bool:
        """Return True when running in the production environment."""
        return self.environment.lower() == "production"

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_BAD_REQUEST: int = 400
    HTTP_UNAUTHORIZED: int = 401
    HTTP_FORBIDDEN: int = 403
    HTTP_NOT_FOUND: int = 404
    HTTP_CONFLICT: int = 409
    HTTP_LOGIN_TIMEOUT: int = 440
    HTTP_SERVER_ERROR: int = 500

    # Session Registry
    SESSION_BUCKET_COUNT: int = 16  # Lock stripes in the session table
    SESSION_TOKEN_BYTES: int = 32  # 256-bit random tokens
    SESSION_TOKEN_LOG_PREFIX: int = 6  # Characters of a token allowed in logs

    # User validation bounds
    USERNAME_MIN_LENGTH: int = 5
    USERNAME_MAX_LENGTH: int = 30
    PASSWORD_MIN_LENGTH: int = 6
    PASSWORD_MAX_LENGTH: int = 29

    # Task validation bounds
    TASK_PRIORITY_MIN: int = 0
    TASK_PRIORITY_MAX: int = 5

    # Sample task generation window (days relative to now)
    SAMPLE_DEADLINE_DAYS_BEFORE: int = 5
    SAMPLE_DEADLINE_DAYS_AFTER: int = 25


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
