"""Package configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from auditable.core.constants import DEFAULT_IGNORED_FIELDS


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Settings loaded from AUDITABLE_-prefixed environment variables.

    The prefix keeps a host application's own LOG_LEVEL or DATABASE_URL
    from being read by the library.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUDITABLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Auditable"
    environment: str = "development"  # development, staging, production

    # Database
    database_url: str = "sqlite:///./auditable.db"
    database_echo: bool = False

    # Observability
    log_level: str = "INFO"

    # Auditing
    audit_ignore_fields: list[str] = list(DEFAULT_IGNORED_FIELDS)
    audit_loose_comparison: bool = False
    audit_atomic_writes: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level name.

        Raises:
            ValueError: If the level is not a standard logging level
        """
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"AUDITABLE_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

