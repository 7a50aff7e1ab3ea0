"""Configuration management for the upkeep engine."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Reference store
    sqlite_db_path: str = Field(default="./upkeep.db", description="SQLite database path for the reference task store")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment reported to Logfire")

    # Advisory service (optional)
    openrouter_api_key: str | None = Field(default=None, description="OpenRouter API key for the advisory model")
    model_id: str = Field(
        default="anthropic/claude-3.5-sonnet",
        description="Model ID for OpenRouter used by the risk advisor",
    )
    advisory_enabled: bool = Field(default=True, description="Enable best-effort risk enrichment on task creation")
    advisory_timeout_seconds: float = Field(default=20.0, description="Upper bound for a single advisory call")

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


# Engine Constants
class Constants:
    """Engine-wide constants."""

    # Unit tagging
    COMMON_AREA_TAG: str = "Common Area"
    ALL_UNITS_TAG_TEMPLATE: str = "All Units ({count})"

    # Workload thresholds (hours per calendar day)
    DAY_CAPACITY_HOURS: float = 8.0  # Cell-level: a day at or above this is overloaded
    WORKLOAD_WARNING_HOURS: float = 6.0  # List-level advisory banner threshold

    # Risk
    CASCADE_ALERT_THRESHOLD: float = 7.0

    # Preservation
    PRESERVATION_MIN_PERCENT: float = 50.0
    PRESERVATION_MAX_PERCENT: float = 95.0
    FAILURE_RISK_CAP: int = 80
    DEFAULT_LIFESPAN_YEARS: int = 20
    DEFAULT_REPLACEMENT_COST: float = 5000.0
    HIGH_PRIORITY_PERCENT: float = 75.0
    MEDIUM_PRIORITY_PERCENT: float = 60.0

    # Seasonal suggestions
    SUGGESTION_LIMIT: int = 4
    SUGGESTION_LIMIT_COMPACT: int = 2
    YEAR_ROUND_SEASON: str = "Year-Round"
    ALL_CLIMATES: str = "All Climates"

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 500

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
