"""
Application configuration using Pydantic Settings.

Loads configuration from APEXLENS_* environment variables and a .env file.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RUNTIME_API_PATH = "/services/data/v65.0/scalemcp/apexguru/class-runtime-data"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="APEXLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="apexlens", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="INFO", description="Logging level")
    log_redaction_enabled: bool = Field(default=True, description="Redact credentials in logs")

    # Runtime telemetry endpoint
    runtime_api_path: str = Field(
        default=DEFAULT_RUNTIME_API_PATH,
        description="Telemetry endpoint path relative to the org instance URL",
    )
    runtime_timeout_seconds: float = Field(default=30.0, gt=0, description="Per-attempt timeout")
    runtime_retry_attempts: int = Field(default=2, ge=0, description="Retries after the first attempt")
    runtime_retry_delay_seconds: float = Field(default=0.5, ge=0, description="Initial retry backoff")

    # Severity thresholds
    query_major_count: int = Field(default=1000, ge=0, description="Executions above which a query is MAJOR")
    query_critical_count: int = Field(
        default=10_000_000, ge=0, description="Executions above which a query is CRITICAL"
    )
    method_critical_avg_cpu_ms: float = Field(
        default=2000.0, ge=0, description="Entrypoint avg CPU time above which a method is CRITICAL"
    )

    # Org connection (optional; static-only analysis when absent)
    instance_url: str | None = Field(default=None, description="Org instance URL")
    access_token: str | None = Field(default=None, description="Org access token")
    org_id: str | None = Field(default=None, description="Org ID sent with telemetry requests")
    user_id: str | None = Field(default=None, description="User ID used for request correlation")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"

    @property
    def has_org_connection(self) -> bool:
        """Check if enough org details are configured to fetch telemetry."""
        return bool(self.instance_url and self.access_token and self.org_id)

    @model_validator(mode="after")
    def _validate_thresholds(self) -> "Settings":
        """Fail fast on threshold combinations that make a severity band unreachable."""
        if self.query_major_count >= self.query_critical_count:
            raise ValueError(
                "query_major_count must be lower than query_critical_count "
                f"(got {self.query_major_count} >= {self.query_critical_count})"
            )
        return self


# Global settings instance
settings = Settings()
