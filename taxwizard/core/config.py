"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    # Tax engine
    default_tax_year: int = 2024
    """Tax year used when the input does not name one, or names an unknown one."""

    compute_earned_income_credit: bool = False
    """Compute the Earned Income Credit inside the engine.

    When disabled the engine reports a zero placeholder and only honors a
    pre-computed value supplied by the caller in the tax credits section.
    """

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, value: object) -> str | None:
        """Treat blank LOG_FORMAT as unset and reject unknown formats."""
        if value is None:
            return None
        text = str(value).strip().lower()
        if not text:
            return None
        if text not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'.")
        return text

    @field_validator("default_tax_year")
    @classmethod
    def validate_default_tax_year(cls, value: int) -> int:
        """Reject obviously invalid years; table availability is checked at lookup."""
        if value < 2000 or value > 2100:
            raise ValueError(f"DEFAULT_TAX_YEAR out of range: {value}")
        return value


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    root_error = str(exc)
    suggestions = [
        "LOG_FORMAT must be one of: json, console (or unset).",
        "DEFAULT_TAX_YEAR must be a four-digit year, e.g. 2024.",
        "COMPUTE_EARNED_INCOME_CREDIT must be a boolean (true/false).",
    ]

    raise RuntimeError(
        "Failed to initialize application settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {root_error}\n"
        + "\n".join(suggestions)
    ) from exc
