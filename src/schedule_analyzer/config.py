"""Analyzer configuration loaded from environment variables."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

DEFAULT_REPORT_PATTERN = "momence-teachers-payroll-report-aggregate-combined"


class AnalyzerConfig(BaseSettings):
    """Analyzer configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Gemini settings (optional - only the AI extraction needs them)
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("gemini_api_key", "api_key"),
        description="Gemini API key (GEMINI_API_KEY or API_KEY)",
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model used for raw schedule extraction",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST API base URL",
    )
    ai_timeout_seconds: float = Field(
        default=60.0,
        description="HTTP timeout for a single Gemini request",
    )
    ai_max_attempts: int = Field(
        default=3,
        description="Attempts per Gemini call before giving up on transient errors",
    )

    # Attendance export
    attendance_report_pattern: str = Field(
        default=DEFAULT_REPORT_PATTERN,
        description="Filename fragment of the attendance report inside the ZIP",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: AnalyzerConfig | None = None


def get_config() -> AnalyzerConfig:
    """Get the analyzer configuration singleton.

    Returns:
        AnalyzerConfig: Analyzer configuration instance
    """
    global _config
    if _config is None:
        _config = AnalyzerConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    global _config
    _config = None
