"""Configuration models for the GitHub events synchronizer."""

from pathlib import Path

from pydantic import BaseModel, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class GitHubConfig(BaseModel):
    """Configuration for the GitHub events feed."""

    api_url: HttpUrl = Field(
        default="https://api.github.com",
        validate_default=True,
        description="GitHub REST API base URL",
    )
    host: str = Field(default="github.com", min_length=1, description="Host entry in gh hosts.yml")
    login: str | None = Field(default=None, description="GitHub login (overrides the gh config)")
    token: str | None = Field(default=None, description="API token (overrides the gh config)")
    page_size: int = Field(default=100, ge=1, le=100, description="Events requested per page")
    max_pages: int = Field(default=3, ge=1, le=10, description="Maximum number of pages to request")
    timeout_seconds: float = Field(default=30.0, gt=0, description="Per-request timeout")


class StorageConfig(BaseModel):
    """Configuration for the local event log."""

    log_path: Path | None = Field(
        default=None, description="Explicit event log path (default: documents directory)"
    )
    file_name: str = Field(
        default="github-events.jsonl",
        min_length=1,
        description="Log file name inside the documents directory",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=False,
        description="If True, output JSON logs. If False, use console format.",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional path to log file. If None, logs only to stderr.",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the level name and reject unknown levels."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


class AppConfig(BaseSettings):
    """Main application configuration.

    This class uses pydantic-settings to load configuration from environment
    variables with the GHEVENTS_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="GHEVENTS_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment variables win over values passed in from the config file.
        return env_settings, init_settings, dotenv_settings, file_secret_settings
