"""Configuration settings for job-intake."""

import json
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        enable_decoding=False,
        extra="ignore",
    )

    # Storage
    db_path: Path = Field(
        default=Path("./data/jobs.db"),
        description="Path to the SQLite jobs database",
    )

    # Keyword pre-filter
    filter_min_length: Annotated[int, Field(ge=0)] = Field(
        default=100,
        description="Minimum message length (in characters) worth inspecting",
    )
    filter_require_whitelist: bool = Field(
        default=False,
        description=(
            "Reject messages that match no whitelist keyword. Off by default: "
            "the whitelist is a soft signal and unmatched messages still pass"
        ),
    )
    filter_whitelist: list[str] | None = Field(
        default=None,
        description="Override for the whitelist keywords (JSON list or comma-separated)",
    )
    filter_blacklist: list[str] | None = Field(
        default=None,
        description="Override for the blacklist keywords (JSON list or comma-separated)",
    )

    # Enrichment workers
    worker_count: Annotated[int, Field(gt=0)] = Field(
        default=2,
        description="Number of concurrent extraction workers",
    )
    recover_pending_on_start: bool = Field(
        default=True,
        description="Re-enqueue jobs still in 'raw' state when workers start",
    )

    # Offers
    offer_requires_processed: bool = Field(
        default=False,
        description="Refuse to generate offers for jobs that are not 'processed'",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    @field_validator("filter_whitelist", "filter_blacklist", mode="before")
    @classmethod
    def parse_keyword_list(cls, v: object) -> list[str] | None:
        """Parse keyword lists from env-friendly formats.

        Supports:
        - JSON list: ["vacancy", "hiring"]
        - Comma-separated: vacancy, hiring
        - Newline-separated entries
        """
        if v is None:
            return None

        if isinstance(v, list):
            return [str(item).strip() for item in v if str(item).strip()]

        if not isinstance(v, str):
            return [str(v).strip()] if str(v).strip() else []

        raw = v.strip()
        if not raw:
            return None

        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = None
            else:
                if isinstance(parsed, list):
                    return [str(item).strip() for item in parsed if str(item).strip()]

        parts: list[str] = []
        for chunk in raw.replace("\n", ",").split(","):
            item = chunk.strip()
            if item:
                parts.append(item)
        return parts

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


# Singleton instance for easy import
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
