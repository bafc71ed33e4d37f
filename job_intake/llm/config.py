"""Configuration settings for the LLM clients.

Falls back to the standard OPENAI_API_KEY / OPENAI_BASE_URL variables when
LLM_API_KEY / LLM_BASE_URL are not set.
"""

from __future__ import annotations

import os
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseSettings):
    """Configuration for vacancy extraction and offer generation.

    Settings can be overridden via environment variables prefixed with LLM_.

    Example: LLM_EXTRACTION_MODEL=gpt-4o-mini
    """

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    provider: str = Field(
        default="openai",
        description="LLM provider (openai, anthropic, azure, etc.)",
    )
    extraction_model: str = Field(
        default="gpt-5-nano",
        description="Model used to parse postings into structured data",
    )
    offer_model: str = Field(
        default="gpt-5.2",
        description="Model used to write outreach messages",
    )
    api_key: str | None = Field(
        default=None,
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default=None,
        description="Base URL for OpenAI-compatible endpoints",
    )
    max_retries: Annotated[int, Field(ge=0)] = Field(
        default=1,
        description="Maximum retry attempts for LLM calls",
    )
    timeout: Annotated[float, Field(gt=0)] = Field(
        default=120.0,
        description="Timeout in seconds for LLM calls",
    )
    reasoning_effort: str | None = Field(
        default=None,
        description="Reasoning effort for supported models (e.g. 'low', 'medium')",
    )

    # Offer persona
    offer_sender_name: str = Field(
        default="",
        description="Name the outreach message is signed with",
    )
    offer_portfolio_url: str = Field(
        default="",
        description="Link included in the closing of outreach messages",
    )

    @model_validator(mode="after")
    def apply_openai_fallbacks(self) -> LLMConfig:
        """Fall back to OPENAI_* variables when LLM_* ones are not set."""
        if not os.getenv("LLM_API_KEY") and self.api_key is None:
            openai_key = os.getenv("OPENAI_API_KEY")
            if openai_key:
                self.api_key = openai_key

        if not os.getenv("LLM_BASE_URL") and self.base_url is None:
            openai_base_url = os.getenv("OPENAI_BASE_URL")
            if openai_base_url:
                self.base_url = openai_base_url

        return self


# Singleton instance
_llm_config: LLMConfig | None = None


def get_llm_config() -> LLMConfig:
    """Get the LLM configuration singleton."""
    global _llm_config
    if _llm_config is None:
        _llm_config = LLMConfig()
    return _llm_config


def reset_llm_config() -> None:
    """Reset the configuration singleton (useful for testing)."""
    global _llm_config
    _llm_config = None
