"""LiteLLM-backed extraction and generation capabilities.

Public API:
- LLMClient: Shared completion client with retries and JSON parsing
- LLMError: Raised when an LLM call fails
- VacancyExtractor: Posting text to ParsedData
- OfferGenerator: CV + job text to outreach message
- LLMConfig / get_llm_config: Configuration
"""

from job_intake.llm.client import LLMClient, LLMError
from job_intake.llm.config import LLMConfig, get_llm_config
from job_intake.llm.extractor import VacancyExtractor
from job_intake.llm.offer_generator import OfferGenerator

__all__ = [
    "LLMClient",
    "LLMError",
    "LLMConfig",
    "get_llm_config",
    "VacancyExtractor",
    "OfferGenerator",
]
