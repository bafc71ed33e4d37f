"""Vacancy extraction: posting text to structured ParsedData."""

from __future__ import annotations

import logging

from job_intake.jobs.models import ParsedData
from job_intake.llm.client import LLMClient
from job_intake.llm.config import LLMConfig

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = """You are a job vacancy parser. Your task is to analyze text messages and extract structured data about job postings.

IMPORTANT RULES:
1. If the text is NOT a job vacancy (e.g., advertisement, news, chat message), set isVacancy to false and leave other fields empty/default.
2. If it IS a vacancy, set isVacancy to true and EXTRACT the job title (e.g., "Golang Developer", "Product Manager").
3. If the title is not explicitly stated, infer it from the context or use the most prominent role mentioned. NEVER leave title empty if isVacancy is true.
4. Extract salary information if present. Convert to numbers only, no currency symbols.
5. Identify the currency from context (look for $, €, ₽, USD, EUR, RUB, etc.)
6. Extract required skills/technologies as a list of short keywords.
7. Determine job grade from context clues (Junior/Middle/Senior/Lead/Principal).
8. Set isRemote to true if remote work, WFH, or distributed team is mentioned.

Always respond with valid JSON matching the schema exactly."""


class VacancyExtractor:
    """Extract structured vacancy data from a message with an LLM."""

    def __init__(
        self,
        client: LLMClient | None = None,
        config: LLMConfig | None = None,
    ) -> None:
        self.client = client or LLMClient(config)
        self.config = self.client.config

    async def extract(self, text: str) -> ParsedData:
        """Parse a posting into ParsedData.

        Raises:
            LLMError: If the call fails or the output does not match the schema.
        """
        parsed = await self.client.generate_structured(
            prompt=text,
            output_model=ParsedData,
            model=self.config.extraction_model,
            system_prompt=EXTRACTION_SYSTEM_PROMPT,
        )
        logger.debug(
            f"Extracted vacancy data: is_vacancy={parsed.is_vacancy} "
            f"title={parsed.title!r}"
        )
        return parsed
