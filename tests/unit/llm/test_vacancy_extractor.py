"""Tests for VacancyExtractor."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from job_intake.jobs.models import ParsedData
from job_intake.llm.client import LLMError
from job_intake.llm.config import LLMConfig
from job_intake.llm.extractor import EXTRACTION_SYSTEM_PROMPT, VacancyExtractor


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.config = LLMConfig(_env_file=None, extraction_model="tiny-model")
    client.generate_structured = AsyncMock(
        return_value=ParsedData(is_vacancy=True, title="Golang Developer")
    )
    return client


async def test_extract_uses_extraction_model_and_schema(client):
    extractor = VacancyExtractor(client)

    result = await extractor.extract("We are hiring a Golang Developer")

    assert result.title == "Golang Developer"
    client.generate_structured.assert_awaited_once_with(
        prompt="We are hiring a Golang Developer",
        output_model=ParsedData,
        model="tiny-model",
        system_prompt=EXTRACTION_SYSTEM_PROMPT,
    )


async def test_extract_propagates_llm_errors(client):
    client.generate_structured = AsyncMock(side_effect=LLMError("down"))

    with pytest.raises(LLMError):
        await VacancyExtractor(client).extract("text")


def test_prompt_names_contract_fields():
    for field in ("isVacancy", "isRemote", "title"):
        assert field in EXTRACTION_SYSTEM_PROMPT
