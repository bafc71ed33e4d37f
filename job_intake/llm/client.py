"""LLM client shared by the extractor and the offer generator.

Provides structured output and plain text generation with retry logic
and error handling using LiteLLM.
"""

from __future__ import annotations

import asyncio
import logging
import os
import warnings
from typing import Any, TypeVar

from litellm import Timeout, acompletion
from pydantic import BaseModel, ValidationError

from job_intake.llm.config import LLMConfig, get_llm_config

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

warnings.filterwarnings(
    "ignore",
    message=r"(?s)^Pydantic serializer warnings:.*",
    category=UserWarning,
)


class LLMError(Exception):
    """Exception raised when LLM operations fail."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class LLMClient:
    """Thin async wrapper around ``litellm.acompletion``.

    Each call names its model, so one client serves both the extraction
    and the offer models.
    """

    def __init__(self, config: LLMConfig | None = None):
        self.config = config or get_llm_config()
        self._setup_provider_env()

    def _setup_provider_env(self) -> None:
        """Anthropic reads a custom base URL from the environment only."""
        if self.config.base_url and self.config.provider == "anthropic":
            # Anthropic SDK appends /v1 itself
            base_url = self.config.base_url.rstrip("/")
            if base_url.endswith("/v1"):
                base_url = base_url[:-3]
            os.environ["ANTHROPIC_BASE_URL"] = base_url
            if self.config.api_key:
                os.environ["ANTHROPIC_API_KEY"] = self.config.api_key

    def model_name(self, model: str) -> str:
        """Format a model id for LiteLLM routing.

        Args:
            model: Bare or provider-prefixed model id.

        Returns:
            Model name with provider prefix if needed.
        """
        if self.config.provider == "anthropic":
            if "/" in model:
                return model
            return f"anthropic/{model}"

        # Custom base URLs (local models, proxies) are OpenAI-compatible
        if self.config.base_url:
            if "/" in model:
                return model
            return f"openai/{model}"

        if self.config.provider == "openai":
            return model

        return f"{self.config.provider}/{model}"

    async def generate_structured(
        self,
        prompt: str,
        output_model: type[T],
        *,
        model: str,
        system_prompt: str | None = None,
    ) -> T:
        """Generate structured output matching a Pydantic model.

        The model class is passed as ``response_format`` so the provider
        enforces its JSON schema.

        Raises:
            LLMError: If the LLM call fails or response cannot be parsed.
        """
        messages = self._build_messages(prompt, system_prompt)
        response = await self._complete_with_retries(
            messages, model=model, response_format=output_model
        )
        return self._parse_response(response, output_model)

    async def generate_text(
        self,
        prompt: str,
        *,
        model: str,
        system_prompt: str | None = None,
    ) -> str:
        """Generate a plain text response.

        Raises:
            LLMError: If the LLM call fails.
        """
        messages = self._build_messages(prompt, system_prompt)
        response = await self._complete_with_retries(messages, model=model)
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    def _build_messages(self, prompt: str, system_prompt: str | None) -> list[dict]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def _complete_with_retries(
        self,
        messages: list[dict],
        *,
        model: str,
        response_format: type[BaseModel] | None = None,
    ) -> Any:
        last_error: Exception | None = None
        for attempt in range(self.config.max_retries + 1):
            try:
                return await self._call_completion(
                    messages=messages,
                    model=model,
                    response_format=response_format,
                )

            except Timeout as e:
                raise LLMError(
                    f"LLM request timed out (timeout={self.config.timeout}s). "
                    "Increase `LLM_TIMEOUT` or use a faster model.",
                    e,
                ) from e

            except Exception as e:
                last_error = e
                if attempt < self.config.max_retries:
                    is_rate_limit = "rate_limit" in str(e).lower() or "429" in str(e)
                    base_wait = 8 if is_rate_limit else 2
                    wait_time = base_wait * (attempt + 1)
                    logger.warning(
                        f"LLM call failed (attempt {attempt + 1}), retrying in {wait_time}s: {e}"
                    )
                    await asyncio.sleep(wait_time)
                else:
                    raise LLMError(f"LLM call failed after retries: {e}", e) from e

        raise LLMError(f"LLM call failed: {last_error}", last_error)

    async def _call_completion(
        self,
        messages: list[dict],
        model: str,
        response_format: type[BaseModel] | None = None,
    ):
        kwargs: dict[str, Any] = {
            "model": self.model_name(model),
            "messages": messages,
            "timeout": self.config.timeout,
        }

        reasoning_effort = _normalize_reasoning_effort(self.config.reasoning_effort)
        if reasoning_effort is not None:
            kwargs["reasoning_effort"] = reasoning_effort

        if self.config.api_key:
            kwargs["api_key"] = self.config.api_key

        # Anthropic gets its base URL from the environment, see _setup_provider_env
        if self.config.base_url and self.config.provider != "anthropic":
            kwargs["base_url"] = self.config.base_url

        if response_format:
            kwargs["response_format"] = response_format

        return await acompletion(**kwargs)

    def _parse_response(self, response, output_model: type[T]) -> T:
        """Parse and validate an LLM response.

        Raises:
            LLMError: If parsing or validation fails.
        """
        if not response.choices:
            raise LLMError("LLM returned no choices.")

        message = response.choices[0].message
        content = getattr(message, "content", None)

        # Some providers return structured output as tool call arguments
        if content is None:
            tool_calls = getattr(message, "tool_calls", None) or []
            if tool_calls:
                function = getattr(tool_calls[0], "function", None)
                arguments = getattr(function, "arguments", None)
                if isinstance(arguments, str) and arguments.strip():
                    content = arguments

        if content is None:
            raise LLMError("LLM returned no content to parse.")

        content = extract_json(content)

        try:
            return output_model.model_validate_json(content)
        except ValidationError as e:
            raise LLMError(
                f"Failed to parse LLM response - validation error: {e}", e
            ) from e


def extract_json(content: str) -> str:
    """Extract a JSON document from a response, handling code fences.

    Some models wrap JSON in markdown fences or prepend reasoning text; the
    first balanced object (or array) is returned in that case.
    """
    content = content.strip()

    if content.startswith("```"):
        first_newline = content.find("\n")
        if first_newline != -1:
            content = content[first_newline + 1 :]
        if content.endswith("```"):
            content = content[:-3]
        content = content.strip()

    if content.startswith("{") or content.startswith("["):
        return content

    for open_char, close_char in (("{", "}"), ("[", "]")):
        extracted = _extract_balanced(content, open_char, close_char)
        if extracted is not None:
            return extracted

    return content


def _extract_balanced(text: str, open_char: str, close_char: str) -> str | None:
    start = text.find(open_char)
    if start == -1:
        return None

    depth = 0
    for idx in range(start, len(text)):
        ch = text[idx]
        if ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return text[start : idx + 1].strip()
    return None


def _normalize_reasoning_effort(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if not normalized:
        return None
    if normalized in {"off", "disabled", "0", "false"}:
        return "disable"
    return normalized
