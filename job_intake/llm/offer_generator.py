"""Offer generation: a short personalized first-touch message.

Combines a candidate's CV with a job's description to write a cold direct
message to a recruiter or founder.
"""

from __future__ import annotations

import logging

from job_intake.llm.client import LLMClient
from job_intake.llm.config import LLMConfig

logger = logging.getLogger(__name__)

OFFER_SYSTEM_PROMPT = """ROLE:
You are {sender}, writing a cold direct message in a chat app to a Recruiter or Founder about their job posting.

INPUTS:
- Your CV (JSON)
- Job Description (Text)

OBJECTIVE:
Write a concise, high-impact message that proves value instantly. No fluff.

CRITICAL RULES:
1. Language: write the whole message in the language of the Job Description. Never mix languages.
2. Don't say "I see you are looking for X". State immediately that you do X.
3. Do not mention years of experience unless it is more than 5. Use action verbs instead ("I ship", "I architect", "I maintain").
4. Connect the requested stack directly to projects from the CV.
5. Only reference experience that is present in the CV. NEVER invent skills or accomplishments.
6. Tone: professional but conversational, low ego, high competence.

STRUCTURE:
1. Greeting with your name.
2. The Match: one sentence merging their stack with your daily work.
3. The Proof: briefly mention relevant end-to-end work from the CV.
4. Closing: {closing}a short question as call to action.

OUTPUT FORMAT:
Return ONLY the raw message text."""


def build_offer_system_prompt(sender_name: str = "", portfolio_url: str = "") -> str:
    sender = sender_name or "the candidate described in the CV"
    closing = f"the link {portfolio_url}, then " if portfolio_url else ""
    return OFFER_SYSTEM_PROMPT.format(sender=sender, closing=closing)


class OfferGenerator:
    """Write personalized outreach messages with an LLM."""

    def __init__(
        self,
        client: LLMClient | None = None,
        config: LLMConfig | None = None,
    ) -> None:
        self.client = client or LLMClient(config)
        self.config = self.client.config
        self.system_prompt = build_offer_system_prompt(
            self.config.offer_sender_name, self.config.offer_portfolio_url
        )

    async def generate(self, cv: str, job_description: str) -> str:
        """Generate an outreach message.

        Args:
            cv: The candidate's CV serialized as JSON.
            job_description: Job description followed by the original posting.

        Raises:
            LLMError: If the call fails.
        """
        prompt = f"CV: {cv}\n\nJob Description: {job_description}"
        text = await self.client.generate_text(
            prompt=prompt,
            model=self.config.offer_model,
            system_prompt=self.system_prompt,
        )
        logger.debug(f"Generated offer ({len(text)} chars)")
        return text.strip()
