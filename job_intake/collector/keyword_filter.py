"""Keyword pre-filter applied before any LLM work.

The filter is deliberately permissive: the blacklist is a hard gate, but
the whitelist is only a positive signal. A message long enough to inspect
that matches neither list still passes, trading precision for recall. Set
``require_whitelist_match`` to make the whitelist a hard gate as well.
"""

from __future__ import annotations

from collections.abc import Iterable

DEFAULT_MIN_LENGTH = 100

DEFAULT_WHITELIST: tuple[str, ...] = (
    # Russian
    "вакансия",
    "ищем",
    "требуется",
    "работа",
    "зарплата",
    "оклад",
    "удаленка",
    "удалённо",
    "офис",
    "опыт работы",
    "junior",
    "middle",
    "senior",
    "lead",
    "тимлид",
    "разработчик",
    "developer",
    "программист",
    "инженер",
    # English
    "vacancy",
    "hiring",
    "job",
    "position",
    "salary",
    "remote",
    "on-site",
    "experience",
    "looking for",
    "we are hiring",
    "join our team",
    "opportunity",
    "engineer",
    "programmer",
    # Tech
    "golang",
    "python",
    "javascript",
    "typescript",
    "react",
    "backend",
    "frontend",
    "fullstack",
    "devops",
    "sre",
    "kubernetes",
    "docker",
    "aws",
    "gcp",
    "azure",
)

# Spam and advertisement markers
DEFAULT_BLACKLIST: tuple[str, ...] = (
    "реклама",
    "продам",
    "куплю",
    "скидка",
    "акция",
    "casino",
    "казино",
    "betting",
    "ставки",
    "crypto pump",
    "#резюме",
)


class KeywordFilter:
    """Cheap textual gate deciding whether a message is worth extracting."""

    def __init__(
        self,
        whitelist: Iterable[str] | None = None,
        blacklist: Iterable[str] | None = None,
        min_length: int = DEFAULT_MIN_LENGTH,
        require_whitelist_match: bool = False,
    ) -> None:
        self.whitelist = tuple(
            kw.lower() for kw in (DEFAULT_WHITELIST if whitelist is None else whitelist)
        )
        self.blacklist = tuple(
            kw.lower() for kw in (DEFAULT_BLACKLIST if blacklist is None else blacklist)
        )
        self.min_length = min_length
        self.require_whitelist_match = require_whitelist_match

    @classmethod
    def from_settings(cls, settings) -> KeywordFilter:
        return cls(
            whitelist=settings.filter_whitelist,
            blacklist=settings.filter_blacklist,
            min_length=settings.filter_min_length,
            require_whitelist_match=settings.filter_require_whitelist,
        )

    def should_process(self, text: str) -> bool:
        """Return True if the message passes keyword filtering."""
        if len(text) < self.min_length:
            return False

        lower = text.lower()
        if any(kw in lower for kw in self.blacklist):
            return False

        if any(kw in lower for kw in self.whitelist):
            return True

        return not self.require_whitelist_match
