"""Evidence gathering for reconciliation prompts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from freshkeeper.evidence.corpus import NewsCorpus
from freshkeeper.logging import get_logger
from freshkeeper.models.evidence import EvidenceItem
from freshkeeper.policies.registry import PolicyRegistry
from freshkeeper.utils.clock import Clock, ensure_utc, utcnow

logger = get_logger(__name__)

NO_KEYWORDS_TEXT = "No recent news available for this module."
NO_MATCHES_TEXT = "No recent news articles found matching this module's topics."


def format_digest(articles: list[EvidenceItem]) -> str:
    """Render articles as a numbered digest."""

    blocks: list[str] = []
    for i, a in enumerate(articles, start=1):
        day = ensure_utc(a.published_at).date().isoformat()
        blocks.append(
            f"{i}. {a.title}\n"
            f"   Source: {a.source} | {day}\n"
            f"   {a.summary or ''}\n"
            f"   {a.url or ''}"
        )
    return "\n\n".join(blocks)


@dataclass
class EvidenceGatherer:
    """Collect recent keyword-matching articles for a module."""

    corpus: NewsCorpus
    registry: PolicyRegistry
    max_items: int = 20
    clock: Clock = field(default=utcnow)

    def get_relevant_articles(self, module: str, days_back: int = 7) -> list[EvidenceItem]:
        keywords = self.registry.get_policy(module).keywords
        if not keywords:
            return []
        since = self.clock() - timedelta(days=days_back)
        return self.corpus.search(keywords, since=since, limit=self.max_items)

    def get_relevant_news(self, module: str, days_back: int = 7) -> str:
        """Digest of recent articles matching the module's policy keywords.

        Empty cases produce a readable placeholder rather than an error, so the prompt
        stays well-formed and reconciliation can run without evidence.
        """

        if not self.registry.get_policy(module).keywords:
            return NO_KEYWORDS_TEXT

        articles = self.get_relevant_articles(module, days_back)
        logger.info("Gathered %d articles for %s (last %d days)", len(articles), module, days_back)
        if not articles:
            return NO_MATCHES_TEXT
        return format_digest(articles)
