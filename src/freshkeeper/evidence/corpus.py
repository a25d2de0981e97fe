"""Evidence corpora.

A corpus answers one question: which recent articles mention any of these keywords?
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, Protocol

from pydantic import ValidationError

from freshkeeper.errors import EvidenceError
from freshkeeper.logging import get_logger
from freshkeeper.models.evidence import EvidenceItem
from freshkeeper.utils.clock import ensure_utc

logger = get_logger(__name__)


class NewsCorpus(Protocol):
    """Searchable evidence source."""

    def search(self, keywords: Iterable[str], *, since: datetime, limit: int) -> list[EvidenceItem]:
        """Articles published at or after ``since`` whose title or summary contains a keyword.

        Matching is a case-insensitive substring test. Results are newest first.
        """


def _matches(item: EvidenceItem, needles: list[str]) -> bool:
    hay_title = item.title.lower()
    hay_summary = (item.summary or "").lower()
    return any(n in hay_title or n in hay_summary for n in needles)


def filter_articles(
    items: Iterable[EvidenceItem],
    keywords: Iterable[str],
    *,
    since: datetime,
    limit: int,
) -> list[EvidenceItem]:
    """Shared keyword / date-window filter used by the bundled corpora."""

    needles = [k.lower() for k in keywords if k and k.strip()]
    if not needles or limit <= 0:
        return []

    cutoff = ensure_utc(since)
    hits = [it for it in items if ensure_utc(it.published_at) >= cutoff and _matches(it, needles)]
    hits.sort(key=lambda it: ensure_utc(it.published_at), reverse=True)
    return hits[:limit]


@dataclass
class InMemoryNewsCorpus:
    """Corpus backed by a list, useful for tests and embedding."""

    articles: list[EvidenceItem] = field(default_factory=list)

    def add(self, article: EvidenceItem) -> None:
        self.articles.append(article)

    def search(self, keywords: Iterable[str], *, since: datetime, limit: int) -> list[EvidenceItem]:
        return filter_articles(self.articles, keywords, since=since, limit=limit)


@dataclass(frozen=True)
class JsonlNewsCorpus:
    """Corpus read from a JSONL feed (one article object per line).

    The file is re-read on every search so an external fetcher can keep appending to it.
    """

    path: Path

    def search(self, keywords: Iterable[str], *, since: datetime, limit: int) -> list[EvidenceItem]:
        return filter_articles(self._load(), keywords, since=since, limit=limit)

    def _load(self) -> list[EvidenceItem]:
        if not self.path.exists():
            logger.warning("News corpus %s does not exist; treating as empty", self.path)
            return []

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise EvidenceError(f"cannot read news corpus {self.path}: {e}") from e

        items: list[EvidenceItem] = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                items.append(EvidenceItem.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError):
                logger.warning("Skipping malformed article at %s:%d", self.path, lineno)
                continue
        return items
