"""Evidence corpora and gathering."""

from __future__ import annotations

from freshkeeper.evidence.corpus import InMemoryNewsCorpus, JsonlNewsCorpus, NewsCorpus
from freshkeeper.evidence.gatherer import EvidenceGatherer, format_digest

__all__ = [
    "InMemoryNewsCorpus",
    "JsonlNewsCorpus",
    "NewsCorpus",
    "EvidenceGatherer",
    "format_digest",
]
