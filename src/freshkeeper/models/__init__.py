"""Pydantic models used across the project."""

from __future__ import annotations

from freshkeeper.models.content import (
    ContentDraft,
    ContentItem,
    ContentMeta,
    ModuleFreshness,
    make_content_key,
)
from freshkeeper.models.evidence import EvidenceItem
from freshkeeper.models.policy import DEFAULT_POLICY, FreshnessPolicy, PolicyTable
from freshkeeper.models.refresh import (
    CleanupResult,
    FreshnessReport,
    ModuleRefreshResult,
    PolicyStatus,
    RefreshLogEntry,
    RefreshRunSummary,
)

__all__ = [
    "ContentDraft",
    "ContentItem",
    "ContentMeta",
    "ModuleFreshness",
    "make_content_key",
    "EvidenceItem",
    "DEFAULT_POLICY",
    "FreshnessPolicy",
    "PolicyTable",
    "CleanupResult",
    "FreshnessReport",
    "ModuleRefreshResult",
    "PolicyStatus",
    "RefreshLogEntry",
    "RefreshRunSummary",
]
