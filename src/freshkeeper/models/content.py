"""Content store models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SourceType = Literal["api", "ai-research", "seed", "manual"]


def make_content_key(module: str, section: str | None) -> str:
    """Derive the store key for a module section."""

    if not section:
        return module
    return f"{module}:{section}"


class ContentMeta(BaseModel):
    """Provenance attached to an upsert."""

    source_type: SourceType
    source_url: str | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    notes: str | None = None
    # Overrides the policy-derived expiry when set.
    expires_at: datetime | None = None


class ContentItem(BaseModel):
    """A versioned, keyed opaque payload plus freshness metadata."""

    model_config = ConfigDict(frozen=True)

    content_key: str
    module: str
    section: str | None = None
    data: Any = None

    source_type: SourceType
    source_url: str | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    notes: str | None = None

    version: int = Field(default=1, ge=1)
    is_active: bool = True
    expires_at: datetime
    refreshed_at: datetime
    last_verified: datetime


class ContentDraft(BaseModel):
    """One entry of a bulk upsert."""

    content_key: str
    section: str | None = None
    data: Any = None


class ModuleFreshness(BaseModel):
    total: int = 0
    active: int = 0
    stale: int = 0
    expired: int = 0
    last_refreshed: datetime | None = None
    source_breakdown: dict[str, int] = Field(default_factory=dict)
