"""Evidence models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class EvidenceItem(BaseModel):
    """A recent article used as context for reconciliation. Never persisted by freshkeeper."""

    title: str
    summary: str | None = None
    source: str
    url: str | None = None
    published_at: datetime
