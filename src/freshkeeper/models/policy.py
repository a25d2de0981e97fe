"""Freshness policy models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Priority = Literal["critical", "high", "moderate", "low"]
RefreshSource = Literal["api", "ai-research", "both"]

PRIORITY_ORDER: dict[str, int] = {"critical": 0, "high": 1, "moderate": 2, "low": 3}


class FreshnessPolicy(BaseModel):
    """Time-to-live and refresh routing for one content module."""

    model_config = ConfigDict(frozen=True)

    ttl_hours: float = Field(gt=0)
    priority: Priority = "moderate"
    refresh_source: RefreshSource = "ai-research"
    # Matched case-insensitively against evidence titles and summaries.
    keywords: tuple[str, ...] = ()


DEFAULT_POLICY = FreshnessPolicy(
    ttl_hours=720,
    priority="moderate",
    refresh_source="ai-research",
    keywords=(),
)


class PolicyTable(BaseModel):
    """An immutable, ordered set of module policies.

    Declaration order of ``policies`` is significant: it is the order used when iterating
    modules by refresh source.
    """

    model_config = ConfigDict(frozen=True)

    policies: dict[str, FreshnessPolicy] = Field(default_factory=dict)
    default: FreshnessPolicy = DEFAULT_POLICY
