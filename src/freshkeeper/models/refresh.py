"""Refresh audit and result models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from freshkeeper.models.content import ModuleFreshness
from freshkeeper.utils.clock import utcnow

RefreshStatus = Literal["success", "failed"]


class RefreshLogEntry(BaseModel):
    """One row of the append-only refresh audit log."""

    model_config = ConfigDict(frozen=True)

    module: str
    # "ai-research", "api", "cleanup", ...
    refresh_type: str
    status: RefreshStatus

    items_checked: int = Field(default=0, ge=0)
    items_updated: int = Field(default=0, ge=0)
    items_created: int = Field(default=0, ge=0)
    items_expired: int = Field(default=0, ge=0)
    tokens_used: int | None = None
    api_calls_made: int | None = None
    duration_ms: int | None = None
    error_message: str | None = None
    details: dict[str, Any] | None = None

    created_at: datetime = Field(default_factory=utcnow)


class ModuleRefreshResult(BaseModel):
    """Outcome of one reconciliation cycle."""

    module: str
    status: RefreshStatus = "success"
    items_updated: int = 0
    items_created: int = 0
    items_removed: int = 0
    items_skipped: int = 0
    tokens_used: int = 0
    notes: str = ""
    error: str | None = None


class RefreshRunSummary(BaseModel):
    """Aggregate of one orchestrator run."""

    run_id: str
    total_updated: int = 0
    total_created: int = 0
    total_tokens: int = 0
    results: list[ModuleRefreshResult] = Field(default_factory=list)
    skipped_modules: list[str] = Field(default_factory=list)


class CleanupResult(BaseModel):
    """Outcome of an expiry sweep plus audit retention pruning."""

    status: RefreshStatus = "success"
    items_expired: int = 0
    logs_pruned: int = 0
    error: str | None = None


class PolicyStatus(BaseModel):
    """A module's policy next to its observed freshness."""

    module: str
    ttl_hours: float
    priority: str
    refresh_source: str
    last_refreshed: datetime | None = None
    is_stale: bool = True
    is_expired: bool = True


class FreshnessReport(BaseModel):
    """Dashboard view across all modules."""

    generated_at: datetime = Field(default_factory=utcnow)
    modules: dict[str, ModuleFreshness] = Field(default_factory=dict)
    policies: list[PolicyStatus] = Field(default_factory=list)
    recent_refresh_logs: list[RefreshLogEntry] = Field(default_factory=list)
