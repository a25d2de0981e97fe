"""Refresh orchestration."""

from __future__ import annotations

from freshkeeper.orchestrator.runner import (
    RefreshOrchestrator,
    Runtime,
    build_freshness_report,
    build_runtime,
    run_cleanup,
    run_refresh,
)

__all__ = [
    "RefreshOrchestrator",
    "Runtime",
    "build_freshness_report",
    "build_runtime",
    "run_cleanup",
    "run_refresh",
]
