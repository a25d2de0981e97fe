"""Generative reconciliation of module content."""

from __future__ import annotations

from freshkeeper.reconcile.engine import ReconciliationEngine, build_reconcile_messages, summarize_content
from freshkeeper.reconcile.response import ReconciliationResponse, parse_reconciliation_response

__all__ = [
    "ReconciliationEngine",
    "ReconciliationResponse",
    "build_reconcile_messages",
    "parse_reconciliation_response",
    "summarize_content",
]
