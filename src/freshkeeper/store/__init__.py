"""Content storage."""

from __future__ import annotations

from freshkeeper.store.content_store import ContentStore

__all__ = ["ContentStore"]
