"""Refresh audit log interface."""

from __future__ import annotations

from typing import Any, Iterable, Protocol

from freshkeeper.models.refresh import RefreshLogEntry, RefreshStatus


class RefreshLog(Protocol):
    """Append-only log of refresh attempts."""

    def append(self, entry: RefreshLogEntry) -> None:
        """Append an entry."""

    def recent(self, limit: int = 50, *, module: str | None = None) -> list[RefreshLogEntry]:
        """Newest entries first."""

    def prune(self, days_to_keep: int = 30) -> int:
        """Delete entries older than the cutoff; return how many were removed."""


def log_refresh(
    log: RefreshLog,
    module: str,
    refresh_type: str,
    status: RefreshStatus,
    **stats: Any,
) -> RefreshLogEntry:
    """Build and append one entry. ``stats`` are :class:`RefreshLogEntry` fields."""

    entry = RefreshLogEntry(module=module, refresh_type=refresh_type, status=status, **stats)
    log.append(entry)
    return entry


def newest_first(
    entries: Iterable[RefreshLogEntry],
    limit: int,
    module: str | None = None,
) -> list[RefreshLogEntry]:
    rows = [e for e in entries if module is None or e.module == module]
    rows.sort(key=lambda e: e.created_at, reverse=True)
    return rows[: max(limit, 0)]
