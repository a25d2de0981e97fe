"""Redis-based refresh log.

This is optional and complements the file log. It enables multi-instance deployments where
the audit trail is accessible without reading local disk.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import redis

from freshkeeper.logging import get_logger
from freshkeeper.models.refresh import RefreshLogEntry
from freshkeeper.recording.audit import newest_first
from freshkeeper.utils.clock import Clock, ensure_utc, utcnow

logger = get_logger(__name__)


@dataclass
class RedisRefreshLog:
    """Append-only refresh log stored in a Redis list, oldest entry at the head.

    ``client`` defaults to a connection built from ``redis_url``; any object with
    ``rpush``/``lrange``/``ltrim`` and string responses works.
    """

    redis_url: str
    key_prefix: str
    clock: Clock = field(default=utcnow)
    client: Any = None

    def __post_init__(self) -> None:
        if self.client is None:
            self.client = redis.Redis.from_url(self.redis_url, decode_responses=True)
        self._key = f"{self.key_prefix}:refresh_log"

    def append(self, entry: RefreshLogEntry) -> None:
        """Append an entry to the tail of the list."""

        line = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False)
        self.client.rpush(self._key, line)

    def entries(self) -> list[RefreshLogEntry]:
        lines = self.client.lrange(self._key, 0, -1)
        return [RefreshLogEntry.model_validate_json(line) for line in lines]

    def recent(self, limit: int = 50, *, module: str | None = None) -> list[RefreshLogEntry]:
        return newest_first(self.entries(), limit, module)

    def prune(self, days_to_keep: int = 30) -> int:
        """Trim the head of the list up to the first entry inside the retention window.

        Entries are appended in creation order, so old entries form a prefix. LTRIM keeps
        concurrent appends at the tail intact.
        """

        cutoff = self.clock() - timedelta(days=days_to_keep)
        entries = self.entries()
        drop = 0
        for e in entries:
            if ensure_utc(e.created_at) >= cutoff:
                break
            drop += 1
        if drop == 0:
            return 0

        self.client.ltrim(self._key, drop, -1)
        logger.info("Pruned %d refresh log entries older than %d days", drop, days_to_keep)
        return drop
