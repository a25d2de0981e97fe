"""File-based refresh log.

Records refresh attempts to `refresh_log.jsonl`. Appends and pruning are serialised within one
process; the file must have a single writing process, so multi-process deployments should use
the Redis log instead.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from freshkeeper.logging import get_logger
from freshkeeper.models.refresh import RefreshLogEntry
from freshkeeper.recording.audit import newest_first
from freshkeeper.utils.clock import Clock, ensure_utc, utcnow

logger = get_logger(__name__)


@dataclass
class FileRefreshLog:
    """Append-only JSONL refresh log."""

    path: Path
    clock: Clock = field(default=utcnow)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, entry: RefreshLogEntry) -> None:
        """Append an entry."""

        line = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False)
        with self._lock, self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    def entries(self) -> list[RefreshLogEntry]:
        """Load all entries in file order."""

        out: list[RefreshLogEntry] = []
        if not self.path.exists():
            return out
        for line in self.path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line:
                continue
            out.append(RefreshLogEntry.model_validate_json(line))
        return out

    def recent(self, limit: int = 50, *, module: str | None = None) -> list[RefreshLogEntry]:
        return newest_first(self.entries(), limit, module)

    def prune(self, days_to_keep: int = 30) -> int:
        """Drop entries created before ``now - days_to_keep``.

        The file is rewritten through a temporary sibling and swapped in with a rename. Appends
        wait until the swap is done so none lands in the file being replaced.
        """

        cutoff = self.clock() - timedelta(days=days_to_keep)
        with self._lock:
            entries = self.entries()
            keep = [e for e in entries if ensure_utc(e.created_at) >= cutoff]
            removed = len(entries) - len(keep)
            if removed == 0:
                return 0

            tmp = self.path.with_name(self.path.name + ".tmp")
            with tmp.open("w", encoding="utf-8") as f:
                for e in keep:
                    f.write(json.dumps(e.model_dump(mode="json"), ensure_ascii=False) + "\n")
            tmp.replace(self.path)

        logger.info("Pruned %d refresh log entries older than %d days", removed, days_to_keep)
        return removed
