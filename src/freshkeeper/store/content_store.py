"""Versioned content store.

This component is the authoritative store for module content. Items are keyed by a
store-wide unique ``content_key`` and are never physically deleted: removal flips
``is_active``. It is kept in memory with optional append-only JSONL persistence, and is
designed to be swapped with a DB-backed implementation later.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from freshkeeper.errors import ContentStoreError, PartialWriteError, VersionConflictError
from freshkeeper.logging import get_logger
from freshkeeper.models.content import ContentDraft, ContentItem, ContentMeta, ModuleFreshness
from freshkeeper.policies.registry import PolicyRegistry
from freshkeeper.utils.clock import Clock, ensure_utc, utcnow

logger = get_logger(__name__)


@dataclass(frozen=True)
class ContentStorePaths:
    """Filesystem layout for a content store."""

    root: Path

    @property
    def content_jsonl(self) -> Path:
        return self.root / "content.jsonl"


class ContentStore:
    """In-memory content store with append-only JSONL persistence.

    Every committed write appends a full snapshot of the item. On load the last snapshot per
    key wins. A snapshot is persisted before the in-memory copy is swapped, so a failed write
    leaves the item exactly as it was.
    """

    def __init__(
        self,
        registry: PolicyRegistry,
        root_dir: Path | None = None,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._registry = registry
        self._clock = clock
        self._items: dict[str, ContentItem] = {}

        self._paths: ContentStorePaths | None = None
        if root_dir is not None:
            self._paths = ContentStorePaths(root=root_dir)
            self._paths.root.mkdir(parents=True, exist_ok=True)
            self._load_existing(self._paths.content_jsonl)

    def _load_existing(self, path: Path) -> None:
        if not path.exists():
            return

        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line:
                continue
            item = ContentItem.model_validate_json(line)
            self._items[item.content_key] = item

        logger.info("Loaded %d content items from %s", len(self._items), path)

    # Reads

    def get_module_content(self, module: str, section: str | None = None) -> list[ContentItem]:
        """Active items of ``module`` (optionally one section), ordered by content key."""

        rows = [
            it
            for it in self._items.values()
            if it.module == module and it.is_active and (not section or it.section == section)
        ]
        rows.sort(key=lambda it: it.content_key)
        return [it.model_copy(deep=True) for it in rows]

    def get_content_item(self, content_key: str, *, include_inactive: bool = False) -> ContentItem | None:
        """Return one item, or None when missing (or inactive, unless asked for)."""

        item = self._items.get(content_key)
        if item is None or (not item.is_active and not include_inactive):
            return None
        return item.model_copy(deep=True)

    def latest_refresh(self, module: str) -> datetime | None:
        """Most recent ``refreshed_at`` among the module's active items."""

        stamps = [it.refreshed_at for it in self._items.values() if it.module == module and it.is_active]
        return max(stamps) if stamps else None

    def modules(self) -> list[str]:
        """Modules present in the store, sorted."""

        return sorted({it.module for it in self._items.values()})

    def count(self) -> int:
        return len(self._items)

    # Writes

    def upsert_content(
        self,
        content_key: str,
        module: str,
        section: str | None,
        data: Any,
        meta: ContentMeta,
        *,
        expected_version: int | None = None,
    ) -> ContentItem:
        """Create or fully replace an item.

        Creation starts at version 1. Replacement increments the version and always
        reactivates the item.

        Args:
            content_key: Store-wide unique key.
            module: Owning module. An existing key cannot move to another module.
            section: Optional section name.
            data: Opaque JSON document; stored as a copy.
            meta: Provenance and optional expiry override.
            expected_version: When given, the write only happens if the current version
                matches (0 means the key must not exist yet).

        Returns:
            The stored item.
        """

        existing = self._items.get(content_key)

        if existing is not None and existing.module != module:
            raise ContentStoreError(
                f"content key {content_key} belongs to module {existing.module}, not {module}"
            )

        if expected_version is not None:
            actual = existing.version if existing is not None else 0
            if actual != expected_version:
                raise VersionConflictError(content_key, expected_version, actual)

        now = self._clock()
        if meta.expires_at is not None:
            expires_at = ensure_utc(meta.expires_at)
        else:
            expires_at = self._registry.get_expires_at(module, now)

        item = ContentItem(
            content_key=content_key,
            module=module,
            section=section,
            data=copy.deepcopy(data),
            source_type=meta.source_type,
            source_url=meta.source_url,
            confidence=meta.confidence,
            notes=meta.notes,
            version=existing.version + 1 if existing is not None else 1,
            is_active=True,
            expires_at=expires_at,
            refreshed_at=now,
            last_verified=now,
        )
        self._commit(item)
        return item.model_copy(deep=True)

    def bulk_upsert_content(
        self,
        module: str,
        items: Iterable[ContentDraft],
        meta: ContentMeta,
    ) -> int:
        """Upsert items one at a time.

        Each item is its own transaction. The first failure stops the batch and raises
        :class:`PartialWriteError` carrying how many items were committed before it.
        """

        count = 0
        for draft in items:
            try:
                self.upsert_content(draft.content_key, module, draft.section, draft.data, meta)
            except Exception as e:
                raise PartialWriteError(count, draft.content_key, e) from e
            count += 1
        return count

    def deactivate_content(self, content_key: str, module: str) -> bool:
        """Soft-delete one item, but only within ``module``.

        Returns:
            True when an active item was deactivated.
        """

        item = self._items.get(content_key)
        if item is None or item.module != module or not item.is_active:
            return False
        self._commit(item.model_copy(update={"is_active": False}))
        return True

    def expire_stale_content(self, module: str | None = None) -> int:
        """Deactivate every active item whose ``expires_at`` has passed.

        Args:
            module: Restrict the sweep to one module; all modules when omitted.

        Returns:
            Number of items deactivated.
        """

        now = self._clock()
        expired = [
            it
            for it in self._items.values()
            if it.is_active and it.expires_at < now and (module is None or it.module == module)
        ]
        for it in expired:
            self._commit(it.model_copy(update={"is_active": False}))

        if expired:
            logger.info("Expired %d stale content items (module=%s)", len(expired), module or "all")
        return len(expired)

    # Aggregation

    def get_module_freshness(self, module: str) -> ModuleFreshness:
        now = self._clock()
        out = ModuleFreshness()

        for it in self._items.values():
            if it.module != module:
                continue
            out.total += 1
            out.source_breakdown[it.source_type] = out.source_breakdown.get(it.source_type, 0) + 1
            if it.is_active:
                out.active += 1
            if it.expires_at < now:
                if it.is_active:
                    out.stale += 1
                else:
                    out.expired += 1
            if out.last_refreshed is None or it.refreshed_at > out.last_refreshed:
                out.last_refreshed = it.refreshed_at

        return out

    def get_all_module_freshness(self) -> dict[str, ModuleFreshness]:
        return {module: self.get_module_freshness(module) for module in self.modules()}

    def _commit(self, item: ContentItem) -> None:
        if self._paths is not None:
            line = json.dumps(item.model_dump(mode="json"), ensure_ascii=False)
            with self._paths.content_jsonl.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        self._items[item.content_key] = item
