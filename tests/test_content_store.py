"""Tests for ContentStore."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from conftest import T0, FixedClock
from freshkeeper.errors import ContentStoreError, PartialWriteError, VersionConflictError
from freshkeeper.models.content import ContentDraft, ContentMeta, make_content_key
from freshkeeper.policies.registry import PolicyRegistry
from freshkeeper.store.content_store import ContentStore

SEED = ContentMeta(source_type="seed")


def test_upsert_replaces_data_and_bumps_version(store: ContentStore) -> None:
    """A second upsert fully replaces the item and increments the version."""

    store.upsert_content("x:y", "x", "y", {"a": 1}, SEED)
    store.upsert_content("x:y", "x", "y", {"a": 2}, ContentMeta(source_type="manual"))

    item = store.get_content_item("x:y")
    assert item is not None
    assert item.data == {"a": 2}
    assert item.version == 2
    assert item.source_type == "manual"


def test_repeated_upserts_count_every_write(store: ContentStore) -> None:
    for _ in range(5):
        store.upsert_content("x:y", "x", "y", {"a": 1}, SEED)

    item = store.get_content_item("x:y")
    assert item is not None
    assert item.version == 5
    assert item.data == {"a": 1}


def test_upsert_sets_policy_expiry(store: ContentStore, clock: FixedClock) -> None:
    item = store.upsert_content("x:y", "x", "y", {}, SEED)

    assert item.refreshed_at == T0
    assert item.last_verified == T0
    assert item.expires_at == T0 + timedelta(hours=24)


def test_upsert_honours_expiry_override(store: ContentStore) -> None:
    override = T0 + timedelta(days=90)
    item = store.upsert_content("x:y", "x", "y", {}, ContentMeta(source_type="manual", expires_at=override))

    assert item.expires_at == override


def test_stored_data_is_isolated_from_caller(store: ContentStore) -> None:
    payload = {"crew": ["a", "b"]}
    store.upsert_content("x:y", "x", "y", payload, SEED)
    payload["crew"].append("c")

    item = store.get_content_item("x:y")
    assert item is not None
    assert item.data == {"crew": ["a", "b"]}


def test_module_reads_are_scoped_and_sorted(store: ContentStore) -> None:
    store.upsert_content("x:b", "x", "b", 2, SEED)
    store.upsert_content("x:a", "x", "a", 1, SEED)
    store.upsert_content("y:a", "y", "a", 3, SEED)

    assert [it.content_key for it in store.get_module_content("x")] == ["x:a", "x:b"]
    assert [it.content_key for it in store.get_module_content("x", "b")] == ["x:b"]
    assert [it.content_key for it in store.get_module_content("y")] == ["y:a"]
    assert store.get_module_content("z") == []


def test_key_cannot_move_between_modules(store: ContentStore) -> None:
    store.upsert_content("x:y", "x", "y", {}, SEED)

    with pytest.raises(ContentStoreError):
        store.upsert_content("x:y", "y", "y", {}, SEED)

    item = store.get_content_item("x:y")
    assert item is not None and item.module == "x" and item.version == 1


def test_soft_delete_is_reversible(store: ContentStore) -> None:
    """Deactivated items disappear from reads and come back with a newer version."""

    store.upsert_content("x:y", "x", "y", {"a": 1}, SEED)

    assert store.deactivate_content("x:y", "y") is False
    assert store.deactivate_content("x:y", "x") is True
    assert store.deactivate_content("x:y", "x") is False
    assert store.get_content_item("x:y") is None
    assert store.get_module_content("x") == []

    hidden = store.get_content_item("x:y", include_inactive=True)
    assert hidden is not None and hidden.is_active is False and hidden.version == 1

    store.upsert_content("x:y", "x", "y", {"a": 2}, SEED)
    item = store.get_content_item("x:y")
    assert item is not None
    assert item.is_active is True
    assert item.version == 2


def test_expire_stale_content_flips_only_expired(store: ContentStore, clock: FixedClock) -> None:
    store.upsert_content("x:old", "x", "old", {}, ContentMeta(source_type="seed", expires_at=T0 - timedelta(hours=1)))
    store.upsert_content("x:new", "x", "new", {}, SEED)
    store.upsert_content("y:old", "y", "old", {}, ContentMeta(source_type="seed", expires_at=T0 - timedelta(hours=1)))

    assert store.expire_stale_content("x") == 1

    assert store.get_content_item("x:old") is None
    assert store.get_content_item("x:new") is not None
    assert store.get_content_item("y:old") is not None

    assert store.expire_stale_content() == 1
    assert store.get_content_item("y:old") is None


def test_module_freshness_counts(store: ContentStore, clock: FixedClock) -> None:
    past = T0 - timedelta(hours=1)
    store.upsert_content("x:a", "x", "a", {}, ContentMeta(source_type="seed", expires_at=past))
    store.upsert_content("x:b", "x", "b", {}, ContentMeta(source_type="seed", expires_at=past))
    clock.advance(hours=2)
    store.upsert_content("x:c", "x", "c", {}, ContentMeta(source_type="ai-research"))
    store.deactivate_content("x:b", "x")

    fresh = store.get_module_freshness("x")

    assert fresh.total == 3
    assert fresh.active == 2
    assert fresh.stale == 1
    assert fresh.expired == 1
    assert fresh.last_refreshed == T0 + timedelta(hours=2)
    assert fresh.source_breakdown == {"seed": 2, "ai-research": 1}

    assert store.latest_refresh("x") == T0 + timedelta(hours=2)
    assert set(store.get_all_module_freshness()) == {"x"}


def test_compare_and_swap_upsert(store: ContentStore) -> None:
    store.upsert_content("x:y", "x", "y", 1, SEED, expected_version=0)

    with pytest.raises(VersionConflictError) as exc:
        store.upsert_content("x:y", "x", "y", 2, SEED, expected_version=0)
    assert exc.value.actual == 1

    store.upsert_content("x:y", "x", "y", 3, SEED, expected_version=1)
    item = store.get_content_item("x:y")
    assert item is not None and item.version == 2 and item.data == 3


def test_bulk_upsert_stops_at_first_failure(store: ContentStore) -> None:
    store.upsert_content("y:taken", "y", "taken", {}, SEED)
    drafts = [
        ContentDraft(content_key="x:a", section="a", data=1),
        ContentDraft(content_key="y:taken", section="taken", data=2),
        ContentDraft(content_key="x:c", section="c", data=3),
    ]

    with pytest.raises(PartialWriteError) as exc:
        store.bulk_upsert_content("x", drafts, SEED)

    assert exc.value.applied == 1
    assert exc.value.failed_key == "y:taken"
    assert store.get_content_item("x:a") is not None
    assert store.get_content_item("x:c") is None


def test_bulk_upsert_returns_count(store: ContentStore) -> None:
    drafts = [ContentDraft(content_key=make_content_key("x", s), section=s, data=s) for s in ("a", "b")]

    assert store.bulk_upsert_content("x", drafts, SEED) == 2
    assert store.count() == 2


def test_store_persists_and_reloads(tmp_path: Path, registry: PolicyRegistry, clock: FixedClock) -> None:
    """It should persist snapshots to JSONL and reload the latest state of each key."""

    first = ContentStore(registry, tmp_path, clock=clock)
    first.upsert_content("x:y", "x", "y", {"a": 1}, SEED)
    first.upsert_content("x:y", "x", "y", {"a": 2}, SEED)
    first.upsert_content("x:z", "x", "z", {"b": 1}, SEED)
    first.deactivate_content("x:z", "x")

    second = ContentStore(registry, tmp_path, clock=clock)
    assert second.count() == 2
    item = second.get_content_item("x:y")
    assert item is not None and item.version == 2 and item.data == {"a": 2}
    assert second.get_content_item("x:z") is None


def test_make_content_key() -> None:
    assert make_content_key("x", "y") == "x:y"
    assert make_content_key("x", None) == "x"
