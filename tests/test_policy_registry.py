"""Tests for PolicyRegistry."""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path

import pytest

from conftest import T0, FixedClock
from freshkeeper.errors import PolicyConfigError
from freshkeeper.models.policy import DEFAULT_POLICY, PRIORITY_ORDER, FreshnessPolicy, PolicyTable
from freshkeeper.policies import DEFAULT_POLICY_TABLE, PolicyRegistry, load_policy_table


def test_staleness_thresholds(registry: PolicyRegistry) -> None:
    """Content is stale past one TTL and expired past two."""

    assert registry.is_stale("x", T0 - timedelta(hours=23)) is False
    assert registry.is_stale("x", T0 - timedelta(hours=25)) is True
    assert registry.is_expired("x", T0 - timedelta(hours=25)) is False
    assert registry.is_expired("x", T0 - timedelta(hours=49)) is True


def test_expired_implies_stale(registry: PolicyRegistry) -> None:
    for hours in range(0, 100, 3):
        refreshed = T0 - timedelta(hours=hours)
        if registry.is_expired("x", refreshed):
            assert registry.is_stale("x", refreshed)


def test_staleness_uses_explicit_now(registry: PolicyRegistry) -> None:
    refreshed = T0
    assert registry.is_stale("x", refreshed, now=T0 + timedelta(hours=30)) is True
    assert registry.is_stale("x", refreshed, now=T0 + timedelta(hours=1)) is False


def test_unknown_module_gets_default_policy(registry: PolicyRegistry) -> None:
    assert "nope" not in registry
    assert registry.get_policy("nope") == DEFAULT_POLICY
    assert registry.ttl("nope") == timedelta(hours=720)


def test_expires_at_is_refresh_plus_ttl(registry: PolicyRegistry, clock: FixedClock) -> None:
    assert registry.get_expires_at("x") == T0 + timedelta(hours=24)
    assert registry.get_expires_at("y", T0 - timedelta(days=1)) == T0 + timedelta(days=6)


def test_modules_needing_refresh_orders_by_priority() -> None:
    """Critical modules come first; equal priorities keep declaration order."""

    registry = PolicyRegistry(DEFAULT_POLICY_TABLE)
    ordered = registry.get_modules_needing_refresh()

    assert sorted(ordered) == sorted(registry.modules())
    ranks = [PRIORITY_ORDER[registry.get_policy(m).priority] for m in ordered]
    assert ranks == sorted(ranks)
    assert ordered[0] == "space-stations"
    assert ordered[-1] == "ground-stations"

    highs = [m for m in registry.modules() if registry.get_policy(m).priority == "high"]
    assert [m for m in ordered if m in highs] == highs


def test_modules_by_source_includes_both() -> None:
    table = PolicyTable(
        policies={
            "a": FreshnessPolicy(ttl_hours=1, refresh_source="api"),
            "b": FreshnessPolicy(ttl_hours=1, refresh_source="both"),
            "c": FreshnessPolicy(ttl_hours=1, refresh_source="ai-research"),
        }
    )
    registry = PolicyRegistry(table)

    assert registry.get_modules_by_source("ai-research") == ["b", "c"]
    assert registry.get_modules_by_source("api") == ["a", "b"]


def test_load_policy_table_from_json(tmp_path: Path) -> None:
    path = tmp_path / "policies.json"
    path.write_text(
        json.dumps(
            {
                "policies": {
                    "alpha": {"ttl_hours": 12, "priority": "critical", "keywords": ["rocket"]},
                    "beta": {"ttl_hours": 48, "refresh_source": "api"},
                },
                "default": {"ttl_hours": 100},
            }
        ),
        encoding="utf-8",
    )

    table = load_policy_table(path)

    assert list(table.policies) == ["alpha", "beta"]
    assert table.policies["alpha"].keywords == ("rocket",)
    assert table.policies["beta"].priority == "moderate"
    assert table.default.ttl_hours == 100


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        json.dumps({"modules": {}}),
        json.dumps({"policies": {"a": {"ttl_hours": 0}}}),
        json.dumps({"policies": {"a": {"ttl_hours": 5, "priority": "urgent"}}}),
    ],
)
def test_load_policy_table_rejects_bad_files(tmp_path: Path, content: str) -> None:
    path = tmp_path / "policies.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(PolicyConfigError):
        load_policy_table(path)
