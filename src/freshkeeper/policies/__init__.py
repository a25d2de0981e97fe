"""Per-module freshness policies."""

from __future__ import annotations

from freshkeeper.policies.defaults import DEFAULT_POLICY_TABLE
from freshkeeper.policies.registry import PolicyRegistry, build_registry, load_policy_table

__all__ = ["DEFAULT_POLICY_TABLE", "PolicyRegistry", "build_registry", "load_policy_table"]
