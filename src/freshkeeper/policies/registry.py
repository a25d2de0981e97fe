"""Policy registry.

Staleness is a pure function of a module's policy and two timestamps, so the scheduler and
the content store always agree on what "fresh" means.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from pathlib import Path

from pydantic import ValidationError

from freshkeeper.config import Settings
from freshkeeper.errors import PolicyConfigError
from freshkeeper.logging import get_logger
from freshkeeper.models.policy import PRIORITY_ORDER, FreshnessPolicy, PolicyTable, RefreshSource
from freshkeeper.policies.defaults import DEFAULT_POLICY_TABLE
from freshkeeper.utils.clock import Clock, ensure_utc, utcnow

logger = get_logger(__name__)


class PolicyRegistry:
    """Read-only lookup and TTL arithmetic over a :class:`PolicyTable`."""

    def __init__(self, table: PolicyTable, *, clock: Clock = utcnow) -> None:
        self._table = table
        self._clock = clock

    @property
    def table(self) -> PolicyTable:
        return self._table

    def __contains__(self, module: object) -> bool:
        return module in self._table.policies

    def modules(self) -> list[str]:
        """Registered modules in declaration order."""

        return list(self._table.policies)

    def get_policy(self, module: str) -> FreshnessPolicy:
        """Return the module's policy, or the table default for unregistered modules."""

        return self._table.policies.get(module, self._table.default)

    def ttl(self, module: str) -> timedelta:
        return timedelta(hours=self.get_policy(module).ttl_hours)

    def get_expires_at(self, module: str, from_: datetime | None = None) -> datetime:
        start = ensure_utc(from_) if from_ is not None else self._clock()
        return start + self.ttl(module)

    def age(self, last_refreshed: datetime, now: datetime | None = None) -> timedelta:
        current = ensure_utc(now) if now is not None else self._clock()
        return current - ensure_utc(last_refreshed)

    def is_stale(self, module: str, last_refreshed: datetime, now: datetime | None = None) -> bool:
        """True once the content is older than the module TTL."""

        return self.age(last_refreshed, now) > self.ttl(module)

    def is_expired(self, module: str, last_refreshed: datetime, now: datetime | None = None) -> bool:
        """True once the content is older than twice the module TTL.

        Between one and two TTLs content is stale but still served.
        """

        return self.age(last_refreshed, now) > self.ttl(module) * 2

    def get_modules_needing_refresh(self) -> list[str]:
        """All registered modules, critical first. Ties keep declaration order."""

        return sorted(
            self._table.policies,
            key=lambda m: PRIORITY_ORDER[self._table.policies[m].priority],
        )

    def get_modules_by_source(self, source: RefreshSource) -> list[str]:
        """Modules refreshed through ``source``, including those marked ``both``."""

        return [
            module
            for module, policy in self._table.policies.items()
            if policy.refresh_source == source or policy.refresh_source == "both"
        ]


def load_policy_table(path: Path) -> PolicyTable:
    """Load a policy table from JSON.

    Expected format::

        {"policies": {"module": {"ttl_hours": 24, "priority": "high", ...}},
         "default": {"ttl_hours": 720}}

    ``default`` is optional.
    """

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise PolicyConfigError(f"cannot read policy file {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("policies"), dict):
        raise PolicyConfigError(f"policy file {path} must contain a 'policies' object")

    try:
        table = PolicyTable.model_validate(data)
    except ValidationError as e:
        raise PolicyConfigError(f"invalid policy file {path}: {e}") from e

    logger.info("Loaded %d policies from %s", len(table.policies), path)
    return table


def build_registry(settings: Settings, *, clock: Clock = utcnow) -> PolicyRegistry:
    """Create the registry for this process: the configured policy file, else the built-ins."""

    if settings.policies_path is not None:
        return PolicyRegistry(load_policy_table(settings.policies_path), clock=clock)
    return PolicyRegistry(DEFAULT_POLICY_TABLE, clock=clock)
