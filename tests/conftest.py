"""Shared fakes for the test suite."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Sequence

import pytest

from freshkeeper.config import Settings
from freshkeeper.llm.client import ChatMessage, Completion
from freshkeeper.models.policy import FreshnessPolicy, PolicyTable
from freshkeeper.policies.registry import PolicyRegistry
from freshkeeper.store.content_store import ContentStore

T0 = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

EMPTY_ANSWER = '{"updates": [], "newItems": [], "removals": [], "notes": "nothing changed"}'


@dataclass
class FixedClock:
    """Manually advanced clock."""

    now: datetime = T0

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@dataclass
class ScriptedCompleter:
    """Returns canned answers in order; an exception in the script is raised instead."""

    script: list[str | BaseException]
    prompt_tokens: int = 100
    completion_tokens: int = 50
    delay_s: float = 0.0
    calls: list[list[ChatMessage]] = field(default_factory=list)

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> Completion:
        self.calls.append(list(messages))
        if self.delay_s:
            time.sleep(self.delay_s)
        step = self.script[min(len(self.calls), len(self.script)) - 1]
        if isinstance(step, BaseException):
            raise step
        return Completion(text=step, prompt_tokens=self.prompt_tokens, completion_tokens=self.completion_tokens)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def registry(clock: FixedClock) -> PolicyRegistry:
    table = PolicyTable(
        policies={
            "x": FreshnessPolicy(ttl_hours=24, priority="high", keywords=("launch", "orbit")),
            "y": FreshnessPolicy(ttl_hours=168, priority="moderate", keywords=("lunar",)),
        }
    )
    return PolicyRegistry(table, clock=clock)


@pytest.fixture
def store(registry: PolicyRegistry, clock: FixedClock) -> ContentStore:
    return ContentStore(registry, clock=clock)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        openai_api_key="test-key",
        orchestrator_delay_s=0.0,
        data_dir=tmp_path / "data",
    )
