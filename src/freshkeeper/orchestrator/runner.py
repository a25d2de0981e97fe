"""Refresh orchestration.

Modules are processed strictly one after another: the generative service sits behind a shared
rate limit and token accounting must stay deterministic.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import timedelta
from functools import cached_property
from typing import Awaitable, Callable

from freshkeeper.config import Settings
from freshkeeper.evidence.corpus import InMemoryNewsCorpus, JsonlNewsCorpus, NewsCorpus
from freshkeeper.evidence.gatherer import EvidenceGatherer
from freshkeeper.llm.client import Completer, LLMClient
from freshkeeper.logging import get_logger, log_exception, refresh_context
from freshkeeper.models.refresh import (
    CleanupResult,
    FreshnessReport,
    ModuleRefreshResult,
    PolicyStatus,
    RefreshRunSummary,
)
from freshkeeper.policies.registry import PolicyRegistry, build_registry
from freshkeeper.reconcile.engine import ReconciliationEngine
from freshkeeper.recording.audit import RefreshLog, log_refresh
from freshkeeper.recording.file_log import FileRefreshLog
from freshkeeper.recording.redis_log import RedisRefreshLog
from freshkeeper.store.content_store import ContentStore
from freshkeeper.utils.ids import new_run_id

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RefreshOrchestrator:
    """Runs reconciliation over every eligible module and aggregates the results."""

    engine: ReconciliationEngine
    store: ContentStore
    registry: PolicyRegistry
    audit_log: RefreshLog
    settings: Settings
    sleep: Sleep = field(default=asyncio.sleep)

    def is_module_fresh(self, module: str) -> bool:
        """True when the module's newest active item is younger than its TTL."""

        return self._fresh_age(module) is not None

    def _fresh_age(self, module: str) -> timedelta | None:
        """Age of the newest active item while it is within the TTL, else None."""

        latest = self.store.latest_refresh(module)
        if latest is None:
            return None
        age = self.registry.age(latest)
        return age if age < self.registry.ttl(module) else None

    async def refresh_all_ai_researched_modules(self) -> RefreshRunSummary:
        """Reconcile every module routed through AI research whose data is not fresh.

        Modules run in registry declaration order with ``orchestrator_delay_s`` between
        cycles. A failed module never stops the run.
        """

        run_id = new_run_id()
        summary = RefreshRunSummary(run_id=run_id)

        with refresh_context(run_id=run_id):
            modules = self.registry.get_modules_by_source("ai-research")
            logger.info("AI research run started: %d candidate modules", len(modules))

            for module in modules:
                fresh_age = self._fresh_age(module)
                if fresh_age is not None:
                    age_h = fresh_age.total_seconds() / 3600
                    logger.info(
                        "Skipping AI research for %s: data is fresh (%.0fh old, TTL %sh)",
                        module,
                        age_h,
                        self.registry.get_policy(module).ttl_hours,
                    )
                    summary.skipped_modules.append(module)
                    continue

                if summary.results and self.settings.orchestrator_delay_s > 0:
                    await self.sleep(self.settings.orchestrator_delay_s)

                result = await self.engine.refresh_module(module)
                summary.results.append(result)
                summary.total_updated += result.items_updated
                summary.total_created += result.items_created
                summary.total_tokens += result.tokens_used

            logger.info(
                "AI research refresh complete: processed=%d skipped=%d updated=%d created=%d tokens=%d",
                len(summary.results),
                len(summary.skipped_modules),
                summary.total_updated,
                summary.total_created,
                summary.total_tokens,
            )
        return summary

    async def refresh_module(self, module: str, *, run_id: str | None = None) -> ModuleRefreshResult:
        """Reconcile one module regardless of freshness."""

        with refresh_context(run_id=run_id or new_run_id("manual")):
            return await self.engine.refresh_module(module)


def run_cleanup(
    store: ContentStore,
    audit_log: RefreshLog,
    days_to_keep: int,
) -> CleanupResult:
    """Expire stale content in every module and prune old refresh logs.

    Logs one ``cleanup`` entry whether or not the sweep succeeded.
    """

    started = time.monotonic()
    out = CleanupResult()

    try:
        out.items_expired = store.expire_stale_content()
        out.logs_pruned = audit_log.prune(days_to_keep)
    except Exception as e:
        out.status = "failed"
        out.error = str(e) or e.__class__.__name__
        log_exception(logger, "Cleanup failed", days_to_keep=days_to_keep)

    log_refresh(
        audit_log,
        "all",
        "cleanup",
        out.status,
        items_expired=out.items_expired,
        duration_ms=int((time.monotonic() - started) * 1000),
        error_message=out.error,
        details={"logs_pruned": out.logs_pruned, "days_to_keep": days_to_keep},
    )
    return out


def build_freshness_report(
    store: ContentStore,
    registry: PolicyRegistry,
    audit_log: RefreshLog,
    limit: int = 50,
) -> FreshnessReport:
    """Freshness of every stored module, policy status of every registered one, recent logs."""

    report = FreshnessReport(
        modules=store.get_all_module_freshness(),
        recent_refresh_logs=audit_log.recent(limit),
    )
    for module in registry.get_modules_needing_refresh():
        policy = registry.get_policy(module)
        latest = store.latest_refresh(module)
        report.policies.append(
            PolicyStatus(
                module=module,
                ttl_hours=policy.ttl_hours,
                priority=policy.priority,
                refresh_source=policy.refresh_source,
                last_refreshed=latest,
                is_stale=latest is None or registry.is_stale(module, latest),
                is_expired=latest is None or registry.is_expired(module, latest),
            )
        )
    return report


@dataclass
class Runtime:
    """Process-wide wiring built from settings.

    The generative client is only created when a refresh actually needs it, so read-only
    commands work without an API key.
    """

    settings: Settings
    registry: PolicyRegistry
    store: ContentStore
    audit_log: RefreshLog
    corpus: NewsCorpus
    llm: Completer | None = None

    def cleanup(self, days_to_keep: int | None = None) -> CleanupResult:
        days = days_to_keep if days_to_keep is not None else self.settings.log_retention_days
        return run_cleanup(self.store, self.audit_log, days)

    def report(self, limit: int = 50) -> FreshnessReport:
        return build_freshness_report(self.store, self.registry, self.audit_log, limit)

    @cached_property
    def gatherer(self) -> EvidenceGatherer:
        return EvidenceGatherer(
            corpus=self.corpus,
            registry=self.registry,
            max_items=self.settings.evidence_max_items,
        )

    @cached_property
    def engine(self) -> ReconciliationEngine:
        llm = self.llm if self.llm is not None else LLMClient(self.settings)
        return ReconciliationEngine(
            store=self.store,
            gatherer=self.gatherer,
            llm=llm,
            audit_log=self.audit_log,
            settings=self.settings,
        )

    @cached_property
    def orchestrator(self) -> RefreshOrchestrator:
        return RefreshOrchestrator(
            engine=self.engine,
            store=self.store,
            registry=self.registry,
            audit_log=self.audit_log,
            settings=self.settings,
        )


def build_runtime(settings: Settings, *, llm: Completer | None = None) -> Runtime:
    """Wire registry, store, audit log and evidence corpus from settings."""

    registry = build_registry(settings)
    store = ContentStore(registry, settings.data_dir / "content")

    audit_log: RefreshLog
    if settings.redis_enabled:
        audit_log = RedisRefreshLog(redis_url=settings.redis_url, key_prefix=settings.redis_key_prefix)
    else:
        audit_log = FileRefreshLog(settings.data_dir / "refresh_log.jsonl")

    corpus: NewsCorpus
    if settings.news_corpus_path is not None:
        corpus = JsonlNewsCorpus(settings.news_corpus_path)
    else:
        logger.warning("No news corpus configured; reconciliation will run without evidence")
        corpus = InMemoryNewsCorpus()

    return Runtime(
        settings=settings,
        registry=registry,
        store=store,
        audit_log=audit_log,
        corpus=corpus,
        llm=llm,
    )


def run_refresh(settings: Settings, *, module: str | None = None) -> RefreshRunSummary:
    """Run a refresh synchronously: one module when given, else every eligible AI module."""

    runtime = build_runtime(settings)
    if module is None:
        return asyncio.run(runtime.orchestrator.refresh_all_ai_researched_modules())

    run_id = new_run_id("manual")
    result = asyncio.run(runtime.orchestrator.refresh_module(module, run_id=run_id))
    return RefreshRunSummary(
        run_id=run_id,
        total_updated=result.items_updated,
        total_created=result.items_created,
        total_tokens=result.tokens_used,
        results=[result],
    )
