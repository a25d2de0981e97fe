"""FastAPI admin app exposing freshness reads and refresh triggers."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Query

from freshkeeper.config import Settings, load_settings
from freshkeeper.logging import configure_logging, get_logger
from freshkeeper.models.content import ContentItem, ModuleFreshness
from freshkeeper.models.refresh import (
    CleanupResult,
    FreshnessReport,
    ModuleRefreshResult,
    RefreshLogEntry,
    RefreshRunSummary,
)
from freshkeeper.orchestrator.runner import Runtime, build_runtime


def create_app(settings: Settings | None = None, *, runtime: Runtime | None = None) -> FastAPI:
    """Create FastAPI app.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
        runtime: Pre-built wiring (tests inject one with a fake generative client).
    """

    settings = settings or (runtime.settings if runtime is not None else load_settings())
    configure_logging(settings.log_level)
    logger = get_logger(__name__)
    rt = runtime or build_runtime(settings)

    app = FastAPI(title="freshkeeper", version="0.1.0")

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/freshness")
    def freshness(limit: int = Query(50, ge=0, le=500)) -> FreshnessReport:
        return rt.report(limit)

    @app.get("/freshness/{module}")
    def module_freshness(module: str) -> ModuleFreshness:
        return rt.store.get_module_freshness(module)

    @app.get("/content/{module}")
    def module_content(module: str, section: str | None = None) -> list[ContentItem]:
        return rt.store.get_module_content(module, section)

    @app.get("/content-item/{content_key}")
    def content_item(content_key: str) -> ContentItem:
        item = rt.store.get_content_item(content_key)
        if item is None:
            raise HTTPException(status_code=404, detail="content item not found")
        return item

    @app.get("/refresh-logs")
    def refresh_logs(
        limit: int = Query(50, ge=1, le=500),
        module: str | None = None,
    ) -> list[RefreshLogEntry]:
        return rt.audit_log.recent(limit, module=module)

    @app.post("/refresh")
    async def refresh_all() -> RefreshRunSummary:
        logger.info("API refresh requested for all AI-researched modules")
        return await rt.orchestrator.refresh_all_ai_researched_modules()

    @app.post("/refresh/{module}")
    async def refresh_one(module: str) -> ModuleRefreshResult:
        logger.info("API refresh requested for %s", module)
        return await rt.orchestrator.refresh_module(module)

    @app.post("/maintenance/cleanup")
    def cleanup(days_to_keep: int | None = Query(None, ge=1, le=3650)) -> CleanupResult:
        logger.info("API cleanup requested")
        return rt.cleanup(days_to_keep)

    return app
