"""CLI entrypoints for freshkeeper."""

from __future__ import annotations

import json

import typer
from rich.console import Console
from rich.table import Table

from freshkeeper.config import load_settings
from freshkeeper.logging import configure_logging, get_logger
from freshkeeper.orchestrator.runner import build_runtime, run_refresh

app = typer.Typer(add_completion=False, help="Content freshness and AI reconciliation CLI")
logger = get_logger(__name__)
console = Console()


@app.command()
def refresh(
    module: str | None = typer.Option(
        None,
        "--module",
        "-m",
        help="Reconcile only this module (ignores freshness). Default: every stale AI-researched module.",
    ),
) -> None:
    """Run AI reconciliation and print the run summary as JSON."""

    settings = load_settings()
    configure_logging(settings.log_level)

    logger.info("CLI refresh requested")
    summary = run_refresh(settings, module=module)
    typer.echo(json.dumps(summary.model_dump(mode="json"), ensure_ascii=False, indent=2))

    if any(r.status == "failed" for r in summary.results):
        raise typer.Exit(code=1)


@app.command()
def status(
    limit: int = typer.Option(10, "--limit", help="Number of recent refresh log entries to show"),
) -> None:
    """Show per-module freshness and recent refresh attempts."""

    settings = load_settings()
    configure_logging(settings.log_level)
    report = build_runtime(settings).report(limit)

    table = Table(title="Module freshness")
    for col in ("module", "priority", "ttl (h)", "last refreshed", "stale", "expired", "active/total"):
        table.add_column(col)
    for p in report.policies:
        fresh = report.modules.get(p.module)
        table.add_row(
            p.module,
            p.priority,
            f"{p.ttl_hours:g}",
            p.last_refreshed.isoformat(timespec="minutes") if p.last_refreshed else "never",
            "yes" if p.is_stale else "no",
            "yes" if p.is_expired else "no",
            f"{fresh.active}/{fresh.total}" if fresh else "0/0",
        )
    console.print(table)

    logs = Table(title="Recent refresh attempts")
    for col in ("created", "module", "type", "status", "updated", "created items", "tokens", "error"):
        logs.add_column(col)
    for e in report.recent_refresh_logs:
        logs.add_row(
            e.created_at.isoformat(timespec="seconds"),
            e.module,
            e.refresh_type,
            e.status,
            str(e.items_updated),
            str(e.items_created),
            str(e.tokens_used or 0),
            e.error_message or "",
        )
    console.print(logs)


@app.command()
def expire(
    module: str | None = typer.Option(None, "--module", "-m", help="Restrict the sweep to one module"),
) -> None:
    """Deactivate content whose expiry has passed."""

    settings = load_settings()
    configure_logging(settings.log_level)
    count = build_runtime(settings).store.expire_stale_content(module)
    typer.echo(str(count))


@app.command()
def cleanup(
    days: int | None = typer.Option(None, "--days", help="Refresh log retention (overrides FRESHKEEPER_LOG_RETENTION_DAYS)"),
) -> None:
    """Expire stale content everywhere and prune old refresh logs."""

    settings = load_settings()
    configure_logging(settings.log_level)
    result = build_runtime(settings).cleanup(days)
    typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    if result.status == "failed":
        raise typer.Exit(code=1)


@app.command()
def prune(
    days: int | None = typer.Option(
        None, "--days", help="Refresh log retention (overrides FRESHKEEPER_LOG_RETENTION_DAYS)"
    ),
) -> None:
    """Delete refresh log entries older than the retention window."""

    settings = load_settings()
    configure_logging(settings.log_level)
    keep = days if days is not None else settings.log_retention_days
    removed = build_runtime(settings).audit_log.prune(keep)
    typer.echo(str(removed))


@app.command()
def policies() -> None:
    """List registered modules in refresh priority order."""

    settings = load_settings()
    configure_logging(settings.log_level)
    registry = build_runtime(settings).registry

    table = Table(title="Freshness policies")
    for col in ("module", "priority", "ttl (h)", "source", "keywords"):
        table.add_column(col)
    for module in registry.get_modules_needing_refresh():
        p = registry.get_policy(module)
        table.add_row(module, p.priority, f"{p.ttl_hours:g}", p.refresh_source, ", ".join(p.keywords))
    console.print(table)


if __name__ == "__main__":
    app()
