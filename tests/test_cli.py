"""Tests for the CLI commands that need no generative service."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from typer.testing import CliRunner

from freshkeeper.cli import app
from freshkeeper.models.refresh import RefreshLogEntry
from freshkeeper.recording.file_log import FileRefreshLog
from freshkeeper.utils.clock import utcnow

runner = CliRunner()


def test_expire_and_cleanup_on_empty_store(tmp_path: Path) -> None:
    env = {"FRESHKEEPER_DATA_DIR": str(tmp_path), "FRESHKEEPER_ENV_FILE": str(tmp_path / "none.env")}

    expired = runner.invoke(app, ["expire"], env=env)
    assert expired.exit_code == 0, expired.output
    assert expired.output.strip().splitlines()[-1] == "0"

    cleaned = runner.invoke(app, ["cleanup", "--days", "7"], env=env)
    assert cleaned.exit_code == 0, cleaned.output
    assert '"items_expired": 0' in cleaned.output
    assert (tmp_path / "refresh_log.jsonl").exists()


def test_prune_reports_removed_count(tmp_path: Path) -> None:
    env = {"FRESHKEEPER_DATA_DIR": str(tmp_path), "FRESHKEEPER_ENV_FILE": str(tmp_path / "none.env")}

    result = runner.invoke(app, ["prune", "--days", "30"], env=env)

    assert result.exit_code == 0, result.output
    assert result.output.strip().splitlines()[-1] == "0"


def test_prune_defaults_to_configured_retention(tmp_path: Path) -> None:
    log = FileRefreshLog(tmp_path / "refresh_log.jsonl")
    log.append(
        RefreshLogEntry(module="x", refresh_type="ai-research", status="success", created_at=utcnow() - timedelta(days=10))
    )
    env = {
        "FRESHKEEPER_DATA_DIR": str(tmp_path),
        "FRESHKEEPER_ENV_FILE": str(tmp_path / "none.env"),
        "FRESHKEEPER_LOG_RETENTION_DAYS": "5",
    }

    result = runner.invoke(app, ["prune"], env=env)

    assert result.exit_code == 0, result.output
    assert result.output.strip().splitlines()[-1] == "1"
    assert log.entries() == []
