"""Tests for the admin HTTP API."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from fastapi.testclient import TestClient

from conftest import EMPTY_ANSWER, T0, FixedClock, ScriptedCompleter
from freshkeeper.api.app import create_app
from freshkeeper.config import Settings
from freshkeeper.evidence import InMemoryNewsCorpus
from freshkeeper.models.content import ContentMeta
from freshkeeper.orchestrator import Runtime
from freshkeeper.policies import DEFAULT_POLICY_TABLE, PolicyRegistry
from freshkeeper.recording.file_log import FileRefreshLog
from freshkeeper.store.content_store import ContentStore


def _client(tmp_path: Path, llm: ScriptedCompleter) -> TestClient:
    clock = FixedClock()
    settings = Settings(openai_api_key="k", orchestrator_delay_s=0.0, data_dir=tmp_path)
    registry = PolicyRegistry(DEFAULT_POLICY_TABLE, clock=clock)
    store = ContentStore(registry, tmp_path / "content", clock=clock)
    runtime = Runtime(
        settings=settings,
        registry=registry,
        store=store,
        audit_log=FileRefreshLog(tmp_path / "refresh_log.jsonl", clock=clock),
        corpus=InMemoryNewsCorpus(),
        llm=llm,
    )
    store.upsert_content("startups:funded", "startups", "funded", [{"name": "Acme"}], ContentMeta(source_type="seed"))
    store.upsert_content(
        "startups:old",
        "startups",
        "old",
        {},
        ContentMeta(source_type="seed", expires_at=T0 - timedelta(days=1)),
    )
    return TestClient(create_app(runtime=runtime))


def test_health_and_reads(tmp_path: Path) -> None:
    client = _client(tmp_path, ScriptedCompleter([EMPTY_ANSWER]))

    assert client.get("/health").json() == {"status": "ok"}

    rows = client.get("/content/startups").json()
    assert [r["content_key"] for r in rows] == ["startups:funded", "startups:old"]
    assert client.get("/content/startups", params={"section": "funded"}).json()[0]["data"] == [{"name": "Acme"}]

    item = client.get("/content-item/startups:funded").json()
    assert item["version"] == 1
    assert client.get("/content-item/startups:nothing").status_code == 404

    fresh = client.get("/freshness/startups").json()
    assert fresh["total"] == 2 and fresh["stale"] == 1

    report = client.get("/freshness").json()
    assert report["policies"][0]["module"] == "space-stations"
    assert "startups" in report["modules"]


def test_refresh_module_endpoint_records_log(tmp_path: Path) -> None:
    answer = '{"newItems": [{"contentKey": "startups:new", "section": "new", "data": {"n": 1}}]}'
    client = _client(tmp_path, ScriptedCompleter([answer]))

    result = client.post("/refresh/startups").json()
    assert result["status"] == "success"
    assert result["items_created"] == 1

    logs = client.get("/refresh-logs", params={"module": "startups"}).json()
    assert len(logs) == 1
    assert logs[0]["refresh_type"] == "ai-research"
    assert client.get("/content-item/startups:new").status_code == 200


def test_cleanup_endpoint(tmp_path: Path) -> None:
    client = _client(tmp_path, ScriptedCompleter([EMPTY_ANSWER]))

    result = client.post("/maintenance/cleanup", params={"days_to_keep": 7}).json()

    assert result == {"status": "success", "items_expired": 1, "logs_pruned": 0, "error": None}
    assert client.get("/content-item/startups:old").status_code == 404
    assert client.get("/refresh-logs").json()[0]["refresh_type"] == "cleanup"
