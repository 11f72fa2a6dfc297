from __future__ import annotations

from dataclasses import replace

from fastapi.testclient import TestClient

from storyteller.api import routes
from storyteller.api.app import create_app
from storyteller.config import Settings
from storyteller.errors import ConfigurationError, NotionError
from storyteller.schemas import JobResult

_PATH = "/api/cron/storyteller"


def _settings(**overrides) -> Settings:
    base = Settings(
        notion_token="secret",
        notion_database_id="db1",
        blob_read_write_token="blob-token",
        cron_secret="cron-secret",
    )
    return replace(base, **overrides)


def _client(monkeypatch, settings: Settings, job):
    calls = []

    async def fake_job(passed_settings):
        calls.append(passed_settings)
        return await job(passed_settings)

    monkeypatch.setattr(routes, "run_snapshot_job", fake_job)
    return TestClient(create_app(settings)), calls


async def _ok_job(settings):
    result = JobResult()
    result.add("X", "https://blob.test/history/X/2025-03-01.json")
    return result


def test_trigger_returns_summary(monkeypatch):
    client, calls = _client(monkeypatch, _settings(), _ok_job)

    resp = client.get(_PATH, headers={"Authorization": "Bearer cron-secret"})

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "count": 1,
        "saved": [
            {"groupId": "X", "url": "https://blob.test/history/X/2025-03-01.json"}
        ],
    }
    assert len(calls) == 1


def test_wrong_or_missing_bearer_is_rejected_without_running(monkeypatch):
    client, calls = _client(monkeypatch, _settings(), _ok_job)

    wrong = client.get(_PATH, headers={"Authorization": "Bearer nope"})
    missing = client.get(_PATH)

    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Unauthorized"}
    assert missing.status_code == 401
    assert calls == []


def test_auth_skipped_when_secret_unset(monkeypatch):
    client, calls = _client(monkeypatch, _settings(cron_secret=""), _ok_job)

    resp = client.get(_PATH)

    assert resp.status_code == 200
    assert len(calls) == 1


def test_configuration_error_maps_to_500(monkeypatch):
    async def job(settings):
        raise ConfigurationError("Env missing: NOTION_TOKEN")

    client, _ = _client(monkeypatch, _settings(cron_secret=""), job)
    resp = client.get(_PATH)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Env missing: NOTION_TOKEN"}


def test_fatal_upstream_error_maps_to_500(monkeypatch):
    async def job(settings):
        raise NotionError("Notion GET /databases/db1 returned 502", status_code=502)

    client, _ = _client(monkeypatch, _settings(cron_secret=""), job)
    resp = client.get(_PATH)

    assert resp.status_code == 500
    assert "502" in resp.json()["error"]


def test_unexpected_error_maps_to_500(monkeypatch):
    async def job(settings):
        raise RuntimeError()

    client, _ = _client(monkeypatch, _settings(cron_secret=""), job)
    resp = client.get(_PATH)

    assert resp.status_code == 500
    assert resp.json() == {"error": "RuntimeError"}


def test_real_job_rejects_missing_config_with_500():
    client = TestClient(create_app(_settings(cron_secret="", notion_token="")))
    resp = client.get(_PATH)

    assert resp.status_code == 500
    assert "NOTION_TOKEN" in resp.json()["error"]


def test_health(monkeypatch):
    client, _ = _client(monkeypatch, _settings(), _ok_job)
    assert client.get("/api/health").json() == {"status": "ok"}
