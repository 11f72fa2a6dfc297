from __future__ import annotations

from fastapi import Request

from storyteller.api.access import authorize_trigger, request_token


def _make_request(
    *,
    path: str = "/api/cron/storyteller",
    method: str = "GET",
    headers: dict[str, str] | None = None,
    client_host: str = "127.0.0.1",
) -> Request:
    header_pairs = [
        (key.lower().encode("latin-1"), str(value).encode("latin-1"))
        for key, value in (headers or {}).items()
    ]
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": b"",
        "headers": header_pairs,
        "client": (client_host, 42424),
        "server": ("testserver", 80),
    }
    return Request(scope)


def test_request_token_reads_bearer_only():
    assert request_token(_make_request(headers={"Authorization": "Bearer  abc123  "})) == "abc123"
    assert request_token(_make_request(headers={"Authorization": "bearer abc123"})) == "abc123"
    assert request_token(_make_request(headers={"Authorization": "Basic abc"})) == ""
    assert request_token(_make_request(headers={"X-API-Key": "key-token"})) == ""


def test_trigger_open_when_secret_unset():
    assert authorize_trigger(_make_request(), cron_secret="")
    assert authorize_trigger(_make_request(), cron_secret="   ")


def test_trigger_requires_matching_secret_when_configured():
    assert authorize_trigger(
        _make_request(headers={"Authorization": "Bearer top-secret"}),
        cron_secret="top-secret",
    )
    assert not authorize_trigger(
        _make_request(headers={"Authorization": "Bearer wrong"}),
        cron_secret="top-secret",
    )
    assert not authorize_trigger(_make_request(), cron_secret="top-secret")
    assert not authorize_trigger(
        _make_request(headers={"Authorization": "top-secret"}),
        cron_secret="top-secret",
    )
