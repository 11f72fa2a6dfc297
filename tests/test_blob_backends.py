from __future__ import annotations

import asyncio
from dataclasses import replace
from unittest.mock import MagicMock

import httpx
import pytest
from botocore.exceptions import ClientError

from storyteller.config import Settings
from storyteller.errors import BlobStoreError
from storyteller.storage.factory import create_blob_store
from storyteller.storage.s3_blob import S3BlobStore
from storyteller.storage.vercel_blob import VercelBlobStore


# ── VercelBlobStore ─────────────────────────────────────────────


def test_vercel_put_sends_overwrite_headers_and_returns_url():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "url": "https://store.public.blob.vercel-storage.com/history/X/2025-03-01.json",
                "pathname": "history/X/2025-03-01.json",
            },
        )

    store = VercelBlobStore("tok", transport=httpx.MockTransport(handler))
    url = asyncio.run(store.put("history/X/2025-03-01.json", b'{"7":1}', "application/json"))

    assert url.endswith("/history/X/2025-03-01.json")
    request = seen[0]
    assert request.method == "PUT"
    assert request.url.params["pathname"] == "history/X/2025-03-01.json"
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.headers["x-add-random-suffix"] == "0"
    assert request.headers["x-allow-overwrite"] == "1"
    assert request.headers["x-content-type"] == "application/json"
    assert request.content == b'{"7":1}'


def test_vercel_put_raises_on_error_status():
    store = VercelBlobStore(
        "tok", transport=httpx.MockTransport(lambda r: httpx.Response(403, text="denied"))
    )
    with pytest.raises(BlobStoreError) as excinfo:
        asyncio.run(store.put("k.json", b"{}", "application/json"))
    assert excinfo.value.status_code == 403


def test_vercel_put_raises_when_url_missing():
    store = VercelBlobStore(
        "tok", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={}))
    )
    with pytest.raises(BlobStoreError, match="no url"):
        asyncio.run(store.put("k.json", b"{}", "application/json"))


# ── S3BlobStore ─────────────────────────────────────────────────


def test_s3_put_object_and_public_url():
    client = MagicMock()
    store = S3BlobStore("bucket", region="ap-northeast-2", client=client)

    url = asyncio.run(store.put("history/X/d.json", b"{}", "application/json"))

    client.put_object.assert_called_once_with(
        Bucket="bucket", Key="history/X/d.json", Body=b"{}", ContentType="application/json"
    )
    assert url == "https://bucket.s3.ap-northeast-2.amazonaws.com/history/X/d.json"


def test_s3_public_base_url_takes_precedence():
    store = S3BlobStore(
        "bucket",
        endpoint_url="http://minio:9000",
        public_base_url="https://cdn.example/",
        client=MagicMock(),
    )
    assert store.public_url("a/b.json") == "https://cdn.example/a/b.json"
    store.public_base_url = ""
    assert store.public_url("a/b.json") == "http://minio:9000/bucket/a/b.json"


def test_s3_client_error_is_wrapped():
    client = MagicMock()
    client.put_object.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "no"}}, "PutObject"
    )
    store = S3BlobStore("bucket", client=client)
    with pytest.raises(BlobStoreError, match="s3://bucket/k.json"):
        asyncio.run(store.put("k.json", b"{}", "application/json"))


# ── factory ─────────────────────────────────────────────────────


def test_factory_selects_backend():
    base = Settings(blob_read_write_token="tok", s3_bucket="bucket")
    assert isinstance(create_blob_store(replace(base, blob_backend="vercel")), VercelBlobStore)
    s3 = create_blob_store(replace(base, blob_backend="s3", s3_region="us-east-1"))
    assert isinstance(s3, S3BlobStore)
    assert s3.bucket == "bucket"
