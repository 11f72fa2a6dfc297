"""Vercel Blob backend over its HTTP API."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..errors import BlobStoreError
from .base import BlobStore

logger = logging.getLogger(__name__)

_API_VERSION = "7"


class VercelBlobStore(BlobStore):
    def __init__(
        self,
        token: str,
        *,
        api_url: str = "https://blob.vercel-storage.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {token}",
                "x-api-version": _API_VERSION,
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def put(self, key: str, body: bytes, content_type: str) -> str:
        try:
            resp = await self._client.put(
                f"{self.api_url}/",
                params={"pathname": key},
                content=body,
                headers={
                    "x-content-type": content_type,
                    "x-add-random-suffix": "0",
                    "x-allow-overwrite": "1",
                },
            )
        except httpx.HTTPError as exc:
            raise BlobStoreError(f"Blob upload failed for {key}: {exc}") from exc

        if not resp.is_success:
            raise BlobStoreError(
                f"Blob upload for {key} returned {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )
        try:
            url = resp.json().get("url")
        except (ValueError, AttributeError):
            url = None
        if not url:
            raise BlobStoreError(f"Blob upload for {key} returned no url")
        logger.debug("blob written key=%s size=%d", key, len(body))
        return str(url)
