"""Async Notion REST client for the storyteller content database.

Only the three read calls the collector needs are implemented: database
metadata, data-source query and the legacy whole-database query.  Queries
follow Notion's cursor pagination until ``has_more`` is false.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..errors import NotionError

logger = logging.getLogger(__name__)

_PAGE_SIZE = 100


class NotionClient:
    def __init__(
        self,
        token: str,
        *,
        base_url: str = "https://api.notion.com/v1",
        notion_version: str = "2025-09-03",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "Notion-Version": notion_version,
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(
        self, method: str, path: str, json: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = await self._client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            raise NotionError(f"Notion request failed: {method} {path}: {exc}") from exc

        if resp.status_code >= 400:
            raise NotionError(
                f"Notion {method} {path} returned {resp.status_code}: "
                f"{resp.reason_phrase or resp.text[:200]}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise NotionError(f"Notion {method} {path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise NotionError(f"Notion {method} {path} returned a non-object body")
        return data

    async def _query_all(self, path: str) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        while True:
            body: Dict[str, Any] = {"page_size": _PAGE_SIZE}
            if cursor:
                body["start_cursor"] = cursor
            data = await self._request("POST", path, json=body)
            results.extend(
                page for page in data.get("results") or [] if isinstance(page, dict)
            )
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return results

    async def get_database(self, database_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/databases/{database_id}")

    async def query_data_source(self, data_source_id: str) -> List[Dict[str, Any]]:
        return await self._query_all(f"/data_sources/{data_source_id}/query")

    async def query_database(self, database_id: str) -> List[Dict[str, Any]]:
        """Legacy query form for databases that expose no data sources."""
        return await self._query_all(f"/databases/{database_id}/query")
