from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from ..config import METRICS_API_BASE_URL, METRICS_PAGE_LIMIT

logger = logging.getLogger(__name__)


class MetricsClient:
    """Read-only client for the leaderboard time-series API.

    Every failure mode collapses to ``None`` so callers can treat a missing
    window as an omission rather than an error.
    """

    def __init__(
        self,
        *,
        base_url: str = METRICS_API_BASE_URL,
        page_limit: int = METRICS_PAGE_LIMIT,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.page_limit = page_limit
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "MetricsClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def window_url(self, group_id: str) -> str:
        return f"{self.base_url}/{quote(group_id, safe='')}/timeseries-group"

    async def fetch_window(self, group_id: str, window: int) -> Optional[Any]:
        """Fetch one lookback window for *group_id*; ``None`` when unavailable."""
        params = {"limit": self.page_limit, "lookbacks": window}
        try:
            resp = await self._client.get(self.window_url(group_id), params=params)
        except httpx.HTTPError as exc:
            logger.warning("Group %s window %sd: request failed: %s", group_id, window, exc)
            return None

        if not resp.is_success:
            logger.warning(
                "Group %s window %sd: HTTP %s", group_id, window, resp.status_code
            )
            return None
        try:
            return resp.json()
        except ValueError:
            logger.warning("Group %s window %sd: response is not JSON", group_id, window)
            return None
