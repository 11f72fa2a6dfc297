from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional, Sequence, TypeVar

from ..schemas import Snapshot
from .metrics import MetricsClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_bounded(
    awaitables: Sequence[Awaitable[T]], limit: int
) -> List[T]:
    """``asyncio.gather`` with at most *limit* awaitables in flight.

    Results keep the input order regardless of completion order.
    """
    sem = asyncio.Semaphore(max(int(limit), 1))

    async def _run(aw: Awaitable[T]) -> T:
        async with sem:
            return await aw

    return list(await asyncio.gather(*(_run(aw) for aw in awaitables)))


async def build_snapshot(
    metrics: MetricsClient,
    group_id: str,
    windows: Sequence[int],
    business_date: str,
    *,
    max_concurrency: int = 4,
) -> Optional[Snapshot]:
    """Fetch every lookback window for one group and merge the successes.

    Returns ``None`` when no window produced data.
    """
    payloads = await gather_bounded(
        [metrics.fetch_window(group_id, window) for window in windows],
        max_concurrency,
    )
    collected: Dict[str, Any] = {
        str(window): payload
        for window, payload in zip(windows, payloads)
        if payload is not None
    }
    if not collected:
        logger.info("Group %s: no window returned data, skipping", group_id)
        return None
    return Snapshot(group_id=group_id, business_date=business_date, windows=collected)
