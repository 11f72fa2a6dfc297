"""Snapshot collection job.

Resolves tracked entities once, then walks them one at a time: fetch all
lookback windows concurrently, store the merged snapshot, move on.  Entity
processing is kept sequential so the metrics API never sees more than one
entity's window fan-out at a time.
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from datetime import datetime
from typing import List, Optional

from ..config import LOOKBACK_DAYS, Settings
from ..errors import ConfigurationError
from ..notion.client import NotionClient
from ..schemas import JobResult, TrackedEntity
from ..storage.base import BlobStore
from ..storage.factory import create_blob_store
from ..storage.snapshot_store import SnapshotStore
from ..utils.datetime import business_date as compute_business_date
from .aggregator import build_snapshot
from .metrics import MetricsClient
from .resolver import resolve_entities

logger = logging.getLogger(__name__)


def missing_job_settings(settings: Settings) -> List[str]:
    missing: List[str] = []
    if not settings.notion_token:
        missing.append("NOTION_TOKEN")
    if not settings.notion_database_id:
        missing.append("NOTION_STORYTELLER_DB_ID")
    if settings.blob_backend == "s3":
        if not settings.s3_bucket:
            missing.append("S3_BUCKET")
    elif not settings.blob_read_write_token:
        missing.append("BLOB_READ_WRITE_TOKEN")
    return missing


def require_job_settings(settings: Settings) -> None:
    missing = missing_job_settings(settings)
    if missing:
        raise ConfigurationError(f"Env missing: {', '.join(missing)}")


async def collect_snapshots(
    entities: List[TrackedEntity],
    *,
    metrics: MetricsClient,
    store: SnapshotStore,
    business_date: str,
    max_concurrency: int,
) -> JobResult:
    result = JobResult()
    for entity in entities:
        group_id = entity.group_id
        try:
            snapshot = await build_snapshot(
                metrics,
                group_id,
                LOOKBACK_DAYS,
                business_date,
                max_concurrency=max_concurrency,
            )
            if snapshot is None:
                continue
            url = await store.save(snapshot)
        except Exception:
            logger.exception("Group %s failed, skipping", group_id)
            continue
        result.add(group_id, url)
    return result


async def run_snapshot_job(
    settings: Settings,
    *,
    notion: Optional[NotionClient] = None,
    metrics: Optional[MetricsClient] = None,
    blob_store: Optional[BlobStore] = None,
    now: Optional[datetime] = None,
) -> JobResult:
    """Run one collection pass.

    Clients not supplied by the caller are built from *settings* and closed
    when the run ends.  ``ConfigurationError`` is raised before any upstream
    call when required settings are absent; a failed database metadata
    lookup propagates as ``NotionError``.
    """
    require_job_settings(settings)

    target_date = compute_business_date(now)
    logger.info("Collecting snapshots for business date %s", target_date)

    async with AsyncExitStack() as stack:
        if notion is None:
            notion = NotionClient(
                settings.notion_token,
                base_url=settings.notion_api_base_url,
                notion_version=settings.notion_version,
                timeout=settings.http_timeout_seconds,
            )
            stack.push_async_callback(notion.aclose)
        if metrics is None:
            metrics = MetricsClient(timeout=settings.http_timeout_seconds)
            stack.push_async_callback(metrics.aclose)
        if blob_store is None:
            blob_store = create_blob_store(settings)
            stack.push_async_callback(blob_store.aclose)

        entities = await resolve_entities(notion, settings.notion_database_id)
        result = await collect_snapshots(
            entities,
            metrics=metrics,
            store=SnapshotStore(blob_store),
            business_date=target_date,
            max_concurrency=settings.metrics_max_concurrency,
        )

    logger.info(
        "Snapshot run finished: %d/%d saved for %s",
        result.count,
        len(entities),
        target_date,
    )
    return result
