"""Snapshot collector worker.

Runs the snapshot job once a day at ``COLLECTOR_SCHEDULE_UTC`` (default
15:05 UTC, just after midnight in Seoul).  Start with::

    python -m storyteller.worker.collector_worker
"""

from __future__ import annotations

import asyncio

from ..collector.job import missing_job_settings, run_snapshot_job
from ..config import Settings, validate_settings
from ._base import CycleSummary, PreflightResult, run_daily_loop
from .heartbeat import WorkerHeartbeat

WORKER_NAME = "collector-worker"


def preflight(settings: Settings) -> PreflightResult:
    validate_settings(settings)
    missing = missing_job_settings(settings)
    if missing:
        return PreflightResult(ok=False, reason=f"missing {', '.join(missing)}")
    return PreflightResult(extra_heartbeat={"blob_backend": settings.blob_backend})


async def run_cycle(settings: Settings, heartbeat: WorkerHeartbeat) -> CycleSummary:
    result = await run_snapshot_job(settings)
    return CycleSummary(
        log_message=f"saved {result.count} snapshots",
        heartbeat_details={"snapshots_saved": result.count},
    )


async def collector_worker_loop() -> None:
    await run_daily_loop(
        worker_name=WORKER_NAME,
        preflight=preflight,
        run_cycle=run_cycle,
    )


def main() -> None:
    asyncio.run(collector_worker_loop())


if __name__ == "__main__":
    main()
