"""HTTP routes: the cron trigger and a liveness probe."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..collector.job import run_snapshot_job
from ..config import Settings
from ..errors import ConfigurationError
from ..schemas import ErrorResponse
from .access import authorize_trigger

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )


def build_router(settings: Settings) -> APIRouter:
    router = APIRouter()

    @router.get("/api/health")
    async def health():
        return {"status": "ok"}

    @router.get("/api/cron/storyteller")
    async def trigger_snapshot_job(request: Request):
        """Collect and store today's leaderboard snapshots."""
        logger.info("Snapshot job triggered")
        if not authorize_trigger(request, cron_secret=settings.cron_secret):
            logger.warning(
                "Rejected snapshot trigger from host=%s",
                request.client.host if request.client else "",
            )
            return _error(401, "Unauthorized")

        try:
            result = await run_snapshot_job(settings)
        except ConfigurationError as exc:
            logger.error("Snapshot job not configured: %s", exc)
            return _error(500, str(exc))
        except Exception as exc:
            logger.exception("Snapshot job failed")
            return _error(500, str(exc) or type(exc).__name__)

        return JSONResponse(content=result.model_dump(by_alias=True))

    return router
