"""Daily worker infrastructure.

Provides :func:`run_daily_loop`, the lifecycle shared by scheduled workers:

* Signal-based graceful shutdown (``SIGINT`` / ``SIGTERM``)
* Heartbeat state machine
* Sleep until the next scheduled UTC time, then run one cycle

Workers supply a preflight check and an async cycle callable.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from ..config import Settings, get_settings
from ..utils.datetime import next_run_at
from .heartbeat import WorkerHeartbeat

logger = logging.getLogger(__name__)

# ── Shutdown primitives ─────────────────────────────────────────────

# Created per loop run: an Event is bound to the loop that first waits on it.
_shutdown: Optional[asyncio.Event] = None


def request_shutdown() -> None:
    if _shutdown is not None:
        _shutdown.set()


def _handle_signal(worker_name: str) -> None:
    logger.info("%s: shutdown signal received", worker_name)
    request_shutdown()


def install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    worker_name: str,
) -> None:
    """Install SIGINT/SIGTERM handlers with portable fallback."""
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _handle_signal, worker_name)
        except (NotImplementedError, RuntimeError, ValueError):
            try:
                signal.signal(sig, lambda *_: _handle_signal(worker_name))
            except (ValueError, OSError):
                logger.warning(
                    "%s: unable to install signal handler for %s",
                    worker_name,
                    sig.name,
                )


# ── Preflight / cycle results ───────────────────────────────────────


@dataclass
class PreflightResult:
    """Returned by a worker's preflight check.

    *ok=False* means the worker should exit immediately.
    """

    ok: bool = True
    reason: str = ""
    extra_heartbeat: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CycleSummary:
    """Compact summary a cycle returns."""

    log_message: str = ""
    heartbeat_details: Dict[str, Any] = field(default_factory=dict)
    errors: Sequence[str] = ()


# ── Main loop ───────────────────────────────────────────────────────


async def run_daily_loop(
    *,
    worker_name: str,
    preflight: Callable[[Settings], PreflightResult],
    run_cycle: Callable[[Settings, WorkerHeartbeat], Awaitable[CycleSummary]],
    clock: Optional[Callable[[], datetime]] = None,
) -> None:
    """Generic once-a-day worker event loop.

    Parameters
    ----------
    worker_name:
        ID used for logging and heartbeat files (e.g. ``"collector-worker"``).
    preflight:
        Called once at startup; a falsy ``ok`` exits the worker.
    run_cycle:
        Awaited once per scheduled run with ``(settings, heartbeat)``.
        Exceptions are logged and the loop keeps its schedule.
    clock:
        Returns the current UTC time; overridable for tests.
    """
    global _shutdown
    settings = get_settings()
    heartbeat = WorkerHeartbeat(settings, worker_name)
    logging.basicConfig(level=settings.log_level)
    _shutdown = asyncio.Event()
    now_fn = clock or (lambda: datetime.now(timezone.utc))

    pf = preflight(settings)
    if not pf.ok:
        logger.info("%s: disabled (%s). Exiting.", worker_name, pf.reason)
        heartbeat.update("disabled", {"reason": pf.reason})
        return

    hour, minute = settings.collector_schedule
    loop = asyncio.get_running_loop()
    install_signal_handlers(loop, worker_name)

    logger.info("%s started — schedule=%02d:%02d UTC", worker_name, hour, minute)
    heartbeat.update(
        "running",
        {"schedule_utc": f"{hour:02d}:{minute:02d}", **pf.extra_heartbeat},
    )

    run_now = settings.collector_run_on_start
    while not _shutdown.is_set():
        if not run_now:
            # ── Sleep / shutdown ────────────────────────────────
            next_at = next_run_at(now_fn(), hour, minute)
            wait_seconds = max((next_at - now_fn()).total_seconds(), 0.0)
            heartbeat.update("sleeping", {"next_run_at": next_at.isoformat()})
            try:
                await asyncio.wait_for(_shutdown.wait(), timeout=wait_seconds)
                break
            except asyncio.TimeoutError:
                pass
        run_now = False

        cycle_started = now_fn()
        heartbeat.update("running", {"cycle_started_at": cycle_started.isoformat()})
        try:
            summary = await run_cycle(settings, heartbeat)
            if summary.log_message:
                logger.info("%s: %s", worker_name, summary.log_message)
            heartbeat.mark_success(
                {
                    "cycle_started_at": cycle_started.isoformat(),
                    **summary.heartbeat_details,
                }
            )
            for err in list(summary.errors)[:5]:
                logger.warning("%s cycle error: %s", worker_name, err)
        except Exception:
            logger.exception("%s cycle failed", worker_name)
            heartbeat.update("error", {"cycle_started_at": cycle_started.isoformat()})

    logger.info("%s stopped", worker_name)
    heartbeat.update("stopped")
