from __future__ import annotations

import json
import logging
import os
import re
import socket
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import Settings

logger = logging.getLogger(__name__)
_SAFE_SEGMENT_RE = re.compile(r"[^a-zA-Z0-9_.-]+")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class WorkerHeartbeat:
    """Heartbeat file for a scheduled worker.

    Besides the current state, the file carries ``last_success_at``: the
    time the last cycle finished.  The collector runs once a day, so a worker
    that restarts (or fails today's cycle) keeps reporting the previous
    success instead of resetting it, and a stalled job shows up as a stale
    timestamp in the file alone.
    """

    def __init__(self, settings: Settings, worker_id: str) -> None:
        self.worker_id = worker_id
        self.base_dir = Path(settings.worker_heartbeat_dir).expanduser()
        self.hostname = socket.gethostname()
        self.pid = os.getpid()
        configured_instance = os.getenv("WORKER_HEARTBEAT_INSTANCE", "").strip()
        raw_instance = configured_instance or f"{self.hostname}-{self.pid}"
        self.instance_id = _SAFE_SEGMENT_RE.sub("_", raw_instance).strip("._-") or str(
            self.pid
        )
        self.path = self.base_dir / f"{worker_id}--{self.instance_id}.json"
        self.last_success_at: Optional[str] = self._previous_success()

    def _previous_success(self) -> Optional[str]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        value = payload.get("last_success_at") if isinstance(payload, dict) else None
        return value if isinstance(value, str) and value else None

    def mark_success(self, details: Optional[Dict[str, Any]] = None) -> None:
        self.last_success_at = _utc_now_iso()
        self.update("running", details)

    def update(
        self,
        state: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        payload: Dict[str, Any] = {
            "worker_id": self.worker_id,
            "instance_id": self.instance_id,
            "state": state,
            "updated_at": _utc_now_iso(),
            "last_success_at": self.last_success_at,
            "pid": self.pid,
            "hostname": self.hostname,
            "details": details or {},
        }
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(".tmp")
            tmp_path.write_text(
                json.dumps(payload, ensure_ascii=False, sort_keys=True), encoding="utf-8"
            )
            tmp_path.replace(self.path)
        except OSError:
            logger.debug("Heartbeat write failed for %s", self.worker_id, exc_info=True)
