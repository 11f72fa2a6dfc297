from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Tuple

# Fixed collection policy. These are deliberately not read from the
# environment: every deployment captures the same windows from the same API.
LOOKBACK_DAYS: Tuple[int, ...] = (7, 14, 30, 90)
METRICS_API_BASE_URL = "https://mashboard-api.despreadlabs.io/storyteller-leaderboard"
METRICS_PAGE_LIMIT = 50
BUSINESS_TIMEZONE = "Asia/Seoul"

BLOB_BACKENDS = {"vercel", "s3"}

_SCHEDULE_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def _env_bool(name: str, default: str = "0") -> bool:
    value = os.getenv(name, default)
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    notion_token: str = os.getenv("NOTION_TOKEN", "")
    notion_database_id: str = os.getenv("NOTION_STORYTELLER_DB_ID", "")
    notion_api_base_url: str = os.getenv(
        "NOTION_API_BASE_URL", "https://api.notion.com/v1"
    )
    notion_version: str = os.getenv("NOTION_VERSION", "2025-09-03")
    cron_secret: str = os.getenv("CRON_SECRET", "")

    # ── Blob storage ─────────────────────────────────────────
    blob_backend: str = os.getenv("BLOB_BACKEND", "vercel").strip().lower()
    blob_read_write_token: str = os.getenv("BLOB_READ_WRITE_TOKEN", "")
    blob_api_url: str = os.getenv("BLOB_API_URL", "https://blob.vercel-storage.com")
    s3_bucket: str = os.getenv("S3_BUCKET", "")
    s3_region: str = os.getenv("S3_REGION", "us-east-1")
    s3_endpoint_url: str = os.getenv("S3_ENDPOINT_URL", "")
    s3_public_base_url: str = os.getenv("S3_PUBLIC_BASE_URL", "")

    # ── Upstream behaviour ───────────────────────────────────
    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
    metrics_max_concurrency: int = int(os.getenv("METRICS_MAX_CONCURRENCY", "4"))

    # ── Collector worker ─────────────────────────────────────
    collector_schedule_utc: str = os.getenv("COLLECTOR_SCHEDULE_UTC", "15:05")
    collector_run_on_start: bool = _env_bool("COLLECTOR_RUN_ON_START", "0")
    worker_heartbeat_dir: str = os.getenv(
        "WORKER_HEARTBEAT_DIR", "/tmp/storyteller-heartbeats"
    )

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def collector_schedule(self) -> Tuple[int, int]:
        """Parsed ``HH:MM`` schedule as ``(hour, minute)`` in UTC."""
        match = _SCHEDULE_RE.match(self.collector_schedule_utc or "")
        if not match:
            raise ValueError(
                f"COLLECTOR_SCHEDULE_UTC must be HH:MM, got {self.collector_schedule_utc!r}"
            )
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise ValueError(
                f"COLLECTOR_SCHEDULE_UTC out of range: {self.collector_schedule_utc!r}"
            )
        return hour, minute


def get_settings() -> Settings:
    return Settings()


def validate_settings(settings: Settings) -> None:
    """Reject settings that can never produce a working run."""
    if settings.blob_backend not in BLOB_BACKENDS:
        raise ValueError(
            f"BLOB_BACKEND must be one of {sorted(BLOB_BACKENDS)}, "
            f"got {settings.blob_backend!r}"
        )
    if settings.metrics_max_concurrency < 1:
        raise ValueError("METRICS_MAX_CONCURRENCY must be >= 1")
    if settings.http_timeout_seconds <= 0:
        raise ValueError("HTTP_TIMEOUT_SECONDS must be > 0")
    settings.collector_schedule  # raises ValueError when malformed
