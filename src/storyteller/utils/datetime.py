"""Business-date and schedule helpers.

The collector runs shortly after midnight in the reference timezone and
files each snapshot under the day that just ended there.  All helpers take
an explicit ``now`` so the policy is testable without freezing the clock.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import BUSINESS_TIMEZONE


def to_utc(dt: datetime) -> datetime:
    """Ensure a datetime is UTC-aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def reference_today(now: Optional[datetime] = None, tz: str = BUSINESS_TIMEZONE) -> date:
    """Calendar date of *now* in the reference timezone."""
    moment = to_utc(now) if now is not None else datetime.now(timezone.utc)
    return moment.astimezone(ZoneInfo(tz)).date()


def business_date(now: Optional[datetime] = None, tz: str = BUSINESS_TIMEZONE) -> str:
    """ISO date of the day that just completed in the reference timezone.

    This is "yesterday" in *tz*, not in UTC: at 2025-03-01T15:30Z the Seoul
    date is already 2025-03-02, so the key is ``2025-03-01``.
    """
    return (reference_today(now, tz) - timedelta(days=1)).isoformat()


def next_run_at(now: datetime, hour: int, minute: int) -> datetime:
    """Next UTC instant at ``hour:minute`` strictly after *now*."""
    now = to_utc(now)
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate
