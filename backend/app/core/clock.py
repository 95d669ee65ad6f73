"""Resolve the user's local calendar day and wall-clock time."""
from __future__ import annotations

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from app.core.config import settings


def local_now(tz_name: str | None = None) -> datetime:
    return datetime.now(ZoneInfo(tz_name or settings.user_timezone))


def local_today(tz_name: str | None = None) -> date:
    """Today's date in the configured user timezone."""
    return local_now(tz_name).date()


def local_time(tz_name: str | None = None) -> time:
    """Current wall-clock time truncated to the minute."""
    return local_now(tz_name).time().replace(second=0, microsecond=0, tzinfo=None)
