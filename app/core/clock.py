"""
Cutoff-date helpers.

"Past" always means strictly before today's date in the configured local
offset (+05:30 by default), truncated to day granularity.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from app.core.config import settings


def local_offset() -> timezone:
    return timezone(timedelta(minutes=settings.LOCAL_UTC_OFFSET_MINUTES))


def local_now(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(local_offset())


def local_today(now: Optional[datetime] = None) -> date:
    return local_now(now).date()


# FastAPI dependencies (overridden in tests)
def get_today() -> date:
    return local_today()


def get_now() -> datetime:
    return datetime.now(timezone.utc)
