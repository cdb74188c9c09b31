"""
Time Utilities

Timezone handling for deadline and appeal-window comparisons.

Functions:
- utc_now(): Current time, timezone-aware UTC
- as_utc(dt): Attach UTC to naive datetimes (SQLite drops tzinfo on read)
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
