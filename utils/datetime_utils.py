from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Tuple


def parse_canvas_datetime(value: str) -> datetime:
    """
    Parse Canvas ISO8601 datetime strings into timezone-aware datetimes.
    Canvas typically returns UTC with 'Z'. Example: '2025-10-01T03:59:00Z'.
    """
    if not value:
        raise ValueError("Empty datetime string")
    # Normalize trailing Z to +00:00 for fromisoformat
    normalized = value.replace("Z", "+00:00")
    dt = datetime.fromisoformat(normalized)
    # Naive values are UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def current_year_and_semester(now: Optional[datetime] = None) -> Tuple[str, str]:
    """
    Return the academic (year, semester) for ``now``.
    The first semester runs through July 15th; the second starts the day after.
    """
    now = now or datetime.now(timezone.utc)
    if now.month < 7 or (now.month == 7 and now.day <= 15):
        semester = "1"
    else:
        semester = "2"
    return str(now.year), semester
