from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIME = "00:00"
_TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def combine_date_time(date_value: Optional[str], time_value: Optional[str]) -> Optional[datetime]:
    """Combine a ``YYYY-MM-DD`` date string and an optional ``HH:MM`` time string.

    A missing or blank time defaults to midnight. Anything that cannot be parsed
    yields ``None`` so callers can drop the item instead of failing the whole
    computation.
    """
    if not date_value or not isinstance(date_value, str):
        return None
    try:
        parsed_date = date.fromisoformat(date_value.strip())
    except ValueError:
        return None

    raw_time = time_value.strip() if isinstance(time_value, str) else ""
    if not raw_time:
        raw_time = DEFAULT_TIME
    for fmt in _TIME_FORMATS:
        try:
            parsed_time = datetime.strptime(raw_time, fmt).time()
        except ValueError:
            continue
        return datetime.combine(parsed_date, parsed_time)
    return None


def local_now(timezone_name: str) -> datetime:
    # Segment dates and times are wall-clock values, so comparisons use naive local time.
    try:
        zone = ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError):
        zone = ZoneInfo("UTC")
    return datetime.now(zone).replace(tzinfo=None)
