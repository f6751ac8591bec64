"""Capture date calculation with timezone and day-start offset."""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from aura.profile import parse_time


def calculate_capture_date(
    utc_timestamp: str,
    timezone_str: str,
    day_start: str
) -> str:
    """Convert UTC timestamp to the capture date (YYYY-MM-DD).

    Args:
        utc_timestamp: ISO 8601 UTC timestamp
        timezone_str: IANA timezone string (e.g., "Europe/Madrid")
        day_start: Day start time in HH:MM or HH:MM:SS format

    Returns:
        Capture date as YYYY-MM-DD string

    Times before ``day_start`` still belong to the previous day, so a task
    typed at 01:00 with a 04:00 day start lands on yesterday's list.

    Example:
        UTC: 2026-01-30T23:30:00Z
        Timezone: Europe/Madrid (UTC+1)
        Local: 2026-01-31T00:30:00
        Day start: 04:00:00
        → Capture date: 2026-01-30
    """
    utc_dt = datetime.fromisoformat(utc_timestamp.replace('Z', '+00:00'))

    try:
        tz = ZoneInfo(timezone_str)
    except ZoneInfoNotFoundError as e:
        raise ValueError(f"Invalid timezone '{timezone_str}': {e}")

    local_dt = utc_dt.astimezone(tz)

    hours, minutes, seconds = parse_time(day_start)
    day_start_time = time(hours, minutes, seconds)

    if local_dt.time() < day_start_time:
        capture_dt = local_dt.date() - timedelta(days=1)
    else:
        capture_dt = local_dt.date()

    return capture_dt.isoformat()


def get_current_capture_date(timezone_str: str, day_start: str) -> date:
    """Get today's capture date for the profile settings.

    Args:
        timezone_str: IANA timezone string
        day_start: Day start time in HH:MM or HH:MM:SS format

    Returns:
        Current capture date
    """
    now_utc = datetime.now(timezone.utc).isoformat()
    return date.fromisoformat(calculate_capture_date(now_utc, timezone_str, day_start))
