"""Time and timezone utilities for mention windows."""

from datetime import datetime, timezone, timedelta
from typing import Optional, Union

from dateutil import parser as date_parser

from trendbot.core.logging import get_logger

logger = get_logger(__name__)


def to_utc(dt: datetime) -> datetime:
    """
    Convert datetime to UTC timezone.

    Naive datetimes are assumed to already be in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Union[str, int, float, datetime, None]) -> Optional[datetime]:
    """
    Parse a publication timestamp into an aware UTC datetime.

    Accepts datetimes, ISO 8601 / RFC 2822 strings and epoch seconds.
    Returns None when the value cannot be interpreted.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return to_utc(value)

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Epoch timestamp out of range: {value}")
            return None

    if isinstance(value, str):
        try:
            return to_utc(date_parser.parse(value.strip()))
        except (ValueError, OverflowError) as e:
            logger.warning(f"Could not parse timestamp '{value}': {e}")
            return None

    return None


def age_hours(dt: datetime, now: datetime) -> float:
    """Age of ``dt`` in hours relative to ``now``; never negative."""
    delta = to_utc(now) - to_utc(dt)
    return max(0.0, delta.total_seconds() / 3600)


def within_window(dt: datetime, now: datetime, window: timedelta) -> bool:
    """True if ``dt`` is no older than ``window`` measured back from ``now``."""
    return to_utc(now) - to_utc(dt) <= window


def get_current_utc_time() -> datetime:
    """Get current time in UTC."""
    return datetime.now(timezone.utc)
