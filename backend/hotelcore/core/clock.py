"""
Time helpers

Everything that needs "now" goes through this module so the hotel-local
date and the duplicate-order window can be controlled in tests.
"""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from hotelcore.core.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_timezone(tz_name) -> ZoneInfo:
    """IANA zone for a hotel, falling back to the configured default"""
    try:
        return ZoneInfo(tz_name or settings.DEFAULT_HOTEL_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(settings.DEFAULT_HOTEL_TIMEZONE)


def hotel_now(tz_name) -> datetime:
    return utcnow().astimezone(resolve_timezone(tz_name))


def hotel_today(tz_name) -> date:
    return hotel_now(tz_name).date()


def to_hotel_time(dt: datetime, tz_name) -> datetime:
    # Naive values coming back from SQLite are UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(resolve_timezone(tz_name))
