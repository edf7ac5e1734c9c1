"""
Shared schema helpers
"""
from datetime import datetime, timezone
from typing import Optional

from hotelcore.core.clock import resolve_timezone


def format_datetime_local(dt: Optional[datetime], tz_name: Optional[str] = None) -> Optional[str]:
    """Render a stored UTC timestamp in hotel-local time"""
    if dt is None:
        return None
    # Timestamps without tzinfo are UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    local_dt = dt.astimezone(resolve_timezone(tz_name))
    return local_dt.strftime("%Y-%m-%d %H:%M:%S")
