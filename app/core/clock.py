"""Time helpers.

Timestamps are stored as naive UTC datetimes.
"""
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Optional, Tuple

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_day_bounds(moment: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Return the [start, end) UTC bounds of the server's local calendar day.

    ``moment`` is an aware datetime (defaults to now); the bounds are naive UTC
    so they compare directly with stored timestamps. Each midnight is resolved
    with the local offset in effect at that midnight, so days with a DST change
    are 23 or 25 hours long.
    """
    day = (moment or datetime.now(timezone.utc)).astimezone().date()
    start_local = datetime.combine(day, time()).astimezone()
    end_local = datetime.combine(day + timedelta(days=1), time()).astimezone()
    return (
        start_local.astimezone(timezone.utc).replace(tzinfo=None),
        end_local.astimezone(timezone.utc).replace(tzinfo=None),
    )
