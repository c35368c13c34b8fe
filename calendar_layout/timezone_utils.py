"""
Timezone utilities for the calendar layout engine.

The layout functions work on naive wall-clock datetimes. Event sources
that deliver timezone-aware values (iCalendar feeds, for example) convert
them to naive local time with these helpers before handing them over.
"""

from datetime import datetime
import pytz


# Default timezone - can be overridden by config
_local_timezone_name: str = "UTC"


def set_timezone(timezone_name: str):
    """Set the local timezone used to interpret wall-clock times."""
    global _local_timezone_name
    _local_timezone_name = timezone_name


def get_timezone_name() -> str:
    return _local_timezone_name


def get_local_timezone():
    """
    Get the local timezone as a pytz timezone object.

    Unknown timezone names fall back to UTC.
    """
    try:
        return pytz.timezone(_local_timezone_name)
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def to_local_naive(dt: datetime) -> datetime:
    """
    Convert an aware datetime to a naive local wall-clock datetime.

    Naive datetimes are assumed to be local already and are returned
    unchanged.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(get_local_timezone()).replace(tzinfo=None)


def localize(dt: datetime, tz=None) -> datetime:
    """
    Attach a timezone to a naive wall-clock datetime.

    Uses pytz's ``localize`` so the UTC offset matches the date (summer
    or winter time). Aware datetimes are normalized into ``tz``.
    """
    if tz is None:
        tz = get_local_timezone()
    if dt.tzinfo is None:
        return tz.localize(dt)
    return tz.normalize(dt.astimezone(tz))


def relocalize(dt: datetime) -> datetime:
    """
    Re-attach the correct UTC offset to an aware datetime whose wall-clock
    fields were changed (e.g. by adding days across a DST switch).

    Only pytz zones need this; other tzinfo implementations compute the
    offset from the wall clock themselves.
    """
    tz = dt.tzinfo
    if tz is None or not hasattr(tz, 'localize'):
        return dt
    zone = getattr(tz, 'zone', None)
    if zone is None:
        return dt
    return pytz.timezone(zone).localize(dt.replace(tzinfo=None))
