"""
Time calculation utilities for the day view.

Pure functions converting between wall-clock times and vertical pixel
offsets, plus time-slot and magnetic snapping.

Conversion and snapping are kept apart: ``offset_to_time`` resolves to the
minute and never snaps. The gridline interval is a purely visual setting and
must not leak into drag granularity; snapping is governed only by the slot
duration and snap range the caller passes to the ``snap_*`` functions.
"""

import math
from dataclasses import dataclass
from datetime import datetime, date, time as dt_time, timedelta
from enum import Enum
from typing import Iterable, Union

from .models import InvalidArgumentError, validate_hour_height
from .date_utils import add_days
from .timezone_utils import relocalize


MINUTES_PER_DAY = 24 * 60
VALID_GRIDLINE_INTERVALS = (1, 5, 10, 15, 20, 30, 60)


def _round_half_up(value: float) -> int:
    # Half away from zero, matching how drag offsets were rounded before
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def _at_minutes(day: Union[date, datetime], total_minutes: int) -> datetime:
    """Build ``day`` + ``total_minutes`` from calendar fields (DST-safe)."""
    days, minutes = divmod(total_minutes, MINUTES_PER_DAY)
    if isinstance(day, datetime):
        base = datetime.combine(day.date(), dt_time.min, tzinfo=day.tzinfo)
    else:
        base = datetime.combine(day, dt_time.min)
    if days:
        base = add_days(base, days)
    return relocalize(base.replace(hour=minutes // 60, minute=minutes % 60))


def time_to_offset(time: Union[datetime, dt_time], start_hour: int, hour_height: float) -> float:
    """
    Vertical offset in pixels of ``time`` below the top of the time axis.

    Example:
        time_to_offset(datetime(2026, 2, 14, 10, 30), 8, 60.0)  ->  150.0
    """
    validate_hour_height(hour_height)
    minutes_from_start = (time.hour - start_hour) * 60 + time.minute
    return (minutes_from_start / 60.0) * hour_height


def offset_to_time(
    offset: float,
    day: Union[date, datetime],
    start_hour: int,
    hour_height: float,
) -> datetime:
    """
    Time on ``day`` at the vertical ``offset``, rounded to the nearest minute.

    No snapping is applied; pass the result through ``snap_to_time_slot``
    or ``snap_to_nearby_time`` when needed.

    Example:
        offset_to_time(150.0, date(2026, 2, 14), 8, 60.0)  ->  2026-02-14 10:30
    """
    validate_hour_height(hour_height)
    minutes_from_start = _round_half_up((offset / hour_height) * 60)
    return _at_minutes(day, start_hour * 60 + minutes_from_start)


def duration_to_height(duration: timedelta, hour_height: float) -> float:
    """Height in pixels of ``duration`` (whole minutes only)."""
    validate_hour_height(hour_height)
    minutes = int(duration.total_seconds() // 60)
    return (minutes / 60.0) * hour_height


def _slot_minutes(slot_duration: timedelta) -> int:
    minutes = int(slot_duration.total_seconds() // 60)
    if minutes <= 0:
        raise InvalidArgumentError(f"Time slot duration must be at least one minute (got {slot_duration})")
    return minutes


def snap_to_time_slot(time: datetime, slot_duration: timedelta) -> datetime:
    """
    Snap ``time`` to the nearest slot boundary, counted from midnight.

    With 15-minute slots 10:37 becomes 10:30 and 10:38 becomes 10:45.
    Snapping past 23:59 lands on midnight of the following day.
    """
    slot = _slot_minutes(slot_duration)
    total_minutes = time.hour * 60 + time.minute
    snapped = _round_half_up(total_minutes / slot) * slot
    return _at_minutes(time, snapped)


def is_within_snap_range(time1: datetime, time2: datetime, snap_range: timedelta) -> bool:
    return abs(time1 - time2) <= snap_range


def snap_to_nearby_time(
    time: datetime,
    nearby_times: Iterable[datetime],
    snap_range: timedelta,
) -> datetime:
    """
    Magnetic snapping: return the nearby time closest to ``time`` if it is
    within ``snap_range`` (inclusive), otherwise ``time`` itself.

    On equal distances the candidate listed first wins.

    Example:
        snap_to_nearby_time(10:33, [10:30, 11:00], 5 min)  ->  10:30
    """
    closest_time = None
    closest_distance = None
    for nearby in nearby_times:
        if not is_within_snap_range(time, nearby, snap_range):
            continue
        distance = abs(time - nearby)
        if closest_distance is None or distance < closest_distance:
            closest_distance = distance
            closest_time = nearby
    return closest_time if closest_time is not None else time


class GridlineType(Enum):
    HOUR = "hour"
    MAJOR = "major"
    MINOR = "minor"


@dataclass(frozen=True)
class Gridline:
    """One horizontal line of the day view's time grid."""
    hour: int
    minute: int
    offset: float
    type: GridlineType
    interval_minutes: int


def classify_gridline(minute: int, interval_minutes: int) -> GridlineType:
    if minute == 0:
        return GridlineType.HOUR
    if minute == 30 and interval_minutes <= 30:
        return GridlineType.MAJOR
    return GridlineType.MINOR


def generate_gridlines(
    start_hour: int,
    end_hour: int,
    hour_height: float,
    interval_minutes: int,
) -> list[Gridline]:
    """
    Gridlines from ``start_hour`` through ``end_hour`` (inclusive) every
    ``interval_minutes``.

    Only 1, 5, 10, 15, 20, 30 and 60 divide an hour evenly; any other
    interval produces no gridlines.
    """
    validate_hour_height(hour_height)
    if interval_minutes not in VALID_GRIDLINE_INTERVALS:
        return []

    gridlines = []
    for hour in range(start_hour, end_hour + 1):
        for minute in range(0, 60, interval_minutes):
            if hour == end_hour and minute > 0:
                break
            offset = ((hour - start_hour) * 60 + minute) / 60.0 * hour_height
            gridlines.append(Gridline(
                hour=hour,
                minute=minute,
                offset=offset,
                type=classify_gridline(minute, interval_minutes),
                interval_minutes=interval_minutes,
            ))
    return gridlines
