"""
Plain data types shared by the layout modules.

Everything here is an immutable value: the layout functions read events and
parameters and return fresh results, they never modify their input.
"""

from dataclasses import dataclass, replace
from datetime import datetime, date, time as dt_time, timedelta
from typing import Iterator, Optional, Union


class InvalidArgumentError(ValueError):
    """Raised for structurally invalid layout input (bad window, reversed event, ...)."""


DateLike = Union[date, datetime]


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, dt_time.min)


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class CalendarEvent:
    """
    One concrete event instance (already expanded from any recurrence rule).

    ``start``/``end`` are naive wall-clock datetimes. For all-day events the
    time of day is dropped and ``end`` names the last day of the event
    (inclusive), so a one-day all-day event has ``start == end``.
    """
    id: str
    start: datetime
    end: datetime
    is_all_day: bool = False
    title: str = ""
    color: Optional[str] = None
    comment: Optional[str] = None
    external_id: Optional[str] = None
    occurrence_id: Optional[str] = None

    def __post_init__(self):
        start = _as_datetime(self.start)
        end = _as_datetime(self.end)
        if self.is_all_day:
            start = datetime.combine(start.date(), dt_time.min)
            end = datetime.combine(end.date(), dt_time.min)
        # frozen: write through object.__setattr__
        object.__setattr__(self, 'start', start)
        object.__setattr__(self, 'end', end)
        if end < start:
            raise InvalidArgumentError(
                f"Event {self.id!r} ends before it starts ({end} < {start})"
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def start_day(self) -> date:
        return self.start.date()

    @property
    def end_day(self) -> date:
        return self.end.date()

    @property
    def occupied_until(self) -> datetime:
        """Last moment the event occupies; the end of the last day for all-day events."""
        if self.is_all_day:
            return datetime.combine(self.end.date(), dt_time.max)
        return self.end

    @property
    def is_multi_day(self) -> bool:
        """True if start and end fall on different calendar days."""
        return self.start_day < self.end_day

    @property
    def span_days(self) -> int:
        """Number of calendar days touched, counting both ends."""
        return (self.end_day - self.start_day).days + 1

    def copy_with(self, **changes) -> 'CalendarEvent':
        return replace(self, **changes)

    def __repr__(self):
        return f"CalendarEvent(id={self.id!r}, start={self.start}, end={self.end}, all_day={self.is_all_day})"


@dataclass(frozen=True)
class DateRange:
    """An inclusive ``[start, end]`` span of wall-clock time."""
    start: datetime
    end: datetime

    def __post_init__(self):
        object.__setattr__(self, 'start', _as_datetime(self.start))
        object.__setattr__(self, 'end', _as_datetime(self.end))
        if self.end < self.start:
            raise InvalidArgumentError(f"Range end {self.end} is before start {self.start}")

    @classmethod
    def for_day(cls, day: DateLike) -> 'DateRange':
        """The whole calendar day, 00:00:00 through 23:59:59.999999."""
        d = _as_date(day)
        return cls(datetime.combine(d, dt_time.min), datetime.combine(d, dt_time.max))

    def contains(self, moment: DateLike) -> bool:
        moment = _as_datetime(moment)
        return self.start <= moment <= self.end

    def overlaps(self, start: DateLike, end: DateLike) -> bool:
        """Inclusive overlap test used when querying event sources."""
        return _as_datetime(start) <= self.end and _as_datetime(end) >= self.start

    def dates(self) -> Iterator[date]:
        """Yield every calendar date touched by the range."""
        current = self.start.date()
        last = self.end.date()
        while current <= last:
            yield current
            current = current + timedelta(days=1)

    @property
    def day_count(self) -> int:
        return (self.end.date() - self.start.date()).days + 1


@dataclass(frozen=True)
class TimeWindow:
    """The visible vertical time axis of a day view."""
    start_hour: int = 0
    end_hour: int = 24
    hour_height: float = 60.0

    def __post_init__(self):
        if not (0 <= self.start_hour <= 24 and 0 <= self.end_hour <= 24):
            raise InvalidArgumentError(
                f"Hours must be within 0-24 (got {self.start_hour}-{self.end_hour})"
            )
        if self.start_hour >= self.end_hour:
            raise InvalidArgumentError(
                f"start_hour ({self.start_hour}) must be before end_hour ({self.end_hour})"
            )
        if not self.hour_height > 0:
            raise InvalidArgumentError(f"hour_height must be positive (got {self.hour_height})")

    @property
    def hours(self) -> int:
        return self.end_hour - self.start_hour

    @property
    def total_height(self) -> float:
        return self.hours * self.hour_height

    def contains(self, moment: Union[datetime, dt_time]) -> bool:
        """True if the wall-clock time lies inside ``[start_hour, end_hour)``."""
        minutes = moment.hour * 60 + moment.minute
        return self.start_hour * 60 <= minutes < self.end_hour * 60


def validate_first_day_of_week(first_day_of_week: int) -> int:
    if not isinstance(first_day_of_week, int) or not 0 <= first_day_of_week <= 6:
        raise InvalidArgumentError(
            f"first_day_of_week must be 0 (Sunday) to 6 (Saturday), got {first_day_of_week!r}"
        )
    return first_day_of_week


def validate_hour_height(hour_height: float) -> float:
    if not hour_height > 0:
        raise InvalidArgumentError(f"hour_height must be positive (got {hour_height})")
    return hour_height
