"""
Highlighted or blocked spans of time.

A TimeRegion marks part of a day in the day view (lunch break, after
hours); a DayRegion marks whole days in the month view (holidays). Both may
repeat through an RRULE string, expanded with the same machinery as
recurring iCalendar events.
"""

from dataclasses import dataclass, replace
from datetime import datetime, date, time as dt_time, timedelta
from typing import Iterable, Optional

from .debug import debug_print
from .event_source import expand_rule
from .models import DateRange, DateLike, InvalidArgumentError, TimeWindow, _as_date
from .time_utils import time_to_offset, duration_to_height


def _occurrence_on(start: datetime, end: datetime, rrule: str, day: date) -> Optional[datetime]:
    """Start of the rule's occurrence on ``day``, or None."""
    try:
        occurrences = expand_rule(start, end, rrule, DateRange.for_day(day))
    except ValueError as e:
        debug_print("REGION", f"Cannot expand rule {rrule!r}: {e}")
        return None
    for occ_start, _ in occurrences:
        if occ_start.date() == day:
            return occ_start
    return None


@dataclass(frozen=True)
class TimeRegion:
    id: str
    start: datetime
    end: datetime
    text: Optional[str] = None
    color: Optional[str] = None
    block_interaction: bool = False
    recurrence_rule: Optional[str] = None

    def __post_init__(self):
        if self.end < self.start:
            raise InvalidArgumentError(f"Region {self.id!r} ends before it starts")

    def contains(self, moment: datetime) -> bool:
        """Half-open: the end moment itself is outside the region."""
        return self.start <= moment < self.end

    def overlaps(self, range_start: datetime, range_end: datetime) -> bool:
        return self.start < range_end and self.end > range_start

    def expanded_for_date(self, day: DateLike) -> Optional['TimeRegion']:
        """
        The concrete region shown on ``day``, or None.

        A one-off region applies only on its own start date. A recurring
        one yields its occurrence on that date, with the date appended to
        the id (``lunch_2026-02-14``) and no recurrence rule.
        An unparseable rule never applies.
        """
        day = _as_date(day)
        if self.recurrence_rule is None:
            return self if self.start.date() == day else None

        occurrence = _occurrence_on(self.start, self.end, self.recurrence_rule, day)
        if occurrence is None:
            return None
        return replace(
            self,
            id=f"{self.id}_{day.isoformat()}",
            start=occurrence,
            end=occurrence + (self.end - self.start),
            recurrence_rule=None,
        )

    def offsets(self, window: TimeWindow) -> tuple[float, float]:
        """(top, height) in pixels within the day view's time axis."""
        top = time_to_offset(self.start, window.start_hour, window.hour_height)
        height = duration_to_height(self.end - self.start, window.hour_height)
        return top, height


@dataclass(frozen=True)
class DayRegion:
    id: str
    date: date
    text: Optional[str] = None
    color: Optional[str] = None
    block_interaction: bool = False
    recurrence_rule: Optional[str] = None

    def applies_to(self, day: DateLike) -> bool:
        day = _as_date(day)
        anchor = _as_date(self.date)
        if self.recurrence_rule is None:
            return anchor == day
        if day < anchor:
            return False
        anchor_start = datetime.combine(anchor, dt_time.min)
        occurrence = _occurrence_on(
            anchor_start, anchor_start + timedelta(days=1), self.recurrence_rule, day
        )
        return occurrence is not None


def regions_for_date(regions: Iterable[TimeRegion], day: DateLike) -> list[TimeRegion]:
    """Concrete regions shown on ``day``, recurring ones expanded."""
    result = []
    for region in regions:
        expanded = region.expanded_for_date(day)
        if expanded is not None:
            result.append(expanded)
    return result


def blocked_time(regions: Iterable[TimeRegion], start: datetime, end: datetime) -> bool:
    """True if any interaction-blocking region overlaps ``[start, end)``."""
    return any(r.block_interaction and r.overlaps(start, end) for r in regions)
