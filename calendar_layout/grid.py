"""
Grid and range queries: which dates a view shows and which events to fetch
for it.

The layout functions never work out their own date range. The month view
asks its source for the whole visible grid (leading and trailing days of the
adjacent months included), the day view for one calendar day.
"""

from datetime import date
from typing import Optional, Protocol, Sequence

from .date_utils import generate_month_dates, days_between, visible_grid_range
from .models import CalendarEvent, DateRange, DateLike


class EventSource(Protocol):
    """Anything that can hand out the concrete events of a date range."""
    first_day_of_week: int

    def events_intersecting(self, date_range: DateRange) -> list[CalendarEvent]:
        ...


class MonthGrid:
    """The 35 or 42 dates of one month view, in display order."""

    def __init__(self, month: DateLike, first_day_of_week: int, show_sixth_row_if_needed: bool = False):
        self.month = date(month.year, month.month, 1)
        self.first_day_of_week = first_day_of_week
        self.dates = generate_month_dates(month, first_day_of_week, show_sixth_row_if_needed)
        self.range = DateRange(
            DateRange.for_day(self.dates[0]).start,
            DateRange.for_day(self.dates[-1]).end,
        )

    def __len__(self) -> int:
        return len(self.dates)

    def __repr__(self):
        return f"MonthGrid({self.month:%Y-%m}, {self.week_count} weeks from {self.dates[0]})"

    @property
    def week_count(self) -> int:
        return len(self.dates) // 7

    def week_dates(self, week_row_index: int) -> list[date]:
        if not 0 <= week_row_index < self.week_count:
            raise IndexError(f"Week row {week_row_index} outside grid of {self.week_count} weeks")
        return self.dates[week_row_index * 7:(week_row_index + 1) * 7]

    def grid_index_of(self, day: DateLike) -> Optional[int]:
        """Cell index (0-based) of ``day``, None if the grid does not show it."""
        index = days_between(self.dates[0], day)
        if 0 <= index < len(self.dates):
            return index
        return None

    def contains(self, day: DateLike) -> bool:
        return self.grid_index_of(day) is not None

    def is_current_month(self, day: DateLike) -> bool:
        return day.year == self.month.year and day.month == self.month.month


def events_in_range(events: Sequence[CalendarEvent], date_range: DateRange) -> list[CalendarEvent]:
    """Events overlapping the inclusive range, in input order."""
    return [e for e in events if date_range.overlaps(e.start, e.occupied_until)]


def fetch_month_events(
    source: EventSource,
    month: DateLike,
    show_sixth_row_if_needed: bool = False,
) -> list[CalendarEvent]:
    """
    Events for a month view: everything overlapping the visible grid, with
    the grid built from the source's own week start.
    """
    grid_range = visible_grid_range(month, source.first_day_of_week, show_sixth_row_if_needed)
    return source.events_intersecting(grid_range)


def fetch_day_events(source: EventSource, day: DateLike) -> list[CalendarEvent]:
    return source.events_intersecting(DateRange.for_day(day))
