"""
Month view layout: stacking multi-day events across the week rows of the grid.

An event that runs from Wednesday to the following Tuesday is cut into one
segment per week row it touches (Wed-Sat and Sun-Tue with a Sunday week
start). Each week row then stacks its segments into rows, lowest free row
first, and days whose events do not fit under ``max_visible_rows`` report
how many are hidden.
"""

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Optional, Sequence

from .date_utils import date_only, days_between, generate_month_dates
from .debug import debug_print
from .models import CalendarEvent, DateLike, InvalidArgumentError


DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class WeekSegment:
    """
    The part of one event drawn on one week row of the month grid.

    ``is_first_segment``/``is_last_segment`` are true only where the segment
    meets the event's real start/end. A segment cut by a week wrap or by the
    edge of the visible grid has a square edge there, not a rounded one.
    ``row_index`` is None until the segment has been through ``assign_rows``.
    """
    event: CalendarEvent
    week_row_index: int
    start_day_in_week: int
    end_day_in_week: int
    is_first_segment: bool
    is_last_segment: bool
    day_index_in_event: int
    total_days_in_event: int
    row_index: Optional[int] = None

    @property
    def span_days(self) -> int:
        return self.end_day_in_week - self.start_day_in_week + 1

    def covers_day(self, day_in_week: int) -> bool:
        return self.start_day_in_week <= day_in_week <= self.end_day_in_week


@dataclass(frozen=True)
class MultiDayEventLayout:
    """One multi-day event with its segments, ordered by week row."""
    event: CalendarEvent
    segments: list[WeekSegment]


@dataclass(frozen=True)
class OverflowInfo:
    hidden_count: int
    hidden_events: list[CalendarEvent]
    visible_events: list[CalendarEvent]


@dataclass(frozen=True)
class WeekLayoutFrame:
    """
    Row assignments for one week row of the month grid.

    ``column_max_rows`` maps a day index (0-6) to the highest row used on
    that day; days without events are missing from the map.
    """
    week_row_index: int
    week_dates: list[date]
    assignments: list[WeekSegment]
    total_rows: int
    column_max_rows: dict[int, int] = field(default_factory=dict)

    def max_row_at_column(self, column: int) -> int:
        """Highest row used on the day, -1 if the day is empty."""
        return self.column_max_rows.get(column, -1)

    def row_count_at_column(self, column: int) -> int:
        return self.max_row_at_column(column) + 1


@dataclass(frozen=True)
class MonthLayout:
    month: date
    first_day_of_week: int
    grid_dates: list[date]
    weeks: list[WeekLayoutFrame]
    overflow: list[dict[int, OverflowInfo]]
    max_visible_rows: Optional[int] = None

    @property
    def week_count(self) -> int:
        return len(self.weeks)

    def hidden_count(self, day: date) -> int:
        """Number of events hidden on ``day`` (0 for days outside the grid)."""
        offset = days_between(self.grid_dates[0], day)
        if offset < 0 or offset >= len(self.grid_dates):
            return 0
        week, column = divmod(offset, DAYS_PER_WEEK)
        info = self.overflow[week].get(column)
        return info.hidden_count if info else 0


def is_multi_day(event: CalendarEvent) -> bool:
    """
    True if the event's start and end fall on different calendar days.

    An all-day event on a single day is not multi-day.
    """
    return event.start_day < event.end_day


def month_sort_key(event: CalendarEvent):
    """
    Stacking order for the month view.

    1. all-day multi-day events
    2. timed multi-day events
    3. all-day single-day events
    4. timed single-day events

    Within a category: earlier start first, then longer events, then id.
    """
    multi = is_multi_day(event)
    if multi and event.is_all_day:
        category = 0
    elif multi:
        category = 1
    elif event.is_all_day:
        category = 2
    else:
        category = 3
    return (category, event.start, -event.duration, event.id)


def _segments_for_event(
    event: CalendarEvent,
    grid_start: date,
    grid_end: date,
) -> list[WeekSegment]:
    event_start = event.start_day
    event_end = event.end_day
    if event_end < grid_start or event_start > grid_end:
        return []

    visible_start = max(event_start, grid_start)
    visible_end = min(event_end, grid_end)
    start_index = days_between(grid_start, visible_start)
    end_index = days_between(grid_start, visible_end)
    total_days = days_between(event_start, event_end) + 1

    segments = []
    current = start_index
    while current <= end_index:
        week_row, day_in_week = divmod(current, DAYS_PER_WEEK)
        week_end_index = (week_row + 1) * DAYS_PER_WEEK - 1
        segment_end_index = min(end_index, week_end_index)
        segment_first_date = grid_start + timedelta(days=current)

        segments.append(WeekSegment(
            event=event,
            week_row_index=week_row,
            start_day_in_week=day_in_week,
            end_day_in_week=segment_end_index % DAYS_PER_WEEK,
            is_first_segment=current == start_index and visible_start == event_start,
            is_last_segment=segment_end_index == end_index and visible_end == event_end,
            day_index_in_event=days_between(event_start, segment_first_date),
            total_days_in_event=total_days,
        ))
        current = week_end_index + 1
    return segments


def calculate_multi_day_layouts(
    events: Sequence[CalendarEvent],
    month: DateLike,
    first_day_of_week: int,
    show_sixth_row_if_needed: bool = False,
) -> list[MultiDayEventLayout]:
    """
    Segments for every multi-day event overlapping the visible grid.

    Events are returned in stacking order (``month_sort_key``); events
    entirely outside the grid are dropped.
    """
    grid = generate_month_dates(month, first_day_of_week, show_sixth_row_if_needed)
    multi_day = sorted((e for e in events if is_multi_day(e)), key=month_sort_key)

    layouts = []
    for event in multi_day:
        segments = _segments_for_event(event, grid[0], grid[-1])
        if segments:
            layouts.append(MultiDayEventLayout(event, segments))
    return layouts


def calculate_week_segments(
    events: Sequence[CalendarEvent],
    month: DateLike,
    first_day_of_week: int,
    show_sixth_row_if_needed: bool = False,
) -> list[list[WeekSegment]]:
    """
    Segments of all events (single-day ones too), bucketed per week row.

    Each week's list is in stacking order. A single-day event gets one
    segment that is both first and last.
    """
    grid = generate_month_dates(month, first_day_of_week, show_sixth_row_if_needed)
    week_count = len(grid) // DAYS_PER_WEEK
    weeks: list[list[WeekSegment]] = [[] for _ in range(week_count)]

    for event in sorted(events, key=month_sort_key):
        for segment in _segments_for_event(event, grid[0], grid[-1]):
            weeks[segment.week_row_index].append(segment)
    return weeks


def assign_rows(segments: Sequence[WeekSegment]) -> list[WeekSegment]:
    """
    Greedy first-fit stacking of the segments of one week row.

    Each segment, in the given order, takes the lowest row in which none of
    its days is taken yet. Returns copies with ``row_index`` set, in input
    order.
    """
    occupied: dict[int, set[int]] = {}
    assigned = []
    for segment in segments:
        days = range(segment.start_day_in_week, segment.end_day_in_week + 1)
        row = 0
        while any(day in occupied.get(row, ()) for day in days):
            row += 1
        occupied.setdefault(row, set()).update(days)
        assigned.append(replace(segment, row_index=row))
    return assigned


def calculate_week_layout(
    segments: Sequence[WeekSegment],
    week_dates: Sequence[date],
    week_row_index: int,
) -> WeekLayoutFrame:
    """
    Stack the segments of one week row and summarize per-day occupancy.

    Segments belonging to other week rows are ignored. Assignments come back
    sorted by row, then by start day, which is the drawing order.
    """
    own = [s for s in segments if s.week_row_index == week_row_index]
    if not own:
        return WeekLayoutFrame(week_row_index, list(week_dates), [], 0, {})

    assigned = assign_rows(own)
    column_max_rows: dict[int, int] = {}
    for segment in assigned:
        for day in range(segment.start_day_in_week, segment.end_day_in_week + 1):
            if segment.row_index > column_max_rows.get(day, -1):
                column_max_rows[day] = segment.row_index

    total_rows = max(s.row_index for s in assigned) + 1
    assigned.sort(key=lambda s: (s.row_index, s.start_day_in_week))
    return WeekLayoutFrame(
        week_row_index=week_row_index,
        week_dates=list(week_dates),
        assignments=assigned,
        total_rows=total_rows,
        column_max_rows=column_max_rows,
    )


def calculate_overflow(
    assigned_segments: Sequence[WeekSegment],
    max_visible_rows: int,
) -> dict[int, OverflowInfo]:
    """
    Per-day overflow of one week row.

    A segment whose ``row_index`` is ``max_visible_rows`` or higher is hidden
    on every day it covers. Only days with hidden events appear in the
    result.
    """
    if max_visible_rows < 0:
        raise InvalidArgumentError(f"max_visible_rows must not be negative (got {max_visible_rows})")

    visible: dict[int, list[CalendarEvent]] = {day: [] for day in range(DAYS_PER_WEEK)}
    hidden: dict[int, list[CalendarEvent]] = {day: [] for day in range(DAYS_PER_WEEK)}
    for segment in assigned_segments:
        if segment.row_index is None:
            raise InvalidArgumentError(f"Segment of {segment.event.id!r} has no row assigned")
        bucket = visible if segment.row_index < max_visible_rows else hidden
        for day in range(segment.start_day_in_week, segment.end_day_in_week + 1):
            bucket[day].append(segment.event)

    return {
        day: OverflowInfo(len(hidden[day]), hidden[day], visible[day])
        for day in range(DAYS_PER_WEEK)
        if hidden[day]
    }


def layout_month(
    events: Sequence[CalendarEvent],
    month: DateLike,
    first_day_of_week: int,
    show_sixth_row_if_needed: bool = False,
    max_visible_rows: Optional[int] = None,
) -> MonthLayout:
    """
    Complete month view layout.

    Rows are assigned week by week over all events touching the week
    (including those entering from the previous week); overflow is counted
    afterwards against ``max_visible_rows``. ``None`` means no cap.
    """
    if max_visible_rows is not None and max_visible_rows < 0:
        raise InvalidArgumentError(f"max_visible_rows must not be negative (got {max_visible_rows})")

    grid = generate_month_dates(month, first_day_of_week, show_sixth_row_if_needed)
    week_segments = calculate_week_segments(events, month, first_day_of_week, show_sixth_row_if_needed)

    frames = []
    overflow = []
    for week_row, segments in enumerate(week_segments):
        week_dates = grid[week_row * DAYS_PER_WEEK:(week_row + 1) * DAYS_PER_WEEK]
        frame = calculate_week_layout(segments, week_dates, week_row)
        frames.append(frame)
        if max_visible_rows is None:
            overflow.append({})
        else:
            overflow.append(calculate_overflow(frame.assignments, max_visible_rows))

    month_day = date_only(month)
    debug_print(
        "MONTH",
        f"{month_day:%Y-%m}: {len(events)} events over {len(frames)} weeks, "
        f"max rows {max((f.total_rows for f in frames), default=0)}",
    )
    return MonthLayout(
        month=date(month_day.year, month_day.month, 1),
        first_day_of_week=first_day_of_week,
        grid_dates=grid,
        weeks=frames,
        overflow=overflow,
        max_visible_rows=max_visible_rows,
    )
