"""
Day view layout: side-by-side columns for overlapping timed events.
"""

from dataclasses import dataclass
from datetime import datetime, date, time as dt_time, timedelta
from typing import Any, Optional, Sequence

from .debug import debug_print
from .models import CalendarEvent, InvalidArgumentError, TimeWindow
from .time_utils import time_to_offset, duration_to_height


@dataclass(frozen=True)
class ColumnAssignment:
    """
    An event with its column inside its overlap group.

    Events of one overlap group share ``total_columns``; each is drawn
    ``1 / total_columns`` wide at column ``column_index`` (0 = leftmost,
    rightmost in RTL layouts).
    """
    event: Any
    column_index: int
    total_columns: int


def events_overlap(a, b) -> bool:
    """
    Standard interval overlap: ``a.start < b.end and b.start < a.end``.

    Touching events (one ends when the other starts) do not overlap. A
    zero-length event overlaps only events strictly containing its moment.
    """
    return a.start < b.end and b.start < a.end


def _check_timed(events: Sequence) -> None:
    for event in events:
        if getattr(event, 'is_all_day', False):
            raise InvalidArgumentError(
                f"All-day event {getattr(event, 'id', event)!r} passed to the timed-event layout"
            )
        if event.end < event.start:
            raise InvalidArgumentError(
                f"Event {getattr(event, 'id', event)!r} ends before it starts"
            )


def _assign_group_columns(group: list[int], items: Sequence) -> tuple[dict[int, int], int]:
    """Greedy first fit; returns (item index -> column, number of columns)."""
    columns: list[list[int]] = []
    assigned: dict[int, int] = {}
    for idx in group:
        event = items[idx]
        for col_idx, column in enumerate(columns):
            if not any(events_overlap(event, items[other]) for other in column):
                column.append(idx)
                assigned[idx] = col_idx
                break
        else:
            assigned[idx] = len(columns)
            columns.append([idx])
    return assigned, len(columns)


def resolve_day_overlaps(events: Sequence) -> list[ColumnAssignment]:
    """
    Assign overlapping timed events of one day to columns.

    Sweep line over the events sorted by start (longer events first on equal
    starts, so long "anchor" events get the low columns). An event joins the
    current overlap group while it starts before the group's latest end;
    this merges chains like A-B-C even when A and C do not touch. Inside a
    group each event takes the lowest column whose events it does not
    overlap, opening a new column when none fits.

    Accepts ``CalendarEvent``s or ``DayPortion``s (anything with ``start``
    and ``end``). All-day events must be filtered out first.

    Returns one assignment per input event, in input order. The input is
    not reordered.
    """
    items = list(events)
    _check_timed(items)
    if not items:
        return []
    if len(items) == 1:
        return [ColumnAssignment(items[0], 0, 1)]

    order = sorted(
        range(len(items)),
        key=lambda i: (items[i].start, -(items[i].end - items[i].start)),
    )

    result: list[Optional[ColumnAssignment]] = [None] * len(items)
    group_count = 0
    pos = 0
    while pos < len(order):
        group = [order[pos]]
        group_end = items[order[pos]].end
        nxt = pos + 1
        while nxt < len(order) and items[order[nxt]].start < group_end:
            group.append(order[nxt])
            group_end = max(group_end, items[order[nxt]].end)
            nxt += 1

        assigned, total_columns = _assign_group_columns(group, items)
        for idx in group:
            result[idx] = ColumnAssignment(items[idx], assigned[idx], total_columns)

        group_count += 1
        pos = nxt

    debug_print("DAY", f"{len(items)} events in {group_count} overlap group(s)")
    return result


@dataclass(frozen=True)
class DayPortion:
    """
    The part of a timed event visible on one day.

    An event "Sat 17:00 - Sun 04:00" yields two portions: Saturday
    17:00-24:00 and Sunday 00:00-04:00. ``start``/``end`` are clipped to the
    day, ``event`` keeps the original times.
    """
    event: CalendarEvent
    display_date: date
    start: datetime
    end: datetime

    @staticmethod
    def create_for_day(event: CalendarEvent, day: date) -> Optional['DayPortion']:
        """
        Create the portion of ``event`` on ``day``, or None if the event
        does not appear on that day.
        """
        day_start = datetime.combine(day, dt_time.min)
        next_day_start = day_start + timedelta(days=1)

        if event.start >= next_day_start or event.end < day_start:
            return None
        # Ending exactly at midnight does not reach into the new day
        if event.end == day_start and event.start < day_start:
            return None

        start = max(event.start, day_start)
        end = min(event.end, next_day_start)
        return DayPortion(event, day, start, end)

    @property
    def id(self) -> str:
        return self.event.id

    @property
    def continues_from_previous_day(self) -> bool:
        return self.event.start < self.start

    @property
    def continues_to_next_day(self) -> bool:
        return self.event.end > self.end

    @property
    def visible_start_hour(self) -> float:
        return self.start.hour + self.start.minute / 60.0

    @property
    def visible_end_hour(self) -> float:
        if self.end.date() > self.display_date:
            return 24.0
        return self.end.hour + self.end.minute / 60.0


def split_day_events(events: Sequence[CalendarEvent], day: date) -> tuple[list[CalendarEvent], list[DayPortion]]:
    """
    Split the events touching ``day`` into all-day events and timed portions.

    Input order is preserved within each list.
    """
    all_day = []
    portions = []
    for event in events:
        if event.is_all_day:
            if event.start_day <= day <= event.end_day:
                all_day.append(event)
            continue
        portion = DayPortion.create_for_day(event, day)
        if portion is not None:
            portions.append(portion)
    return all_day, portions


@dataclass(frozen=True)
class TimedPlacement:
    """Position of one timed portion in the day view, in pixels and width fractions."""
    portion: DayPortion
    column_index: int
    total_columns: int
    top: float
    height: float
    left_fraction: float
    width_fraction: float


@dataclass(frozen=True)
class DayLayout:
    day: date
    window: TimeWindow
    all_day_events: list[CalendarEvent]
    placements: list[TimedPlacement]


def layout_day(
    events: Sequence[CalendarEvent],
    day: date,
    window: TimeWindow,
    min_event_height: float = 0.0,
) -> DayLayout:
    """
    Full day view layout: all-day events separated out, timed events clipped
    to the day, assigned to columns and converted to pixel positions.
    """
    all_day, portions = split_day_events(events, day)
    placements = []
    for assignment in resolve_day_overlaps(portions):
        portion = assignment.event
        top = time_to_offset(portion.start, window.start_hour, window.hour_height)
        height = duration_to_height(portion.end - portion.start, window.hour_height)
        placements.append(TimedPlacement(
            portion=portion,
            column_index=assignment.column_index,
            total_columns=assignment.total_columns,
            top=top,
            height=max(height, min_event_height),
            left_fraction=assignment.column_index / assignment.total_columns,
            width_fraction=1.0 / assignment.total_columns,
        ))
    return DayLayout(day=day, window=window, all_day_events=all_day, placements=placements)
