"""
Calendar Layout Engine

Pure layout computations for calendar views:
- Plain data types (models.py) - CalendarEvent, DateRange, TimeWindow
- Date arithmetic (date_utils.py) - month grids, week numbers, DST-safe day moves
- Time/offset conversion (time_utils.py) - pixels <-> times, snapping, gridlines
- Day view layout (day_layout.py) - overlap groups and columns
- Month view layout (month_layout.py) - week segments, rows, overflow
- Range queries (grid.py) - which events a view needs
- Event sources (event_source.py) - in-memory and iCalendar (dateutil rrule expansion)
- Regions (regions.py) - highlighted/blocked time and days
- Configuration parsing (config.py)
"""

from .config import Config, DayViewConfig, MonthViewConfig
from .models import CalendarEvent, DateRange, TimeWindow, InvalidArgumentError
from .date_utils import (
    generate_month_dates, visible_grid_range, month_range,
    previous_month_range, next_month_range, add_days, days_between,
    iso_week_number, week_number, weekday_index,
)
from .time_utils import (
    time_to_offset, offset_to_time, duration_to_height,
    snap_to_time_slot, snap_to_nearby_time, generate_gridlines,
    Gridline, GridlineType,
)
from .day_layout import (
    ColumnAssignment, DayPortion, DayLayout, TimedPlacement,
    resolve_day_overlaps, layout_day,
)
from .month_layout import (
    WeekSegment, MultiDayEventLayout, WeekLayoutFrame, OverflowInfo, MonthLayout,
    calculate_multi_day_layouts, calculate_week_segments, calculate_week_layout,
    assign_rows, calculate_overflow, layout_month,
)
from .grid import MonthGrid, EventSource, fetch_month_events, fetch_day_events, events_in_range
from .event_source import InMemoryEventSource, ICalEventSource
from .regions import TimeRegion, DayRegion

__all__ = [
    'Config',
    'DayViewConfig',
    'MonthViewConfig',
    'CalendarEvent',
    'DateRange',
    'TimeWindow',
    'InvalidArgumentError',
    # Date/time arithmetic
    'generate_month_dates',
    'visible_grid_range',
    'month_range',
    'previous_month_range',
    'next_month_range',
    'add_days',
    'days_between',
    'iso_week_number',
    'week_number',
    'weekday_index',
    'time_to_offset',
    'offset_to_time',
    'duration_to_height',
    'snap_to_time_slot',
    'snap_to_nearby_time',
    'generate_gridlines',
    'Gridline',
    'GridlineType',
    # Day view
    'ColumnAssignment',
    'DayPortion',
    'DayLayout',
    'TimedPlacement',
    'resolve_day_overlaps',
    'layout_day',
    # Month view
    'WeekSegment',
    'MultiDayEventLayout',
    'WeekLayoutFrame',
    'OverflowInfo',
    'MonthLayout',
    'calculate_multi_day_layouts',
    'calculate_week_segments',
    'calculate_week_layout',
    'assign_rows',
    'calculate_overflow',
    'layout_month',
    # Sources and queries
    'MonthGrid',
    'EventSource',
    'fetch_month_events',
    'fetch_day_events',
    'events_in_range',
    'InMemoryEventSource',
    'ICalEventSource',
    'TimeRegion',
    'DayRegion',
]
