"""
Calendar date arithmetic for month grids and week numbers.

All day arithmetic works on calendar fields (year/month/day), never on
24-hour durations, so results do not shift across daylight-saving switches.
Week-start days use the 0 = Sunday ... 6 = Saturday convention.
"""

import calendar
from datetime import datetime, date, time as dt_time, timedelta
from typing import Optional

from .models import DateRange, DateLike, validate_first_day_of_week
from .timezone_utils import relocalize


GRID_DAYS_FIVE_WEEKS = 35
GRID_DAYS_SIX_WEEKS = 42


def _to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def date_only(value: DateLike) -> date:
    """Strip the time component, e.g. 2026-02-24 14:30 -> 2026-02-24."""
    return _to_date(value)


def is_today(value: DateLike, today: Optional[date] = None) -> bool:
    if today is None:
        today = date.today()
    return _to_date(value) == today


def weekday_index(value: DateLike) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday."""
    return (_to_date(value).weekday() + 1) % 7


def add_days(value: DateLike, days: int) -> DateLike:
    """
    Move a date or datetime by whole calendar days.

    The wall-clock time is kept: 02:30 stays 02:30 even when the move
    crosses a DST switch. Timezone-aware pytz datetimes get the UTC offset
    that is valid on the target day.
    """
    if not isinstance(value, datetime):
        return value + timedelta(days=days)
    moved_day = value.date() + timedelta(days=days)
    moved = datetime.combine(moved_day, value.timetz())
    return relocalize(moved)


def month_range(month: DateLike) -> DateRange:
    """
    Get the range of a month: first day 00:00:00 to last day 23:59:59.999999.
    """
    d = _to_date(month)
    last_day = calendar.monthrange(d.year, d.month)[1]
    return DateRange(
        datetime(d.year, d.month, 1),
        datetime.combine(date(d.year, d.month, last_day), dt_time.max),
    )


def previous_month_range(month: DateLike) -> DateRange:
    """Range of the month before ``month`` (January wraps to December)."""
    d = _to_date(month)
    if d.month == 1:
        return month_range(date(d.year - 1, 12, 1))
    return month_range(date(d.year, d.month - 1, 1))


def next_month_range(month: DateLike) -> DateRange:
    """Range of the month after ``month`` (December wraps to January)."""
    d = _to_date(month)
    if d.month == 12:
        return month_range(date(d.year + 1, 1, 1))
    return month_range(date(d.year, d.month + 1, 1))


def generate_month_dates(
    month: DateLike,
    first_day_of_week: int,
    show_sixth_row_if_needed: bool = False,
) -> list[date]:
    """
    Generate the dates shown in the month grid.

    The grid starts on the ``first_day_of_week`` on or before the 1st of the
    month and holds 35 dates (5 weeks). A 6th week is added when the month's
    last day would not fit, or always when ``show_sixth_row_if_needed`` is set.

    Example:
        generate_month_dates(date(2024, 2, 1), 0)[0]  ->  date(2024, 1, 28)
    """
    validate_first_day_of_week(first_day_of_week)
    d = _to_date(month)
    first_day = date(d.year, d.month, 1)
    last_day = date(d.year, d.month, calendar.monthrange(d.year, d.month)[1])

    offset = (weekday_index(first_day) - first_day_of_week) % 7
    grid_start = first_day - timedelta(days=offset)

    fifth_week_end = grid_start + timedelta(days=GRID_DAYS_FIVE_WEEKS - 1)
    needs_sixth_week = show_sixth_row_if_needed or last_day > fifth_week_end
    total_days = GRID_DAYS_SIX_WEEKS if needs_sixth_week else GRID_DAYS_FIVE_WEEKS

    return [grid_start + timedelta(days=i) for i in range(total_days)]


def visible_grid_range(
    month: DateLike,
    first_day_of_week: int,
    show_sixth_row_if_needed: bool = False,
) -> DateRange:
    """
    Full range shown by the month grid, including the leading days of the
    previous month and the trailing days of the next one.

    Event queries for a month view must use this range, not ``month_range``,
    or events on the adjacent-month cells go missing.
    """
    dates = generate_month_dates(month, first_day_of_week, show_sixth_row_if_needed)
    return DateRange(
        datetime.combine(dates[0], dt_time.min),
        datetime.combine(dates[-1], dt_time.max),
    )


def days_between(from_date: DateLike, to_date: DateLike) -> int:
    """
    Signed number of calendar days from ``from_date`` to ``to_date``.

    Times and UTC offsets are ignored; only the calendar dates count, e.g.
    days_between(date(2026, 3, 6), date(2026, 3, 9)) == 3.
    """
    return (_to_date(to_date) - _to_date(from_date)).days


def iso_week_number(value: DateLike) -> int:
    """
    ISO-8601 week number (1..53).

    Week 1 is the week holding the year's first Thursday; weeks start on
    Monday. Days before week 1 belong to the last week of the previous year
    and a week 53 that has no Thursday in this year is week 1 of the next.
    """
    d = _to_date(value)
    weekday = d.isoweekday()  # Monday = 1 ... Sunday = 7
    ordinal = d.timetuple().tm_yday
    week = (ordinal - weekday + 10) // 7
    if week < 1:
        return _iso_weeks_in_year(d.year - 1)
    if week > _iso_weeks_in_year(d.year):
        return 1
    return week


def _iso_weeks_in_year(year: int) -> int:
    # A year has 53 ISO weeks when Dec 28 falls in week 53
    dec28 = date(year, 12, 28)
    return (dec28.timetuple().tm_yday - dec28.isoweekday() + 10) // 7


def week_start_of(value: DateLike, first_day_of_week: int) -> date:
    """First day of the week containing ``value``."""
    validate_first_day_of_week(first_day_of_week)
    d = _to_date(value)
    days_since = (weekday_index(d) - first_day_of_week) % 7
    return d - timedelta(days=days_since)


def first_week_start(year: int, first_day_of_week: int) -> date:
    """
    Start of week 1 of ``year``: the first week whose anchor day
    (week start + 3 days) lies in the year.
    """
    jan1_week_start = week_start_of(date(year, 1, 1), first_day_of_week)
    anchor = jan1_week_start + timedelta(days=3)
    if anchor.year == year:
        return jan1_week_start
    return jan1_week_start + timedelta(days=7)


def week_number(value: DateLike, first_day_of_week: int) -> int:
    """
    Week number (1..53) for an arbitrary week-start day.

    Generalizes ISO-8601: the day three positions into each week is its
    anchor and the anchor's year owns the week. With Monday (1) as the
    first day this equals ``iso_week_number``.
    """
    week_start = week_start_of(value, first_day_of_week)
    anchor = week_start + timedelta(days=3)
    first_ws = first_week_start(anchor.year, first_day_of_week)

    # first_ws is the first week anchored in anchor.year, so never after week_start
    return 1 + (week_start - first_ws).days // 7
