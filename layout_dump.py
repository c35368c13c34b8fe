#!/usr/bin/env python3
"""
layout_dump - print the month or day layout of an iCalendar file as text.

Useful for checking row and column assignments without a GUI:

    layout_dump.py calendar.ics --month 2026-03
    layout_dump.py calendar.ics --day 2026-03-29 --debug
"""

import sys
import argparse
from datetime import datetime, date
from pathlib import Path
from typing import Optional, TextIO

from calendar_layout.config import Config
from calendar_layout.date_utils import week_number
from calendar_layout.day_layout import layout_day
from calendar_layout.debug import set_debug
from calendar_layout.event_source import ICalEventSource
from calendar_layout.grid import fetch_day_events, fetch_month_events
from calendar_layout.models import InvalidArgumentError
from calendar_layout.month_layout import layout_month


DAY_ABBREVIATIONS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _month_arg(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}")


def _day_arg(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Dump the calendar view layout of an iCalendar file"
    )
    parser.add_argument("ics", type=Path, help="iCalendar (.ics) file to lay out")
    view = parser.add_mutually_exclusive_group(required=True)
    view.add_argument("--month", type=_month_arg, help="Month view of YYYY-MM")
    view.add_argument("--day", type=_day_arg, help="Day view of YYYY-MM-DD")
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to configuration file (default: auto-detect, built-in defaults if absent)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )
    return parser.parse_args(argv)


def _load_config(path: Optional[Path]) -> Config:
    if path is not None:
        return Config.load(path)
    default_path = Config.get_default_config_path()
    if default_path.exists():
        return Config.load(default_path)
    return Config()


def _segment_label(segment) -> str:
    left = "(" if segment.is_first_segment else "<"
    right = ")" if segment.is_last_segment else ">"
    title = segment.event.title or segment.event.id
    return f"{left}{title}{right}"


def dump_month(source: ICalEventSource, month: date, config: Config, out: TextIO):
    month_config = config.month
    events = fetch_month_events(source, month, month_config.show_sixth_row_if_needed)
    layout = layout_month(
        events,
        month,
        month_config.first_day_of_week,
        month_config.show_sixth_row_if_needed,
        month_config.max_visible_rows,
    )

    out.write(f"{month:%B %Y}: {len(events)} events, {layout.week_count} weeks\n")
    header = [DAY_ABBREVIATIONS[(month_config.first_day_of_week + i) % 7] for i in range(7)]
    out.write("     " + " ".join(f"{name:>6}" for name in header) + "\n")

    for frame, overflow in zip(layout.weeks, layout.overflow):
        number = week_number(frame.week_dates[0], month_config.first_day_of_week)
        cells = []
        for day in frame.week_dates:
            marker = " " if day.month == month.month else "*"
            cells.append(f"{marker}{day:%m-%d}")
        out.write(f"W{number:<3} " + " ".join(cells) + "\n")

        for segment in frame.assignments:
            hidden = ""
            if month_config.max_visible_rows is not None and segment.row_index >= month_config.max_visible_rows:
                hidden = " [hidden]"
            days = f"{DAY_ABBREVIATIONS[(month_config.first_day_of_week + segment.start_day_in_week) % 7]}"
            if segment.span_days > 1:
                days += f"-{DAY_ABBREVIATIONS[(month_config.first_day_of_week + segment.end_day_in_week) % 7]}"
            out.write(f"     row {segment.row_index}: {days:<7} {_segment_label(segment)}{hidden}\n")

        if overflow:
            more = ", ".join(
                f"{frame.week_dates[column]:%m-%d} +{info.hidden_count}"
                for column, info in sorted(overflow.items())
            )
            out.write(f"     overflow: {more}\n")


def dump_day(source: ICalEventSource, day: date, config: Config, out: TextIO):
    window = config.day.time_window()
    events = fetch_day_events(source, day)
    layout = layout_day(events, day, window, config.day.min_event_height)

    out.write(f"{day:%A %Y-%m-%d}: {window.start_hour:02d}:00-{window.end_hour:02d}:00, "
              f"{window.hour_height:g}px/hour\n")
    for event in layout.all_day_events:
        out.write(f"  all day      {event.title or event.id}\n")
    for placement in layout.placements:
        portion = placement.portion
        end_label = "24:00" if portion.end.date() > day else f"{portion.end:%H:%M}"
        out.write(
            f"  {portion.start:%H:%M}-{end_label}  "
            f"col {placement.column_index + 1}/{placement.total_columns}  "
            f"top={placement.top:g} height={placement.height:g}  "
            f"{portion.event.title or portion.id}\n"
        )


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    if args.debug:
        set_debug(True)

    # Load configuration
    try:
        config = _load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (ValueError, TypeError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1
    if args.debug:
        set_debug(True)

    try:
        source = ICalEventSource.from_path(args.ics, config.month.first_day_of_week)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error reading {args.ics}: {e}", file=sys.stderr)
        return 1

    try:
        if args.month is not None:
            dump_month(source, args.month, config, sys.stdout)
        else:
            dump_day(source, args.day, config, sys.stdout)
    except InvalidArgumentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
