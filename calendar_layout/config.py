"""
Configuration parser for the calendar layout engine.

Handles TOML file parsing into layout parameter dataclasses. Example file:

    [General]
    timezone = "Europe/Amsterdam"
    debug = false

    [DayView]
    start_hour = 7
    end_hour = 20
    hour_height = 48

    [MonthView]
    first_day_of_week = 0   # Sunday
    max_visible_rows = 4    # 0 shows every row
"""

import tomllib
import os
from pathlib import Path
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from .debug import debug_print, set_debug
from .models import TimeWindow, validate_first_day_of_week
from .timezone_utils import set_timezone


@dataclass
class DayViewConfig:
    """Configuration for the day view's time axis and dragging."""
    start_hour: int = 0
    end_hour: int = 24
    hour_height: float = 60.0             # Height of an hour slot in pixels
    time_slot_minutes: int = 15           # Drag snapping granularity
    snap_range_minutes: int = 5           # Magnetic snapping distance
    gridline_interval_minutes: int = 15   # Visual only
    min_event_height: float = 20.0

    def time_window(self) -> TimeWindow:
        return TimeWindow(self.start_hour, self.end_hour, float(self.hour_height))

    @property
    def time_slot(self) -> timedelta:
        return timedelta(minutes=self.time_slot_minutes)

    @property
    def snap_range(self) -> timedelta:
        return timedelta(minutes=self.snap_range_minutes)


@dataclass
class MonthViewConfig:
    """Configuration for the month grid."""
    first_day_of_week: int = 1            # 0 = Sunday ... 6 = Saturday
    show_sixth_row_if_needed: bool = False
    max_visible_rows: Optional[int] = 3   # None: no cap

    def __post_init__(self):
        validate_first_day_of_week(self.first_day_of_week)


@dataclass
class Config:
    """Main configuration container."""

    timezone: str = "UTC"
    debug: bool = False
    day: DayViewConfig = field(default_factory=DayViewConfig)
    month: MonthViewConfig = field(default_factory=MonthViewConfig)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'calendar-layout' / 'calendar-layout.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """
        Load configuration from a TOML file and apply its timezone and
        debug settings.
        """
        if config_path is None:
            config_path = cls.get_default_config_path()
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)

        config = cls.from_dict(data)
        set_timezone(config.timezone)
        set_debug(config.debug)
        debug_print("CONFIG", f"Loaded {config_path}: sections {list(data.keys())}")
        return config

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build a Config from parsed TOML data; missing keys keep their defaults."""
        # Parse General section
        general = data.get('General', {})

        # Parse DayView section
        day_data = data.get('DayView', {})
        day = DayViewConfig(
            start_hour=day_data.get('start_hour', DayViewConfig.start_hour),
            end_hour=day_data.get('end_hour', DayViewConfig.end_hour),
            hour_height=float(day_data.get('hour_height', DayViewConfig.hour_height)),
            time_slot_minutes=day_data.get('time_slot_minutes', DayViewConfig.time_slot_minutes),
            snap_range_minutes=day_data.get('snap_range_minutes', DayViewConfig.snap_range_minutes),
            gridline_interval_minutes=day_data.get(
                'gridline_interval_minutes', DayViewConfig.gridline_interval_minutes
            ),
            min_event_height=float(day_data.get('min_event_height', DayViewConfig.min_event_height)),
        )
        # Raises InvalidArgumentError for an invalid time window
        day.time_window()

        # Parse MonthView section; 0 rows in the file means no cap
        month_data = data.get('MonthView', {})
        max_rows = month_data.get('max_visible_rows', MonthViewConfig.max_visible_rows)
        month = MonthViewConfig(
            first_day_of_week=month_data.get('first_day_of_week', MonthViewConfig.first_day_of_week),
            show_sixth_row_if_needed=month_data.get(
                'show_sixth_row_if_needed', MonthViewConfig.show_sixth_row_if_needed
            ),
            max_visible_rows=max_rows if max_rows else None,
        )

        return cls(
            timezone=general.get('timezone', 'UTC'),
            debug=bool(general.get('debug', False)),
            day=day,
            month=month,
        )
