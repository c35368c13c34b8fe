# File: tests/conftest.py
"""
Pytest configuration and shared fixtures.
Provides event builders and resets module-level settings between tests.
"""

import pytest
from datetime import datetime, date
from pathlib import Path
import sys

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from calendar_layout.debug import set_debug
from calendar_layout.models import CalendarEvent
from calendar_layout.timezone_utils import set_timezone


def make_event(event_id, start, end, all_day=False, title=None):
    """Shorthand event builder used throughout the tests."""
    return CalendarEvent(
        id=event_id,
        start=start,
        end=end,
        is_all_day=all_day,
        title=title if title is not None else event_id,
    )


def at(hour, minute=0, day=date(2026, 2, 14)):
    """Datetime on the default test day (Saturday 2026-02-14)."""
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture(autouse=True)
def reset_module_state():
    """Every test starts in UTC with debug output off."""
    set_timezone("UTC")
    set_debug(False)
    yield
    set_timezone("UTC")
    set_debug(False)


# ==================== Sample Data Fixtures ====================

@pytest.fixture
def chained_events():
    """A overlaps B, B overlaps C, A and C do not touch."""
    return [
        make_event("a", at(9), at(10)),
        make_event("b", at(9, 30), at(11)),
        make_event("c", at(10, 30), at(11, 30)),
    ]


@pytest.fixture
def sample_ics():
    """Small calendar with timed, all-day, multi-day and recurring events."""
    return "\r\n".join([
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//calendar-layout//tests//EN",
        "BEGIN:VEVENT",
        "UID:standup",
        "SUMMARY:Standup",
        "DTSTART:20260302T090000",
        "DTEND:20260302T091500",
        "RRULE:FREQ=DAILY;COUNT=5",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:holiday",
        "SUMMARY:Holiday",
        "DTSTART;VALUE=DATE:20260304",
        "DTEND;VALUE=DATE:20260307",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:review",
        "SUMMARY:Review",
        "DESCRIPTION:Quarterly review",
        "DTSTART:20260303T140000Z",
        "DURATION:PT90M",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:night",
        "SUMMARY:Night shift",
        "DTSTART:20260305T220000",
        "DTEND:20260306T060000",
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ])


@pytest.fixture
def ics_file(tmp_path, sample_ics):
    path = tmp_path / "sample.ics"
    path.write_text(sample_ics)
    return path
