# File: tests/test_day_layout.py
"""
Unit tests for the day view overlap resolver and placements.
"""

import random
import pytest
from datetime import datetime, date, timedelta

from calendar_layout.day_layout import (
    events_overlap, resolve_day_overlaps, DayPortion, split_day_events, layout_day,
)
from calendar_layout.models import InvalidArgumentError, TimeWindow
from conftest import make_event, at


SATURDAY = date(2026, 2, 14)
SUNDAY = date(2026, 2, 15)


def _columns(assignments):
    return [(a.event.id, a.column_index, a.total_columns) for a in assignments]


def _overlap_components(events):
    """Connected components of the pairwise overlap graph (union-find)."""
    parent = list(range(len(events)))

    def find(i):
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    for i in range(len(events)):
        for j in range(i + 1, len(events)):
            if events_overlap(events[i], events[j]):
                parent[find(i)] = find(j)

    components = {}
    for i in range(len(events)):
        components.setdefault(find(i), []).append(i)
    return list(components.values())


def _max_clique(events):
    return max(
        sum(1 for f in events if f.start <= e.start < f.end)
        for e in events
    )


# ==================== Overlap Resolver Tests ====================

class TestResolveDayOverlaps:

    def test_empty(self):
        assert resolve_day_overlaps([]) == []

    def test_single_event(self):
        event = make_event("a", at(9), at(10))
        assert _columns(resolve_day_overlaps([event])) == [("a", 0, 1)]

    def test_chained_overlaps_form_one_group(self, chained_events):
        result = resolve_day_overlaps(chained_events)

        # a and c do not touch, so c reuses column 0
        assert _columns(result) == [("a", 0, 2), ("b", 1, 2), ("c", 0, 2)]

    def test_touching_events_do_not_overlap(self):
        events = [make_event("a", at(9), at(10)), make_event("b", at(10), at(11))]
        assert _columns(resolve_day_overlaps(events)) == [("a", 0, 1), ("b", 0, 1)]

    def test_longer_event_first_on_equal_start(self):
        events = [make_event("short", at(9), at(10)), make_event("long", at(9), at(12))]
        assert _columns(resolve_day_overlaps(events)) == [("short", 1, 2), ("long", 0, 2)]

    def test_zero_duration_at_boundary_collides_with_nothing(self):
        events = [make_event("meeting", at(10), at(11)), make_event("marker", at(10), at(10))]
        assert _columns(resolve_day_overlaps(events)) == [("meeting", 0, 1), ("marker", 0, 1)]

    def test_result_follows_input_order_and_input_is_untouched(self, chained_events):
        reversed_events = list(reversed(chained_events))
        snapshot = list(reversed_events)

        result = resolve_day_overlaps(reversed_events)

        assert reversed_events == snapshot
        assert [a.event.id for a in result] == ["c", "b", "a"]

    def test_idempotent(self, chained_events):
        shuffled = [chained_events[2], chained_events[0], chained_events[1]]
        assert _columns(resolve_day_overlaps(shuffled)) == _columns(resolve_day_overlaps(shuffled))

    def test_all_day_event_rejected(self):
        events = [make_event("a", at(9), at(10)), make_event("h", SATURDAY, SATURDAY, all_day=True)]
        with pytest.raises(InvalidArgumentError):
            resolve_day_overlaps(events)

    @pytest.mark.parametrize("seed", range(20))
    def test_no_collisions_and_minimal_columns(self, seed):
        rng = random.Random(seed)
        events = []
        for i in range(rng.randint(2, 25)):
            start = at(8) + timedelta(minutes=15 * rng.randint(0, 40))
            duration = timedelta(minutes=15 * rng.randint(1, 12))
            events.append(make_event(f"e{i}", start, start + duration))

        result = resolve_day_overlaps(events)

        for i, a in enumerate(result):
            for b in result[i + 1:]:
                if a.column_index == b.column_index and events_overlap(a.event, b.event):
                    pytest.fail(f"{a.event.id} and {b.event.id} share column {a.column_index}")

        for component in _overlap_components(events):
            totals = {result[i].total_columns for i in component}
            assert totals == {_max_clique([events[i] for i in component])}
            assert all(result[i].column_index < result[i].total_columns for i in component)


# ==================== Day Portion Tests ====================

class TestDayPortion:

    def test_overnight_event_splits_in_two(self):
        event = make_event("party", at(17), datetime(2026, 2, 15, 4, 0))

        saturday = DayPortion.create_for_day(event, SATURDAY)
        sunday = DayPortion.create_for_day(event, SUNDAY)

        assert (saturday.start, saturday.end) == (at(17), datetime(2026, 2, 15))
        assert saturday.continues_to_next_day and not saturday.continues_from_previous_day
        assert saturday.visible_end_hour == 24.0

        assert (sunday.start, sunday.end) == (datetime(2026, 2, 15), datetime(2026, 2, 15, 4))
        assert sunday.continues_from_previous_day and not sunday.continues_to_next_day
        assert sunday.visible_start_hour == 0.0
        assert sunday.visible_end_hour == 4.0

    def test_event_ending_at_midnight_not_on_next_day(self):
        event = make_event("late", datetime(2026, 2, 13, 22), datetime(2026, 2, 14))

        assert DayPortion.create_for_day(event, SATURDAY) is None
        friday = DayPortion.create_for_day(event, date(2026, 2, 13))
        assert not friday.continues_to_next_day

    def test_other_day(self):
        event = make_event("a", at(9), at(10))
        assert DayPortion.create_for_day(event, SUNDAY) is None

    def test_split_day_events(self):
        holiday = make_event("holiday", date(2026, 2, 13), date(2026, 2, 15), all_day=True)
        meeting = make_event("meeting", at(9), at(10))
        tomorrow = make_event("tomorrow", datetime(2026, 2, 15, 9), datetime(2026, 2, 15, 10))

        all_day, portions = split_day_events([holiday, meeting, tomorrow], SATURDAY)

        assert all_day == [holiday]
        assert [p.id for p in portions] == ["meeting"]


# ==================== Full Layout Tests ====================

class TestLayoutDay:

    def test_placements(self):
        window = TimeWindow(8, 18, 60.0)
        events = [
            make_event("a", at(9), at(10, 30)),
            make_event("b", at(10), at(11)),
            make_event("holiday", SATURDAY, SATURDAY, all_day=True),
        ]

        layout = layout_day(events, SATURDAY, window)

        assert [e.id for e in layout.all_day_events] == ["holiday"]
        a, b = layout.placements
        assert (a.top, a.height, a.left_fraction, a.width_fraction) == (60.0, 90.0, 0.0, 0.5)
        assert (b.top, b.height, b.left_fraction, b.width_fraction) == (120.0, 60.0, 0.5, 0.5)

    def test_min_event_height(self):
        window = TimeWindow(8, 18, 60.0)
        layout = layout_day([make_event("quick", at(9), at(9, 5))], SATURDAY, window, min_event_height=20.0)

        assert layout.placements[0].height == 20.0

    def test_overnight_portion_height(self):
        window = TimeWindow(0, 24, 40.0)
        event = make_event("party", at(22), datetime(2026, 2, 15, 2))

        layout = layout_day([event], SATURDAY, window)

        assert layout.placements[0].top == 22 * 40.0
        assert layout.placements[0].height == 2 * 40.0
