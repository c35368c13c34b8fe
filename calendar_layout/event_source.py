"""
Event sources feeding the layout functions.

InMemoryEventSource keeps concrete CalendarEvents in an interval tree.
ICalEventSource reads an iCalendar (RFC 5545) calendar and expands
RRULE/RDATE/EXDATE with dateutil's rruleset, applying RECURRENCE-ID
overrides, so the layout core only ever sees concrete instances.
"""

from datetime import datetime, date, time as dt_time, timedelta
from pathlib import Path
from typing import Iterable, Optional, Union

from dateutil.rrule import rrulestr, rruleset
from icalendar import Calendar as ICalCalendar, Event as ICalEvent, vRecur

from .debug import debug_print
from .interval_tree import IntervalTree, IntervalNode
from .models import CalendarEvent, DateRange, DateLike, validate_first_day_of_week
from .timezone_utils import to_local_naive, localize, relocalize


def _event_order(event: CalendarEvent):
    return (event.start, event.id)


class InMemoryEventSource:
    """
    Mutable store of concrete events, queried by date range.

    Adding an event whose id is already present replaces the old one.
    """

    def __init__(self, first_day_of_week: int = 1, events: Iterable[CalendarEvent] = ()):
        self.first_day_of_week = validate_first_day_of_week(first_day_of_week)
        self._tree: IntervalTree[datetime] = IntervalTree()
        self._nodes: dict[str, IntervalNode[datetime]] = {}
        self.add_events(events)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, event_id: str) -> bool:
        return event_id in self._nodes

    def add_event(self, event: CalendarEvent):
        if event.id in self._nodes:
            self._tree.remove(self._nodes.pop(event.id))
        self._nodes[event.id] = self._tree.insert(event.start, event.occupied_until, event)

    def add_events(self, events: Iterable[CalendarEvent]):
        for event in events:
            self.add_event(event)

    def remove_event(self, event_id: str) -> bool:
        """Remove an event by id. Returns True if it was present."""
        node = self._nodes.pop(event_id, None)
        if node is None:
            return False
        self._tree.remove(node)
        return True

    def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        node = self._nodes.get(event_id)
        return node.data if node else None

    def all_events(self) -> list[CalendarEvent]:
        return sorted((node.data for node in self._tree), key=_event_order)

    def clear(self):
        self._tree.clear()
        self._nodes.clear()

    def events_intersecting(self, date_range: DateRange) -> list[CalendarEvent]:
        """Events sharing at least one moment with the inclusive range, by start then id."""
        found = [node.data for node in self._tree.iter_intersecting(date_range.start, date_range.end)]
        found.sort(key=_event_order)
        debug_print("SOURCE", f"{len(found)} of {len(self)} events in {date_range.start} - {date_range.end}")
        return found

    def events_for_date(self, day: DateLike) -> list[CalendarEvent]:
        return self.events_intersecting(DateRange.for_day(day))


# --- iCalendar conversion ---

def _is_date_only(value) -> bool:
    return isinstance(value, date) and not isinstance(value, datetime)


def _as_list(value) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _prop_text(component: ICalEvent, name: str) -> Optional[str]:
    value = component.get(name)
    return str(value) if value else None


def _component_times(component: ICalEvent):
    """
    Raw (start, end) values of a VEVENT, dates for all-day events.

    Without DTEND the DURATION is used, else one day (all-day) or one hour.
    """
    dtstart = component.get('DTSTART')
    if dtstart is None:
        raise ValueError(f"VEVENT {component.get('UID')!r} has no DTSTART")
    start_val = dtstart.dt

    dtend = component.get('DTEND')
    duration = component.get('DURATION')
    if dtend is not None:
        end_val = dtend.dt
    elif duration is not None:
        end_val = start_val + duration.dt
    elif _is_date_only(start_val):
        end_val = start_val + timedelta(days=1)
    else:
        end_val = start_val + timedelta(hours=1)
    return start_val, end_val


def _occurrence_key(value) -> datetime:
    """Local wall-clock start used to match RECURRENCE-IDs to occurrences."""
    if isinstance(value, tuple):
        value = value[0]
    if _is_date_only(value):
        return datetime.combine(value, dt_time.min)
    return to_local_naive(value)


def _make_event(component: ICalEvent, start_val, end_val, occurrence_day: Optional[date] = None) -> CalendarEvent:
    all_day = _is_date_only(start_val)
    if all_day:
        start = datetime.combine(start_val, dt_time.min)
        if _is_date_only(end_val):
            # DTEND of an all-day event is exclusive
            last_day = max(start_val, end_val - timedelta(days=1))
        else:
            last_day = max(start_val, end_val.date())
        end = datetime.combine(last_day, dt_time.min)
    else:
        start = to_local_naive(start_val)
        if _is_date_only(end_val):
            end_val = datetime.combine(end_val, dt_time.min)
        end = max(to_local_naive(end_val), start)

    uid = _prop_text(component, 'UID') or f"{start.isoformat()}-{_prop_text(component, 'SUMMARY') or ''}"
    event_id = uid
    occurrence_id = None
    if occurrence_day is not None:
        occurrence_id = datetime.combine(occurrence_day, dt_time.min).isoformat()
        event_id = f"{uid}_{occurrence_id}"

    return CalendarEvent(
        id=event_id,
        start=start,
        end=end,
        is_all_day=all_day,
        title=_prop_text(component, 'SUMMARY') or "",
        color=_prop_text(component, 'COLOR'),
        comment=_prop_text(component, 'DESCRIPTION'),
        external_id=uid,
        occurrence_id=occurrence_id,
    )


def to_calendar_event(component: ICalEvent) -> CalendarEvent:
    """
    Convert one VEVENT, taken as-is, to a CalendarEvent.

    Timezone-aware times are converted to naive local wall-clock time. An
    all-day DTEND is exclusive in iCalendar and becomes the inclusive last
    day here. A component carrying a RECURRENCE-ID (an edited occurrence)
    gets the id of the occurrence it replaces.
    """
    start_val, end_val = _component_times(component)
    recurrence_id = component.get('RECURRENCE-ID')
    occurrence_day = _occurrence_key(recurrence_id.dt).date() if recurrence_id is not None else None
    return _make_event(component, start_val, end_val, occurrence_day)


def _align(value, anchor: datetime) -> datetime:
    """Bring an RDATE/EXDATE value to the anchor's naive/aware form."""
    if isinstance(value, tuple):
        value = value[0]
    if _is_date_only(value):
        value = datetime.combine(value, dt_time.min)
    if anchor.tzinfo is None and value.tzinfo is not None:
        return to_local_naive(value)
    if anchor.tzinfo is not None and value.tzinfo is None:
        return relocalize(value.replace(tzinfo=anchor.tzinfo))
    return value


def _window_value(value: datetime, anchor: datetime) -> datetime:
    if anchor.tzinfo is None:
        return to_local_naive(value)
    return localize(value)


def _is_recurring(component: ICalEvent) -> bool:
    return component.get('RRULE') is not None or component.get('RDATE') is not None


def _expand_component(component: ICalEvent, query_start: datetime, query_end: datetime) -> list[tuple]:
    """
    (start, end) values of the occurrences of a recurring VEVENT that may
    overlap ``[query_start, query_end]``, in the component's own value types.

    DTSTART always counts as the first occurrence; EXDATEs remove
    occurrences.
    """
    start_val, end_val = _component_times(component)
    all_day = _is_date_only(start_val)
    anchor = datetime.combine(start_val, dt_time.min) if all_day else start_val
    length = end_val - start_val

    rules = rruleset()
    rules.rdate(anchor)
    for prop in _as_list(component.get('RRULE')):
        rules.rrule(rrulestr(prop.to_ical().decode(), dtstart=anchor, ignoretz=anchor.tzinfo is None))
    for prop in _as_list(component.get('RDATE')):
        for value in prop.dts:
            rules.rdate(_align(value.dt, anchor))
    for prop in _as_list(component.get('EXDATE')):
        for value in prop.dts:
            rules.exdate(_align(value.dt, anchor))

    # The window is local wall-clock time; occurrences starting before it
    # may still reach into it
    window_start = _window_value(query_start, anchor) - length
    window_end = _window_value(query_end, anchor)

    occurrences = []
    for occ in rules.between(window_start, window_end, inc=True):
        if all_day:
            occurrences.append((occ.date(), occ.date() + length))
        elif occ.tzinfo is not None:
            occurrences.append((relocalize(occ), relocalize(occ + length)))
        else:
            occurrences.append((occ, occ + length))
    return occurrences


class ICalEventSource:
    """Read-only source backed by an icalendar.Calendar."""

    def __init__(self, calendar: ICalCalendar, first_day_of_week: int = 1):
        self.calendar = calendar
        self.first_day_of_week = validate_first_day_of_week(first_day_of_week)

        # Edited occurrences, keyed by UID and the local start they replace
        self._overrides: dict[str, dict[datetime, ICalEvent]] = {}
        self._masters: list[ICalEvent] = []
        for component in calendar.walk('VEVENT'):
            recurrence_id = component.get('RECURRENCE-ID')
            if recurrence_id is None:
                self._masters.append(component)
            else:
                uid = str(component.get('UID'))
                self._overrides.setdefault(uid, {})[_occurrence_key(recurrence_id.dt)] = component

    @classmethod
    def from_ical(cls, ical_text: Union[str, bytes], first_day_of_week: int = 1) -> 'ICalEventSource':
        """Parse iCalendar text; raises ValueError on malformed input."""
        return cls(ICalCalendar.from_ical(ical_text), first_day_of_week)

    @classmethod
    def from_path(cls, path: Union[str, Path], first_day_of_week: int = 1) -> 'ICalEventSource':
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Calendar file not found: {path}")
        debug_print("ICS", f"Loading {path}")
        return cls.from_ical(path.read_bytes(), first_day_of_week)

    def _expand_master(self, component: ICalEvent, date_range: DateRange) -> list[CalendarEvent]:
        uid = str(component.get('UID'))
        try:
            occurrences = _expand_component(component, date_range.start, date_range.end)
        except (ValueError, TypeError) as e:
            debug_print("ICS", f"Error expanding recurring event {uid}: {e}")
            # Fallback: the master occurrence only
            occurrences = [_component_times(component)]

        replaced = self._overrides.get(uid, {})
        events = []
        for start_val, end_val in occurrences:
            key = _occurrence_key(start_val)
            if key in replaced:
                continue
            events.append(_make_event(component, start_val, end_val, key.date()))
        return events

    def events_intersecting(self, date_range: DateRange) -> list[CalendarEvent]:
        """Concrete instances overlapping the inclusive range, by start then id."""
        candidates = []
        for component in self._masters:
            if _is_recurring(component):
                candidates.extend(self._expand_master(component, date_range))
            else:
                candidates.append(to_calendar_event(component))
        for overrides in self._overrides.values():
            candidates.extend(to_calendar_event(component) for component in overrides.values())

        events = [e for e in candidates if date_range.overlaps(e.start, e.occupied_until)]
        events.sort(key=_event_order)
        debug_print("ICS", f"Expanded {len(events)} instances in {date_range.start} - {date_range.end}")
        return events

    def events_for_date(self, day: DateLike) -> list[CalendarEvent]:
        return self.events_intersecting(DateRange.for_day(day))


def expand_rule(start: datetime, end: datetime, rrule: str, window: DateRange) -> list[tuple[datetime, datetime]]:
    """
    Expand an RRULE string (``"FREQ=DAILY;COUNT=5"``, optionally prefixed
    with ``RRULE:``) anchored at ``start``-``end`` into the occurrences
    overlapping ``window``.

    Returns naive local ``(start, end)`` pairs sorted by start. Raises
    ValueError for an unparseable rule.
    """
    rule_text = rrule.strip()
    if rule_text.upper().startswith('RRULE:'):
        rule_text = rule_text[len('RRULE:'):]

    # Throw-away VEVENT so rules expand exactly like calendar events
    event = ICalEvent()
    event.add('uid', 'expand-rule')
    event.add('dtstart', start)
    event.add('dtend', end)
    event.add('rrule', vRecur.from_ical(rule_text))

    occurrences = []
    for occ_start, occ_end in _expand_component(event, window.start, window.end):
        occ_start = to_local_naive(occ_start)
        occ_end = to_local_naive(occ_end)
        if window.overlaps(occ_start, occ_end):
            occurrences.append((occ_start, occ_end))
    occurrences.sort()
    return occurrences
