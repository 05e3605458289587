"""
Calendar layout for one employee's day.

Overlapping events in a lane are spread across side-by-side columns with a
greedy interval-partitioning pass (the "meeting rooms" sweep). The result is
for drawing only and is never stored or used to accept or reject bookings.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .models import LaidOutEvent

MAX_COLUMNS = 4


def layout_events(events: Iterable) -> List[LaidOutEvent]:
    """
    Assign each event a column index and a column count.

    Events need ``start`` and ``end`` attributes. An event ending exactly when
    the next one begins frees its column. More than four concurrent events
    share the last column.

    ``column_count`` is the highest concurrency seen while the event was
    active, so an event can widen to account for events that started after
    it; good enough for rendering.
    """
    ordered = sorted(events, key=lambda e: e.start)
    results: List[LaidOutEvent] = []
    active: List[Tuple[datetime, int, LaidOutEvent]] = []

    for event in ordered:
        active = [entry for entry in active if entry[0] > event.start]

        used = {column for _, column, _ in active}
        column = 0
        while column in used and column < MAX_COLUMNS:
            column += 1
        if column >= MAX_COLUMNS:
            column = MAX_COLUMNS - 1

        laid = LaidOutEvent(event=event, column_index=column, column_count=1)
        results.append(laid)
        active.append((event.end, column, laid))

        count = max(1, min(MAX_COLUMNS, len(active)))
        for _, _, entry in active:
            entry.column_count = max(entry.column_count, count)

    return results


def layout_lanes(events: Iterable, day: date) -> Dict[int, List[LaidOutEvent]]:
    """
    Lay out the events that touch ``day``, one lane per employee.

    An event belongs to the day when it overlaps [00:00, next 00:00), so an
    overnight shift shows on both of the days it spans.
    """
    midnight = datetime.combine(day, datetime.min.time())
    next_midnight = midnight + timedelta(days=1)
    lanes = defaultdict(list)
    for event in events:
        if event.start < next_midnight and event.end > midnight:
            lanes[event.employee_id].append(event)
    return {employee_id: layout_events(lane) for employee_id, lane in lanes.items()}


def column_geometry(column_index: int, column_count: int) -> Tuple[float, float]:
    """(left, width) of a column as fractions of the lane width."""
    count = max(1, min(MAX_COLUMNS, column_count))
    index = min(column_index, count - 1)
    width = 1.0 / count
    return index * width, width


@dataclass(frozen=True)
class CalendarGrid:
    """
    The visible day, cut into fixed-width slots.

    Positions on screen snap to slots; a drag or double-click always lands on
    a slot boundary.
    """
    start_hour: int = 8
    end_hour: int = 20
    slot_minutes: int = 15

    @classmethod
    def from_config(cls, config) -> 'CalendarGrid':
        return cls(
            start_hour=config.get('CALENDAR_START_HOUR', 8),
            end_hour=config.get('CALENDAR_END_HOUR', 20),
            slot_minutes=config.get('SLOT_MINUTES', 15)
        )

    @property
    def total_minutes(self) -> int:
        return (self.end_hour - self.start_hour) * 60

    @property
    def slot_count(self) -> int:
        return self.total_minutes // self.slot_minutes

    def minutes_since_open(self, moment: datetime) -> int:
        return moment.hour * 60 + moment.minute - self.start_hour * 60

    def clamp_slot(self, slot: int) -> int:
        return max(0, min(self.slot_count, slot))

    def nearest_slot(self, minutes: float) -> int:
        """Snap minutes-from-opening to the nearest slot index."""
        minutes = max(0, min(self.total_minutes, minutes))
        return self.clamp_slot(int(round(minutes / self.slot_minutes)))

    def slot_of(self, moment: datetime) -> int:
        return self.nearest_slot(self.minutes_since_open(moment))

    def duration_slots(self, start: datetime, end: datetime) -> int:
        minutes = max(self.slot_minutes, (end - start).total_seconds() / 60)
        return max(1, int(round(minutes / self.slot_minutes)))

    def clamp_start(self, slot: int, duration_slots: int) -> int:
        """Latest start slot that keeps ``duration_slots`` inside the day."""
        return max(0, min(slot, self.slot_count - duration_slots))

    def opening(self, day: date) -> datetime:
        return datetime.combine(day, datetime.min.time()) + timedelta(hours=self.start_hour)

    def slot_start(self, day: date, slot: int) -> datetime:
        return self.opening(day) + timedelta(minutes=slot * self.slot_minutes)

    def describe(self, laid: LaidOutEvent, day: Optional[date] = None) -> dict:
        """
        Drawing geometry for one laid-out event.

        With ``day`` the event is clipped to that day's visible hours, which
        matters for events that start before midnight or end after closing.
        """
        left, width = column_geometry(laid.column_index, laid.column_count)
        start, end = laid.event.start, laid.event.end
        if day is None:
            top = self.slot_of(start)
        else:
            opening = self.opening(day)
            start = max(start, opening)
            end = min(end, opening + timedelta(minutes=self.total_minutes))
            top = self.nearest_slot((start - opening).total_seconds() / 60)
        return {
            'top_slot': top,
            'height_slots': self.duration_slots(start, end),
            'left': left,
            'width': width
        }
