"""Value types for the interval scheduling engine."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional


class Role(Enum):
    """Caller role as far as the scheduler cares."""
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class AppointmentStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELED = "CANCELED"


class IntervalKind(Enum):
    """Which record family an interval belongs to."""
    SHIFT = "shift"
    APPOINTMENT = "appointment"


class OverlapMode(Enum):
    """Boundary rule used when comparing two intervals."""
    STRICT = "strict"        # touching end-to-start is allowed
    INCLUSIVE = "inclusive"  # touching end-to-start is a collision


# Allowed status moves; re-setting the current status is always a no-op
STATUS_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELED},
    AppointmentStatus.CONFIRMED: {AppointmentStatus.CANCELED},
    AppointmentStatus.CANCELED: set(),
}


@dataclass(frozen=True)
class Interval:
    """A half-open time range [start, end) attached to one employee."""
    employee_id: int
    start: datetime
    end: datetime
    id: Optional[int] = None

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat()
        }


@dataclass(frozen=True)
class WeeklyTemplateEntry:
    """One day of a recurring week: day 1=Monday .. 7=Sunday."""
    day: int
    start_time: str  # "HH:MM"
    end_time: str    # "HH:MM"

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "start_time": self.start_time,
            "end_time": self.end_time
        }


@dataclass(frozen=True)
class CallerIdentity:
    """The authenticated caller: who they are and which staff record they own."""
    user_id: int
    role: Role
    employee_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def owns(self, employee_id: int) -> bool:
        return self.employee_id is not None and self.employee_id == employee_id


@dataclass(frozen=True)
class Conflict:
    """The existing record a candidate interval collided with."""
    kind: IntervalKind
    record_id: int
    employee_id: int
    start: datetime
    end: datetime

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "id": self.record_id,
            "employee_id": self.employee_id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat()
        }


@dataclass
class ExpansionResult:
    """Outcome of expanding a weekly template into shifts."""
    created: List[Any] = field(default_factory=list)
    skipped_count: int = 0

    def to_dict(self) -> dict:
        return {
            "count": len(self.created),
            "skipped": self.skipped_count,
            "shifts": [s.to_dict() for s in self.created]
        }


@dataclass
class AppointmentChanges:
    """Fields a reschedule may touch. ``end`` is derived, never accepted."""
    start: Optional[datetime] = None
    service_id: Optional[int] = None
    employee_id: Optional[int] = None
    status: Optional[AppointmentStatus] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    notes: Optional[str] = None

    CLIENT_FIELDS = ("client_name", "client_email", "client_phone", "notes")

    def client_updates(self) -> dict:
        return {
            name: getattr(self, name)
            for name in self.CLIENT_FIELDS
            if getattr(self, name) is not None
        }


@dataclass
class LaidOutEvent:
    """An event with its display column inside one employee/day lane."""
    event: Any
    column_index: int
    column_count: int

    def to_dict(self) -> dict:
        payload = self.event.to_dict() if hasattr(self.event, "to_dict") else {"event": self.event}
        payload.update({
            "column_index": self.column_index,
            "column_count": self.column_count
        })
        return payload


@dataclass
class DragPreview:
    """Where an event would land if the pointer were released now."""
    appointment_id: int
    employee_id: int
    day: date
    slot: int
    duration_slots: int

    def to_dict(self) -> dict:
        return {
            "appointment_id": self.appointment_id,
            "employee_id": self.employee_id,
            "day": self.day.isoformat(),
            "slot": self.slot,
            "duration_slots": self.duration_slots
        }
