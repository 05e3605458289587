"""Interval scheduling engine - shifts, appointments and calendar layout."""

from .models import (
    Role,
    AppointmentStatus,
    IntervalKind,
    OverlapMode,
    Interval,
    WeeklyTemplateEntry,
    CallerIdentity,
    Conflict,
    ExpansionResult,
    AppointmentChanges,
    LaidOutEvent,
    DragPreview
)
from .errors import (
    SchedulingError,
    ValidationError,
    ForbiddenError,
    NotFoundError,
    ConflictError
)
from .overlap import check_overlap, intervals_overlap
from .locking import employee_interval_lock, with_employee_interval_lock
from .duration import resolve_end, end_for_duration
from .templates import anchor_monday, expand_template, generate_shifts, DAYS_OF_WEEK
from .shifts import create_shift, update_shift, delete_shift, list_shifts_in_window, list_my_shifts
from .appointments import (
    create_appointment,
    book_public_appointment,
    reschedule_appointment,
    set_appointment_status,
    delete_appointment,
    list_appointments
)
from .authz import identity_from_user
from .layout import layout_events, layout_lanes, column_geometry, CalendarGrid, MAX_COLUMNS
from .drag import DragSession, DragState

__all__ = [
    # Models
    'Role',
    'AppointmentStatus',
    'IntervalKind',
    'OverlapMode',
    'Interval',
    'WeeklyTemplateEntry',
    'CallerIdentity',
    'Conflict',
    'ExpansionResult',
    'AppointmentChanges',
    'LaidOutEvent',
    'DragPreview',

    # Errors
    'SchedulingError',
    'ValidationError',
    'ForbiddenError',
    'NotFoundError',
    'ConflictError',

    # Validation and locking
    'check_overlap',
    'intervals_overlap',
    'employee_interval_lock',
    'with_employee_interval_lock',
    'resolve_end',
    'end_for_duration',

    # Shifts
    'anchor_monday',
    'expand_template',
    'generate_shifts',
    'create_shift',
    'update_shift',
    'delete_shift',
    'list_shifts_in_window',
    'list_my_shifts',
    'DAYS_OF_WEEK',

    # Appointments
    'create_appointment',
    'book_public_appointment',
    'reschedule_appointment',
    'set_appointment_status',
    'delete_appointment',
    'list_appointments',

    # Callers
    'identity_from_user',

    # Calendar
    'layout_events',
    'layout_lanes',
    'column_geometry',
    'CalendarGrid',
    'MAX_COLUMNS',
    'DragSession',
    'DragState'
]
