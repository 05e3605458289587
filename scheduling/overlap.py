"""
Overlap Detection

Decides whether a candidate interval collides with an employee's existing
shifts or appointments. Shifts and appointments use different boundary
rules:

- Shifts (strict): existing.start < new.end AND new.start < existing.end.
  A shift ending at 12:00 and one starting at 12:00 may coexist.
- Appointments (inclusive): existing.start <= new.end AND new.start <= existing.end.
  Exact back-to-back bookings collide.

Both defaults come from the app config and can be overridden per call.
"""

from datetime import datetime
from typing import Optional

from flask import current_app

from models import Appointment, Shift, STATUS_CANCELED
from .models import Conflict, IntervalKind, OverlapMode


_MODELS = {
    IntervalKind.SHIFT: Shift,
    IntervalKind.APPOINTMENT: Appointment,
}


def intervals_overlap(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
    mode: OverlapMode = OverlapMode.STRICT
) -> bool:
    """Pure overlap predicate for two intervals under a boundary rule."""
    if mode is OverlapMode.INCLUSIVE:
        return a_start <= b_end and b_start <= a_end
    return a_start < b_end and b_start < a_end


def default_mode(kind: IntervalKind) -> OverlapMode:
    """Boundary rule configured for a record kind."""
    key = 'SHIFT_OVERLAP_MODE' if kind is IntervalKind.SHIFT else 'APPOINTMENT_OVERLAP_MODE'
    fallback = 'strict' if kind is IntervalKind.SHIFT else 'inclusive'
    value = current_app.config.get(key, fallback)
    if isinstance(value, OverlapMode):
        return value
    return OverlapMode(str(value).lower())


def include_canceled_default() -> bool:
    return bool(current_app.config.get('INCLUDE_CANCELED_IN_OVERLAP_CHECK', True))


def check_overlap(
    kind: IntervalKind,
    employee_id: int,
    start: datetime,
    end: datetime,
    exclude_id: Optional[int] = None,
    mode: Optional[OverlapMode] = None,
    include_canceled: Optional[bool] = None
) -> Optional[Conflict]:
    """
    Find an existing record of the same kind that collides with [start, end).

    Args:
        kind: SHIFT or APPOINTMENT
        employee_id: whose records to compare against
        start, end: the candidate interval; ``end`` is already resolved
        exclude_id: record being updated, left out of the comparison
        mode: boundary rule; defaults to the kind's configured rule
        include_canceled: appointments only; whether CANCELED bookings block

    Returns:
        The earliest-starting colliding record as a Conflict, or None.
    """
    model = _MODELS[kind]
    if mode is None:
        mode = default_mode(kind)

    query = model.query.filter(model.employee_id == employee_id)

    if mode is OverlapMode.INCLUSIVE:
        query = query.filter(model.start <= end, model.end >= start)
    else:
        query = query.filter(model.start < end, model.end > start)

    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)

    if kind is IntervalKind.APPOINTMENT:
        if include_canceled is None:
            include_canceled = include_canceled_default()
        if not include_canceled:
            query = query.filter(model.status != STATUS_CANCELED)

    existing = query.order_by(model.start, model.id).first()
    if existing is None:
        return None

    return Conflict(
        kind=kind,
        record_id=existing.id,
        employee_id=existing.employee_id,
        start=existing.start,
        end=existing.end
    )
