"""Shift operations: create, update (move/reassign), delete, list."""

import logging
from datetime import datetime
from typing import List, Optional

import db_service
from models import db, Shift
from .authz import ensure_can_reassign, ensure_owner, resolve_target_employee
from .errors import ConflictError, NotFoundError, ValidationError
from .locking import employee_interval_lock
from .models import CallerIdentity, IntervalKind
from .overlap import check_overlap

logger = logging.getLogger(__name__)


def get_shift_or_404(shift_id: int) -> Shift:
    shift = db.session.get(Shift, shift_id)
    if shift is None:
        raise NotFoundError('Shift not found')
    return shift


def _ensure_valid_range(start: datetime, end: datetime):
    if end <= start:
        raise ValidationError('Shift end must be after start')


def _raise_conflict(conflict):
    logger.info(
        'Shift rejected for employee %s: overlaps shift %s (%s - %s)',
        conflict.employee_id, conflict.record_id, conflict.start, conflict.end
    )
    raise ConflictError('Shift overlaps with existing one', conflict)


def create_shift(
    employee_id: Optional[int],
    start: datetime,
    end: datetime,
    caller: Optional[CallerIdentity] = None
) -> Shift:
    """Add one shift, rejecting it if it overlaps another of the employee's shifts."""
    if caller is not None:
        employee_id = resolve_target_employee(caller, employee_id)
    elif employee_id is None:
        raise ValidationError('employee_id is required')

    _ensure_valid_range(start, end)
    db_service.get_employee_or_404(employee_id)

    with employee_interval_lock(employee_id):
        conflict = check_overlap(IntervalKind.SHIFT, employee_id, start, end)
        if conflict is not None:
            _raise_conflict(conflict)
        shift = Shift(employee_id=employee_id, start=start, end=end)
        db.session.add(shift)

    logger.info('Created shift %s for employee %s (%s - %s)', shift.id, employee_id, start, end)
    return shift


def update_shift(
    shift_id: int,
    caller: CallerIdentity,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    employee_id: Optional[int] = None
) -> Shift:
    """
    Move a shift in time and/or hand it to another employee.

    The owner may change times; only an admin may reassign. The overlap check
    runs against the destination employee, excluding the shift itself.
    """
    existing = get_shift_or_404(shift_id)
    ensure_owner(caller, existing.employee_id)
    ensure_can_reassign(caller, existing.employee_id, employee_id)

    next_start = start if start is not None else existing.start
    next_end = end if end is not None else existing.end
    next_employee_id = employee_id if employee_id is not None else existing.employee_id

    _ensure_valid_range(next_start, next_end)
    if next_employee_id != existing.employee_id:
        db_service.get_employee_or_404(next_employee_id)

    with employee_interval_lock(existing.employee_id, next_employee_id):
        conflict = check_overlap(
            IntervalKind.SHIFT, next_employee_id, next_start, next_end, exclude_id=shift_id
        )
        if conflict is not None:
            _raise_conflict(conflict)
        existing.start = next_start
        existing.end = next_end
        existing.employee_id = next_employee_id

    return existing


def delete_shift(shift_id: int, caller: CallerIdentity):
    """Remove a shift. Admins may delete any; employees only their own."""
    shift = get_shift_or_404(shift_id)
    ensure_owner(caller, shift.employee_id)
    db.session.delete(shift)
    db.session.commit()
    logger.info('User %s deleted shift %s', caller.user_id, shift_id)


def list_shifts_in_window(
    employee_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None
) -> List[Shift]:
    """
    Shifts that overlap the window [start, end), not only those contained in it.

    Either bound may be omitted for an open-ended window.
    """
    query = Shift.query
    if employee_id is not None:
        query = query.filter(Shift.employee_id == employee_id)
    if end is not None:
        query = query.filter(Shift.start < end)
    if start is not None:
        query = query.filter(Shift.end > start)
    return query.order_by(Shift.start, Shift.id).all()


def list_my_shifts(caller: CallerIdentity) -> List[Shift]:
    if caller.employee_id is None:
        return []
    return list_shifts_in_window(employee_id=caller.employee_id)
