"""
Appointment operations and the reschedule protocol.

Every write follows the same path: authorize, derive the end from the
service, check for overlap on the target employee while holding that
employee's interval lock, then commit everything together or nothing.
"""

import logging
from datetime import datetime
from typing import List, Optional

import db_service
from models import db, Appointment
from .authz import ensure_can_reassign, ensure_owner, resolve_target_employee
from .duration import resolve_end
from .errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from .locking import employee_interval_lock
from .models import (
    AppointmentChanges, AppointmentStatus, CallerIdentity, IntervalKind,
    STATUS_TRANSITIONS
)
from .overlap import check_overlap

logger = logging.getLogger(__name__)

SCOPE_ALL = 'all'
SCOPE_MY = 'my'
SCOPE_TEAM = 'team'


def get_appointment_or_404(appointment_id: int) -> Appointment:
    appointment = db.session.get(Appointment, appointment_id)
    if appointment is None:
        raise NotFoundError('Appointment not found')
    return appointment


def _raise_conflict(conflict):
    logger.info(
        'Appointment rejected for employee %s: collides with appointment %s (%s - %s)',
        conflict.employee_id, conflict.record_id, conflict.start, conflict.end
    )
    raise ConflictError('Time slot not available', conflict)


def _book(employee_id: int, service_id: int, start: datetime, client_fields: dict,
          status: AppointmentStatus) -> Appointment:
    if not (client_fields.get('client_name') or '').strip():
        raise ValidationError('client_name is required')
    db_service.get_employee_or_404(employee_id)
    end = resolve_end(service_id, start)

    with employee_interval_lock(employee_id):
        conflict = check_overlap(IntervalKind.APPOINTMENT, employee_id, start, end)
        if conflict is not None:
            _raise_conflict(conflict)
        appointment = Appointment(
            employee_id=employee_id,
            service_id=service_id,
            client_name=client_fields['client_name'].strip(),
            client_email=client_fields.get('client_email'),
            client_phone=client_fields.get('client_phone'),
            notes=client_fields.get('notes'),
            start=start,
            end=end,
            status=status.value
        )
        db.session.add(appointment)

    logger.info(
        'Booked appointment %s for employee %s (%s - %s, %s)',
        appointment.id, employee_id, start, end, status.value
    )
    return appointment


def create_appointment(
    employee_id: Optional[int],
    service_id: int,
    start: datetime,
    client_fields: dict,
    caller: CallerIdentity,
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
) -> Appointment:
    """Staff-side booking. Admins book for anyone, employees for themselves."""
    target = resolve_target_employee(caller, employee_id)
    return _book(target, service_id, start, client_fields, status)


def book_public_appointment(
    employee_id: int,
    service_id: int,
    start: datetime,
    client_fields: dict
) -> Appointment:
    """Client self-booking: contact details required, lands as PENDING."""
    if not client_fields.get('client_email'):
        raise ValidationError('Email is required')
    if not client_fields.get('client_phone'):
        raise ValidationError('Phone number is required')
    return _book(employee_id, service_id, start, client_fields, AppointmentStatus.PENDING)


def _check_transition(current: AppointmentStatus, target: AppointmentStatus):
    if target is current:
        return
    if target not in STATUS_TRANSITIONS[current]:
        raise ValidationError(f'Cannot change status from {current.value} to {target.value}')


def reschedule_appointment(
    appointment_id: int,
    caller: CallerIdentity,
    changes: AppointmentChanges
) -> Appointment:
    """
    Move an appointment in time, switch its service, and/or reassign it.

    1. Load the appointment (NotFound).
    2. Authorize: employees must own it and cannot reassign (Forbidden).
    3. Resolve next service, start and employee; derive the next end.
    4. Check overlap on the next employee, excluding this appointment.
    5. Persist all fields together, or nothing on conflict.
    """
    existing = get_appointment_or_404(appointment_id)
    ensure_owner(caller, existing.employee_id)
    ensure_can_reassign(caller, existing.employee_id, changes.employee_id)

    next_service_id = changes.service_id if changes.service_id is not None else existing.service_id
    next_start = changes.start if changes.start is not None else existing.start
    next_employee_id = changes.employee_id if changes.employee_id is not None else existing.employee_id

    if next_employee_id != existing.employee_id:
        db_service.get_employee_or_404(next_employee_id)
    next_end = resolve_end(next_service_id, next_start)

    if changes.status is not None:
        _check_transition(AppointmentStatus(existing.status), changes.status)

    client_updates = changes.client_updates()
    if 'client_name' in client_updates and not client_updates['client_name'].strip():
        raise ValidationError('client_name cannot be empty')

    with employee_interval_lock(existing.employee_id, next_employee_id):
        conflict = check_overlap(
            IntervalKind.APPOINTMENT, next_employee_id, next_start, next_end,
            exclude_id=appointment_id
        )
        if conflict is not None:
            _raise_conflict(conflict)

        existing.start = next_start
        existing.end = next_end
        existing.service_id = next_service_id
        existing.employee_id = next_employee_id
        if changes.status is not None:
            existing.status = changes.status.value
        for name, value in client_updates.items():
            setattr(existing, name, value)

    logger.info(
        'User %s rescheduled appointment %s to employee %s (%s - %s)',
        caller.user_id, appointment_id, next_employee_id, next_start, next_end
    )
    return existing


def set_appointment_status(
    appointment_id: int,
    caller: CallerIdentity,
    status: AppointmentStatus
) -> Appointment:
    """PENDING -> CONFIRMED -> CANCELED, or straight to CANCELED."""
    appointment = get_appointment_or_404(appointment_id)
    ensure_owner(caller, appointment.employee_id)
    _check_transition(AppointmentStatus(appointment.status), status)

    if appointment.status != status.value:
        appointment.status = status.value
        db.session.commit()
        logger.info('Appointment %s is now %s', appointment_id, status.value)
    return appointment


def delete_appointment(appointment_id: int, caller: CallerIdentity):
    appointment = get_appointment_or_404(appointment_id)
    ensure_owner(caller, appointment.employee_id)
    db.session.delete(appointment)
    db.session.commit()
    logger.info('User %s deleted appointment %s', caller.user_id, appointment_id)


def list_appointments(
    caller: CallerIdentity,
    scope: str = SCOPE_ALL,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    employee_id: Optional[int] = None
) -> List[Appointment]:
    """
    Appointments visible to the caller, optionally limited to a time window.

    ``all`` is admin-only, ``my`` is the caller's own bookings, ``team`` is
    the read-only view of everyone's bookings for staff.
    """
    query = Appointment.query

    if scope == SCOPE_MY:
        if caller.employee_id is None:
            return []
        query = query.filter(Appointment.employee_id == caller.employee_id)
    elif scope == SCOPE_ALL:
        if not caller.is_admin:
            raise ForbiddenError('Forbidden')
    elif scope != SCOPE_TEAM:
        raise ValidationError(f'Unknown scope: {scope}')

    if employee_id is not None:
        query = query.filter(Appointment.employee_id == employee_id)
    if end is not None:
        query = query.filter(Appointment.start < end)
    if start is not None:
        query = query.filter(Appointment.end > start)
    return query.order_by(Appointment.start, Appointment.id).all()
