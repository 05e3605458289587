"""Role and ownership checks over the caller identity."""

import logging
from typing import Optional

from models import ROLE_ADMIN
from .errors import ForbiddenError, ValidationError
from .models import CallerIdentity, Role

logger = logging.getLogger(__name__)


def identity_from_user(user) -> CallerIdentity:
    """Build the scheduler's view of a logged-in ``models.User``."""
    role = Role.ADMIN if user.role == ROLE_ADMIN else Role.EMPLOYEE
    return CallerIdentity(
        user_id=user.id,
        role=role,
        employee_id=user.linked_employee_id
    )


def ensure_admin(caller: CallerIdentity, action: str = 'perform this action'):
    if not caller.is_admin:
        logger.warning('User %s denied: only admin can %s', caller.user_id, action)
        raise ForbiddenError(f'Only admin can {action}')


def ensure_owner(caller: CallerIdentity, employee_id: int):
    """Admins pass; employees must own the record's employee."""
    if caller.is_admin:
        return
    if not caller.owns(employee_id):
        logger.warning(
            'User %s (employee %s) denied access to records of employee %s',
            caller.user_id, caller.employee_id, employee_id
        )
        raise ForbiddenError('Forbidden')


def ensure_can_reassign(caller: CallerIdentity, current_employee_id: int, requested_employee_id: Optional[int]):
    """Only admins may move a record to a different employee."""
    if requested_employee_id is None or requested_employee_id == current_employee_id:
        return
    if not caller.is_admin:
        logger.warning(
            'User %s attempted to reassign from employee %s to %s',
            caller.user_id, current_employee_id, requested_employee_id
        )
        raise ForbiddenError('Only admin can reassign to another employee')


def resolve_target_employee(caller: CallerIdentity, requested_employee_id: Optional[int]) -> int:
    """
    Pick the employee a new record is created for.

    Admins must name one. Employees act for themselves: they may omit the id
    or pass their own, anything else is forbidden.
    """
    if caller.is_admin:
        if requested_employee_id is None:
            raise ValidationError('employee_id is required')
        return requested_employee_id

    if caller.employee_id is None:
        raise ValidationError('Employee profile not found')
    if requested_employee_id is not None and requested_employee_id != caller.employee_id:
        logger.warning(
            'User %s attempted to create a record for employee %s',
            caller.user_id, requested_employee_id
        )
        raise ForbiddenError('Employees can only create records for themselves')
    return caller.employee_id
