"""
Recurring shift generation from a weekly template.

A template lists working hours per weekday (1=Monday .. 7=Sunday). Expanding
it over N weeks produces concrete shifts, anchored on the Monday of the week
that contains the requested start date. Slots that are empty (end <= start)
or that collide with an existing shift are skipped and counted; the rest of
the batch still goes through.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, List, Optional

from flask import current_app

import db_service
from models import db, Shift
from .authz import ensure_owner
from .errors import ValidationError
from .locking import employee_interval_lock
from .models import CallerIdentity, ExpansionResult, Interval, IntervalKind, WeeklyTemplateEntry
from .overlap import check_overlap

logger = logging.getLogger(__name__)

DAYS_OF_WEEK = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']

_TIME_RE = re.compile(r'^\s*(\d{1,2})(?::(\d{1,2}))?\s*$')


def parse_time_of_day(value: str) -> timedelta:
    """
    Parse "HH:MM" (or bare "HH") into an offset from midnight.

    "24:00" is accepted and means midnight at the end of the day.
    """
    match = _TIME_RE.match(value or '')
    if not match:
        raise ValidationError(f'Invalid time "{value}". Use HH:MM')
    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    if minutes > 59 or hours > 24 or (hours == 24 and minutes):
        raise ValidationError(f'Invalid time "{value}". Use HH:MM')
    return timedelta(hours=hours, minutes=minutes)


def anchor_monday(start_date: date) -> date:
    """Monday of the week containing ``start_date`` (a Sunday maps 6 days back)."""
    return start_date - timedelta(days=start_date.weekday())


def validate_template(weeks: int, week_template: List[WeeklyTemplateEntry], max_weeks: Optional[int] = None):
    """Reject requests that are malformed as a whole, before anything is written."""
    if max_weeks is None:
        max_weeks = current_app.config.get('BULK_MAX_WEEKS', 26)
    if not isinstance(weeks, int) or weeks < 1 or weeks > max_weeks:
        raise ValidationError(f'weeks must be between 1 and {max_weeks}')
    if not week_template:
        raise ValidationError('week_template must contain at least one day')
    for entry in week_template:
        if entry.day < 1 or entry.day > 7:
            raise ValidationError(f'Invalid template day {entry.day}; use 1 (Monday) to 7 (Sunday)')
        parse_time_of_day(entry.start_time)
        parse_time_of_day(entry.end_time)


def expand_template(
    employee_id: int,
    start_date: date,
    weeks: int,
    week_template: Iterable[WeeklyTemplateEntry]
) -> Iterator[Interval]:
    """Yield the interval of every template slot, week by week."""
    template = list(week_template)
    first_monday = anchor_monday(start_date)

    for week in range(weeks):
        week_base = first_monday + timedelta(days=7 * week)
        for entry in template:
            day = week_base + timedelta(days=entry.day - 1)
            midnight = datetime.combine(day, datetime.min.time())
            yield Interval(
                employee_id=employee_id,
                start=midnight + parse_time_of_day(entry.start_time),
                end=midnight + parse_time_of_day(entry.end_time)
            )


def generate_shifts(
    employee_id: int,
    start_date: date,
    weeks: int,
    week_template: List[WeeklyTemplateEntry],
    caller: Optional[CallerIdentity] = None
) -> ExpansionResult:
    """
    Create the shifts described by a weekly template.

    The batch is not atomic: each slot is checked and written under the
    employee lock on its own, and a slot that cannot be placed only bumps
    ``skipped_count``.
    """
    if caller is not None:
        ensure_owner(caller, employee_id)
    validate_template(weeks, week_template)
    db_service.get_employee_or_404(employee_id)

    result = ExpansionResult()

    for slot in expand_template(employee_id, start_date, weeks, week_template):
        if slot.end <= slot.start:
            result.skipped_count += 1
            continue

        with employee_interval_lock(employee_id):
            conflict = check_overlap(IntervalKind.SHIFT, employee_id, slot.start, slot.end)
            if conflict is not None:
                result.skipped_count += 1
                continue
            shift = Shift(employee_id=employee_id, start=slot.start, end=slot.end)
            db.session.add(shift)

        result.created.append(shift)

    logger.info(
        'Generated shifts for employee %s from %s over %s week(s): %s created, %s skipped',
        employee_id, start_date.isoformat(), weeks, len(result.created), result.skipped_count
    )
    return result
