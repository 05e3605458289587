"""Calendar routes: day view with column layout, plus the lookups the calendar needs."""

from datetime import date, datetime, timedelta

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required

from auth import current_caller
from db_service import list_employees, list_services
from schemas import date_arg
from scheduling import CalendarGrid, layout_lanes, list_appointments, list_shifts_in_window
from scheduling.appointments import SCOPE_ALL, SCOPE_TEAM

calendar_bp = Blueprint('calendar', __name__, url_prefix='/api')


@calendar_bp.route('/calendar/day', methods=['GET'])
@login_required
def calendar_day():
    """
    One day of the calendar: a lane per employee, each event placed in a
    display column. Pass ``kind=shifts`` to lay out shifts instead of
    appointments.
    """
    caller = current_caller()
    day = date_arg(request.args, 'date') or date.today()
    employee_id = request.args.get('employee_id', type=int)
    kind = request.args.get('kind', 'appointments')

    window_start = datetime.combine(day, datetime.min.time())
    window_end = window_start + timedelta(days=1)

    if kind == 'shifts':
        events = list_shifts_in_window(employee_id=employee_id, start=window_start, end=window_end)
    else:
        events = list_appointments(
            caller,
            scope=SCOPE_ALL if caller.is_admin else SCOPE_TEAM,
            start=window_start,
            end=window_end,
            employee_id=employee_id
        )

    grid = CalendarGrid.from_config(current_app.config)
    lanes = layout_lanes(events, day)

    employees = list_employees()
    if employee_id is not None:
        employees = [e for e in employees if e.id == employee_id]

    return jsonify({
        'success': True,
        'date': day.isoformat(),
        'kind': kind,
        'grid': {
            'start_hour': grid.start_hour,
            'end_hour': grid.end_hour,
            'slot_minutes': grid.slot_minutes,
            'slot_count': grid.slot_count
        },
        'lanes': [
            {
                'employee': employee.to_dict(),
                'read_only': not (caller.is_admin or caller.owns(employee.id)),
                'events': [
                    {**laid.to_dict(), **grid.describe(laid, day)}
                    for laid in lanes.get(employee.id, [])
                ]
            }
            for employee in employees
        ]
    })


@calendar_bp.route('/employees', methods=['GET'])
@login_required
def get_employees():
    return jsonify({
        'success': True,
        'employees': [e.to_dict() for e in list_employees()]
    })


@calendar_bp.route('/services', methods=['GET'])
def get_services():
    return jsonify({
        'success': True,
        'services': [s.to_dict() for s in list_services()]
    })
