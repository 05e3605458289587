"""Shift routes: admin management and employee self-service."""

from flask import Blueprint, jsonify, request
from flask_login import login_required

from auth import current_caller
from schemas import BulkShiftsIn, ShiftIn, ShiftUpdateIn, datetime_arg
from scheduling import (
    create_shift, update_shift, delete_shift, generate_shifts,
    list_shifts_in_window, list_my_shifts
)
from scheduling.authz import ensure_admin

shifts_bp = Blueprint('shifts', __name__, url_prefix='/api/shifts')


# ==================== ADMIN ====================

@shifts_bp.route('', methods=['GET'])
@login_required
def list_shifts():
    """List shifts overlapping an optional [start, end) window."""
    ensure_admin(current_caller(), 'list all shifts')

    shifts = list_shifts_in_window(
        employee_id=request.args.get('employee_id', type=int),
        start=datetime_arg(request.args, 'start'),
        end=datetime_arg(request.args, 'end')
    )
    return jsonify({
        'success': True,
        'shifts': [s.to_dict() for s in shifts]
    })


@shifts_bp.route('', methods=['POST'])
@login_required
def add_shift():
    """Create a single shift for any employee."""
    caller = current_caller()
    ensure_admin(caller, 'create shifts for other employees')
    payload = ShiftIn.parse(request.get_json(silent=True))

    shift = create_shift(payload.employee_id, payload.start, payload.end, caller)

    return jsonify({
        'success': True,
        'shift': shift.to_dict(),
        'message': 'Shift created'
    }), 201


@shifts_bp.route('/bulk', methods=['POST'])
@login_required
def add_shifts_bulk():
    """Generate shifts from a weekly template across N weeks."""
    caller = current_caller()
    ensure_admin(caller, 'generate shifts for other employees')
    payload = BulkShiftsIn.parse(request.get_json(silent=True))
    if payload.employee_id is None:
        return jsonify({'success': False, 'error': 'validation_error', 'message': 'employee_id is required'}), 400

    result = generate_shifts(payload.employee_id, payload.start_date, payload.weeks, payload.entries(), caller)

    return jsonify({
        'success': True,
        **result.to_dict(),
        'message': f'{len(result.created)} shift(s) created, {result.skipped_count} skipped'
    })


# ==================== ADMIN OR OWNER ====================

@shifts_bp.route('/<int:shift_id>', methods=['PUT'])
@login_required
def edit_shift(shift_id):
    """Move a shift; only admins may hand it to another employee."""
    payload = ShiftUpdateIn.parse(request.get_json(silent=True))

    shift = update_shift(
        shift_id,
        current_caller(),
        start=payload.start,
        end=payload.end,
        employee_id=payload.employee_id
    )

    return jsonify({
        'success': True,
        'shift': shift.to_dict(),
        'message': 'Shift updated'
    })


@shifts_bp.route('/<int:shift_id>', methods=['DELETE'])
@login_required
def remove_shift(shift_id):
    delete_shift(shift_id, current_caller())
    return jsonify({'success': True, 'message': 'Shift deleted'})


# ==================== EMPLOYEE SELF-SERVICE ====================

@shifts_bp.route('/my', methods=['GET'])
@login_required
def my_shifts():
    shifts = list_my_shifts(current_caller())
    return jsonify({
        'success': True,
        'shifts': [s.to_dict() for s in shifts]
    })


@shifts_bp.route('/my', methods=['POST'])
@login_required
def add_my_shift():
    """Create a shift for the logged-in employee."""
    caller = current_caller()
    payload = ShiftIn.parse(request.get_json(silent=True))

    shift = create_shift(caller.employee_id, payload.start, payload.end, caller)

    return jsonify({
        'success': True,
        'shift': shift.to_dict(),
        'message': 'Shift created'
    }), 201


@shifts_bp.route('/my/bulk', methods=['POST'])
@login_required
def add_my_shifts_bulk():
    """Generate the logged-in employee's shifts from a weekly template."""
    caller = current_caller()
    payload = BulkShiftsIn.parse(request.get_json(silent=True))
    if caller.employee_id is None:
        return jsonify({'success': False, 'error': 'validation_error', 'message': 'Employee profile not found'}), 400

    result = generate_shifts(caller.employee_id, payload.start_date, payload.weeks, payload.entries(), caller)

    return jsonify({
        'success': True,
        **result.to_dict(),
        'message': f'{len(result.created)} shift(s) created, {result.skipped_count} skipped'
    })
