"""Appointment routes: staff booking, rescheduling, status changes, public booking."""

from flask import Blueprint, jsonify, request
from flask_login import login_required

from auth import current_caller
from schemas import AppointmentIn, AppointmentUpdateIn, PublicBookingIn, StatusIn, datetime_arg
from scheduling import (
    create_appointment, book_public_appointment, reschedule_appointment,
    set_appointment_status, delete_appointment, list_appointments
)
from scheduling.appointments import SCOPE_ALL, SCOPE_MY, SCOPE_TEAM

appointments_bp = Blueprint('appointments', __name__, url_prefix='/api')


def _listing(scope):
    appointments = list_appointments(
        current_caller(),
        scope=scope,
        start=datetime_arg(request.args, 'start'),
        end=datetime_arg(request.args, 'end'),
        employee_id=request.args.get('employee_id', type=int)
    )
    return jsonify({
        'success': True,
        'appointments': [a.to_dict() for a in appointments]
    })


@appointments_bp.route('/appointments', methods=['GET'])
@login_required
def get_appointments():
    """All appointments (admin only)."""
    return _listing(SCOPE_ALL)


@appointments_bp.route('/appointments/my', methods=['GET'])
@login_required
def get_my_appointments():
    return _listing(SCOPE_MY)


@appointments_bp.route('/appointments/team', methods=['GET'])
@login_required
def get_team_appointments():
    """Everyone's appointments, read-only view for staff."""
    return _listing(SCOPE_TEAM)


@appointments_bp.route('/appointments', methods=['POST'])
@login_required
def add_appointment():
    """Book an appointment. Admins book for anyone, employees for themselves."""
    payload = AppointmentIn.parse(request.get_json(silent=True))

    appointment = create_appointment(
        payload.employee_id,
        payload.service_id,
        payload.start,
        payload.client_fields(),
        current_caller()
    )

    return jsonify({
        'success': True,
        'appointment': appointment.to_dict(),
        'message': 'Appointment booked'
    }), 201


@appointments_bp.route('/appointments/<int:appointment_id>', methods=['PUT'])
@login_required
def edit_appointment(appointment_id):
    """Reschedule, switch service, reassign or edit client details."""
    payload = AppointmentUpdateIn.parse(request.get_json(silent=True))

    appointment = reschedule_appointment(appointment_id, current_caller(), payload.to_changes())

    return jsonify({
        'success': True,
        'appointment': appointment.to_dict(),
        'message': 'Appointment updated'
    })


@appointments_bp.route('/appointments/<int:appointment_id>/status', methods=['PUT'])
@login_required
def change_appointment_status(appointment_id):
    payload = StatusIn.parse(request.get_json(silent=True))

    appointment = set_appointment_status(appointment_id, current_caller(), payload.status)

    return jsonify({
        'success': True,
        'appointment': appointment.to_dict(),
        'message': f'Appointment {appointment.status.lower()}'
    })


@appointments_bp.route('/appointments/<int:appointment_id>', methods=['DELETE'])
@login_required
def remove_appointment(appointment_id):
    delete_appointment(appointment_id, current_caller())
    return jsonify({'success': True, 'message': 'Appointment deleted'})


@appointments_bp.route('/book', methods=['POST'])
def public_booking():
    """Client self-booking; lands as PENDING until staff confirm it."""
    payload = PublicBookingIn.parse(request.get_json(silent=True))

    appointment = book_public_appointment(
        payload.employee_id,
        payload.service_id,
        payload.start,
        payload.client_fields()
    )

    return jsonify({
        'success': True,
        'appointment': appointment.to_dict(),
        'message': 'Appointment requested'
    }), 201
