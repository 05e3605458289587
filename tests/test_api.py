"""End-to-end tests of the JSON API through the Flask test client."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from schemas import to_business_time


DAY = '2024-01-08'


def shift_body(employee_id, start, end):
    return {'employeeId': employee_id, 'start': f'{DAY}T{start}:00', 'end': f'{DAY}T{end}:00'}


def booking_body(seed, start, **extra):
    body = {
        'employee_id': seed.alice,
        'service_id': seed.haircut,
        'start': f'{DAY}T{start}:00',
        'client_name': 'Dana Client'
    }
    body.update(extra)
    return body


class TestAuth:

    def test_health(self, app):
        response = app.test_client().get('/api/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'

    def test_protected_route_requires_login(self, app, seed):
        response = app.test_client().get('/api/shifts/my')
        assert response.status_code == 401
        assert response.get_json()['error'] == 'unauthorized'

    def test_bad_password(self, app, seed):
        response = app.test_client().post('/auth/login', json={'email': 'alice@salon.local', 'password': 'nope'})
        assert response.status_code == 401

    def test_me(self, alice_client, seed):
        data = alice_client.get('/auth/me').get_json()
        assert data['user']['email'] == 'alice@salon.local'
        assert data['employee']['id'] == seed.alice

    def test_logout(self, alice_client):
        assert alice_client.post('/auth/logout').status_code == 200
        assert alice_client.get('/auth/me').status_code == 401


class TestShiftRoutes:

    def test_admin_creates_and_conflicts(self, admin_client, seed):
        created = admin_client.post('/api/shifts', json=shift_body(seed.alice, '09:00', '12:00'))
        assert created.status_code == 201
        shift_id = created.get_json()['shift']['id']

        conflict = admin_client.post('/api/shifts', json=shift_body(seed.alice, '11:00', '13:00'))
        assert conflict.status_code == 409
        data = conflict.get_json()
        assert data['error'] == 'conflict'
        assert data['message'] == 'Shift overlaps with existing one'
        assert data['conflict']['id'] == shift_id

    def test_employee_cannot_use_admin_route(self, alice_client, seed):
        response = alice_client.post('/api/shifts', json=shift_body(seed.alice, '09:00', '12:00'))
        assert response.status_code == 403
        assert response.get_json()['success'] is False

    def test_employee_self_service(self, alice_client, seed):
        response = alice_client.post('/api/shifts/my', json={'start': f'{DAY}T09:00:00', 'end': f'{DAY}T12:00:00'})
        assert response.status_code == 201
        assert response.get_json()['shift']['employee_id'] == seed.alice

        shifts = alice_client.get('/api/shifts/my').get_json()['shifts']
        assert [s['start'] for s in shifts] == [f'{DAY}T09:00:00']

    def test_bulk_generation_from_template(self, alice_client):
        body = {
            'startDate': '2024-01-03',
            'weeks': 2,
            'weekTemplate': [
                {'day': 1, 'startTime': '09:00', 'endTime': '17:00'},
                {'day': 3, 'startTime': '09:00', 'endTime': '13:00'},
            ]
        }
        first = alice_client.post('/api/shifts/my/bulk', json=body).get_json()
        again = alice_client.post('/api/shifts/my/bulk', json=body).get_json()

        assert (first['count'], first['skipped']) == (4, 0)
        assert first['shifts'][0]['start'] == '2024-01-01T09:00:00'
        assert (again['count'], again['skipped']) == (0, 4)

    def test_admin_bulk_requires_employee(self, admin_client):
        body = {'startDate': '2024-01-01', 'weeks': 1,
                'weekTemplate': [{'day': 1, 'startTime': '09:00', 'endTime': '17:00'}]}
        response = admin_client.post('/api/shifts/bulk', json=body)
        assert response.status_code == 400

    def test_employee_reassign_is_forbidden(self, alice_client, seed):
        created = alice_client.post('/api/shifts/my', json={'start': f'{DAY}T09:00:00', 'end': f'{DAY}T12:00:00'})
        shift_id = created.get_json()['shift']['id']

        response = alice_client.put(f'/api/shifts/{shift_id}', json={'employeeId': seed.bob})

        assert response.status_code == 403
        assert response.get_json()['message'] == 'Only admin can reassign to another employee'

    def test_window_listing(self, admin_client, seed):
        admin_client.post('/api/shifts', json=shift_body(seed.alice, '07:00', '10:00'))
        admin_client.post('/api/shifts', json=shift_body(seed.bob, '13:00', '15:00'))

        response = admin_client.get(f'/api/shifts?start={DAY}T09:00:00&end={DAY}T12:00:00')

        assert [s['employee_id'] for s in response.get_json()['shifts']] == [seed.alice]

    def test_bad_window_timestamp(self, admin_client):
        response = admin_client.get('/api/shifts?start=yesterday')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'validation_error'

    def test_delete_missing_shift(self, admin_client):
        response = admin_client.delete('/api/shifts/9999')
        assert response.status_code == 404


class TestAppointmentRoutes:

    def test_booking_conflict(self, admin_client, seed):
        first = admin_client.post('/api/appointments', json=booking_body(seed, '10:00'))
        assert first.status_code == 201
        assert first.get_json()['appointment']['end'] == f'{DAY}T10:30:00'

        second = admin_client.post('/api/appointments', json=booking_body(seed, '10:15'))
        assert second.status_code == 409
        assert second.get_json()['message'] == 'Time slot not available'

    def test_offset_timestamps_share_the_clock_of_naive_ones(self, admin_client, seed):
        naive = admin_client.post('/api/appointments', json=booking_body(seed, '10:00'))
        assert naive.status_code == 201

        clashing = booking_body(seed, '10:00')
        clashing['start'] = f'{DAY}T12:15:00+02:00'
        assert admin_client.post('/api/appointments', json=clashing).status_code == 409

        later = booking_body(seed, '10:00')
        later['start'] = f'{DAY}T14:00:00+02:00'
        response = admin_client.post('/api/appointments', json=later)
        assert response.get_json()['appointment']['start'] == f'{DAY}T12:00:00'

    def test_end_cannot_be_set_on_update(self, alice_client, seed):
        created = alice_client.post('/api/appointments', json=booking_body(seed, '10:00'))
        appointment_id = created.get_json()['appointment']['id']

        response = alice_client.put(f'/api/appointments/{appointment_id}', json={'end': f'{DAY}T12:00:00'})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'validation_error'

    def test_reschedule_and_switch_service(self, alice_client, seed):
        created = alice_client.post('/api/appointments', json=booking_body(seed, '10:00'))
        appointment_id = created.get_json()['appointment']['id']

        response = alice_client.put(
            f'/api/appointments/{appointment_id}',
            json={'start': f'{DAY}T14:00:00', 'serviceId': seed.color}
        )

        appointment = response.get_json()['appointment']
        assert (appointment['start'], appointment['end']) == (f'{DAY}T14:00:00', f'{DAY}T15:00:00')

    def test_other_employee_cannot_reschedule(self, alice_client, bob_client, seed):
        created = alice_client.post('/api/appointments', json=booking_body(seed, '10:00'))
        appointment_id = created.get_json()['appointment']['id']

        response = bob_client.put(f'/api/appointments/{appointment_id}', json={'start': f'{DAY}T11:00:00'})

        assert response.status_code == 403

    def test_status_route_accepts_lowercase(self, alice_client, seed):
        created = alice_client.post('/api/appointments', json=booking_body(seed, '10:00'))
        appointment_id = created.get_json()['appointment']['id']

        response = alice_client.put(f'/api/appointments/{appointment_id}/status', json={'status': 'canceled'})

        assert response.status_code == 200
        assert response.get_json()['appointment']['status'] == 'CANCELED'

    def test_unknown_status(self, alice_client, seed):
        created = alice_client.post('/api/appointments', json=booking_body(seed, '10:00'))
        appointment_id = created.get_json()['appointment']['id']
        response = alice_client.put(f'/api/appointments/{appointment_id}/status', json={'status': 'DONE'})
        assert response.status_code == 400

    @pytest.mark.parametrize('path, status', [
        ('/api/appointments', 403),
        ('/api/appointments/my', 200),
        ('/api/appointments/team', 200),
    ])
    def test_listing_scopes_for_staff(self, alice_client, path, status):
        assert alice_client.get(path).status_code == status

    def test_public_booking_is_pending(self, app, seed):
        body = booking_body(seed, '10:00', client_email='dana@example.com', client_phone='555-0100')
        response = app.test_client().post('/api/book', json=body)

        assert response.status_code == 201
        assert response.get_json()['appointment']['status'] == 'PENDING'

    def test_public_booking_needs_contact_details(self, app, seed):
        response = app.test_client().post('/api/book', json=booking_body(seed, '10:00'))
        assert response.status_code == 400

    def test_delete(self, alice_client, seed):
        created = alice_client.post('/api/appointments', json=booking_body(seed, '10:00'))
        appointment_id = created.get_json()['appointment']['id']
        assert alice_client.delete(f'/api/appointments/{appointment_id}').status_code == 200
        assert alice_client.get('/api/appointments/my').get_json()['appointments'] == []


class TestCalendarRoutes:

    def test_day_view(self, alice_client, seed):
        alice_client.post('/api/appointments', json=booking_body(seed, '10:00'))

        data = alice_client.get(f'/api/calendar/day?date={DAY}').get_json()

        lanes = {lane['employee']['id']: lane for lane in data['lanes']}
        assert data['grid']['slot_count'] == 48
        assert lanes[seed.alice]['read_only'] is False
        assert lanes[seed.bob]['read_only'] is True

        [event] = lanes[seed.alice]['events']
        assert (event['column_index'], event['column_count']) == (0, 1)
        assert (event['top_slot'], event['height_slots']) == (8, 2)
        assert (event['left'], event['width']) == (0.0, 1.0)

    def test_shift_day_view(self, admin_client, seed):
        admin_client.post('/api/shifts', json=shift_body(seed.bob, '09:00', '17:00'))

        data = admin_client.get(f'/api/calendar/day?date={DAY}&kind=shifts').get_json()

        lanes = {lane['employee']['id']: lane for lane in data['lanes']}
        assert len(lanes[seed.bob]['events']) == 1
        assert lanes[seed.alice]['events'] == []

    def test_overnight_shift_is_drawn_on_the_next_morning(self, admin_client, seed):
        body = {'employeeId': seed.bob, 'start': '2024-01-07T22:00:00', 'end': f'{DAY}T10:00:00'}
        assert admin_client.post('/api/shifts', json=body).status_code == 201

        data = admin_client.get(f'/api/calendar/day?date={DAY}&kind=shifts').get_json()

        lanes = {lane['employee']['id']: lane for lane in data['lanes']}
        [event] = lanes[seed.bob]['events']
        assert (event['top_slot'], event['height_slots']) == (0, 8)

    def test_services_are_public(self, app, seed):
        names = [s['name'] for s in app.test_client().get('/api/services').get_json()['services']]
        assert 'Haircut' in names
        assert 'Time Block 30' in names

    def test_employees_require_login(self, app, seed):
        assert app.test_client().get('/api/employees').status_code == 401

    def test_unknown_route_is_json(self, app):
        response = app.test_client().get('/api/nope')
        assert response.status_code == 404
        assert response.get_json()['success'] is False


class TestBusinessTime:

    def test_naive_input_is_kept_as_is(self, app):
        with app.app_context():
            assert to_business_time(datetime(2024, 1, 8, 10)) == datetime(2024, 1, 8, 10)

    def test_offset_input_is_converted_to_the_business_zone(self, app):
        aware = datetime(2024, 1, 8, 12, tzinfo=timezone(timedelta(hours=2)))
        with app.app_context():
            assert to_business_time(aware) == datetime(2024, 1, 8, 10)

    def test_named_business_zone(self, app):
        try:
            ZoneInfo('Europe/Berlin')
        except ZoneInfoNotFoundError:
            pytest.skip('no time zone database available')
        app.config['BUSINESS_TIMEZONE'] = 'Europe/Berlin'
        aware = datetime(2024, 1, 8, 9, tzinfo=timezone.utc)
        with app.app_context():
            assert to_business_time(aware) == datetime(2024, 1, 8, 10)
