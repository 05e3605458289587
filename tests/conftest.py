"""Shared fixtures: an app on an in-memory database, seeded staff and callers."""

from datetime import datetime
from types import SimpleNamespace

import pytest

import db_service
from app import create_app
from config import TestingConfig
from models import db, Appointment, Shift, STATUS_CONFIRMED
from scheduling import CallerIdentity, Role

STAFF_PASSWORD = 'Staff123!'


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def seed(app):
    """Two employees with logins and two services; returns plain ids."""
    with app.app_context():
        admin = db_service.get_user_by_email(app.config['ADMIN_EMAIL'])
        alice = db_service.create_employee('Alice', 'Ng', '#E91E63')
        bob = db_service.create_employee('Bob', 'Ortiz', '#2196F3')
        alice_user = db_service.create_user('alice@salon.local', STAFF_PASSWORD, employee=alice)
        bob_user = db_service.create_user('bob@salon.local', STAFF_PASSWORD, employee=bob)
        haircut = db_service.get_or_create_service('Haircut', 30)
        color = db_service.get_or_create_service('Color', 60)

        return SimpleNamespace(
            admin_user_id=admin.id,
            admin_employee_id=admin.linked_employee_id,
            alice=alice.id,
            bob=bob.id,
            alice_user_id=alice_user.id,
            bob_user_id=bob_user.id,
            haircut=haircut.id,
            color=color.id
        )


@pytest.fixture
def ctx(app, seed):
    """Application context for tests that call the scheduling functions directly."""
    with app.app_context():
        yield app


@pytest.fixture
def admin(seed):
    return CallerIdentity(user_id=seed.admin_user_id, role=Role.ADMIN, employee_id=seed.admin_employee_id)


@pytest.fixture
def alice(seed):
    return CallerIdentity(user_id=seed.alice_user_id, role=Role.EMPLOYEE, employee_id=seed.alice)


@pytest.fixture
def bob(seed):
    return CallerIdentity(user_id=seed.bob_user_id, role=Role.EMPLOYEE, employee_id=seed.bob)


def login(client, email, password=STAFF_PASSWORD):
    response = client.post('/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def admin_client(app, seed):
    return login(app.test_client(), app.config['ADMIN_EMAIL'], app.config['ADMIN_PASSWORD'])


@pytest.fixture
def alice_client(app, seed):
    return login(app.test_client(), 'alice@salon.local')


@pytest.fixture
def bob_client(app, seed):
    return login(app.test_client(), 'bob@salon.local')


def at(day, hhmm):
    """datetime for a 'YYYY-MM-DD' day and 'HH:MM' time."""
    return datetime.fromisoformat(f'{day}T{hhmm}')


def add_shift(employee_id, start, end):
    shift = Shift(employee_id=employee_id, start=start, end=end)
    db.session.add(shift)
    db.session.commit()
    return shift


def add_appointment(employee_id, service_id, start, end, status=STATUS_CONFIRMED, client_name='Client'):
    appointment = Appointment(
        employee_id=employee_id,
        service_id=service_id,
        client_name=client_name,
        start=start,
        end=end,
        status=status
    )
    db.session.add(appointment)
    db.session.commit()
    return appointment
