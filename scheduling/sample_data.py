"""
Sample data module - default accounts, staff and services.

Seeding is idempotent: records are looked up by natural key first, so this
can run on every start-up.
"""

import logging

import db_service
from models import ROLE_ADMIN, ROLE_EMPLOYEE

logger = logging.getLogger(__name__)

# Staff time blocks let employees reserve their own calendar
BLOCK_SERVICES = [
    ('Time Block 30', 30),
    ('Time Block 60', 60),
    ('Time Block 90', 90),
]

DEMO_SERVICES = [
    ('Haircut', 30),
    ('Color', 90),
    ('Manicure', 45),
]

DEMO_STAFF = [
    ('Maya', 'Lopez', '#E91E63', 'maya@salon.local'),
    ('Jonas', 'Berg', '#2196F3', 'jonas@salon.local'),
]

DEMO_STAFF_PASSWORD = 'Staff123!'


def ensure_admin(email: str, password: str):
    """Create the administrator login (and its employee record) if missing."""
    user = db_service.get_user_by_email(email)
    if user is None:
        employee = db_service.create_employee('Admin', 'User', '#6366f1')
        user = db_service.create_user(email, password, role=ROLE_ADMIN, employee=employee)
        logger.info('Seeded admin account %s', email)
    return user


def ensure_services(catalog=BLOCK_SERVICES):
    return [db_service.get_or_create_service(name, minutes) for name, minutes in catalog]


def ensure_demo_staff(password: str = DEMO_STAFF_PASSWORD):
    users = []
    for first_name, last_name, color, email in DEMO_STAFF:
        user = db_service.get_user_by_email(email)
        if user is None:
            employee = db_service.create_employee(first_name, last_name, color)
            user = db_service.create_user(email, password, role=ROLE_EMPLOYEE, employee=employee)
            logger.info('Seeded staff account %s', email)
        users.append(user)
    return users


def seed_defaults(config, demo: bool = False):
    """Seed the admin account and block services; demo staff and services on request."""
    ensure_admin(config['ADMIN_EMAIL'], config['ADMIN_PASSWORD'])
    ensure_services(BLOCK_SERVICES)
    if demo:
        ensure_services(DEMO_SERVICES)
        ensure_demo_staff()
