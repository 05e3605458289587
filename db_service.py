"""
Database service for the records the scheduler reads but does not own.

Employees, services and users are maintained elsewhere (admin tooling, seed
script); the scheduling engine only needs existence checks and lookups.
"""

from typing import List, Optional

from models import db, User, Employee, Service, ROLE_ADMIN, ROLE_EMPLOYEE
from scheduling.errors import NotFoundError


# =============================================================================
# EMPLOYEE OPERATIONS
# =============================================================================

def get_employee(employee_id: int) -> Optional[Employee]:
    """Get an employee by id."""
    return db.session.get(Employee, employee_id)


def get_employee_or_404(employee_id: int) -> Employee:
    employee = get_employee(employee_id)
    if employee is None:
        raise NotFoundError('Employee not found')
    return employee


def list_employees() -> List[Employee]:
    return Employee.query.order_by(Employee.first_name, Employee.last_name).all()


def create_employee(first_name: str, last_name: str = '', color: str = '#4CAF50') -> Employee:
    """Add an employee record (used by seeding and tests)."""
    employee = Employee(first_name=first_name, last_name=last_name, color=color)
    db.session.add(employee)
    db.session.commit()
    return employee


# =============================================================================
# SERVICE OPERATIONS
# =============================================================================

def get_service(service_id: int) -> Optional[Service]:
    return db.session.get(Service, service_id)


def list_services() -> List[Service]:
    return Service.query.order_by(Service.name).all()


def get_or_create_service(name: str, duration_minutes: int) -> Service:
    """Find a service by name, creating it with the given duration if missing."""
    service = Service.query.filter_by(name=name).first()
    if service is None:
        service = Service(name=name, duration_minutes=duration_minutes)
        db.session.add(service)
        db.session.commit()
    return service


# =============================================================================
# USER OPERATIONS
# =============================================================================

def get_user_by_email(email: str) -> Optional[User]:
    return User.query.filter_by(email=(email or '').strip().lower()).first()


def create_user(email: str, password: str, role: str = ROLE_EMPLOYEE,
                employee: Optional[Employee] = None) -> User:
    """Create a login, optionally linked to the employee it acts as."""
    if role not in (ROLE_ADMIN, ROLE_EMPLOYEE):
        raise ValueError(f'Unknown role: {role}')
    user = User(
        email=email.strip().lower(),
        role=role,
        linked_employee_id=employee.id if employee else None
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user
