"""Database models for users, staff, services, shifts and appointments."""

from datetime import datetime
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from flask_bcrypt import Bcrypt

db = SQLAlchemy()
bcrypt = Bcrypt()


ROLE_ADMIN = 'ADMIN'
ROLE_EMPLOYEE = 'EMPLOYEE'

STATUS_PENDING = 'PENDING'
STATUS_CONFIRMED = 'CONFIRMED'
STATUS_CANCELED = 'CANCELED'
APPOINTMENT_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_CANCELED)


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model, UserMixin):
    """User model for authentication (admins and employees)."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_EMPLOYEE)

    # Employee linking (the staff record this login acts as)
    linked_employee_id = db.Column(db.Integer, db.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True)

    # Account status
    is_active = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime, nullable=True)

    linked_employee = db.relationship('Employee', backref='user_account', foreign_keys=[linked_employee_id])

    def __repr__(self):
        return f'<User {self.email}>'

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def set_password(self, password):
        """Hash and set the user's password."""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if the provided password matches the hash."""
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        """Convert user to dictionary (excluding sensitive data)."""
        return {
            'id': self.id,
            'email': self.email,
            'role': self.role,
            'is_admin': self.is_admin,
            'linked_employee_id': self.linked_employee_id,
            'created_at': _iso(self.created_at),
            'last_login': _iso(self.last_login)
        }


class Employee(db.Model):
    """A staff member who can work shifts and take appointments."""
    __tablename__ = 'employees'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False, default='')
    color = db.Column(db.String(20), default='#4CAF50')

    shifts = db.relationship('Shift', backref='employee', lazy=True, cascade='all, delete-orphan')
    appointments = db.relationship('Appointment', backref='employee', lazy=True, cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Employee {self.id}: {self.name}>'

    @property
    def name(self):
        return f'{self.first_name} {self.last_name}'.strip()

    def to_dict(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'name': self.name,
            'color': self.color
        }


class Service(db.Model):
    """A bookable service; its duration fixes every appointment's length."""
    __tablename__ = 'services'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    duration_minutes = db.Column(db.Integer, nullable=False)

    __table_args__ = (db.CheckConstraint('duration_minutes > 0', name='ck_service_duration_positive'),)

    def __repr__(self):
        return f'<Service {self.name} ({self.duration_minutes}m)>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'duration_minutes': self.duration_minutes
        }


class Shift(db.Model):
    """Working time of an employee, half-open [start, end)."""
    __tablename__ = 'shifts'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False, index=True)
    start = db.Column(db.DateTime, nullable=False, index=True)
    end = db.Column(db.DateTime, nullable=False, index=True)

    __table_args__ = (db.CheckConstraint('"end" > start', name='ck_shift_end_after_start'),)

    def __repr__(self):
        return f'<Shift {self.id} emp={self.employee_id} {self.start:%Y-%m-%d %H:%M}-{self.end:%H:%M}>'

    def to_dict(self):
        return {
            'id': self.id,
            'employee_id': self.employee_id,
            'employee_name': self.employee.name if self.employee else None,
            'start': _iso(self.start),
            'end': _iso(self.end),
            'duration_minutes': int((self.end - self.start).total_seconds() // 60)
        }


class Appointment(db.Model):
    """A client booking held by one employee for one service."""
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey('services.id'), nullable=False)

    # Client info
    client_name = db.Column(db.String(200), nullable=False)
    client_email = db.Column(db.String(200), nullable=True)
    client_phone = db.Column(db.String(50), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    # Always start + service.duration_minutes
    start = db.Column(db.DateTime, nullable=False, index=True)
    end = db.Column(db.DateTime, nullable=False, index=True)

    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    service = db.relationship('Service')

    def __repr__(self):
        return f'<Appointment {self.id} emp={self.employee_id} {self.start:%Y-%m-%d %H:%M} {self.status}>'

    def to_dict(self):
        return {
            'id': self.id,
            'employee_id': self.employee_id,
            'employee_name': self.employee.name if self.employee else None,
            'service_id': self.service_id,
            'service': self.service.to_dict() if self.service else None,
            'client_name': self.client_name,
            'client_email': self.client_email,
            'client_phone': self.client_phone,
            'notes': self.notes,
            'start': _iso(self.start),
            'end': _iso(self.end),
            'status': self.status,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


def init_db(app):
    """Initialize the database with the Flask app."""
    db.init_app(app)
    bcrypt.init_app(app)

    with app.app_context():
        from scheduling.locking import configure_sqlite_locking
        configure_sqlite_locking(db.engine)
        db.create_all()
