"""Request payload models for the JSON API.

Keys are accepted in snake_case or camelCase. Every stored timestamp is a
naive wall-clock time of the business (``BUSINESS_TIMEZONE``). Naive input is
taken as already being business time; input with an offset is converted to
business time and stored naive.
"""

from datetime import date, datetime, timezone, tzinfo
from typing import Any, List, Optional
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from scheduling import AppointmentChanges, AppointmentStatus, WeeklyTemplateEntry
from scheduling import ValidationError as SchedulingValidationError


def business_timezone() -> tzinfo:
    name = current_app.config.get('BUSINESS_TIMEZONE', 'UTC') if has_app_context() else 'UTC'
    if name.upper() == 'UTC':
        return timezone.utc
    return ZoneInfo(name)


def to_business_time(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(business_timezone()).replace(tzinfo=None)
    return value


def to_status(value):
    if value is None or isinstance(value, AppointmentStatus):
        return value
    return AppointmentStatus(str(value).strip().upper())


class Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def parse(cls, data):
        return cls.model_validate(data or {})


class LoginIn(Payload):
    email: str
    password: str
    remember: bool = False


class ShiftIn(Payload):
    employee_id: Optional[int] = Field(default=None, gt=0)
    start: datetime
    end: datetime

    @field_validator('start', 'end')
    @classmethod
    def naive_times(cls, value):
        return to_business_time(value)


class ShiftUpdateIn(Payload):
    employee_id: Optional[int] = Field(default=None, gt=0)
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @field_validator('start', 'end')
    @classmethod
    def naive_times(cls, value):
        return to_business_time(value)


class TemplateDayIn(Payload):
    day: int = Field(ge=1, le=7)  # 1=Monday .. 7=Sunday
    start_time: str
    end_time: str

    def to_entry(self) -> WeeklyTemplateEntry:
        return WeeklyTemplateEntry(day=self.day, start_time=self.start_time, end_time=self.end_time)


class BulkShiftsIn(Payload):
    employee_id: Optional[int] = Field(default=None, gt=0)
    start_date: date
    weeks: int = Field(ge=1)
    week_template: List[TemplateDayIn] = Field(min_length=1)

    def entries(self) -> List[WeeklyTemplateEntry]:
        return [day.to_entry() for day in self.week_template]


class ClientFieldsIn(Payload):
    client_name: str = Field(min_length=1)
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = None
    notes: Optional[str] = None

    def client_fields(self) -> dict:
        return {
            'client_name': self.client_name,
            'client_email': self.client_email,
            'client_phone': self.client_phone,
            'notes': self.notes
        }


class AppointmentIn(ClientFieldsIn):
    employee_id: Optional[int] = Field(default=None, gt=0)
    service_id: int = Field(gt=0)
    start: datetime

    @field_validator('start')
    @classmethod
    def naive_start(cls, value):
        return to_business_time(value)


class PublicBookingIn(AppointmentIn):
    employee_id: int = Field(gt=0)
    client_email: EmailStr
    client_phone: str = Field(min_length=1)


class AppointmentUpdateIn(Payload):
    start: Optional[datetime] = None
    end: Optional[Any] = None
    service_id: Optional[int] = Field(default=None, gt=0)
    employee_id: Optional[int] = Field(default=None, gt=0)
    status: Optional[AppointmentStatus] = None
    client_name: Optional[str] = None
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('start')
    @classmethod
    def naive_start(cls, value):
        return to_business_time(value)

    @field_validator('status', mode='before')
    @classmethod
    def normalize_status(cls, value):
        return to_status(value)

    @field_validator('end')
    @classmethod
    def reject_end(cls, value):
        if value is not None:
            raise ValueError('end is derived from the service duration and cannot be set')
        return value

    def to_changes(self) -> AppointmentChanges:
        return AppointmentChanges(
            start=self.start,
            service_id=self.service_id,
            employee_id=self.employee_id,
            status=self.status,
            client_name=self.client_name,
            client_email=self.client_email,
            client_phone=self.client_phone,
            notes=self.notes
        )


class StatusIn(Payload):
    status: AppointmentStatus

    @field_validator('status', mode='before')
    @classmethod
    def normalize_status(cls, value):
        return to_status(value)


def datetime_arg(args, name: str) -> Optional[datetime]:
    """Read an ISO-8601 query-string timestamp; absent means unbounded."""
    raw = args.get(name)
    if not raw:
        return None
    try:
        value = datetime.fromisoformat(raw.strip().replace('Z', '+00:00'))
    except ValueError:
        raise SchedulingValidationError(f'Invalid {name} "{raw}". Use ISO-8601') from None
    return to_business_time(value)


def date_arg(args, name: str) -> Optional[date]:
    raw = args.get(name)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        raise SchedulingValidationError(f'Invalid {name} "{raw}". Use YYYY-MM-DD') from None
