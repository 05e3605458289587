"""Appointment end-time resolution from the booked service's duration."""

from datetime import datetime, timedelta

from models import db, Service
from .errors import NotFoundError


def end_for_duration(start: datetime, duration_minutes: int) -> datetime:
    return start + timedelta(minutes=duration_minutes)


def get_service_or_404(service_id: int) -> Service:
    service = db.session.get(Service, service_id)
    if service is None:
        raise NotFoundError('Service not found')
    return service


def resolve_end(service_id: int, start: datetime) -> datetime:
    """
    Derive an appointment's end from its start and service.

    Callers never supply an end for an appointment. When a booking switches
    service, pass the new service id so the end follows the new duration.
    """
    service = get_service_or_404(service_id)
    return end_for_duration(start, service.duration_minutes)
