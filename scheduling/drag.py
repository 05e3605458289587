"""
Drag-to-reschedule view model.

Holds the preview of an appointment being dragged across the calendar and
submits the final position on release. The preview is local state only;
nothing is authoritative until the commit callable accepts the change.

States::

    IDLE --begin--> DRAGGING --release--> COMMITTING --ok----> IDLE
                       |                       |
                       +--cancel--> IDLE       +--error--> ROLLED_BACK

``commit`` is any callable ``(appointment_id, AppointmentChanges) -> object``;
in-process it is ``reschedule_appointment`` bound to a caller, behind HTTP it
is the client's PUT request.
"""

import logging
from datetime import date
from enum import Enum
from typing import Callable, Optional

from .errors import SchedulingError
from .layout import CalendarGrid
from .models import AppointmentChanges, DragPreview

logger = logging.getLogger(__name__)


class DragState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"
    ROLLED_BACK = "rolled_back"


class DragSession:
    """One pointer-drag of one appointment."""

    def __init__(self, commit: Callable, grid: Optional[CalendarGrid] = None):
        self.commit = commit
        self.grid = grid or CalendarGrid()
        self.state = DragState.IDLE
        self.preview: Optional[DragPreview] = None
        self.origin: Optional[DragPreview] = None
        self.service_id: Optional[int] = None
        self.last_error: Optional[SchedulingError] = None
        self.result = None

    def begin(self, appointment) -> DragPreview:
        """Pick up an appointment at its current lane, day and slot."""
        if self.state in (DragState.DRAGGING, DragState.COMMITTING):
            raise RuntimeError(f'Cannot start a drag while {self.state.value}')

        origin = DragPreview(
            appointment_id=appointment.id,
            employee_id=appointment.employee_id,
            day=appointment.start.date(),
            slot=self.grid.slot_of(appointment.start),
            duration_slots=self.grid.duration_slots(appointment.start, appointment.end)
        )
        self.origin = origin
        self.preview = origin
        self.service_id = appointment.service_id
        self.last_error = None
        self.result = None
        self.state = DragState.DRAGGING
        return self.preview

    def move(self, employee_id: Optional[int], day: Optional[date], minutes_from_open: float) -> DragPreview:
        """Follow the pointer; snaps to the nearest slot where the event still fits."""
        self._require(DragState.DRAGGING)
        slot = self.grid.nearest_slot(minutes_from_open)
        self.preview = DragPreview(
            appointment_id=self.preview.appointment_id,
            employee_id=employee_id if employee_id is not None else self.preview.employee_id,
            day=day or self.preview.day,
            slot=self.grid.clamp_start(slot, self.preview.duration_slots),
            duration_slots=self.preview.duration_slots
        )
        return self.preview

    def cancel(self):
        """Drop the drag before release; no request is made."""
        self._require(DragState.DRAGGING)
        self.preview = self.origin
        self.state = DragState.IDLE

    def pending_changes(self) -> AppointmentChanges:
        """What release would submit for the current preview."""
        changes = AppointmentChanges(
            start=self.grid.slot_start(self.preview.day, self.preview.slot),
            service_id=self.service_id
        )
        if self.preview.employee_id != self.origin.employee_id:
            changes.employee_id = self.preview.employee_id
        return changes

    def release(self):
        """
        Submit the previewed position.

        On success the new position becomes the known-good one. On a
        scheduling error the preview snaps back to where the drag started and
        the reason is kept in ``last_error``. Any other error also rolls the
        preview back before it propagates.
        """
        self._require(DragState.DRAGGING)
        changes = self.pending_changes()
        self.state = DragState.COMMITTING

        try:
            self.result = self.commit(self.preview.appointment_id, changes)
        except SchedulingError as exc:
            logger.info(
                'Reschedule of appointment %s rejected: %s',
                self.preview.appointment_id, exc.message
            )
            self.last_error = exc
            self.preview = self.origin
            self.state = DragState.ROLLED_BACK
            return None
        except Exception:
            self.preview = self.origin
            self.state = DragState.ROLLED_BACK
            raise

        self.origin = self.preview
        self.state = DragState.IDLE
        return self.result

    def _require(self, state: DragState):
        if self.state is not state:
            raise RuntimeError(f'Drag is {self.state.value}, expected {state.value}')
