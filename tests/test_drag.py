"""Tests for the drag-to-reschedule session."""

from datetime import date
from types import SimpleNamespace

import pytest

from conftest import add_appointment, at
from models import db, Appointment
from scheduling import ConflictError, DragSession, DragState, reschedule_appointment

DAY = '2024-01-08'


def appointment(employee_id=1, start='10:00', end='10:30'):
    return SimpleNamespace(id=42, employee_id=employee_id, service_id=3, start=at(DAY, start), end=at(DAY, end))


class RecordingCommit:

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, appointment_id, changes):
        self.calls.append((appointment_id, changes))
        if self.error is not None:
            raise self.error
        return 'saved'


class TestDragSession:

    def test_begin_picks_up_the_current_position(self):
        session = DragSession(RecordingCommit())
        preview = session.begin(appointment())

        assert session.state is DragState.DRAGGING
        assert (preview.employee_id, preview.day, preview.slot, preview.duration_slots) == (1, date(2024, 1, 8), 8, 2)

    def test_move_snaps_to_the_nearest_slot(self):
        session = DragSession(RecordingCommit())
        session.begin(appointment())

        preview = session.move(None, None, 187)

        assert preview.slot == 12
        assert preview.employee_id == 1

    def test_release_commits_start_and_service(self):
        commit = RecordingCommit()
        session = DragSession(commit)
        session.begin(appointment())
        session.move(None, None, 180)

        assert session.release() == 'saved'

        [(appointment_id, changes)] = commit.calls
        assert appointment_id == 42
        assert changes.start == at(DAY, '11:00')
        assert changes.service_id == 3
        assert changes.employee_id is None
        assert session.state is DragState.IDLE
        assert session.origin.slot == 12

    def test_moving_to_another_lane_requests_a_reassign(self):
        commit = RecordingCommit()
        session = DragSession(commit)
        session.begin(appointment())
        session.move(2, date(2024, 1, 9), 0)
        session.release()

        changes = commit.calls[0][1]
        assert changes.employee_id == 2
        assert changes.start == at('2024-01-09', '08:00')

    def test_rejected_release_rolls_back_to_the_origin(self):
        error = ConflictError('Time slot not available')
        session = DragSession(RecordingCommit(error))
        origin = session.begin(appointment())
        session.move(2, None, 240)

        assert session.release() is None

        assert session.state is DragState.ROLLED_BACK
        assert session.preview == origin
        assert session.last_error is error

    def test_can_drag_again_after_a_rollback(self):
        session = DragSession(RecordingCommit(ConflictError('Time slot not available')))
        session.begin(appointment())
        session.release()

        session.begin(appointment())
        assert session.state is DragState.DRAGGING
        assert session.last_error is None

    def test_cancel_makes_no_request(self):
        commit = RecordingCommit()
        session = DragSession(commit)
        origin = session.begin(appointment())
        session.move(None, None, 300)

        session.cancel()

        assert session.state is DragState.IDLE
        assert session.preview == origin
        assert commit.calls == []

    def test_only_one_drag_at_a_time(self):
        session = DragSession(RecordingCommit())
        session.begin(appointment())
        with pytest.raises(RuntimeError):
            session.begin(appointment())

    def test_move_requires_an_active_drag(self):
        session = DragSession(RecordingCommit())
        with pytest.raises(RuntimeError):
            session.move(None, None, 60)

    def test_unexpected_errors_propagate_after_rolling_back(self):
        session = DragSession(RecordingCommit(KeyError('boom')))
        origin = session.begin(appointment())
        session.move(2, None, 240)

        with pytest.raises(KeyError):
            session.release()

        assert session.state is DragState.ROLLED_BACK
        assert session.preview == origin
        assert session.last_error is None
        assert session.begin(appointment()) == origin
        assert session.state is DragState.DRAGGING

    def test_move_past_closing_keeps_the_whole_event_on_the_grid(self):
        commit = RecordingCommit()
        session = DragSession(commit)
        session.begin(appointment())

        assert session.move(None, None, 720).slot == 46
        assert session.move(None, None, 5000).slot == 46
        session.release()

        assert commit.calls[0][1].start == at(DAY, '19:30')

    def test_long_event_clamps_to_the_first_slot(self):
        session = DragSession(RecordingCommit())
        session.begin(appointment(start='08:00', end='20:00'))
        assert session.move(None, None, 300).slot == 0


class TestDragAgainstTheDatabase:

    def test_drop_on_a_busy_slot_keeps_the_stored_appointment(self, ctx, seed, alice):
        add_appointment(seed.alice, seed.haircut, at(DAY, '12:00'), at(DAY, '12:30'))
        dragged = add_appointment(seed.alice, seed.haircut, at(DAY, '10:00'), at(DAY, '10:30'))
        dragged_id = dragged.id

        session = DragSession(lambda appointment_id, changes: reschedule_appointment(appointment_id, alice, changes))
        session.begin(dragged)
        session.move(None, None, 240)  # 12:00

        assert session.release() is None
        assert session.state is DragState.ROLLED_BACK

        db.session.expire_all()
        assert db.session.get(Appointment, dragged_id).start == at(DAY, '10:00')

    def test_drop_on_a_free_slot_moves_it(self, ctx, seed, alice):
        dragged = add_appointment(seed.alice, seed.haircut, at(DAY, '10:00'), at(DAY, '10:30'))

        session = DragSession(lambda appointment_id, changes: reschedule_appointment(appointment_id, alice, changes))
        session.begin(dragged)
        session.move(None, None, 345)

        moved = session.release()

        assert (moved.start, moved.end) == (at(DAY, '13:45'), at(DAY, '14:15'))
        assert session.state is DragState.IDLE

    def test_drop_on_another_lane_as_employee_is_forbidden(self, ctx, seed, alice):
        dragged = add_appointment(seed.alice, seed.haircut, at(DAY, '10:00'), at(DAY, '10:30'))

        session = DragSession(lambda appointment_id, changes: reschedule_appointment(appointment_id, alice, changes))
        session.begin(dragged)
        session.move(seed.bob, None, 0)

        assert session.release() is None
        assert session.last_error.status_code == 403
