"""Transition rules of the explicit wish phase type."""
from datetime import date, datetime

import pytest

from asobot.domain import phases
from asobot.domain.phases import AttendanceConfirmation, Confirmed, Open, SchedulePoll
from asobot.errors import InvalidTransitionError, ValidationError

D1 = date(2030, 3, 1)
D2 = date(2030, 3, 8)
DEADLINE = datetime(2030, 2, 20, 12, 0)


class TestStartSchedulePoll:
    def test_from_undated_open(self):
        poll = phases.start_schedule_poll(Open(), [D2, D1, D2], DEADLINE)
        assert poll == SchedulePoll((D1, D2), DEADLINE)

    def test_recreate_replaces_candidates(self):
        poll = phases.start_schedule_poll(SchedulePoll((D1,)), [D2])
        assert poll.candidates == (D2,)
        assert poll.vote_deadline is None

    def test_empty_candidates_rejected(self):
        with pytest.raises(ValidationError):
            phases.start_schedule_poll(Open(), [])

    @pytest.mark.parametrize("phase", [
        Open(start_date=D1),
        AttendanceConfirmation(D1),
        Confirmed(D1),
    ])
    def test_not_allowed(self, phase):
        with pytest.raises(InvalidTransitionError):
            phases.start_schedule_poll(phase, [D1])


class TestStartAttendanceConfirmation:
    def test_from_dated_open(self):
        result = phases.start_attendance_confirmation(Open(start_date=D1), DEADLINE)
        assert result == AttendanceConfirmation(D1, DEADLINE)

    def test_undated_open_needs_a_date(self):
        with pytest.raises(ValidationError) as excinfo:
            phases.start_attendance_confirmation(Open())
        assert not isinstance(excinfo.value, InvalidTransitionError)

    @pytest.mark.parametrize("phase", [
        AttendanceConfirmation(D1),
        SchedulePoll((D1,)),
        Confirmed(D1),
    ])
    def test_not_allowed(self, phase):
        with pytest.raises(InvalidTransitionError):
            phases.start_attendance_confirmation(phase)


class TestConfirm:
    @pytest.mark.parametrize("phase", [
        Open(),
        Open(start_date=D1),
        SchedulePoll((D1, D2)),
        AttendanceConfirmation(D1),
    ])
    def test_allowed_from_any_unconfirmed_phase(self, phase):
        assert phases.confirm(phase, D2) == Confirmed(D2)

    def test_twice_rejected(self):
        with pytest.raises(InvalidTransitionError):
            phases.confirm(Confirmed(D1), D2)

    def test_requires_date(self):
        with pytest.raises(ValidationError):
            phases.confirm(Open(), None)


def test_only_open_is_editable():
    assert phases.is_editable(Open())
    assert phases.is_editable(Open(start_date=D1))
    assert not phases.is_editable(SchedulePoll((D1,)))
    assert not phases.is_editable(AttendanceConfirmation(D1))
    assert not phases.is_editable(Confirmed(D1))
