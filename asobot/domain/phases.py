# asobot/domain/phases.py
"""Wish phases as an explicit variant type.

A wish row stores its phase across several columns (``status``,
``voting_started``, ``start_date``, ``confirmed_date``). ``phase_of`` reads
those columns into exactly one of the classes below, the transition
functions map a phase to the next one, and ``apply_phase`` writes the result
back. Every transition is defined for every phase: the ones that are not
allowed raise ``InvalidTransitionError`` instead of silently doing nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple, Union

from asobot.errors import InvalidTransitionError, ValidationError
from asobot.models.wish import STATUS_CONFIRMED, STATUS_OPEN, STATUS_VOTING


@dataclass(frozen=True)
class Open:
    """Collecting interest. Optionally already carries a concrete date."""
    start_date: Optional[date] = None


@dataclass(frozen=True)
class SchedulePoll:
    """Undated wish whose members vote on candidate dates."""
    candidates: Tuple[date, ...]
    vote_deadline: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceConfirmation:
    """Dated wish collecting ok / maybe / ng answers."""
    date: date
    vote_deadline: Optional[datetime] = None


@dataclass(frozen=True)
class Confirmed:
    date: date


WishPhase = Union[Open, SchedulePoll, AttendanceConfirmation, Confirmed]


def phase_of(wish) -> WishPhase:
    if wish.status == STATUS_CONFIRMED:
        return Confirmed(wish.confirmed_date)
    if wish.voting_started and wish.start_date is not None:
        return AttendanceConfirmation(wish.start_date, wish.vote_deadline)
    if wish.status == STATUS_VOTING and wish.start_date is None:
        return SchedulePoll(tuple(c.date for c in wish.candidates), wish.vote_deadline)
    return Open(wish.start_date)


def start_schedule_poll(phase: WishPhase, candidates, vote_deadline=None) -> SchedulePoll:
    dates = tuple(sorted(set(candidates)))
    if not dates:
        raise ValidationError("At least one candidate date is required")
    if isinstance(phase, SchedulePoll):
        # Recreating a poll replaces the previous candidate set
        return SchedulePoll(dates, vote_deadline)
    if isinstance(phase, Open):
        if phase.start_date is not None:
            raise InvalidTransitionError("Wish already has a date; start attendance confirmation instead")
        return SchedulePoll(dates, vote_deadline)
    if isinstance(phase, AttendanceConfirmation):
        raise InvalidTransitionError("Attendance confirmation is already in progress")
    raise InvalidTransitionError("Wish is already confirmed")


def start_attendance_confirmation(phase: WishPhase, vote_deadline=None) -> AttendanceConfirmation:
    if isinstance(phase, Open):
        if phase.start_date is None:
            raise ValidationError("Attendance confirmation requires a start date")
        return AttendanceConfirmation(phase.start_date, vote_deadline)
    if isinstance(phase, AttendanceConfirmation):
        raise InvalidTransitionError("Attendance confirmation has already started")
    if isinstance(phase, SchedulePoll):
        raise InvalidTransitionError("Wish has a schedule poll in progress; confirm a date instead")
    raise InvalidTransitionError("Wish is already confirmed")


def confirm(phase: WishPhase, on: date) -> Confirmed:
    if on is None:
        raise ValidationError("A date is required to confirm")
    if isinstance(phase, Confirmed):
        raise InvalidTransitionError("Wish is already confirmed")
    return Confirmed(on)


def is_editable(phase: WishPhase) -> bool:
    """Edits and deletion are only possible before any vote has started."""
    return isinstance(phase, Open)


def apply_phase(wish, phase: WishPhase) -> None:
    """Write *phase* onto the wish row. Candidates are managed by the caller."""
    if isinstance(phase, Open):
        wish.status = STATUS_OPEN
        wish.voting_started = False
    elif isinstance(phase, SchedulePoll):
        wish.status = STATUS_VOTING
        wish.voting_started = False
        wish.vote_deadline = phase.vote_deadline
    elif isinstance(phase, AttendanceConfirmation):
        wish.status = STATUS_OPEN
        wish.voting_started = True
        wish.vote_deadline = phase.vote_deadline
    elif isinstance(phase, Confirmed):
        wish.status = STATUS_CONFIRMED
        wish.confirmed_date = phase.date
        if wish.start_date is None:
            # A poll-confirmed wish takes its date so it shows up on the calendar
            wish.start_date = phase.date
    else:
        raise TypeError(f"Unknown wish phase: {phase!r}")
