# asobot/services/wish_service.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Iterable, Optional

from asobot import db
from asobot.domain import phases
from asobot.errors import NotFoundError, PermissionDeniedError, ValidationError
from asobot.models import Wish
from asobot.models.wish import STATUS_OPEN, STATUS_VOTING
from asobot.services import schedule_service
from asobot.utils.db import commit
from asobot.utils.timeutil import to_naive_utc

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'title',
    'description',
    'is_anonymous',
    'start_date',
    'start_time',
    'end_date',
    'end_time',
    'is_all_day',
)


class WishService:
    """Wish lifecycle: creation, edits and the open -> voting -> confirmed moves.

    State changes are committed before any notification goes out, and a
    failed notification never undoes a committed transition.
    """

    def __init__(self, notifier):
        self.notifier = notifier

    # -----------------------
    # Queries
    # -----------------------
    @staticmethod
    def get_wish(wish_id: int) -> Wish:
        wish = db.session.get(Wish, wish_id)
        if wish is None:
            raise NotFoundError(f"Wish {wish_id} not found")
        return wish

    @staticmethod
    def list_wishes(group_id: int, statuses: Iterable[str] = (STATUS_OPEN, STATUS_VOTING)):
        return (
            Wish.query.filter(Wish.group_id == group_id, Wish.status.in_(list(statuses)))
            .order_by(Wish.created_at.desc())
            .all()
        )

    # -----------------------
    # Create / edit / delete
    # -----------------------
    @staticmethod
    def _clean_fields(fields: Dict) -> Dict:
        cleaned = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
        for key in ('title', 'description'):
            if cleaned.get(key) is not None and not isinstance(cleaned[key], str):
                raise ValidationError(f"{key} must be a string")
        if 'title' in cleaned:
            title = (cleaned['title'] or '').strip()
            if not title:
                raise ValidationError("Title is required")
            cleaned['title'] = title
        if 'description' in cleaned and cleaned['description'] is not None:
            cleaned['description'] = cleaned['description'].strip() or None
        return cleaned

    @staticmethod
    def _check_window(wish: Wish) -> None:
        if wish.end_date and not wish.start_date:
            raise ValidationError("end_date requires start_date")
        if wish.start_date and wish.end_date and wish.end_date < wish.start_date:
            raise ValidationError("end_date must not be before start_date")

    def create_wish(self, group, creator, title: str, description: Optional[str] = None,
                    is_anonymous: bool = False, **window) -> Wish:
        if creator is None:
            raise ValidationError("Creator must be a registered user")
        fields = self._clean_fields(dict(window, title=title, description=description))
        if 'title' not in fields:
            raise ValidationError("Title is required")

        wish = Wish(
            group_id=group.id,
            created_by=creator.id,
            is_anonymous=bool(is_anonymous),
            status=STATUS_OPEN,
            voting_started=False,
            **fields,
        )
        self._check_window(wish)
        db.session.add(wish)
        commit()
        logger.info("Wish %s created in group %s by user %s", wish.id, group.id, creator.id)
        return wish

    @staticmethod
    def _require_creator_pre_vote(wish: Wish, requester, action: str) -> None:
        if requester is None or requester.id != wish.created_by:
            raise PermissionDeniedError(f"Only the creator can {action} this wish")
        if not phases.is_editable(phases.phase_of(wish)):
            raise PermissionDeniedError(f"Wish can no longer be {action}d once voting has started")

    def edit_wish(self, wish: Wish, requester, fields: Dict) -> Wish:
        self._require_creator_pre_vote(wish, requester, 'edit')
        for key, value in self._clean_fields(fields).items():
            setattr(wish, key, value)
        self._check_window(wish)
        commit()
        return wish

    def delete_wish(self, wish: Wish, requester) -> None:
        """Delete the wish with its interests, responses, candidates and votes."""
        self._require_creator_pre_vote(wish, requester, 'delete')
        wish_id = wish.id
        db.session.delete(wish)
        commit()
        logger.info("Wish %s deleted by user %s", wish_id, requester.id)

    # -----------------------
    # Transitions
    # -----------------------
    def create_schedule_poll(self, wish: Wish, candidate_dates: Iterable[date],
                             vote_deadline: Optional[datetime] = None) -> Wish:
        """Replace the candidate set and open (or reopen) the schedule poll.

        Existing candidates and every vote on them are discarded. The
        "poll started" message is sent once per wish; recreating the poll
        does not announce it again.
        """
        if vote_deadline is not None:
            vote_deadline = to_naive_utc(vote_deadline)
        poll = phases.start_schedule_poll(phases.phase_of(wish), list(candidate_dates or []), vote_deadline)

        schedule_service.replace_candidates(wish, poll.candidates)
        phases.apply_phase(wish, poll)
        commit()

        outcome = self.notifier.notify_schedule_start(wish)
        logger.info("Wish %s schedule poll opened with %d candidates (notify: %s)",
                    wish.id, len(poll.candidates), outcome.value)
        return wish

    def start_attendance_confirmation(self, wish: Wish, vote_deadline: Optional[datetime] = None) -> Wish:
        if vote_deadline is not None:
            vote_deadline = to_naive_utc(vote_deadline)
        attendance = phases.start_attendance_confirmation(phases.phase_of(wish), vote_deadline)
        phases.apply_phase(wish, attendance)
        commit()

        outcome = self.notifier.notify_confirm_start(wish)
        logger.info("Wish %s attendance confirmation started (notify: %s)", wish.id, outcome.value)
        return wish

    def confirm_date(self, wish: Wish, on: date, requester=None) -> Wish:
        """Fix the wish's date. When *requester* is given it must be the creator."""
        if requester is not None and requester.id != wish.created_by:
            raise PermissionDeniedError("Only the creator can confirm the date")
        confirmed = phases.confirm(phases.phase_of(wish), on)
        phases.apply_phase(wish, confirmed)
        commit()

        outcome = self.notifier.notify_date_confirmed(wish)
        logger.info("Wish %s confirmed for %s (notify: %s)", wish.id, on.isoformat(), outcome.value)
        return wish
