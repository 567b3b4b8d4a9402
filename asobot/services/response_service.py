# asobot/services/response_service.py
"""Attendance answers (ok / maybe / ng) for dated wishes."""

import logging

from asobot import db
from asobot.errors import InvalidTransitionError, ValidationError
from asobot.models import Wish, WishResponse
from asobot.models.wish import RESPONSE_VALUES, STATUS_VOTING
from asobot.services import schedule_service
from asobot.utils.db import commit, upsert
from asobot.utils.timeutil import utcnow

logger = logging.getLogger(__name__)


def set_response(wish, user, value):
    """Upsert *user*'s answer for *wish*. An empty value withdraws it."""
    if value is None:
        value = ""
    if value != "" and value not in RESPONSE_VALUES:
        raise ValidationError(f"Unknown response '{value}'. Expected one of: {', '.join(RESPONSE_VALUES)}")
    if not wish.voting_started:
        raise InvalidTransitionError("Attendance confirmation has not started for this wish")

    if value == "":
        WishResponse.query.filter_by(wish_id=wish.id, user_id=user.id).delete()
        commit()
        return None

    upsert(
        WishResponse,
        {'wish_id': wish.id, 'user_id': user.id, 'response': value, 'updated_at': utcnow()},
        conflict_columns=['wish_id', 'user_id'],
        update_columns=['response', 'updated_at'],
    )
    commit()
    return WishResponse.query.filter_by(wish_id=wish.id, user_id=user.id).one()


def list_responses(wish):
    return WishResponse.query.filter_by(wish_id=wish.id).order_by(WishResponse.updated_at).all()


def tally_responses(wish):
    counts = {value: 0 for value in RESPONSE_VALUES}
    for response in list_responses(wish):
        counts[response.response] = counts.get(response.response, 0) + 1
    return counts


def unanswered_members(wish, member_ids):
    """Members of *member_ids* with no response row for *wish*, in roster order."""
    answered = {
        r[0] for r in db.session.query(WishResponse.user_id).filter(WishResponse.wish_id == wish.id).all()
    }
    return [uid for uid in member_ids if uid not in answered]


def pending_actions(group_id, user_id):
    """Wishes in the group still waiting for *user_id*'s answer.

    Attendance confirmations count until the user has responded; schedule
    polls count until the user has voted on at least one candidate.
    """
    wishes = (
        Wish.query.filter_by(group_id=group_id)
        .filter((Wish.voting_started.is_(True)) | (Wish.status == STATUS_VOTING))
        .filter(Wish.confirmed_date.is_(None))
        .order_by(Wish.vote_deadline.is_(None), Wish.vote_deadline, Wish.created_at)
        .all()
    )
    pending = []
    for wish in wishes:
        if wish.voting_started and wish.start_date is not None:
            if user_id in unanswered_members(wish, [user_id]):
                pending.append(wish)
        elif wish.status == STATUS_VOTING and wish.start_date is None:
            if user_id not in schedule_service.voters(wish):
                pending.append(wish)
    return pending
