# asobot/services/schedule_service.py
"""Schedule poll votes and their aggregation.

No ownership checks happen here; who may confirm a date is decided by the
wish lifecycle service.
"""

import logging
from collections import Counter

from asobot import db
from asobot.errors import InvalidTransitionError, NotFoundError, ValidationError
from asobot.models import ScheduleCandidate, ScheduleVote
from asobot.models.schedule import VOTE_VALUES
from asobot.models.wish import STATUS_VOTING
from asobot.utils.db import commit, upsert
from asobot.utils.timeutil import utcnow

logger = logging.getLogger(__name__)


def _validate_vote(value):
    if value is None:
        value = ""
    if value != "" and value not in VOTE_VALUES:
        raise ValidationError(f"Unknown vote value '{value}'. Expected one of: {', '.join(VOTE_VALUES)}")
    return value


def _require_open_poll(wish):
    if wish.status != STATUS_VOTING:
        raise InvalidTransitionError("Schedule poll is not open for this wish")


def _write_vote(candidate_id, user_id, value):
    if value == "":
        ScheduleVote.query.filter_by(candidate_id=candidate_id, user_id=user_id).delete()
        return
    upsert(
        ScheduleVote,
        {'candidate_id': candidate_id, 'user_id': user_id, 'availability': value, 'updated_at': utcnow()},
        conflict_columns=['candidate_id', 'user_id'],
        update_columns=['availability', 'updated_at'],
    )


def cast_vote(candidate, user, value):
    """Record *user*'s availability on *candidate*. An empty value clears it."""
    value = _validate_vote(value)
    _require_open_poll(candidate.wish)
    _write_vote(candidate.id, user.id, value)
    commit()


def cast_votes(wish, user, votes):
    """Apply several votes for one wish in a single transaction.

    *votes* maps candidate id to value; the last value per candidate wins.
    Every candidate must belong to *wish*.
    """
    try:
        cleaned = {int(cid): _validate_vote(value) for cid, value in votes.items()}
    except (TypeError, ValueError):
        raise ValidationError("Candidate ids must be integers")
    _require_open_poll(wish)
    known = {c.id for c in wish.candidates}
    unknown = set(cleaned) - known
    if unknown:
        raise NotFoundError(f"Candidate(s) {sorted(unknown)} not found for wish {wish.id}")

    for candidate_id, value in cleaned.items():
        _write_vote(candidate_id, user.id, value)
    commit()


def list_candidates(wish):
    return ScheduleCandidate.query.filter_by(wish_id=wish.id).order_by(ScheduleCandidate.date.asc()).all()


def tally_by_candidate(wish):
    """Per candidate date, the count of each vote value present.

    Returns a list ordered by date: ``[{'candidate_id', 'date', 'counts'}]``.
    """
    result = []
    for candidate in list_candidates(wish):
        counts = Counter(v.availability for v in candidate.votes)
        result.append({
            'candidate_id': candidate.id,
            'date': candidate.date,
            'counts': dict(counts),
        })
    return result


def leading_candidates(wish):
    """Candidates tied at the highest ``ok`` count, or [] when nobody said ok.

    Ties are all returned; the wish creator picks which one to confirm.
    """
    tally = tally_by_candidate(wish)
    best = max((row['counts'].get('ok', 0) for row in tally), default=0)
    if best == 0:
        return []
    return [row for row in tally if row['counts'].get('ok', 0) == best]


def replace_candidates(wish, dates):
    """Swap the wish's candidate set for *dates*.

    Old candidates and their votes are deleted. The caller commits, so the
    swap lands in the same transaction as the wish status update.
    """
    # delete-orphan drops the old candidates and cascades to their votes
    wish.candidates = [ScheduleCandidate(date=d) for d in dates]
    logger.info("Wish %s poll candidates replaced with %d date(s)", wish.id, len(dates))


def voters(wish):
    """Ids of users who voted on at least one of the wish's candidates."""
    rows = (
        db.session.query(ScheduleVote.user_id)
        .join(ScheduleCandidate, ScheduleCandidate.id == ScheduleVote.candidate_id)
        .filter(ScheduleCandidate.wish_id == wish.id)
        .distinct()
        .all()
    )
    return {r[0] for r in rows}
