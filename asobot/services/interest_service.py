# asobot/services/interest_service.py
import logging

from sqlalchemy import func

from asobot import db
from asobot.errors import ConflictError, InvalidTransitionError
from asobot.models import Interest, Wish
from asobot.models.wish import STATUS_OPEN, STATUS_VOTING
from asobot.utils.db import commit, insert_unique

logger = logging.getLogger(__name__)


def add_interest(wish, user) -> bool:
    """Mark *user* as interested in *wish*. Returns False when already present.

    Only undated wishes that are open or in a schedule poll take interest.
    """
    if wish.start_date is not None or wish.status not in (STATUS_OPEN, STATUS_VOTING):
        raise InvalidTransitionError("Interest can only be added to undated wishes that are still open or being scheduled")
    try:
        insert_unique(Interest(wish_id=wish.id, user_id=user.id))
    except ConflictError:
        logger.debug("User %s already interested in wish %s", user.id, wish.id)
        return False
    return True


def remove_interest(wish, user) -> bool:
    """Remove *user*'s interest. Removing a missing interest is a no-op."""
    removed = Interest.query.filter_by(wish_id=wish.id, user_id=user.id).delete()
    commit()
    return removed > 0


def toggle_interest(wish, user) -> bool:
    """Flip the interest marker and return the new state."""
    exists = Interest.query.filter_by(wish_id=wish.id, user_id=user.id).first() is not None
    if exists:
        remove_interest(wish, user)
        return False
    add_interest(wish, user)
    return True


def interest_count(wish) -> int:
    return db.session.query(func.count(Interest.id)).filter(Interest.wish_id == wish.id).scalar() or 0


def interest_counts(wish_ids):
    """Map wish id -> interest count for many wishes in one query."""
    if not wish_ids:
        return {}
    rows = (
        db.session.query(Interest.wish_id, func.count(Interest.id))
        .filter(Interest.wish_id.in_(list(wish_ids)))
        .group_by(Interest.wish_id)
        .all()
    )
    counts = {wish_id: 0 for wish_id in wish_ids}
    counts.update({wish_id: count for wish_id, count in rows})
    return counts


def rank_popular(wishes, min_count, top_n, counts=None):
    """Open, undated wishes with at least *min_count* interests, most popular first.

    Returns a list of ``(wish, count)`` pairs, at most *top_n* long. Ties keep
    the order of *wishes*.
    """
    eligible = [w for w in wishes if w.status == STATUS_OPEN and w.start_date is None]
    if counts is None:
        counts = interest_counts([w.id for w in eligible])
    ranked = [(w, counts.get(w.id, 0)) for w in eligible]
    ranked = [pair for pair in ranked if pair[1] >= min_count]
    ranked.sort(key=lambda pair: pair[1], reverse=True)
    return ranked[:top_n]


def popular_wishes(group_id, min_count, top_n):
    wishes = (
        Wish.query.filter_by(group_id=group_id, status=STATUS_OPEN)
        .filter(Wish.start_date.is_(None))
        .order_by(Wish.created_at)
        .all()
    )
    return rank_popular(wishes, min_count, top_n)
