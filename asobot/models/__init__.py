# asobot/models/__init__.py

from .. import db  # SQLAlchemy instance from the asobot package

# Import all models to ensure they're registered with SQLAlchemy
from asobot.models.user import User, Group, GroupMember
from asobot.models.wish import Wish, Interest, WishResponse
from asobot.models.schedule import ScheduleCandidate, ScheduleVote
from asobot.models.notification import GroupSettings, NotificationLog

__all__ = [
    'db',
    'User',
    'Group',
    'GroupMember',
    'Wish',
    'Interest',
    'WishResponse',
    'ScheduleCandidate',
    'ScheduleVote',
    'GroupSettings',
    'NotificationLog',
]
