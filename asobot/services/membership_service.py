# asobot/services/membership_service.py
import logging

from asobot import cache, db
from asobot.errors import NotFoundError, ValidationError
from asobot.models import Group, GroupMember, User
from asobot.utils.db import commit, insert_ignore, upsert
from asobot.utils.timeutil import utcnow

logger = logging.getLogger(__name__)


class MembershipService:
    """Users, groups and the group roster.

    The roster is read-only for the wish engine and the scanner; it is only
    written when the mini-app registers a user into a group.
    """

    def __init__(self, cache_timeout=60):
        self.cache_timeout = cache_timeout

    @staticmethod
    def _cache_key(group_id):
        return f"group_members:{group_id}"

    # -----------------------
    # Lookups
    # -----------------------
    @staticmethod
    def get_user_by_line_id(line_user_id):
        if not line_user_id:
            raise ValidationError("lineUserId is required")
        user = User.query.filter_by(line_user_id=line_user_id).first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def get_group(group_id):
        group = db.session.get(Group, group_id)
        if group is None:
            raise NotFoundError(f"Group {group_id} not found")
        return group

    @staticmethod
    def get_group_by_line_id(line_group_id):
        group = Group.query.filter_by(line_group_id=line_group_id).first()
        if group is None:
            raise NotFoundError("Group not found")
        return group

    def member_ids(self, group_id):
        """Current roster of *group_id* as a list of user ids."""
        key = self._cache_key(group_id)
        ids = cache.get(key)
        if ids is None:
            rows = (
                db.session.query(GroupMember.user_id)
                .filter_by(group_id=group_id)
                .order_by(GroupMember.joined_at, GroupMember.id)
                .all()
            )
            ids = [r[0] for r in rows]
            cache.set(key, ids, timeout=self.cache_timeout)
        return list(ids)

    def member_count(self, group_id):
        return len(self.member_ids(group_id))

    @staticmethod
    def members(group_id):
        return (
            User.query.join(GroupMember, GroupMember.user_id == User.id)
            .filter(GroupMember.group_id == group_id)
            .order_by(GroupMember.joined_at, GroupMember.id)
            .all()
        )

    @staticmethod
    def user_groups(user_id):
        """Groups *user_id* belongs to, oldest membership first."""
        return (
            Group.query.join(GroupMember, GroupMember.group_id == Group.id)
            .filter(GroupMember.user_id == user_id)
            .order_by(GroupMember.joined_at, GroupMember.id)
            .all()
        )

    # -----------------------
    # Registration
    # -----------------------
    def register_user(self, line_user_id, display_name=None, picture_url=None, group_id=None, line_group_id=None):
        """Create or refresh a user and optionally add them to a group."""
        if not line_user_id:
            raise ValidationError("lineUserId is required")

        upsert(
            User,
            {
                'line_user_id': line_user_id,
                'display_name': display_name or None,
                'picture_url': picture_url or None,
                'created_at': utcnow(),
                'updated_at': utcnow(),
            },
            conflict_columns=['line_user_id'],
            update_columns=['display_name', 'picture_url', 'updated_at'],
        )
        commit()
        user = User.query.filter_by(line_user_id=line_user_id).one()

        target_group_id = group_id
        if target_group_id is None and line_group_id:
            group = Group.query.filter_by(line_group_id=line_group_id).first()
            if group is not None:
                target_group_id = group.id

        if target_group_id is not None:
            self.get_group(target_group_id)
            self.add_member(target_group_id, user.id)
            logger.info("Member registered: %s -> group %s", display_name, target_group_id)

        return user

    def add_member(self, group_id, user_id):
        insert_ignore(
            GroupMember,
            {'group_id': group_id, 'user_id': user_id, 'joined_at': utcnow()},
            conflict_columns=['group_id', 'user_id'],
        )
        commit()
        cache.delete(self._cache_key(group_id))

