# asobot/services/notification_service.py
from __future__ import annotations

import enum
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from asobot import db
from asobot.errors import ConflictError, DependencyError, ValidationError
from asobot.line import messages
from asobot.models import Group, GroupSettings, NotificationLog
from asobot.models.notification import (
    CONFIRM_REMINDER,
    CONFIRM_START,
    DATE_CONFIRMED,
    SCHEDULE_REMINDER,
    SCHEDULE_START,
    SUGGESTION,
)
from asobot.utils.db import commit, insert_unique
from asobot.utils.timeutil import utcnow

logger = logging.getLogger(__name__)


class Delivery(str, enum.Enum):
    SENT = "sent"
    DISABLED = "disabled"      # group settings turned this type off
    DUPLICATE = "duplicate"    # already logged for this wish
    FAILED = "failed"


class NotificationService:
    """Sends group notifications through the LINE client.

    Delivery is best effort: dispatch errors are logged and reported as
    ``Delivery.FAILED`` rather than raised, and nothing is retried here.
    A successful delivery is recorded in ``notification_logs``, which is the
    only thing keeping a (wish, type) pair from firing twice.
    """

    def __init__(self, line_client, liff_id: str = ""):
        self.line_client = line_client
        self.liff_id = liff_id

    # -----------------------
    # Group settings
    # -----------------------
    @staticmethod
    def get_settings(group_id: int) -> GroupSettings:
        """Return the group's settings, creating the defaults on first read."""
        settings = GroupSettings.query.filter_by(group_id=group_id).first()
        if settings is not None:
            return settings
        try:
            insert_unique(GroupSettings(group_id=group_id))
        except ConflictError:
            # Created by a concurrent request
            pass
        return GroupSettings.query.filter_by(group_id=group_id).one()

    @staticmethod
    def update_settings(group_id: int, values: Dict) -> GroupSettings:
        settings = NotificationService.get_settings(group_id)
        for field in GroupSettings.EDITABLE_FIELDS:
            if field not in values:
                continue
            value = values[field]
            if field in ('suggest_interval_days', 'suggest_min_interests'):
                if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                    raise ValidationError(f"{field} must be a positive integer")
            elif not isinstance(value, bool):
                raise ValidationError(f"{field} must be true or false")
            setattr(settings, field, value)
        commit()
        return settings

    # -----------------------
    # Log lookups
    # -----------------------
    @staticmethod
    def already_sent(wish_id: int, notif_type: str) -> bool:
        return NotificationLog.query.filter_by(
            wish_id=wish_id, notification_type=notif_type
        ).first() is not None

    @staticmethod
    def last_sent_at(group_id: int, notif_type: str) -> Optional[datetime]:
        last = (
            NotificationLog.query.filter_by(group_id=group_id, notification_type=notif_type)
            .order_by(NotificationLog.sent_at.desc())
            .first()
        )
        return last.sent_at if last else None

    def liff_url(self, path: str, group_id: int) -> str:
        return f"https://liff.line.me/{self.liff_id}/{path.lstrip('/')}?groupId={group_id}"

    # -----------------------
    # Sending
    # -----------------------
    def send_group_notification(
        self,
        group_id: int,
        notif_type: str,
        message: str,
        wish_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Delivery:
        settings = self.get_settings(group_id)
        if not settings.allows(notif_type):
            logger.info("Notification %s disabled for group %s", notif_type, group_id)
            return Delivery.DISABLED

        if wish_id is not None and self.already_sent(wish_id, notif_type):
            logger.info("Notification already sent: %s wish=%s", notif_type, wish_id)
            return Delivery.DUPLICATE

        group = db.session.get(Group, group_id)
        if group is None or not group.line_group_id:
            logger.error("No LINE group id found for group %s", group_id)
            return Delivery.FAILED

        try:
            self.line_client.push_text(group.line_group_id, message)
        except DependencyError as e:
            logger.error(f"Failed to push {notif_type} to group {group_id}: {e.message}")
            return Delivery.FAILED

        sent_at = now or utcnow()
        db.session.add(NotificationLog(
            group_id=group_id,
            wish_id=wish_id,
            notification_type=notif_type,
            sent_at=sent_at,
        ))
        group.last_activity_at = sent_at
        try:
            commit()
        except DependencyError as e:
            logger.error(f"Sent {notif_type} to group {group_id} but could not log it: {e.message}")
            return Delivery.FAILED
        return Delivery.SENT

    # -----------------------
    # Typed helpers
    # -----------------------
    def notify_schedule_start(self, wish) -> Delivery:
        url = self.liff_url(f"wishes/{wish.id}/schedule/vote", wish.group_id)
        return self.send_group_notification(
            wish.group_id, SCHEDULE_START, messages.schedule_start(wish.title, url), wish_id=wish.id
        )

    def notify_confirm_start(self, wish) -> Delivery:
        url = self.liff_url(f"wishes/{wish.id}/confirm", wish.group_id)
        return self.send_group_notification(
            wish.group_id, CONFIRM_START,
            messages.confirm_start(wish.title, format_wish_date(wish), url), wish_id=wish.id,
        )

    def notify_reminder(self, wish, days_left: int, kind: str, now: Optional[datetime] = None) -> Delivery:
        if kind == 'schedule':
            notif_type = SCHEDULE_REMINDER
            url = self.liff_url(f"wishes/{wish.id}/schedule/vote", wish.group_id)
        else:
            notif_type = CONFIRM_REMINDER
            url = self.liff_url(f"wishes/{wish.id}/confirm", wish.group_id)
        return self.send_group_notification(
            wish.group_id, notif_type, messages.reminder(wish.title, days_left, kind, url),
            wish_id=wish.id, now=now,
        )

    def notify_date_confirmed(self, wish) -> Delivery:
        return self.send_group_notification(
            wish.group_id, DATE_CONFIRMED,
            messages.date_confirmed(wish.title, wish.confirmed_date.isoformat()), wish_id=wish.id,
        )

    def notify_suggestion(self, group_id: int, popular: List[Tuple[str, int]], now: Optional[datetime] = None) -> Delivery:
        url = self.liff_url("wishes", group_id)
        return self.send_group_notification(group_id, SUGGESTION, messages.suggestion(popular, url), now=now)

    def notify_suggestion_empty(self, group_id: int, now: Optional[datetime] = None) -> Delivery:
        url = self.liff_url("wishes", group_id)
        return self.send_group_notification(group_id, SUGGESTION, messages.suggestion_empty(url), now=now)


def format_wish_date(wish) -> str:
    """Human readable date window, e.g. ``2025-03-01 10:00 - 2025-03-02``."""
    text = wish.start_date.isoformat()
    if wish.start_time and not wish.is_all_day:
        text += f" {wish.start_time.strftime('%H:%M')}"
    if wish.end_date and wish.end_date != wish.start_date:
        text += f" - {wish.end_date.isoformat()}"
        if wish.end_time and not wish.is_all_day:
            text += f" {wish.end_time.strftime('%H:%M')}"
    elif wish.end_time and not wish.is_all_day:
        text += f" - {wish.end_time.strftime('%H:%M')}"
    return text
