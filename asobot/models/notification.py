# asobot/models/notification.py
from asobot import db
from asobot.utils.timeutil import utcnow

SCHEDULE_START = 'schedule_start'
SCHEDULE_REMINDER = 'schedule_reminder'
CONFIRM_START = 'confirm_start'
CONFIRM_REMINDER = 'confirm_reminder'
DATE_CONFIRMED = 'date_confirmed'
SUGGESTION = 'suggestion'

NOTIFICATION_TYPES = (
    SCHEDULE_START,
    SCHEDULE_REMINDER,
    CONFIRM_START,
    CONFIRM_REMINDER,
    DATE_CONFIRMED,
    SUGGESTION,
)


class GroupSettings(db.Model):
    __tablename__ = 'group_settings'

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False, unique=True)
    notify_schedule_start = db.Column(db.Boolean, nullable=False, default=True)
    notify_reminder = db.Column(db.Boolean, nullable=False, default=True)
    notify_confirmed = db.Column(db.Boolean, nullable=False, default=True)
    suggest_enabled = db.Column(db.Boolean, nullable=False, default=True)
    suggest_interval_days = db.Column(db.Integer, nullable=False, default=14)
    suggest_min_interests = db.Column(db.Integer, nullable=False, default=2)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    EDITABLE_FIELDS = (
        'notify_schedule_start',
        'notify_reminder',
        'notify_confirmed',
        'suggest_enabled',
        'suggest_interval_days',
        'suggest_min_interests',
    )

    def allows(self, notif_type: str) -> bool:
        """Whether this group accepts notifications of *notif_type*."""
        if 'schedule' in notif_type and not self.notify_schedule_start:
            return False
        if 'reminder' in notif_type and not self.notify_reminder:
            return False
        if notif_type == DATE_CONFIRMED and not self.notify_confirmed:
            return False
        if notif_type == SUGGESTION and not self.suggest_enabled:
            return False
        return True

    def to_dict(self):
        data = {field: getattr(self, field) for field in self.EDITABLE_FIELDS}
        data['group_id'] = self.group_id
        return data


class NotificationLog(db.Model):
    """Append-only record of delivered group notifications, used for dedupe."""
    __tablename__ = 'notification_logs'

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False, index=True)
    wish_id = db.Column(db.Integer, db.ForeignKey('wishes.id', ondelete='SET NULL'), nullable=True, index=True)
    notification_type = db.Column(db.String(32), nullable=False, index=True)
    sent_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f'<NotificationLog {self.notification_type} group={self.group_id} wish={self.wish_id}>'
