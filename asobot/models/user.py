# asobot/models/user.py
from asobot import db
from asobot.utils.timeutil import utcnow


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    line_user_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(255), nullable=True)
    picture_url = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<User {self.id} {self.display_name or self.line_user_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'line_user_id': self.line_user_id,
            'display_name': self.display_name,
            'picture_url': self.picture_url,
        }


class Group(db.Model):
    __tablename__ = 'groups'

    id = db.Column(db.Integer, primary_key=True)
    line_group_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=True)
    # Refreshed whenever a notification is delivered to the group
    last_activity_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    members = db.relationship('GroupMember', backref='group', lazy='dynamic', cascade="all, delete-orphan")

    def __repr__(self):
        return f'<Group {self.id} {self.name or self.line_group_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'line_group_id': self.line_group_id,
            'name': self.name,
            'last_activity_at': self.last_activity_at.isoformat() if self.last_activity_at else None,
        }


class GroupMember(db.Model):
    __tablename__ = 'group_members'

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    joined_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship('User')

    __table_args__ = (
        db.UniqueConstraint('group_id', 'user_id', name='uq_group_member'),
    )
