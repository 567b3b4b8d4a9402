# asobot/models/wish.py
from asobot import db
from asobot.utils.timeutil import utcnow

STATUS_OPEN = 'open'
STATUS_VOTING = 'voting'
STATUS_CONFIRMED = 'confirmed'

WISH_STATUSES = (STATUS_OPEN, STATUS_VOTING, STATUS_CONFIRMED)

RESPONSE_VALUES = ('ok', 'maybe', 'ng')


class Wish(db.Model):
    """A place or activity someone in the group wants to do."""
    __tablename__ = 'wishes'

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_anonymous = db.Column(db.Boolean, nullable=False, default=False)

    # Optional date window
    start_date = db.Column(db.Date, nullable=True)
    start_time = db.Column(db.Time, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    end_time = db.Column(db.Time, nullable=True)
    is_all_day = db.Column(db.Boolean, nullable=False, default=True)

    status = db.Column(db.String(20), nullable=False, default=STATUS_OPEN, index=True)
    # Attendance confirmation phase for dated wishes; independent of status
    voting_started = db.Column(db.Boolean, nullable=False, default=False)
    vote_deadline = db.Column(db.DateTime, nullable=True)
    confirmed_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    group = db.relationship('Group', backref=db.backref('wishes', lazy='dynamic'))
    creator = db.relationship('User', foreign_keys=[created_by])

    interests = db.relationship('Interest', backref='wish', lazy='select', cascade="all, delete-orphan")
    responses = db.relationship('WishResponse', backref='wish', lazy='select', cascade="all, delete-orphan")
    candidates = db.relationship(
        'ScheduleCandidate', backref='wish', lazy='select',
        cascade="all, delete-orphan", order_by='ScheduleCandidate.date',
    )
    # Logs outlive the wish; deleting the wish nulls their wish_id
    notification_logs = db.relationship('NotificationLog', backref='wish', lazy='select')

    def __repr__(self):
        return f'<Wish {self.id} {self.title!r} ({self.status})>'

    @property
    def interest_count(self):
        return len(self.interests)

    def to_dict(self, include_interests=False):
        data = {
            'id': self.id,
            'group_id': self.group_id,
            'title': self.title,
            'description': self.description,
            'is_anonymous': self.is_anonymous,
            # Anonymous wishes never reveal their creator
            'created_by': None if self.is_anonymous else self.created_by,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'start_time': self.start_time.strftime('%H:%M') if self.start_time else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'end_time': self.end_time.strftime('%H:%M') if self.end_time else None,
            'is_all_day': self.is_all_day,
            'status': self.status,
            'voting_started': self.voting_started,
            'vote_deadline': self.vote_deadline.isoformat() if self.vote_deadline else None,
            'confirmed_date': self.confirmed_date.isoformat() if self.confirmed_date else None,
            'interest_count': self.interest_count,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_interests:
            data['interests'] = [i.user_id for i in self.interests]
        return data


class Interest(db.Model):
    """A "this user wants to go" marker on a wish."""
    __tablename__ = 'interests'

    id = db.Column(db.Integer, primary_key=True)
    wish_id = db.Column(db.Integer, db.ForeignKey('wishes.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('wish_id', 'user_id', name='uq_interest_wish_user'),
    )


class WishResponse(db.Model):
    """Attendance answer (ok / maybe / ng) for a dated wish."""
    __tablename__ = 'wish_responses'

    id = db.Column(db.Integer, primary_key=True)
    wish_id = db.Column(db.Integer, db.ForeignKey('wishes.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    response = db.Column(db.String(10), nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship('User')

    __table_args__ = (
        db.UniqueConstraint('wish_id', 'user_id', name='uq_response_wish_user'),
    )

    def to_dict(self):
        return {
            'wish_id': self.wish_id,
            'user_id': self.user_id,
            'response': self.response,
            'display_name': self.user.display_name if self.user else None,
        }
