# asobot/models/schedule.py
from asobot import db
from asobot.utils.timeutil import utcnow

# ok = free all day, ng = unavailable; the rest are partial availability
VOTE_VALUES = ('ok', 'ng', 'undecided', 'morning', 'afternoon', 'evening')


class ScheduleCandidate(db.Model):
    """One proposed date in an undated wish's schedule poll."""
    __tablename__ = 'schedule_candidates'

    id = db.Column(db.Integer, primary_key=True)
    wish_id = db.Column(db.Integer, db.ForeignKey('wishes.id', ondelete='CASCADE'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    votes = db.relationship('ScheduleVote', backref='candidate', lazy='select', cascade="all, delete-orphan")

    def __repr__(self):
        return f'<ScheduleCandidate {self.date} for Wish {self.wish_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'votes': [v.to_dict() for v in self.votes],
        }


class ScheduleVote(db.Model):
    __tablename__ = 'schedule_votes'

    id = db.Column(db.Integer, primary_key=True)
    candidate_id = db.Column(
        db.Integer, db.ForeignKey('schedule_candidates.id', ondelete='CASCADE'), nullable=False, index=True
    )
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    availability = db.Column(db.String(20), nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship('User')

    __table_args__ = (
        db.UniqueConstraint('candidate_id', 'user_id', name='uq_vote_candidate_user'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'availability': self.availability,
            'display_name': self.user.display_name if self.user else None,
        }
