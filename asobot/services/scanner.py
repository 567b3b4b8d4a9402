# asobot/services/scanner.py
"""Daily reminder and suggestion sweep.

Each wish or group is handled on its own: a failure is recorded as a failed
``ItemResult`` and the sweep moves on. Re-running on the same day is safe
because every send is checked against ``notification_logs`` first.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from asobot import db
from asobot.errors import AsobotError
from asobot.models import GroupSettings, Wish
from asobot.models.notification import CONFIRM_REMINDER, SCHEDULE_REMINDER, SUGGESTION
from asobot.models.wish import STATUS_CONFIRMED, STATUS_VOTING
from asobot.services import interest_service
from asobot.services.notification_service import Delivery
from asobot.utils.timeutil import utcnow

logger = logging.getLogger(__name__)

SCHEDULE_REMINDER_DAYS = 3
CONFIRM_REMINDER_DAYS = 1
SUGGESTION_TOP_N = 3
SUGGESTION_MEMBER_RATIO = 0.3


@dataclass
class ItemResult:
    kind: str           # "schedule", "confirm" or "suggestion"
    target: str         # wish title or group id
    outcome: str        # a Delivery value, "skipped" or "error"
    detail: str = ""

    @property
    def ok(self):
        return self.outcome != Delivery.FAILED.value and self.outcome != "error"

    def describe(self):
        return f"{self.kind}: {self.target}" + (f" ({self.detail})" if self.detail else "")


@dataclass
class ScanReport:
    started_at: datetime
    items: List[ItemResult] = field(default_factory=list)

    @property
    def reminders(self):
        return [i.describe() for i in self.items
                if i.kind in ('schedule', 'confirm') and i.outcome == Delivery.SENT.value]

    @property
    def suggestions(self):
        return [i.describe() for i in self.items
                if i.kind == 'suggestion' and i.outcome == Delivery.SENT.value]

    @property
    def failures(self):
        return [i.describe() for i in self.items if not i.ok]

    def to_dict(self):
        return {
            'success': True,
            'results': {
                'reminders': self.reminders,
                'suggestions': self.suggestions,
                'failures': self.failures,
            },
            'timestamp': self.started_at.isoformat(),
        }


def end_of_day(moment: datetime, days_ahead: int) -> datetime:
    target = moment + timedelta(days=days_ahead)
    return target.replace(hour=23, minute=59, second=59, microsecond=999999)


class ReminderScanner:
    def __init__(self, notifier, membership, now: Optional[datetime] = None):
        self.notifier = notifier
        self.membership = membership
        self.now = now

    def run(self) -> ScanReport:
        now = self.now or utcnow()
        report = ScanReport(started_at=now)
        logger.info("Reminder scan started at %s", now.isoformat())

        for wish in self._schedule_poll_due(now):
            report.items.append(self._guard('schedule', wish.title, self._remind_schedule, wish, now))
        for wish in self._attendance_due(now):
            report.items.append(self._guard('confirm', wish.title, self._remind_attendance, wish, now))
        for settings in GroupSettings.query.filter_by(suggest_enabled=True).order_by(GroupSettings.group_id).all():
            report.items.append(self._guard('suggestion', str(settings.group_id), self._suggest, settings, now))

        logger.info(
            "Reminder scan finished: %d reminder(s), %d suggestion(s), %d failure(s)",
            len(report.reminders), len(report.suggestions), len(report.failures),
        )
        return report

    def _guard(self, kind, target, func, item, now) -> ItemResult:
        """Run one item, turning any error into a failed result."""
        try:
            outcome, detail = func(item, now)
        except AsobotError as e:
            db.session.rollback()
            logger.error(f"Scan item {kind}:{target} failed: {e.message}")
            return ItemResult(kind, target, "error", e.message)
        except Exception as e:  # noqa: BLE001 one bad item must not stop the sweep
            db.session.rollback()
            logger.error(f"Scan item {kind}:{target} failed: {e}", exc_info=True)
            return ItemResult(kind, target, "error", str(e))
        if outcome == Delivery.FAILED.value:
            logger.warning("Scan item %s:%s was not delivered", kind, target)
        return ItemResult(kind, target, outcome, detail)

    # -----------------------
    # Candidate queries
    # -----------------------
    @staticmethod
    def _schedule_poll_due(now):
        return (
            Wish.query.filter(
                Wish.status == STATUS_VOTING,
                Wish.start_date.is_(None),
                Wish.vote_deadline.isnot(None),
                Wish.vote_deadline >= now,
                Wish.vote_deadline <= end_of_day(now, SCHEDULE_REMINDER_DAYS),
            )
            .order_by(Wish.vote_deadline)
            .all()
        )

    @staticmethod
    def _attendance_due(now):
        return (
            Wish.query.filter(
                Wish.voting_started.is_(True),
                Wish.status != STATUS_CONFIRMED,
                Wish.start_date.isnot(None),
                Wish.vote_deadline.isnot(None),
                Wish.vote_deadline >= now,
                Wish.vote_deadline <= end_of_day(now, CONFIRM_REMINDER_DAYS),
            )
            .order_by(Wish.vote_deadline)
            .all()
        )

    # -----------------------
    # Item handlers, each returning (outcome, detail)
    # -----------------------
    def _remind_schedule(self, wish, now):
        if self.notifier.already_sent(wish.id, SCHEDULE_REMINDER):
            return "skipped", "already reminded"
        days_left = math.ceil((wish.vote_deadline - now).total_seconds() / 86400)
        outcome = self.notifier.notify_reminder(wish, days_left, 'schedule', now=now)
        return outcome.value, f"{days_left} day(s) left"

    def _remind_attendance(self, wish, now):
        if self.notifier.already_sent(wish.id, CONFIRM_REMINDER):
            return "skipped", "already reminded"
        outcome = self.notifier.notify_reminder(wish, 1, 'confirm', now=now)
        return outcome.value, ""

    def _suggest(self, settings, now):
        group_id = settings.group_id
        last_sent = self.notifier.last_sent_at(group_id, SUGGESTION)
        if last_sent is not None:
            days_since = (now - last_sent).total_seconds() / 86400
            if days_since < settings.suggest_interval_days:
                return "skipped", f"last suggestion {days_since:.1f} day(s) ago"

        member_count = self.membership.member_count(group_id)
        min_interests = max(settings.suggest_min_interests, math.ceil(member_count * SUGGESTION_MEMBER_RATIO))
        popular = interest_service.popular_wishes(group_id, min_interests, SUGGESTION_TOP_N)

        if popular:
            pairs = [(wish.title, count) for wish, count in popular]
            outcome = self.notifier.notify_suggestion(group_id, pairs, now=now)
            return outcome.value, f"{len(pairs)} wish(es)"
        outcome = self.notifier.notify_suggestion_empty(group_id, now=now)
        return outcome.value, "no candidates"
