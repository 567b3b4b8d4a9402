"""Settings gating, dedupe, and best-effort delivery of group notifications."""
from datetime import date, datetime, time

import pytest

from asobot import db
from asobot.errors import ValidationError
from asobot.models import Group, NotificationLog
from asobot.models.notification import DATE_CONFIRMED, SCHEDULE_REMINDER, SCHEDULE_START, SUGGESTION
from asobot.services.notification_service import Delivery, format_wish_date


class TestSettings:
    def test_defaults_created_on_first_read(self, notifier, group):
        settings = notifier.get_settings(group.id)
        assert settings.to_dict() == {
            'group_id': group.id,
            'notify_schedule_start': True,
            'notify_reminder': True,
            'notify_confirmed': True,
            'suggest_enabled': True,
            'suggest_interval_days': 14,
            'suggest_min_interests': 2,
        }
        assert notifier.get_settings(group.id).id == settings.id

    def test_update(self, notifier, group):
        settings = notifier.update_settings(group.id, {'notify_reminder': False, 'suggest_interval_days': 7})
        assert settings.notify_reminder is False
        assert settings.suggest_interval_days == 7

    @pytest.mark.parametrize("values", [
        {'notify_reminder': 'no'},
        {'suggest_interval_days': 0},
        {'suggest_min_interests': True},
    ])
    def test_update_rejects_bad_values(self, notifier, group, values):
        with pytest.raises(ValidationError):
            notifier.update_settings(group.id, values)

    def test_allows(self, notifier, group):
        settings = notifier.update_settings(group.id, {'notify_schedule_start': False})
        assert not settings.allows(SCHEDULE_START)
        # Substring match: schedule reminders follow the schedule switch too
        assert not settings.allows(SCHEDULE_REMINDER)
        assert settings.allows(DATE_CONFIRMED)


class TestSendGroupNotification:
    def test_sent_and_logged(self, notifier, group, open_wish, line_client):
        now = datetime(2030, 1, 1, 12, 0)
        outcome = notifier.send_group_notification(group.id, SCHEDULE_START, "hello", wish_id=open_wish.id, now=now)

        assert outcome is Delivery.SENT
        assert line_client.pushed == [("C-test-group", "hello")]
        log = NotificationLog.query.one()
        assert (log.wish_id, log.notification_type, log.sent_at) == (open_wish.id, SCHEDULE_START, now)
        assert db.session.get(Group, group.id).last_activity_at == now

    def test_duplicate_is_not_resent(self, notifier, group, open_wish, line_client):
        notifier.send_group_notification(group.id, SCHEDULE_START, "hello", wish_id=open_wish.id)
        outcome = notifier.send_group_notification(group.id, SCHEDULE_START, "hello", wish_id=open_wish.id)

        assert outcome is Delivery.DUPLICATE
        assert len(line_client.pushed) == 1
        assert NotificationLog.query.count() == 1

    def test_disabled_type(self, notifier, group, open_wish, line_client):
        notifier.update_settings(group.id, {'notify_confirmed': False})
        outcome = notifier.send_group_notification(group.id, DATE_CONFIRMED, "set", wish_id=open_wish.id)

        assert outcome is Delivery.DISABLED
        assert line_client.pushed == []
        assert NotificationLog.query.count() == 0

    def test_dispatch_failure_is_not_logged(self, notifier, group, open_wish, line_client):
        line_client.fail = True
        outcome = notifier.send_group_notification(group.id, SCHEDULE_START, "hello", wish_id=open_wish.id)

        assert outcome is Delivery.FAILED
        assert NotificationLog.query.count() == 0

        # A later attempt can still go out
        line_client.fail = False
        assert notifier.send_group_notification(group.id, SCHEDULE_START, "hello", wish_id=open_wish.id) is Delivery.SENT

    def test_group_level_notifications_are_not_deduped(self, notifier, group, line_client):
        notifier.send_group_notification(group.id, SUGGESTION, "one")
        notifier.send_group_notification(group.id, SUGGESTION, "two")
        assert len(line_client.pushed) == 2
        assert notifier.last_sent_at(group.id, SUGGESTION) is not None


def test_liff_url(notifier):
    assert notifier.liff_url("/wishes/3/confirm", 5) == "https://liff.line.me/test-liff/wishes/3/confirm?groupId=5"


def test_format_wish_date(wish_service, group, alice):
    wish = wish_service.create_wish(
        group, alice, title="Onsen",
        start_date=date(2030, 3, 1), start_time=time(10, 0),
        end_date=date(2030, 3, 2), is_all_day=False,
    )
    assert format_wish_date(wish) == "2030-03-01 10:00 - 2030-03-02"
