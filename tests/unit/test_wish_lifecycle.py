"""Wish creation, edits, deletion and the open -> voting -> confirmed moves."""
from datetime import date, datetime, timezone

import pytest

from asobot import db
from asobot.errors import InvalidTransitionError, NotFoundError, PermissionDeniedError, ValidationError
from asobot.models import Interest, NotificationLog, ScheduleCandidate, ScheduleVote, Wish, WishResponse
from asobot.models.notification import CONFIRM_START, DATE_CONFIRMED, SCHEDULE_START
from asobot.services import interest_service, response_service, schedule_service


def _logs(wish, notif_type):
    return NotificationLog.query.filter_by(wish_id=wish.id, notification_type=notif_type).count()


class TestCreateWish:
    def test_create_open_undated(self, wish_service, group, alice):
        wish = wish_service.create_wish(group, alice, title="  Beach Trip  ", description="  ")
        assert wish.id is not None
        assert wish.title == "Beach Trip"
        assert wish.description is None
        assert wish.status == 'open'
        assert wish.voting_started is False
        assert wish.start_date is None

    def test_blank_title_rejected(self, wish_service, group, alice):
        with pytest.raises(ValidationError):
            wish_service.create_wish(group, alice, title="   ")
        assert Wish.query.count() == 0

    def test_end_before_start_rejected(self, wish_service, group, alice):
        with pytest.raises(ValidationError):
            wish_service.create_wish(
                group, alice, title="Ski", start_date=date(2030, 1, 5), end_date=date(2030, 1, 4),
            )

    @pytest.mark.parametrize("fields", [
        {'title': 123},
        {'title': 'Ski', 'description': {'text': 'powder'}},
    ])
    def test_non_string_text_rejected(self, wish_service, group, alice, fields):
        with pytest.raises(ValidationError):
            wish_service.create_wish(group, alice, **fields)
        assert Wish.query.count() == 0

    def test_anonymous_hides_creator(self, wish_service, group, alice):
        wish = wish_service.create_wish(group, alice, title="Karaoke", is_anonymous=True)
        assert wish.created_by == alice.id
        assert wish.to_dict()['created_by'] is None


class TestEditAndDelete:
    def test_creator_can_edit_before_voting(self, wish_service, open_wish, alice):
        wish_service.edit_wish(open_wish, alice, {'title': 'Beach Weekend', 'status': 'confirmed'})
        assert open_wish.title == 'Beach Weekend'
        # Non-editable fields are ignored
        assert open_wish.status == 'open'

    def test_edit_rejects_non_string_title(self, wish_service, open_wish, alice):
        with pytest.raises(ValidationError):
            wish_service.edit_wish(open_wish, alice, {'title': ['Beach']})
        assert open_wish.title == 'Beach Trip'

    def test_non_creator_cannot_edit(self, wish_service, open_wish, bob):
        with pytest.raises(PermissionDeniedError):
            wish_service.edit_wish(open_wish, bob, {'title': 'Mine now'})

    def test_no_edit_after_voting_started(self, wish_service, dated_wish, alice):
        wish_service.start_attendance_confirmation(dated_wish)
        with pytest.raises(PermissionDeniedError):
            wish_service.edit_wish(dated_wish, alice, {'title': 'Too late'})

    def test_non_creator_cannot_delete(self, wish_service, open_wish, bob):
        with pytest.raises(PermissionDeniedError):
            wish_service.delete_wish(open_wish, bob)
        assert db.session.get(Wish, open_wish.id) is not None

    def test_delete_removes_dependents(self, wish_service, open_wish, alice, bob):
        interest_service.add_interest(open_wish, bob)
        wish_id = open_wish.id

        wish_service.delete_wish(open_wish, alice)

        assert db.session.get(Wish, wish_id) is None
        assert Interest.query.filter_by(wish_id=wish_id).count() == 0
        assert ScheduleCandidate.query.filter_by(wish_id=wish_id).count() == 0

    def test_delete_cascades_poll_votes_and_responses(self, wish_service, group, alice, bob):
        # A poll wish cannot be deleted through the service, so remove it directly
        wish = wish_service.create_wish(group, alice, title="Camping")
        wish_service.create_schedule_poll(wish, [date(2030, 5, 1)])
        schedule_service.cast_votes(wish, bob, {wish.candidates[0].id: 'ok'})
        db.session.add(WishResponse(wish_id=wish.id, user_id=bob.id, response='ok'))
        db.session.commit()

        db.session.delete(wish)
        db.session.commit()

        assert ScheduleCandidate.query.count() == 0
        assert ScheduleVote.query.count() == 0
        assert WishResponse.query.count() == 0
        # The log survives with its wish reference cleared
        assert NotificationLog.query.filter_by(notification_type=SCHEDULE_START).one().wish_id is None

    def test_get_missing_wish(self, wish_service):
        with pytest.raises(NotFoundError):
            wish_service.get_wish(999)


class TestSchedulePoll:
    def test_beach_trip_scenario(self, wish_service, open_wish, alice, bob, carol, line_client):
        d1, d2 = date(2025, 3, 1), date(2025, 3, 2)
        wish_service.create_schedule_poll(open_wish, [d1, d2])
        assert open_wish.status == 'voting'
        first, second = schedule_service.list_candidates(open_wish)

        schedule_service.cast_vote(first, alice, 'ok')
        schedule_service.cast_vote(first, bob, 'ok')
        schedule_service.cast_vote(second, carol, 'ng')

        leading = schedule_service.leading_candidates(open_wish)
        assert [row['date'] for row in leading] == [d1]

        line_client.reset()
        wish_service.confirm_date(open_wish, d1, requester=alice)

        assert open_wish.status == 'confirmed'
        assert open_wish.confirmed_date == d1
        assert open_wish.start_date == d1
        assert _logs(open_wish, DATE_CONFIRMED) == 1
        assert len(line_client.pushed) == 1
        assert '"Beach Trip"' in line_client.pushed[0][1]

    def test_poll_start_notifies_once(self, wish_service, open_wish, line_client):
        wish_service.create_schedule_poll(open_wish, [date(2030, 4, 1)])
        wish_service.create_schedule_poll(open_wish, [date(2030, 4, 2), date(2030, 4, 3)])

        assert _logs(open_wish, SCHEDULE_START) == 1
        assert len(line_client.pushed) == 1
        assert [c.date for c in open_wish.candidates] == [date(2030, 4, 2), date(2030, 4, 3)]

    def test_recreate_discards_votes(self, wish_service, open_wish, bob):
        wish_service.create_schedule_poll(open_wish, [date(2030, 4, 1)])
        schedule_service.cast_vote(open_wish.candidates[0], bob, 'ok')

        wish_service.create_schedule_poll(open_wish, [date(2030, 4, 2)])

        assert ScheduleVote.query.count() == 0
        assert ScheduleCandidate.query.filter_by(wish_id=open_wish.id).count() == 1

    def test_deadline_stored_as_naive_utc(self, wish_service, open_wish):
        deadline = datetime(2030, 4, 1, 9, 0, tzinfo=timezone.utc)
        wish_service.create_schedule_poll(open_wish, [date(2030, 4, 5)], vote_deadline=deadline)
        assert open_wish.vote_deadline == datetime(2030, 4, 1, 9, 0)

    def test_dated_wish_cannot_poll(self, wish_service, dated_wish):
        with pytest.raises(InvalidTransitionError):
            wish_service.create_schedule_poll(dated_wish, [date(2030, 4, 1)])

    def test_empty_dates_rejected(self, wish_service, open_wish):
        with pytest.raises(ValidationError):
            wish_service.create_schedule_poll(open_wish, [])
        assert open_wish.status == 'open'

    def test_notification_failure_keeps_poll(self, wish_service, open_wish, line_client):
        line_client.fail = True
        wish_service.create_schedule_poll(open_wish, [date(2030, 4, 1)])

        db.session.expire_all()
        assert db.session.get(Wish, open_wish.id).status == 'voting'
        assert _logs(open_wish, SCHEDULE_START) == 0


class TestAttendanceConfirmation:
    def test_start_sets_flags_and_notifies(self, wish_service, dated_wish, line_client):
        wish_service.start_attendance_confirmation(dated_wish, vote_deadline=datetime(2030, 2, 25))
        assert dated_wish.voting_started is True
        assert dated_wish.status == 'open'
        assert dated_wish.vote_deadline == datetime(2030, 2, 25)
        assert _logs(dated_wish, CONFIRM_START) == 1
        assert '2030-03-01' in line_client.pushed[0][1]

    def test_undated_wish_rejected(self, wish_service, open_wish):
        with pytest.raises(ValidationError):
            wish_service.start_attendance_confirmation(open_wish)
        assert open_wish.voting_started is False

    def test_confirm_after_attendance(self, wish_service, dated_wish, bob):
        wish_service.start_attendance_confirmation(dated_wish)
        response_service.set_response(dated_wish, bob, 'ok')

        wish_service.confirm_date(dated_wish, date(2030, 3, 1))
        assert dated_wish.status == 'confirmed'
        assert dated_wish.confirmed_date == date(2030, 3, 1)

    def test_confirm_twice_rejected(self, wish_service, dated_wish):
        wish_service.confirm_date(dated_wish, date(2030, 3, 1))
        with pytest.raises(InvalidTransitionError):
            wish_service.confirm_date(dated_wish, date(2030, 3, 2))

    def test_only_creator_confirms(self, wish_service, dated_wish, bob):
        with pytest.raises(PermissionDeniedError):
            wish_service.confirm_date(dated_wish, date(2030, 3, 1), requester=bob)


def test_status_and_date_invariants_hold(wish_service, group, alice):
    """confirmed <=> confirmed_date, and voting_started => start_date."""
    a = wish_service.create_wish(group, alice, title="A")
    b = wish_service.create_wish(group, alice, title="B", start_date=date(2030, 6, 1))
    c = wish_service.create_wish(group, alice, title="C")
    wish_service.create_schedule_poll(a, [date(2030, 6, 2)])
    wish_service.confirm_date(a, date(2030, 6, 2))
    wish_service.start_attendance_confirmation(b)
    wish_service.create_schedule_poll(c, [date(2030, 6, 3)])

    for wish in Wish.query.all():
        assert (wish.status == 'confirmed') == (wish.confirmed_date is not None)
        if wish.voting_started:
            assert wish.start_date is not None
