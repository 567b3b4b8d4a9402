# asobot/routes/wishes.py
import logging

from flask import Blueprint, jsonify, request

from asobot.domain import phases
from asobot.errors import ValidationError
from asobot.routes import json_body, membership, notifier, parse_bool, parse_date, parse_datetime, parse_time
from asobot.services import interest_service, response_service, schedule_service
from asobot.services.wish_service import WishService

logger = logging.getLogger(__name__)
bp = Blueprint('wishes', __name__, url_prefix='/api/wishes')

# camelCase request keys accepted by the edit endpoint
_EDIT_FIELDS = {
    'title': ('title', None),
    'description': ('description', None),
    'isAnonymous': ('is_anonymous', parse_bool),
    'startDate': ('start_date', parse_date),
    'startTime': ('start_time', parse_time),
    'endDate': ('end_date', parse_date),
    'endTime': ('end_time', parse_time),
    'isAllDay': ('is_all_day', parse_bool),
}


def _wish_payload(wish):
    data = wish.to_dict(include_interests=True)
    data['phase'] = type(phases.phase_of(wish)).__name__
    return data


def _tally_payload(rows):
    return [
        {'candidate_id': r['candidate_id'], 'date': r['date'].isoformat(), 'counts': r['counts']}
        for r in rows
    ]


@bp.route('/<int:wish_id>', methods=['GET'])
def get_wish(wish_id):
    return jsonify(_wish_payload(WishService.get_wish(wish_id)))


@bp.route('/<int:wish_id>', methods=['PATCH'])
def update_wish(wish_id):
    """Start attendance confirmation, confirm a date, or edit the wish."""
    payload = json_body()
    service = WishService(notifier())
    wish = service.get_wish(wish_id)

    if payload.get('votingStarted'):
        deadline = parse_datetime(payload.get('voteDeadline'), 'voteDeadline')
        wish = service.start_attendance_confirmation(wish, vote_deadline=deadline)
        return jsonify(_wish_payload(wish))

    if 'confirmedDate' in payload:
        on = parse_date(payload.get('confirmedDate'), 'confirmedDate')
        requester = None
        if payload.get('lineUserId'):
            requester = membership().get_user_by_line_id(payload.get('lineUserId'))
        wish = service.confirm_date(wish, on, requester=requester)
        return jsonify(_wish_payload(wish))

    requester = membership().get_user_by_line_id(payload.get('lineUserId'))
    fields = {}
    for key, (column, convert) in _EDIT_FIELDS.items():
        if key not in payload:
            continue
        value = payload[key]
        if convert is not None:
            value = convert(value, key)
        fields[column] = value
    if not fields:
        raise ValidationError("Nothing to update")
    wish = service.edit_wish(wish, requester, fields)
    return jsonify(_wish_payload(wish))


@bp.route('/<int:wish_id>', methods=['DELETE'])
def delete_wish(wish_id):
    service = WishService(notifier())
    wish = service.get_wish(wish_id)
    requester = membership().get_user_by_line_id(request.args.get('lineUserId'))
    service.delete_wish(wish, requester)
    return jsonify({'success': True})


# ---------------------------------------------------------------------------
# Interest
# ---------------------------------------------------------------------------

@bp.route('/<int:wish_id>/interest', methods=['POST'])
def add_interest(wish_id):
    wish = WishService.get_wish(wish_id)
    user = membership().get_user_by_line_id(json_body().get('lineUserId'))
    if not interest_service.add_interest(wish, user):
        return jsonify({'message': 'Already interested', 'interest_count': interest_service.interest_count(wish)})
    return jsonify({'success': True, 'interest_count': interest_service.interest_count(wish)}), 201


@bp.route('/<int:wish_id>/interest', methods=['DELETE'])
def remove_interest(wish_id):
    wish = WishService.get_wish(wish_id)
    user = membership().get_user_by_line_id(request.args.get('lineUserId'))
    interest_service.remove_interest(wish, user)
    return jsonify({'success': True, 'interest_count': interest_service.interest_count(wish)})


# ---------------------------------------------------------------------------
# Attendance responses
# ---------------------------------------------------------------------------

@bp.route('/<int:wish_id>/response', methods=['GET'])
def get_responses(wish_id):
    wish = WishService.get_wish(wish_id)
    member_ids = membership().member_ids(wish.group_id)
    return jsonify({
        'responses': [r.to_dict() for r in response_service.list_responses(wish)],
        'tally': response_service.tally_responses(wish),
        'unanswered': response_service.unanswered_members(wish, member_ids),
    })


@bp.route('/<int:wish_id>/response', methods=['POST'])
def set_response(wish_id):
    payload = json_body()
    wish = WishService.get_wish(wish_id)
    user = membership().get_user_by_line_id(payload.get('lineUserId'))
    saved = response_service.set_response(wish, user, payload.get('response'))
    if saved is None:
        return jsonify({'deleted': True})
    return jsonify(saved.to_dict())


# ---------------------------------------------------------------------------
# Schedule poll
# ---------------------------------------------------------------------------

@bp.route('/<int:wish_id>/schedule', methods=['GET'])
def get_schedule(wish_id):
    wish = WishService.get_wish(wish_id)
    return jsonify({
        'candidates': [c.to_dict() for c in schedule_service.list_candidates(wish)],
        'tally': _tally_payload(schedule_service.tally_by_candidate(wish)),
        'leading': _tally_payload(schedule_service.leading_candidates(wish)),
        'vote_deadline': wish.vote_deadline.isoformat() if wish.vote_deadline else None,
    })


@bp.route('/<int:wish_id>/schedule', methods=['POST'])
def create_schedule(wish_id):
    payload = json_body()
    dates = payload.get('dates')
    if not isinstance(dates, list) or not dates:
        raise ValidationError("dates required")

    service = WishService(notifier())
    wish = service.get_wish(wish_id)
    wish = service.create_schedule_poll(
        wish,
        [parse_date(d, 'dates') for d in dates],
        vote_deadline=parse_datetime(payload.get('voteDeadline'), 'voteDeadline'),
    )
    return jsonify([c.to_dict() for c in schedule_service.list_candidates(wish)]), 201


@bp.route('/<int:wish_id>/schedule/vote', methods=['POST'])
def cast_votes(wish_id):
    """Save one user's votes: ``{"lineUserId", "votes": {candidateId: value}}``."""
    payload = json_body()
    votes = payload.get('votes')
    if not isinstance(votes, dict):
        raise ValidationError("votes must be an object of candidateId -> availability")

    wish = WishService.get_wish(wish_id)
    user = membership().get_user_by_line_id(payload.get('lineUserId'))
    schedule_service.cast_votes(wish, user, votes)
    return jsonify({
        'success': True,
        'tally': _tally_payload(schedule_service.tally_by_candidate(wish)),
    })
