# asobot/routes/groups.py
import logging

from flask import Blueprint, jsonify, request

from asobot.routes import json_body, membership, notifier, parse_bool, parse_date, parse_time
from asobot.services import interest_service, response_service
from asobot.services.wish_service import WishService

logger = logging.getLogger(__name__)
bp = Blueprint('groups', __name__, url_prefix='/api/groups')

POPULAR_TOP_N = 3


@bp.route('/by-line-id', methods=['GET'])
def group_by_line_id():
    group = membership().get_group_by_line_id(request.args.get('lineGroupId'))
    return jsonify(group.to_dict())


@bp.route('/<int:group_id>/members', methods=['GET'])
def list_members(group_id):
    membership().get_group(group_id)
    users = membership().members(group_id)
    return jsonify([
        {'user_id': u.id, 'display_name': u.display_name, 'picture_url': u.picture_url}
        for u in users
    ])


@bp.route('/<int:group_id>/settings', methods=['GET'])
def get_settings(group_id):
    membership().get_group(group_id)
    return jsonify(notifier().get_settings(group_id).to_dict())


@bp.route('/<int:group_id>/settings', methods=['PATCH'])
def update_settings(group_id):
    membership().get_group(group_id)
    settings = notifier().update_settings(group_id, json_body())
    return jsonify(settings.to_dict())


@bp.route('/<int:group_id>/wishes', methods=['GET'])
def list_wishes(group_id):
    """Open and voting wishes, newest first. ``?popular=1`` ranks by interest."""
    membership().get_group(group_id)
    if request.args.get('popular'):
        min_count = request.args.get('minCount', 1, type=int)
        ranked = interest_service.popular_wishes(group_id, min_count, POPULAR_TOP_N)
        return jsonify([dict(w.to_dict(), interest_count=count) for w, count in ranked])

    wishes = WishService.list_wishes(group_id)
    return jsonify([w.to_dict(include_interests=True) for w in wishes])


@bp.route('/<int:group_id>/wishes', methods=['POST'])
def create_wish(group_id):
    payload = json_body()
    group = membership().get_group(group_id)
    creator = membership().get_user_by_line_id(payload.get('lineUserId'))

    wish = WishService(notifier()).create_wish(
        group,
        creator,
        title=payload.get('title'),
        description=payload.get('description'),
        is_anonymous=parse_bool(payload.get('isAnonymous'), 'isAnonymous', default=False),
        start_date=parse_date(payload.get('startDate'), 'startDate'),
        start_time=parse_time(payload.get('startTime'), 'startTime'),
        end_date=parse_date(payload.get('endDate'), 'endDate'),
        end_time=parse_time(payload.get('endTime'), 'endTime'),
        is_all_day=parse_bool(payload.get('isAllDay'), 'isAllDay', default=True),
    )
    return jsonify(wish.to_dict()), 201


@bp.route('/<int:group_id>/pending', methods=['GET'])
def pending(group_id):
    """Wishes waiting for the given user's vote or attendance answer."""
    membership().get_group(group_id)
    user = membership().get_user_by_line_id(request.args.get('lineUserId'))
    wishes = response_service.pending_actions(group_id, user.id)
    return jsonify([w.to_dict() for w in wishes])
