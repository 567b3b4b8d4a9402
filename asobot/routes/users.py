# asobot/routes/users.py
import logging

from flask import Blueprint, jsonify, request

from asobot.routes import json_body, membership

logger = logging.getLogger(__name__)
bp = Blueprint('users', __name__, url_prefix='/api')


@bp.route('/register-user', methods=['POST'])
def register_user():
    """Called when the mini-app opens: upsert the user and join them to the group."""
    payload = json_body()
    user = membership().register_user(
        line_user_id=payload.get('lineUserId'),
        display_name=payload.get('displayName'),
        picture_url=payload.get('pictureUrl'),
        group_id=payload.get('groupId'),
        line_group_id=payload.get('lineGroupId'),
    )
    return jsonify({'success': True, 'userId': user.id})


@bp.route('/user-groups', methods=['GET'])
def user_groups():
    """Groups the given LINE user is a member of."""
    user = membership().get_user_by_line_id(request.args.get('lineUserId'))
    return jsonify([
        {'group_id': group.id, 'user_id': user.id, 'group': group.to_dict()}
        for group in membership().user_groups(user.id)
    ])
