# asobot/routes/__init__.py
"""Helpers shared by the JSON API blueprints."""

from datetime import date, datetime, time

from flask import current_app, request

from asobot.errors import ValidationError


def json_body():
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("JSON object expected")
    return payload


def parse_bool(value, field, default=None):
    if value is None and default is not None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be true or false")
    return value


def parse_date(value, field):
    if value in (None, ''):
        return None
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a YYYY-MM-DD date")


def parse_time(value, field):
    if value in (None, ''):
        return None
    try:
        return time.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a HH:MM time")


def parse_datetime(value, field):
    if value in (None, ''):
        return None
    try:
        # Accept a trailing "Z" as sent by JavaScript's toISOString()
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except (AttributeError, TypeError, ValueError):
        raise ValidationError(f"{field} must be an ISO 8601 timestamp")


def notifier():
    return current_app.extensions['notifier']


def membership():
    return current_app.extensions['membership']
