"""Pytest fixtures for Flask app testing.

Provides the session-wide `app`, a fresh schema per test, a `client`, and a
fake LINE client that records pushed messages instead of calling the
Messaging API. The fixtures use an in-memory SQLite database; rate limiting
and the in-process scheduler are disabled.
"""
from __future__ import annotations

from datetime import date

import pytest

from asobot import cache, create_app, db
from asobot.line.client import LineAPIError
from asobot.models import Group
from asobot.services.wish_service import WishService


class FakeLineClient:
    """Stand-in for LineMessagingClient that keeps every push in memory."""

    def __init__(self):
        self.pushed = []
        self.fail = False

    def push_text(self, to, text):
        if self.fail:
            raise LineAPIError("LINE API error 500: simulated outage", status_code=500)
        self.pushed.append((to, text))

    def reset(self):
        self.pushed.clear()
        self.fail = False


###############################################################################
# Core application & database fixtures
###############################################################################

@pytest.fixture(scope="session")
def line_client():
    return FakeLineClient()


@pytest.fixture(scope="session")  # one app instance for the entire test session
def app(line_client):
    """Create and configure a new app instance for this test session."""
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "testing-secret-key",
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "LIFF_ID": "test-liff",
            "CRON_SECRET": "test-secret",
            "CACHE_TYPE": "SimpleCache",
            # Disable rate limiting noise in tests
            "RATELIMIT_ENABLED": False,
            # Avoid APScheduler side-effects in tests
            "SCHEDULER_ENABLED": False,
        },
        line_client=line_client,
    )
    yield app

    # Teardown – drop all tables after the test session ends
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(autouse=True)
def app_ctx(app, line_client):
    """Run every test inside an app context against empty tables."""
    with app.app_context():
        db.drop_all()
        db.create_all()
        cache.clear()
        line_client.reset()
        yield
        db.session.remove()


@pytest.fixture
def client(app):
    """Return a test client."""
    return app.test_client()


@pytest.fixture
def notifier(app):
    return app.extensions['notifier']


@pytest.fixture
def membership(app):
    return app.extensions['membership']


@pytest.fixture
def wish_service(notifier):
    return WishService(notifier)


###############################################################################
# Helper fixtures – a group with three members
###############################################################################

@pytest.fixture
def group():
    group = Group(line_group_id="C-test-group", name="Weekend Crew")
    db.session.add(group)
    db.session.commit()
    return group


@pytest.fixture
def users(membership, group):
    """Alice (wish creator), Bob and Carol, all registered into `group`."""
    return [
        membership.register_user(f"U-{name.lower()}", display_name=name, group_id=group.id)
        for name in ("Alice", "Bob", "Carol")
    ]


@pytest.fixture
def alice(users):
    return users[0]


@pytest.fixture
def bob(users):
    return users[1]


@pytest.fixture
def carol(users):
    return users[2]


@pytest.fixture
def open_wish(wish_service, group, alice):
    """An undated open wish created by Alice."""
    return wish_service.create_wish(group, alice, title="Beach Trip", description="Somewhere warm")


@pytest.fixture
def dated_wish(wish_service, group, alice):
    """An open wish that already has a date."""
    return wish_service.create_wish(group, alice, title="Hot Pot Night", start_date=date(2030, 3, 1))
