# asobot/__init__.py
"""Flask application factory and extension initialization."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_apscheduler import APScheduler
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from apscheduler.events import EVENT_JOB_EXECUTED, EVENT_JOB_ERROR

from config import get_config

# ---------------------------------------------------------------------------
# Extension instances (singletons that will be imported elsewhere)
# ---------------------------------------------------------------------------

db = SQLAlchemy()
migrate = Migrate()
cache = Cache()
scheduler = APScheduler()
limiter = Limiter(key_func=get_remote_address, default_limits=["2000 per day", "300 per hour"])

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def create_app(test_config: dict | None = None, line_client=None):
    """Application factory used by run.py and WSGI servers.

    *line_client* replaces the LINE push client, which tests use to capture
    outgoing messages instead of calling the Messaging API.
    """
    load_dotenv()

    app = Flask(__name__)

    # Config
    app.config.from_object(get_config())
    if test_config is not None:
        app.config.update(test_config)

    # Logging defaults
    app.logger.setLevel(logging.DEBUG if app.debug else logging.INFO)

    # ---------------------------------------------------------------------
    # Extension init
    # ---------------------------------------------------------------------
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') and ':memory:' not in app.config['SQLALCHEMY_DATABASE_URI']:
        os.makedirs(os.path.join(app.root_path, os.pardir, 'instance'), exist_ok=True)

    db.init_app(app)
    migrate.init_app(app, db)
    cache.init_app(app)
    limiter.init_app(app)

    # ---------------------------------------------------------------------
    # Collaborators: constructed once here, handed to services explicitly
    # ---------------------------------------------------------------------
    from asobot.line.client import LineMessagingClient
    from asobot.services.membership_service import MembershipService
    from asobot.services.notification_service import NotificationService

    if line_client is None:
        line_client = LineMessagingClient(
            access_token=app.config['LINE_CHANNEL_ACCESS_TOKEN'],
            api_url=app.config['LINE_API_URL'],
            timeout=app.config['LINE_API_TIMEOUT'],
        )
    membership = MembershipService(cache_timeout=app.config.get('MEMBERS_CACHE_TIMEOUT', 60))
    app.extensions['line_client'] = line_client
    app.extensions['membership'] = membership
    app.extensions['notifier'] = NotificationService(line_client, liff_id=app.config.get('LIFF_ID', ''))

    # ---------------------------------------------------------------------
    # Scheduler
    # ---------------------------------------------------------------------
    app.config.setdefault("SCHEDULER_JOB_DEFAULTS", {
        "misfire_grace_time": 86_400,  # 24 h tolerance
        "coalesce": True,
        "max_instances": 1
    })

    if app.config.get('SCHEDULER_ENABLED'):
        scheduler.init_app(app)

        def _log_scheduler_event(job_event):  # noqa: ANN001
            """Write a concise log line for every APScheduler job completion/error."""
            if getattr(job_event, "exception", False):
                app.logger.error("Scheduler job %s failed: %s", job_event.job_id, job_event.exception)
            else:
                app.logger.info("Scheduler job %s executed successfully.", job_event.job_id)

        scheduler.add_listener(_log_scheduler_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

        from asobot.services.scheduler import register_daily_scan
        register_daily_scan(app, scheduler)

        if not scheduler.running:
            scheduler.start()

    # ---------------------------------------------------------------------
    # Database bootstrap – inside app context
    # ---------------------------------------------------------------------
    with app.app_context():
        from asobot import models  # noqa: F401  register tables

        db.create_all()

    # ---------------------------------------------------------------------
    # Blueprints
    # ---------------------------------------------------------------------
    from asobot.routes.users import bp as users_bp
    from asobot.routes.groups import bp as groups_bp
    from asobot.routes.wishes import bp as wishes_bp
    from asobot.routes.cron import bp as cron_bp

    app.register_blueprint(users_bp)
    app.register_blueprint(groups_bp)
    app.register_blueprint(wishes_bp)
    app.register_blueprint(cron_bp)

    # ---------------------------------------------------------------------
    # Error handlers & health
    # ---------------------------------------------------------------------
    from asobot.errors import AsobotError

    @app.errorhandler(AsobotError)
    def _asobot_error(e):
        if e.status_code >= 500:
            logger.error("%s on %s: %s", type(e).__name__, request.path, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def _404(e):  # noqa: D401
        return jsonify({"error": "Not Found", "message": str(e)}), 404

    @app.errorhandler(500)
    def _500(e):  # noqa: D401
        logger.error("Unhandled 500: %s", e, exc_info=True)
        return jsonify({"error": "Internal Server Error"}), 500

    @app.route("/health")
    def _health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}, 200

    return app
