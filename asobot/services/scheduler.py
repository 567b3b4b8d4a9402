# asobot/services/scheduler.py
from flask import current_app

from asobot.services.scanner import ReminderScanner

SCAN_JOB_ID = 'daily_reminder_scan'


def run_scan(now=None):
    """Run the reminder/suggestion sweep with the app's collaborators."""
    scanner = ReminderScanner(
        notifier=current_app.extensions['notifier'],
        membership=current_app.extensions['membership'],
        now=now,
    )
    return scanner.run()


def register_daily_scan(app, scheduler):
    """Register the daily sweep as an APScheduler cron job (once per process)."""

    def scheduled_scan_with_context():
        with app.app_context():
            try:
                report = run_scan()
                app.logger.info("Daily reminder scan: %s", report.to_dict()['results'])
            except Exception as exc:
                app.logger.error(f"Daily reminder scan failed: {exc}", exc_info=True)
                raise  # Re-raise so the job listener logs the failure

    if scheduler.get_job(SCAN_JOB_ID):
        app.logger.info("Daily reminder scan job already exists, skipping registration.")
        return

    scheduler.add_job(
        id=SCAN_JOB_ID,
        func=scheduled_scan_with_context,
        trigger='cron',
        hour=app.config.get('SCAN_HOUR', 0),
        minute=app.config.get('SCAN_MINUTE', 0),
        misfire_grace_time=86_400,  # retry for up to 24 h
    )
    app.logger.info("Scheduled %s job via APScheduler.", SCAN_JOB_ID)
