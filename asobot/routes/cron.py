# asobot/routes/cron.py
import hmac
import logging

from flask import Blueprint, current_app, jsonify, request

from asobot import limiter
from asobot.services.scheduler import run_scan

logger = logging.getLogger(__name__)
bp = Blueprint('cron', __name__, url_prefix='/api')


def _authorized():
    secret = current_app.config.get('CRON_SECRET')
    if not secret:
        return True
    supplied = request.headers.get('Authorization', '')
    # compare_digest only accepts ASCII str, so compare the UTF-8 bytes
    return hmac.compare_digest(supplied.encode('utf-8'), f"Bearer {secret}".encode('utf-8'))


@bp.route('/cron', methods=['GET'])
@limiter.limit("10/minute")
def cron():
    """External trigger for the daily reminder and suggestion sweep."""
    if not _authorized():
        logger.warning("Rejected cron call from %s", request.remote_addr)
        return jsonify({'error': 'Unauthorized'}), 401

    try:
        report = run_scan()
    except Exception as e:
        logger.error(f"Cron scan failed: {e}", exc_info=True)
        return jsonify({'error': 'Internal Server Error'}), 500

    logger.info("Cron scan finished: %s", report.to_dict()['results'])
    return jsonify(report.to_dict())
