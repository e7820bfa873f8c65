import logging

from flask import current_app, request, jsonify

from . import webhooks_bp
from ...core import get_db, db_log
from ...core.errors import AuthenticationError, ValidationError
from ..tracking import DeliveryTracker
from .events import parse_payload, status_for_event
from .verification import build_verifier

logger = logging.getLogger(__name__)


def _request_data():
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


@webhooks_bp.route('/mailgun', methods=['POST'])
def mailgun_webhook():
    """Apply a Mailgun delivery event to its tracking record"""
    db = get_db()
    payload = parse_payload(_request_data())

    try:
        build_verifier(current_app, db).verify(payload)
    except AuthenticationError as e:
        logger.warning(f"Rejected Mailgun webhook: {e.message}")
        db_log('warning', 'webhooks', 'Webhook signature rejected', {
            'reason': e.message, 'remote_addr': request.remote_addr
        })
        raise

    if not payload.message_id and not payload.event:
        raise ValidationError('Missing message-id or event')

    status = status_for_event(payload.event, payload.severity)
    if status is None:
        logger.info(f"Ignoring Mailgun event '{payload.event}' for {payload.message_id}")
        return jsonify({'received': True})

    tracker = DeliveryTracker(db)
    record = tracker.find_by_message_id(payload.message_id)
    if not record:
        logger.info(f"Webhook for unknown message id: {payload.message_id}")
        db_log('info', 'webhooks', 'Webhook for unknown message id', {
            'message_id': payload.message_id, 'event': payload.event
        })
        return jsonify({'received': True})

    tracker.update_status(record['id'], status, message_id=payload.message_id)
    logger.info(f"Tracking record {record['id']} -> {status}")
    return jsonify({'received': True})
