"""
Mailgun webhook payload parsing.

Two shapes are accepted, as form fields or JSON:

Legacy (flat)::

    message-id, event, severity, timestamp, token, signature

Current (nested)::

    {"signature": {"timestamp", "token", "signature"},
     "event-data": {"event", "severity",
                    "message": {"headers": {"message-id"}}}}
"""

from collections import namedtuple

from ...core.errors import ValidationError
from ..tracking.models import BOUNCED, CLICKED, COMPLAINED, DELIVERED, OPENED, UNSUBSCRIBED

WebhookPayload = namedtuple(
    'WebhookPayload', ['message_id', 'event', 'severity', 'timestamp', 'token', 'signature']
)

# Mailgun event name -> tracking status
EVENT_STATUS = {
    'delivered': DELIVERED,
    'opened': OPENED,
    'clicked': CLICKED,
    'bounced': BOUNCED,
    'complained': COMPLAINED,
    'unsubscribed': UNSUBSCRIBED,
    'dropped': BOUNCED,
}


def _mapping(value, field):
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(f"'{field}' must be an object")
    return value


def _text(value, field):
    if value is None or isinstance(value, str):
        return value
    raise ValidationError(f"'{field}' must be a string")


def _scalar(value, field):
    """Signature parts arrive as strings, though JSON senders may use numbers"""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValidationError(f"'{field}' must be a string")


def parse_payload(data):
    """
    Normalize a webhook body into a WebhookPayload.

    Raises ValidationError when the body or one of its fields has the
    wrong type.
    """
    data = _mapping(data, 'body')
    signature = data.get('signature')

    if isinstance(signature, dict) or 'event-data' in data:
        signature = _mapping(signature, 'signature')
        event_data = _mapping(data.get('event-data'), 'event-data')
        message = _mapping(event_data.get('message'), 'event-data.message')
        headers = _mapping(message.get('headers'), 'event-data.message.headers')
        return WebhookPayload(
            message_id=_text(headers.get('message-id'), 'message-id'),
            event=_text(event_data.get('event'), 'event'),
            severity=_text(event_data.get('severity'), 'severity'),
            timestamp=_scalar(signature.get('timestamp'), 'timestamp'),
            token=_scalar(signature.get('token'), 'token'),
            signature=_scalar(signature.get('signature'), 'signature'),
        )

    return WebhookPayload(
        message_id=_text(data.get('message-id') or data.get('Message-Id'), 'message-id'),
        event=_text(data.get('event'), 'event'),
        severity=_text(data.get('severity'), 'severity'),
        timestamp=_scalar(data.get('timestamp'), 'timestamp'),
        token=_scalar(data.get('token'), 'token'),
        signature=_scalar(signature, 'signature'),
    )



def status_for_event(event, severity=None):
    """Tracking status for a Mailgun event, or None if the event is ignored"""
    event = (event or '').strip().lower()
    if event == 'failed':
        return BOUNCED if (severity or '').lower() == 'permanent' else None
    return EVENT_STATUS.get(event)
