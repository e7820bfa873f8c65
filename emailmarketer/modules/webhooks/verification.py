"""
Webhook Verification
====================

Mailgun signs each webhook with HMAC-SHA256 over ``timestamp + token``
using the account's HTTP webhook signing key.

The verifier in use is chosen per request by ``build_verifier``:
- a signing key is configured: MailgunSignatureVerifier
- no key, WEBHOOK_ALLOW_UNSIGNED set: UnsignedWebhookVerifier (accepts all)
- otherwise: RejectingWebhookVerifier (rejects all)
"""

import hashlib
import hmac
import logging
import time

from ...core.errors import AuthenticationError
from ..settings.helpers import get_webhook_signing_key

logger = logging.getLogger(__name__)


class WebhookVerifier:
    """Raises AuthenticationError when a webhook payload isn't authentic"""

    def verify(self, payload):
        raise NotImplementedError


class MailgunSignatureVerifier(WebhookVerifier):
    def __init__(self, signing_key, max_age=900, clock=time.time):
        self.signing_key = signing_key
        self.max_age = max_age
        self.clock = clock

    def sign(self, timestamp, token):
        return hmac.new(
            self.signing_key.encode('utf-8'),
            f"{timestamp}{token}".encode('utf-8'),
            hashlib.sha256
        ).hexdigest()

    def verify(self, payload):
        if not payload.timestamp or not payload.token or not payload.signature:
            raise AuthenticationError('Missing webhook signature')

        try:
            timestamp = int(float(payload.timestamp))
        except (TypeError, ValueError, OverflowError):
            raise AuthenticationError('Invalid webhook timestamp')

        if self.max_age and abs(self.clock() - timestamp) > self.max_age:
            raise AuthenticationError('Stale webhook timestamp')

        expected = self.sign(payload.timestamp, payload.token)
        if not hmac.compare_digest(expected.encode('utf-8'), str(payload.signature).encode('utf-8')):
            raise AuthenticationError('Invalid webhook signature')


class UnsignedWebhookVerifier(WebhookVerifier):
    def verify(self, payload):
        logger.warning("Accepting unsigned webhook (WEBHOOK_ALLOW_UNSIGNED is set)")


class RejectingWebhookVerifier(WebhookVerifier):
    def verify(self, payload):
        raise AuthenticationError('Webhook signing key is not configured')


def build_verifier(app, db):
    signing_key = get_webhook_signing_key(db)
    if signing_key:
        return MailgunSignatureVerifier(
            signing_key, max_age=app.config.get('WEBHOOK_MAX_AGE_SECONDS', 900)
        )
    if app.config.get('WEBHOOK_ALLOW_UNSIGNED'):
        return UnsignedWebhookVerifier()
    return RejectingWebhookVerifier()
