"""
Webhooks Module
===============

Receives Mailgun delivery events (delivered, opened, clicked, bounced,
complained, unsubscribed) and applies them to tracking records by
provider message id.
"""

from flask import Blueprint

webhooks_bp = Blueprint('webhooks', __name__, url_prefix='/api/webhooks')

from . import routes
