"""
Email Service Module
====================

Outbound email over the Mailgun HTTP API.

Credentials are read on every send from the settings table (falling back
to MAILGUN_API_KEY / MAILGUN_DOMAIN in app config), so changes made via
POST /api/settings apply without a restart.
"""

import logging
from typing import Iterable, Optional

import requests

from ...core.errors import TransportError
from ..settings.helpers import get_mailgun_api_key, get_mailgun_domain

logger = logging.getLogger(__name__)

# Mailgun accepts at most 3 o:tag values per message
MAX_TAGS = 3


class MailgunTransport:
    """
    Sends one message per call and returns the provider message id.

    Configuration (Flask app.config, via from_app):
        MAILGUN_API_BASE: API root (default: https://api.mailgun.net)
        MAILGUN_TIMEOUT: Request timeout in seconds (default: 30)
        EMAIL_FROM_NAME: Display name for the sender (default: 'Email Marketer')
    """

    def __init__(self, db=None, api_key=None, domain=None,
                 api_base='https://api.mailgun.net', timeout=30.0,
                 from_name='Email Marketer'):
        self.db = db
        self.api_key = api_key
        self.domain = domain
        self.api_base = api_base.rstrip('/')
        self.timeout = timeout
        self.from_name = from_name

    @classmethod
    def from_app(cls, app, db):
        return cls(
            db=db,
            api_base=app.config.get('MAILGUN_API_BASE', 'https://api.mailgun.net'),
            timeout=app.config.get('MAILGUN_TIMEOUT', 30.0),
            from_name=app.config.get('EMAIL_FROM_NAME', 'Email Marketer'),
        )

    def _credentials(self):
        api_key = self.api_key
        domain = self.domain
        if self.db is not None:
            api_key = api_key or get_mailgun_api_key(self.db)
            domain = domain or get_mailgun_domain(self.db)

        if not api_key or not domain:
            raise TransportError('Mailgun is not configured. Set the API key and domain in settings.')
        return api_key, domain

    def send(self, to: str, subject: str, html: str, text: Optional[str] = None,
             tags: Iterable[str] = ()) -> str:
        """
        Send a single email.

        Args:
            to: Recipient email address
            subject: Email subject
            html: HTML body
            text: Plain text body (optional)
            tags: Provider tags; only the first three are sent

        Returns:
            str: Mailgun message id

        Raises:
            TransportError: on missing config, HTTP failure or a response without an id
        """
        api_key, domain = self._credentials()

        data = [
            ('from', f"{self.from_name} <postmaster@{domain}>"),
            ('to', to),
            ('subject', subject),
            ('html', html),
        ]
        if text:
            data.append(('text', text))
        for tag in list(tags or ())[:MAX_TAGS]:
            data.append(('o:tag', tag))

        url = f"{self.api_base}/v3/{domain}/messages"
        try:
            resp = requests.post(url, auth=('api', api_key), data=data, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as e:
            error_detail = ''
            if getattr(e, 'response', None) is not None:
                error_detail = e.response.text
            raise TransportError(f"Mailgun error: {e} {error_detail}".strip())
        except ValueError:
            raise TransportError('Mailgun returned a non-JSON response')

        message_id = body.get('id') if isinstance(body, dict) else None
        if not message_id:
            raise TransportError('Mailgun response did not include a message id')

        logger.info(f"Mailgun accepted message to {to}: {message_id}")
        return message_id
