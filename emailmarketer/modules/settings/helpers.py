"""
Settings Helpers
================

Convenient accessors for provider settings. These fall back to app config
and environment variables when a setting isn't stored.
"""

from .database import get_setting


def get_mailgun_api_key(db):
    return get_setting(db, 'mailgun_api_key')


def get_mailgun_domain(db):
    return get_setting(db, 'mailgun_domain')


def get_webhook_signing_key(db):
    """Mailgun HTTP webhook signing key"""
    return get_setting(db, 'mailgun_webhook_signing_key')
