"""
Settings Database with Encryption
=================================

Stores provider settings in the ``settings`` table. Secret values are
encrypted at rest with Fernet, keyed from the app's SECRET_KEY.
"""

import os
import base64
import hashlib
import logging

from cryptography.fernet import Fernet, InvalidToken
from flask import current_app

logger = logging.getLogger(__name__)

MASK = '****'

# Setting key -> the config/env key it falls back to, and whether it is secret
SETTINGS_SCHEMA = {
    'mailgun_api_key': {'config_key': 'MAILGUN_API_KEY', 'is_secret': True},
    'mailgun_domain': {'config_key': 'MAILGUN_DOMAIN', 'is_secret': False},
    'mailgun_webhook_signing_key': {'config_key': 'MAILGUN_WEBHOOK_SIGNING_KEY', 'is_secret': True},
}


def get_encryption_key():
    """
    Derive encryption key from Flask SECRET_KEY.
    Returns a Fernet-compatible key (32 bytes, base64 encoded).
    """
    try:
        secret = current_app.config.get('SECRET_KEY') or 'default-insecure-key'
    except RuntimeError:
        # Outside of app context
        secret = os.environ.get('SECRET_KEY', 'default-insecure-key')

    key_bytes = hashlib.sha256(secret.encode()).digest()
    return base64.urlsafe_b64encode(key_bytes)


def encrypt_value(value):
    if not value:
        return value
    return Fernet(get_encryption_key()).encrypt(value.encode()).decode()


def decrypt_value(encrypted_value):
    """Decrypt a value; a value that is not a valid token is returned as-is"""
    if not encrypted_value:
        return encrypted_value
    try:
        return Fernet(get_encryption_key()).decrypt(encrypted_value.encode()).decode()
    except InvalidToken:
        logger.warning("Stored secret could not be decrypted; SECRET_KEY may have changed")
        return encrypted_value


def _config_fallback(key, default=None):
    schema = SETTINGS_SCHEMA.get(key)
    if not schema:
        return default
    try:
        value = current_app.config.get(schema['config_key'])
    except RuntimeError:
        value = os.environ.get(schema['config_key'])
    return value or default


def get_setting(db, key, default=None, decrypt=True):
    """
    Get a setting value by key.
    Falls back to app config / environment if not stored.
    """
    row = db.fetch_one('SELECT value, is_secret FROM settings WHERE key = ?', (key,))
    if row and row['value']:
        value = row['value']
        if row['is_secret'] and decrypt:
            value = decrypt_value(value)
        return value
    return _config_fallback(key, default)


def set_setting(db, key, value, is_secret=None):
    """Set a setting value; secrets are encrypted before they are stored"""
    if is_secret is None:
        is_secret = SETTINGS_SCHEMA.get(key, {}).get('is_secret', False)
    stored_value = encrypt_value(value) if is_secret and value else value

    with db.transaction() as conn:
        conn.execute("""
            INSERT INTO settings (key, value, is_secret, updated_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                is_secret = excluded.is_secret,
                updated_at = excluded.updated_at
        """, (key, stored_value, 1 if is_secret else 0))
    return True


def delete_setting(db, key):
    with db.transaction() as conn:
        cursor = conn.execute('DELETE FROM settings WHERE key = ?', (key,))
        return cursor.rowcount > 0


def get_public_settings(db):
    """Known settings for API clients; secrets are reported as '****' when set"""
    settings = {}
    for key, schema in SETTINGS_SCHEMA.items():
        value = get_setting(db, key)
        if schema['is_secret']:
            settings[key] = MASK if value else None
        else:
            settings[key] = value
    return settings
