import os
from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Base configuration for the email marketer.
    Every value can be overridden from the environment (or a .env file),
    and again per-app through create_app(config={...}).
    """
    # Flask settings
    SECRET_KEY = os.getenv('SECRET_KEY') or os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')
    JSON_SORT_KEYS = False

    # Auth
    # Unset means "derive from the app's final SECRET_KEY" (see create_app)
    JWT_SECRET = os.getenv('JWT_SECRET')
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES_HOURS = int(os.getenv('JWT_EXPIRES_HOURS', '168'))
    MIN_PASSWORD_LENGTH = 6
    # Comma-separated emails that register as admins (admins manage global settings)
    ADMIN_EMAILS = [e.strip().lower() for e in os.getenv('ADMIN_EMAILS', '').split(',') if e.strip()]

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'data'))
    DATABASE_PATH = os.getenv('DATABASE_PATH', os.path.join(DB_DIR, 'email-marketer.db'))

    # Mailgun settings (runtime values in the settings table take precedence)
    MAILGUN_API_KEY = os.getenv('MAILGUN_API_KEY')
    MAILGUN_DOMAIN = os.getenv('MAILGUN_DOMAIN')
    MAILGUN_API_BASE = os.getenv('MAILGUN_API_BASE', 'https://api.mailgun.net')
    MAILGUN_TIMEOUT = float(os.getenv('MAILGUN_TIMEOUT', '30'))
    MAILGUN_WEBHOOK_SIGNING_KEY = os.getenv('MAILGUN_WEBHOOK_SIGNING_KEY')
    EMAIL_FROM_NAME = os.getenv('EMAIL_FROM_NAME', 'Email Marketer')

    # Webhooks
    WEBHOOK_ALLOW_UNSIGNED = _env_bool('WEBHOOK_ALLOW_UNSIGNED', False)
    WEBHOOK_MAX_AGE_SECONDS = int(os.getenv('WEBHOOK_MAX_AGE_SECONDS', '900'))

    # Delivery tracking: mark records 'failed' when the transport raises.
    # When False a failed record stays 'queued'.
    TRACKING_MARK_FAILED = _env_bool('TRACKING_MARK_FAILED', True)

    # Port for local server
    PORT = int(os.getenv('PORT', '5000'))
