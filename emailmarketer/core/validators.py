import re

from flask import request

from .errors import ValidationError

# Email validation regex: rejects consecutive dots, leading/trailing dots
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_%+-]+(\.[a-zA-Z0-9_%+-]+)*@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$')


def normalize_email(email):
    """Trim and lower-case an email; raises ValidationError for non-strings"""
    if email is None:
        return ''
    if not isinstance(email, str):
        raise ValidationError('Email must be a string')
    return email.strip().lower()


def validate_email(email):
    """Validate email format"""
    return bool(email) and EMAIL_REGEX.match(email) is not None


def parse_int(value, default=None):
    """Parse an optional integer from request data; None/'' give default"""
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def json_body():
    """The request's JSON object ({} when absent); raises ValidationError for other JSON types"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def optional_text(value, field):
    """Pass through None or a string; anything else is a ValidationError"""
    if value is None or isinstance(value, str):
        return value
    raise ValidationError(f"'{field}' must be a string")
