from datetime import datetime, timedelta, timezone
from functools import wraps

import bcrypt
import jwt
from flask import current_app, g, request

from ...core import get_db
from ...core.errors import AuthenticationError, PermissionDeniedError


def hash_password(password):
    """Hash a password with bcrypt"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password, password_hash):
    """Verify a password against its bcrypt hash"""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def validate_password_strength(password):
    """Validate password meets the minimum length"""
    min_length = current_app.config.get('MIN_PASSWORD_LENGTH', 6)
    return bool(password) and len(password) >= min_length


def create_token(user):
    """Issue a signed JWT for a user row"""
    now = datetime.now(timezone.utc)
    payload = {
        'userId': user['id'],
        'email': user['email'],
        'iat': now,
        'exp': now + timedelta(hours=current_app.config.get('JWT_EXPIRES_HOURS', 168)),
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET'],
        algorithm=current_app.config.get('JWT_ALGORITHM', 'HS256')
    )


def decode_token(token):
    """Decode a JWT; raises AuthenticationError if invalid or expired"""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET'],
            algorithms=[current_app.config.get('JWT_ALGORITHM', 'HS256')]
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError('Invalid or expired token.')
    except jwt.InvalidTokenError:
        raise AuthenticationError('Invalid or expired token.')


def _bearer_token():
    auth_header = request.headers.get('Authorization', '')
    parts = auth_header.split(' ')
    if len(parts) == 2 and parts[0].lower() == 'bearer':
        return parts[1]
    return None


def token_required(f):
    """
    Decorator to require a valid bearer token for an active user.
    Sets g.user, g.user_id and g.user_email.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from .database import UserDatabase

        token = _bearer_token()
        if not token:
            raise AuthenticationError('Access denied. No token provided.')

        payload = decode_token(token)
        user = UserDatabase(get_db()).get_user_by_id(payload.get('userId'))
        if not user:
            raise AuthenticationError('Invalid or expired token.')
        if not user['active']:
            raise AuthenticationError('Account is deactivated')

        g.user = user
        g.user_id = user['id']
        g.user_email = user['email']
        return f(*args, **kwargs)

    return decorated_function


def admin_required(f):
    """Decorator to require an admin user (implies token_required)"""
    @wraps(f)
    @token_required
    def decorated_function(*args, **kwargs):
        if g.user.get('role') != 'admin':
            raise PermissionDeniedError('Admin access required')
        return f(*args, **kwargs)

    return decorated_function


def role_for_email(email):
    """'admin' for addresses listed in ADMIN_EMAILS, else 'user'"""
    admins = current_app.config.get('ADMIN_EMAILS') or ()
    if isinstance(admins, str):
        admins = [a.strip().lower() for a in admins.split(',') if a.strip()]
    return 'admin' if email in admins else 'user'
