import logging

from flask import jsonify, g

from . import auth_bp
from ...core import get_db, db_log
from ...core.errors import AuthenticationError, NotFoundError, ValidationError
from ...core.validators import json_body, normalize_email, validate_email
from .database import UserDatabase, public_user
from .utils import create_token, role_for_email, token_required, validate_password_strength

logger = logging.getLogger(__name__)


def _require_strings(data, *fields):
    for field in fields:
        if data.get(field) is not None and not isinstance(data[field], str):
            raise ValidationError(f"'{field}' must be a string")


@auth_bp.route('/register', methods=['POST'])
def register():
    """Register a new user and return a token"""
    data = json_body()
    _require_strings(data, 'email', 'password', 'name')
    email = normalize_email(data.get('email'))
    password = data.get('password') or ''
    name = (data.get('name') or '').strip()

    if not email or not password:
        raise ValidationError('Email and password are required')

    if not validate_email(email):
        raise ValidationError('Invalid email address')

    if not validate_password_strength(password):
        raise ValidationError('Password must be at least 6 characters')

    users = UserDatabase(get_db())
    if users.get_user_by_email(email):
        raise ValidationError('User already exists with this email')

    user = users.create_user(email, password, name, role=role_for_email(email))
    logger.info(f"User registered: {email}")
    db_log('info', 'auth', 'User registered', {'email': email}, user_id=user['id'])

    return jsonify({
        'message': 'User registered successfully',
        'token': create_token(user),
        'user': public_user(user)
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Exchange email/password for a token"""
    data = json_body()
    _require_strings(data, 'email', 'password')
    email = normalize_email(data.get('email'))
    password = data.get('password') or ''

    if not email or not password:
        raise ValidationError('Email and password are required')

    users = UserDatabase(get_db())
    user = users.verify_user_credentials(email, password)
    if not user:
        db_log('warning', 'auth', 'Failed login attempt', {'email': email})
        raise AuthenticationError('Invalid email or password')

    if not user['active']:
        raise AuthenticationError('Account is deactivated')

    return jsonify({
        'message': 'Login successful',
        'token': create_token(user),
        'user': public_user(user)
    })


@auth_bp.route('/me', methods=['GET'])
@token_required
def me():
    """Get current user"""
    user = UserDatabase(get_db()).get_user_by_id(g.user_id)
    if not user:
        raise NotFoundError('User')
    return jsonify(public_user(user))
