"""
Auth Module

Provides user authentication for the JSON API:
- Email/password registration and login
- JWT bearer tokens (token_required decorator)
- Current-user lookup
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

from . import routes
from .database import UserDatabase, public_user
from .utils import admin_required, token_required

__all__ = ['auth_bp', 'UserDatabase', 'public_user', 'token_required', 'admin_required']
