"""
Settings Module
===============

Mailgun credentials and webhook signing key, stored in the database.
Secret values are encrypted at rest and masked when read over the API. Only admins may read or change them.
"""

from flask import Blueprint

settings_bp = Blueprint('settings', __name__, url_prefix='/api/settings')

from . import routes
