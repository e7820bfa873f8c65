"""
Email Templates Module
======================

Reusable subject/HTML/plain-text bodies. Editor blocks are stored and
returned as opaque JSON.
"""

from flask import Blueprint

templates_bp = Blueprint('email_templates', __name__, url_prefix='/api/templates')

from . import routes
