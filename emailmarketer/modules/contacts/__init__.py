"""
Contacts Module
===============

Provides:
- Owner-scoped contact CRUD (email, name, ordered tags)
- Search by email/name substring and case-insensitive tag filter
"""

from flask import Blueprint

contacts_bp = Blueprint('contacts', __name__, url_prefix='/api/contacts')

from . import routes
