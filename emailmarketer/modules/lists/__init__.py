"""
Lists Module
============

Provides:
- List CRUD with member counts
- Adding and removing contacts (membership is a set)
"""

from flask import Blueprint

lists_bp = Blueprint('lists', __name__, url_prefix='/api/lists')

from . import routes
