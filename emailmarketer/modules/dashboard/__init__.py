"""
Dashboard Module
================

Per-user counts and recent campaigns for the dashboard, the admin view
of persisted application logs, and the unauthenticated health check.
"""

from flask import Blueprint

dashboard_bp = Blueprint('dashboard', __name__)

# Import routes after blueprint is created
from . import routes

__all__ = ['dashboard_bp']
