"""
Sharing Module
==============

Lets owners share lists, templates and campaigns with other users.

Provides:
- POST /api/shares -- share a resource by the recipient's email
- GET /api/shares/<type>/<id> -- shares of a resource (owner only)
- DELETE /api/shares/<id> -- revoke a share (owner only)
- GET /api/shared-with-me -- resources other users shared with me
"""

from flask import Blueprint

sharing_bp = Blueprint('sharing', __name__, url_prefix='/api')

from . import routes
from .access import ResourceKind, check_access, require_access

__all__ = ['sharing_bp', 'ResourceKind', 'check_access', 'require_access']
