"""
Campaigns Module
================

Provides:
- Campaign CRUD with content copied from a template
- Sending to every member of the campaign's list via Mailgun
- Per-recipient merge tags ({{email}}, {{name}}, {{tagN}}, {{tag:value}})
- Delivery statistics and tracking records
"""

from flask import Blueprint

campaigns_bp = Blueprint('campaigns', __name__, url_prefix='/api/campaigns')

from . import routes
from .merge_tags import merge_tags
from .sender import CampaignSender

__all__ = ['campaigns_bp', 'merge_tags', 'CampaignSender']
