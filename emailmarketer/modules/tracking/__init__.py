"""
Tracking Module
===============

Per-recipient delivery records and campaign statistics. Records are written
by the campaign sender and updated by the Mailgun webhook.
"""

from .models import DeliveryTracker, STATUSES, normalize_message_id
from .stats import get_campaign_stats

__all__ = ['DeliveryTracker', 'STATUSES', 'normalize_message_id', 'get_campaign_stats']
