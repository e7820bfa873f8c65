"""
Campaign Sender
===============

Sends a draft campaign to every current member of its list, one recipient
at a time, recording a delivery-tracking record per recipient.

A transport failure for one recipient is tallied and reported; it never
aborts the run. Nothing is retried.

If the process dies or storage fails after the campaign is claimed, the
campaign stays in 'sending': further sends answer 409 and edits are
refused. Recover by checking its tracking records, then resetting it by hand::

    UPDATE campaigns SET status = 'draft' WHERE id = ? AND status = 'sending'

Resending after a reset creates new tracking records and may send duplicate
emails to contacts that already received it.
"""

import logging

from ...core.errors import ConflictError, ValidationError
from ...core.logging_service import db_log
from ..lists.models import get_list, get_list_contacts
from ..tracking.models import DeliveryTracker, FAILED, SENT as RECORD_SENT
from .merge_tags import merge_tags
from .models import SENDING, SENT, claim_for_sending, mark_sent, require_campaign

logger = logging.getLogger(__name__)


class CampaignSender:
    """
    Args:
        db: Database
        transport: object with send(to, subject, html, text, tags) -> message id
        tracker: DeliveryTracker (defaults to one over ``db``)
        mark_failed: mark records 'failed' on transport errors; when False
            they stay 'queued'
    """

    def __init__(self, db, transport, tracker=None, mark_failed=True):
        self.db = db
        self.transport = transport
        self.tracker = tracker or DeliveryTracker(db)
        self.mark_failed = mark_failed

    def _recipients(self, campaign):
        if not campaign.get('list_id') or not get_list(self.db, campaign['list_id']):
            return []
        return get_list_contacts(self.db, campaign['list_id'])

    def send(self, campaign_id):
        """Send a campaign. Returns {success, campaign_id, sent, failed, errors}."""
        campaign = require_campaign(self.db, campaign_id)

        if campaign['status'] == SENT:
            raise ValidationError('Campaign has already been sent')
        if campaign['status'] == SENDING:
            raise ConflictError('Campaign is already being sent')

        contacts = self._recipients(campaign)
        if not contacts:
            raise ValidationError('No contacts in the selected list')

        if not claim_for_sending(self.db, campaign_id):
            raise ConflictError('Campaign is already being sent')

        logger.info(f"Sending campaign {campaign_id} to {len(contacts)} contacts")
        db_log('info', 'campaigns', 'Campaign send started', {
            'campaign_id': campaign_id, 'recipients': len(contacts)
        })

        sent = 0
        failed = 0
        errors = []
        for contact in contacts:
            record_id = self.tracker.create(campaign_id, contact['id'], contact['email'])
            try:
                message_id = self.transport.send(
                    contact['email'],
                    merge_tags(campaign['subject'], contact),
                    merge_tags(campaign['html_content'], contact),
                    merge_tags(campaign['plain_text'], contact),
                    tags=[campaign['name']],
                )
            except Exception as e:
                failed += 1
                errors.append({'email': contact['email'], 'error': str(e)})
                logger.error(f"Error sending campaign {campaign_id} to {contact['email']}: {e}")
                db_log('error', 'campaigns', 'Recipient send failed', {
                    'campaign_id': campaign_id, 'email': contact['email'], 'error': str(e)
                })
                if self.mark_failed:
                    self.tracker.update_status(record_id, FAILED, error=str(e))
                continue

            self.tracker.update_status(record_id, RECORD_SENT, message_id=message_id)
            sent += 1

        mark_sent(self.db, campaign_id, sent)

        logger.info(f"Campaign {campaign_id} sent: {sent} succeeded, {failed} failed")
        db_log('info', 'campaigns', 'Campaign send finished', {
            'campaign_id': campaign_id, 'sent': sent, 'failed': failed
        })

        return {
            'success': True,
            'campaign_id': campaign_id,
            'sent': sent,
            'failed': failed,
            'errors': errors,
        }
