"""
Delivery Tracker
================

One ``email_tracking`` record per (campaign, recipient) send attempt.

Status writes are non-monotonic: the latest event wins, whatever it is.
Each status owns a fixed timestamp column, which is (re)stamped when that
status is written and never cleared by any other status.
"""

import logging

from ...core.errors import ValidationError

logger = logging.getLogger(__name__)

QUEUED = 'queued'
SENT = 'sent'
DELIVERED = 'delivered'
OPENED = 'opened'
CLICKED = 'clicked'
BOUNCED = 'bounced'
COMPLAINED = 'complained'
UNSUBSCRIBED = 'unsubscribed'
FAILED = 'failed'

STATUSES = (QUEUED, SENT, DELIVERED, OPENED, CLICKED, BOUNCED, COMPLAINED, UNSUBSCRIBED, FAILED)

# Status -> timestamp column it stamps. queued and unsubscribed stamp nothing.
TIMESTAMP_COLUMNS = {
    SENT: 'sent_at',
    DELIVERED: 'delivered_at',
    OPENED: 'opened_at',
    CLICKED: 'clicked_at',
    BOUNCED: 'bounced_at',
    COMPLAINED: 'complained_at',
    FAILED: 'failed_at',
}


def normalize_message_id(message_id):
    """Provider ids arrive both as '<id@domain>' and 'id@domain'"""
    if message_id is None:
        return None
    message_id = str(message_id).strip()
    if message_id.startswith('<') and message_id.endswith('>'):
        message_id = message_id[1:-1].strip()
    return message_id or None


class DeliveryTracker:
    def __init__(self, db):
        self.db = db

    def create(self, campaign_id, contact_id, email):
        """Create a queued record and return its id"""
        with self.db.transaction() as conn:
            cursor = conn.execute("""
                INSERT INTO email_tracking (campaign_id, contact_id, email, status)
                VALUES (?, ?, ?, ?)
            """, (campaign_id, contact_id, email, QUEUED))
            return cursor.lastrowid

    def update_status(self, record_id, status, message_id=None, error=None):
        """Overwrite the status and stamp its timestamp column"""
        if status not in STATUSES:
            raise ValidationError(f"Unknown delivery status: {status}")

        set_clauses = ['status = ?', 'updated_at = CURRENT_TIMESTAMP']
        values = [status]

        column = TIMESTAMP_COLUMNS.get(status)
        if column:
            set_clauses.append(f'{column} = CURRENT_TIMESTAMP')

        message_id = normalize_message_id(message_id)
        if message_id:
            set_clauses.append('message_id = ?')
            values.append(message_id)

        if error is not None:
            set_clauses.append('error_message = ?')
            values.append(str(error))

        values.append(record_id)
        with self.db.transaction() as conn:
            conn.execute(
                f"UPDATE email_tracking SET {', '.join(set_clauses)} WHERE id = ?",
                values
            )

    def get(self, record_id):
        return self.db.fetch_one('SELECT * FROM email_tracking WHERE id = ?', (record_id,))

    def find_by_message_id(self, message_id):
        message_id = normalize_message_id(message_id)
        if not message_id:
            return None
        return self.db.fetch_one(
            'SELECT * FROM email_tracking WHERE message_id = ? ORDER BY id DESC LIMIT 1',
            (message_id,)
        )

    def list_for_campaign(self, campaign_id):
        return self.db.fetch_all(
            'SELECT * FROM email_tracking WHERE campaign_id = ? ORDER BY id',
            (campaign_id,)
        )
