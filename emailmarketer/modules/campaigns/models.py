"""
Campaigns Models
================

Database operations for campaigns.

A campaign snapshots its template's content at creation time, so later
template edits don't change it. Status only moves forward:

    draft -> sending -> sent
"""

import logging

from ...core.errors import NotFoundError, ValidationError
from ..email_templates.models import dump_blocks, load_blocks, normalize_fields
from ..sharing.access import ResourceKind
from ..sharing.models import delete_shares_for_resource
from ..tracking import get_campaign_stats

logger = logging.getLogger(__name__)

DRAFT = 'draft'
SENDING = 'sending'
SENT = 'sent'

CAMPAIGN_COLUMNS = (
    'name', 'template_id', 'list_id', 'subject', 'html_content', 'plain_text', 'editor_blocks'
)

CAMPAIGN_ALIASES = {
    'templateId': 'template_id',
    'listId': 'list_id',
    'htmlContent': 'html_content',
    'plainText': 'plain_text',
    'editorBlocks': 'editor_blocks',
}


def _fields(data):
    return normalize_fields(data, columns=CAMPAIGN_COLUMNS, aliases=CAMPAIGN_ALIASES)


def get_campaign(db, campaign_id):
    return load_blocks(db.fetch_one('SELECT * FROM campaigns WHERE id = ?', (campaign_id,)))


def require_campaign(db, campaign_id):
    campaign = get_campaign(db, campaign_id)
    if not campaign:
        raise NotFoundError('Campaign')
    return campaign


def get_campaigns(db, owner_id, limit=None):
    """Owned campaigns, newest first, each with stats"""
    sql = 'SELECT * FROM campaigns WHERE owner_id = ? ORDER BY created_at DESC, id DESC'
    params = [owner_id]
    if limit:
        sql += ' LIMIT ?'
        params.append(limit)

    campaigns = [load_blocks(row) for row in db.fetch_all(sql, tuple(params))]
    for campaign in campaigns:
        campaign['stats'] = get_campaign_stats(db, campaign['id'])
    return campaigns


def count_campaigns(db, owner_id):
    row = db.fetch_one('SELECT COUNT(*) AS count FROM campaigns WHERE owner_id = ?', (owner_id,))
    return row['count']


def total_emails_sent(db, owner_id):
    row = db.fetch_one(
        'SELECT COALESCE(SUM(sent_count), 0) AS total FROM campaigns WHERE owner_id = ?',
        (owner_id,)
    )
    return row['total']


def create_campaign(db, owner_id, data, template=None):
    """
    Create a draft campaign.

    When ``template`` (a template row) is given, its subject and bodies are
    copied; fields present in ``data`` override the copy.
    """
    fields = _fields(data)
    if not fields.get('name'):
        raise ValidationError('Campaign name is required')

    content = {'subject': None, 'html_content': None, 'plain_text': '', 'editor_blocks': None}
    if template:
        content.update({
            'subject': template.get('subject'),
            'html_content': template.get('html_content'),
            'plain_text': template.get('plain_text') or '',
            'editor_blocks': template.get('editor_blocks'),
        })
    for key in content:
        if fields.get(key) is not None:
            content[key] = fields[key]

    if not content['subject'] or not content['html_content']:
        raise ValidationError('Subject and HTML content are required')

    with db.transaction() as conn:
        cursor = conn.execute("""
            INSERT INTO campaigns
                (owner_id, name, template_id, list_id, subject, html_content,
                 plain_text, editor_blocks, status)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            owner_id,
            fields['name'],
            template['id'] if template else fields.get('template_id'),
            fields.get('list_id'),
            content['subject'],
            content['html_content'],
            content['plain_text'] or '',
            dump_blocks(content['editor_blocks']),
            DRAFT
        ))
        campaign_id = cursor.lastrowid

    logger.info(f"Created campaign {campaign_id} for user {owner_id}")
    return get_campaign(db, campaign_id)


def update_campaign(db, campaign_id, data):
    """Partial update of a draft campaign"""
    campaign = require_campaign(db, campaign_id)
    if campaign['status'] != DRAFT:
        raise ValidationError('Only draft campaigns can be edited')

    fields = _fields(data)
    for required in ('name', 'subject', 'html_content'):
        if required in fields and not fields[required]:
            raise ValidationError(f"{required.replace('_', ' ').capitalize()} cannot be empty")
    if 'editor_blocks' in fields:
        fields['editor_blocks'] = dump_blocks(fields['editor_blocks'])

    if fields:
        set_clauses = [f'{column} = ?' for column in fields]
        set_clauses.append('updated_at = CURRENT_TIMESTAMP')
        with db.transaction() as conn:
            cursor = conn.execute(
                f"UPDATE campaigns SET {', '.join(set_clauses)} WHERE id = ? AND status = ?",
                list(fields.values()) + [campaign_id, DRAFT]
            )
            if cursor.rowcount == 0:
                raise ValidationError('Only draft campaigns can be edited')
    return get_campaign(db, campaign_id)


def delete_campaign(db, campaign_id):
    """Delete a campaign; its tracking records cascade"""
    with db.transaction() as conn:
        delete_shares_for_resource(db, ResourceKind.CAMPAIGN, campaign_id)
        conn.execute('DELETE FROM campaigns WHERE id = ?', (campaign_id,))
    logger.info(f"Deleted campaign {campaign_id}")


def claim_for_sending(db, campaign_id):
    """Atomically move draft -> sending. Returns False if the campaign wasn't a draft."""
    with db.transaction() as conn:
        cursor = conn.execute("""
            UPDATE campaigns SET status = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ? AND status = ?
        """, (SENDING, campaign_id, DRAFT))
        return cursor.rowcount == 1


def mark_sent(db, campaign_id, sent_count):
    """Finish a send: status sent, sent_at stamped, sent_count incremented"""
    with db.transaction() as conn:
        conn.execute("""
            UPDATE campaigns
            SET status = ?, sent_at = CURRENT_TIMESTAMP,
                sent_count = sent_count + ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        """, (SENT, sent_count, campaign_id))

