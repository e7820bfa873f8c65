"""
Lists Models
============

Named sets of contacts. Membership is unique per (list, contact) and is
removed automatically when either side is deleted.
"""

import logging

from ...core.errors import NotFoundError, ValidationError
from ...core.validators import optional_text
from ..contacts.models import attach_tags
from ..sharing.access import ResourceKind
from ..sharing.models import delete_shares_for_resource

logger = logging.getLogger(__name__)


def get_list(db, list_id):
    return db.fetch_one('SELECT * FROM lists WHERE id = ?', (list_id,))


def get_lists(db, owner_id):
    """Owned lists, newest first, each with stats"""
    lists = db.fetch_all("""
        SELECT * FROM lists WHERE owner_id = ?
        ORDER BY created_at DESC, id DESC
    """, (owner_id,))
    for item in lists:
        item['stats'] = get_list_stats(db, item['id'])
    return lists


def count_lists(db, owner_id):
    row = db.fetch_one('SELECT COUNT(*) AS count FROM lists WHERE owner_id = ?', (owner_id,))
    return row['count']


def create_list(db, owner_id, name, description=''):
    name = (optional_text(name, 'name') or '').strip()
    description = optional_text(description, 'description')
    if not name:
        raise ValidationError('List name is required')

    with db.transaction() as conn:
        cursor = conn.execute(
            'INSERT INTO lists (owner_id, name, description) VALUES (?, ?, ?)',
            (owner_id, name, description or '')
        )
        list_id = cursor.lastrowid

    logger.info(f"Created list {list_id} for user {owner_id}")
    return get_list(db, list_id)


def update_list(db, list_id, name=None, description=None):
    """Partial update of name/description"""
    set_clauses = []
    values = []
    if name is not None:
        name = optional_text(name, 'name').strip()
        if not name:
            raise ValidationError('List name is required')
        set_clauses.append('name = ?')
        values.append(name)
    if description is not None:
        optional_text(description, 'description')
        set_clauses.append('description = ?')
        values.append(description)

    if set_clauses:
        set_clauses.append('updated_at = CURRENT_TIMESTAMP')
        with db.transaction() as conn:
            conn.execute(
                f"UPDATE lists SET {', '.join(set_clauses)} WHERE id = ?",
                values + [list_id]
            )
    return get_list(db, list_id)


def delete_list(db, list_id):
    """Delete a list; memberships cascade, campaigns keep a NULL list_id"""
    with db.transaction() as conn:
        delete_shares_for_resource(db, ResourceKind.LIST, list_id)
        conn.execute('DELETE FROM lists WHERE id = ?', (list_id,))
    logger.info(f"Deleted list {list_id}")


def add_contact_to_list(db, list_id, contact_id):
    """Add a member; adding an existing member is a no-op"""
    with db.transaction() as conn:
        if not conn.execute('SELECT 1 FROM lists WHERE id = ?', (list_id,)).fetchone():
            raise NotFoundError('List')
        if not conn.execute('SELECT 1 FROM contacts WHERE id = ?', (contact_id,)).fetchone():
            raise NotFoundError('Contact')
        conn.execute(
            'INSERT OR IGNORE INTO list_members (list_id, contact_id) VALUES (?, ?)',
            (list_id, contact_id)
        )


def remove_contact_from_list(db, list_id, contact_id):
    with db.transaction() as conn:
        conn.execute(
            'DELETE FROM list_members WHERE list_id = ? AND contact_id = ?',
            (list_id, contact_id)
        )


def get_list_contacts(db, list_id):
    """Current members with their current email, name and tags, in join order"""
    contacts = db.fetch_all("""
        SELECT c.*, m.added_at
        FROM list_members m
        JOIN contacts c ON c.id = m.contact_id
        WHERE m.list_id = ?
        ORDER BY m.added_at, m.rowid
    """, (list_id,))
    return attach_tags(db, contacts)


def get_list_stats(db, list_id):
    row = db.fetch_one(
        'SELECT COUNT(*) AS total FROM list_members WHERE list_id = ?', (list_id,)
    )
    return {'totalContacts': row['total']}
