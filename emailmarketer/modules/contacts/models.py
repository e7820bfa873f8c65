"""
Contacts Models
===============

Contacts belong to exactly one owner. Tags live in ``contact_tags`` with an
explicit position (so ``{{tagN}}`` is stable) and a lower-cased key used for
case-insensitive membership.
"""

import sqlite3
import logging

from ...core.errors import NotFoundError, ValidationError
from ...core.validators import normalize_email, optional_text, validate_email

logger = logging.getLogger(__name__)


def clean_tags(tags):
    """Trim tags, drop empties and keep the first of any case-insensitive duplicate"""
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(',')
    elif not isinstance(tags, (list, tuple)):
        raise ValidationError('Tags must be a list or a comma-separated string')

    cleaned = []
    seen = set()
    for tag in tags:
        tag = str(tag).strip() if tag is not None else ''
        if not tag or tag.lower() in seen:
            continue
        seen.add(tag.lower())
        cleaned.append(tag)
    return cleaned


def clean_name(name):
    return (optional_text(name, 'name') or '').strip()


def _write_tags(conn, contact_id, tags):
    conn.execute('DELETE FROM contact_tags WHERE contact_id = ?', (contact_id,))
    conn.executemany(
        'INSERT INTO contact_tags (contact_id, position, tag, tag_key) VALUES (?, ?, ?, ?)',
        [(contact_id, position, tag, tag.lower()) for position, tag in enumerate(tags)]
    )


def attach_tags(db, contacts):
    """Fill in the ordered ``tags`` list on each contact dict"""
    if not contacts:
        return contacts

    by_id = {contact['id']: contact for contact in contacts}
    for contact in contacts:
        contact['tags'] = []

    placeholders = ','.join('?' * len(by_id))
    rows = db.fetch_all(f"""
        SELECT contact_id, tag FROM contact_tags
        WHERE contact_id IN ({placeholders})
        ORDER BY contact_id, position
    """, tuple(by_id))
    for row in rows:
        by_id[row['contact_id']]['tags'].append(row['tag'])
    return contacts


def get_contact(db, contact_id, owner_id=None):
    """Get a contact with its tags; scoped to owner when owner_id is given"""
    if owner_id is None:
        contact = db.fetch_one('SELECT * FROM contacts WHERE id = ?', (contact_id,))
    else:
        contact = db.fetch_one(
            'SELECT * FROM contacts WHERE id = ? AND owner_id = ?', (contact_id, owner_id)
        )
    if contact:
        attach_tags(db, [contact])
    return contact


def require_contact(db, contact_id, owner_id):
    contact = get_contact(db, contact_id, owner_id)
    if not contact:
        raise NotFoundError('Contact')
    return contact


def list_contacts(db, owner_id, search=None, tag=None, limit=100, offset=0):
    """List an owner's contacts, newest first"""
    clauses = ['c.owner_id = ?']
    params = [owner_id]

    if search:
        clauses.append('(c.email LIKE ? OR c.name LIKE ?)')
        pattern = f'%{search}%'
        params.extend([pattern, pattern])

    if tag:
        clauses.append(
            'EXISTS (SELECT 1 FROM contact_tags t WHERE t.contact_id = c.id AND t.tag_key = ?)'
        )
        params.append(tag.strip().lower())

    params.extend([limit, offset])
    contacts = db.fetch_all(f"""
        SELECT c.* FROM contacts c
        WHERE {' AND '.join(clauses)}
        ORDER BY c.created_at DESC, c.id DESC
        LIMIT ? OFFSET ?
    """, tuple(params))
    return attach_tags(db, contacts)


def count_contacts(db, owner_id):
    row = db.fetch_one('SELECT COUNT(*) AS count FROM contacts WHERE owner_id = ?', (owner_id,))
    return row['count']


def create_contact(db, owner_id, email, name='', tags=()):
    """Create a contact; raises ValidationError on bad or duplicate email"""
    email = normalize_email(email)
    if not email:
        raise ValidationError('Email is required')
    if not validate_email(email):
        raise ValidationError('Invalid email address')
    name = clean_name(name)
    tags = clean_tags(tags)

    try:
        with db.transaction() as conn:
            cursor = conn.execute(
                'INSERT INTO contacts (owner_id, email, name) VALUES (?, ?, ?)',
                (owner_id, email, name)
            )
            contact_id = cursor.lastrowid
            _write_tags(conn, contact_id, tags)
    except sqlite3.IntegrityError:
        raise ValidationError('Contact with this email already exists')

    logger.info(f"Created contact {contact_id} ({email}) for user {owner_id}")
    return get_contact(db, contact_id)


def update_contact(db, contact_id, owner_id, email=None, name=None, tags=None):
    """Partial update; fields left as None are unchanged"""
    require_contact(db, contact_id, owner_id)

    set_clauses = []
    values = []
    if email is not None:
        email = normalize_email(email)
        if not validate_email(email):
            raise ValidationError('Invalid email address')
        set_clauses.append('email = ?')
        values.append(email)
    if name is not None:
        set_clauses.append('name = ?')
        values.append(clean_name(name))
    if tags is not None:
        tags = clean_tags(tags)

    try:
        with db.transaction() as conn:
            if set_clauses:
                set_clauses.append('updated_at = CURRENT_TIMESTAMP')
                conn.execute(
                    f"UPDATE contacts SET {', '.join(set_clauses)} WHERE id = ?",
                    values + [contact_id]
                )
            if tags is not None:
                _write_tags(conn, contact_id, tags)
                conn.execute(
                    'UPDATE contacts SET updated_at = CURRENT_TIMESTAMP WHERE id = ?',
                    (contact_id,)
                )
    except sqlite3.IntegrityError:
        raise ValidationError('Contact with this email already exists')

    return get_contact(db, contact_id)


def delete_contact(db, contact_id, owner_id):
    """Delete a contact; list memberships and tags cascade"""
    require_contact(db, contact_id, owner_id)
    with db.transaction() as conn:
        conn.execute('DELETE FROM contacts WHERE id = ?', (contact_id,))
    logger.info(f"Deleted contact {contact_id}")
    return True
