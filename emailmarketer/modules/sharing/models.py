"""
Shares Models
=============

Per-resource ACL entries: (resource kind, resource id) shared by its owner
with another user at 'view' or 'edit' permission.
"""

import logging

from ...core.errors import NotFoundError, ValidationError
from .access import PERMISSIONS, ResourceKind, table_for

logger = logging.getLogger(__name__)


def create_share(db, kind, resource_id, owner_id, shared_with_id, permission='view'):
    """Create or replace a share and return the resource's current shares"""
    kind = ResourceKind.parse(kind)
    permission = (permission or 'view').lower()
    if permission not in PERMISSIONS:
        raise ValidationError(f"Permission must be one of: {', '.join(PERMISSIONS)}")
    if shared_with_id == owner_id:
        raise ValidationError('Cannot share with yourself')

    with db.transaction() as conn:
        conn.execute("""
            INSERT INTO shares (resource_type, resource_id, owner_id, shared_with_id, permission)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(resource_type, resource_id, shared_with_id) DO UPDATE SET
                permission = excluded.permission
        """, (kind.value, resource_id, owner_id, shared_with_id, permission))

    logger.info(f"Shared {kind.value} {resource_id} with user {shared_with_id} ({permission})")
    return get_shares_for_resource(db, kind, resource_id, owner_id)


def get_share(db, share_id):
    return db.fetch_one('SELECT * FROM shares WHERE id = ?', (share_id,))


def get_shares_for_resource(db, kind, resource_id, owner_id):
    kind = ResourceKind.parse(kind)
    return db.fetch_all("""
        SELECT s.*, u.email, u.name
        FROM shares s
        JOIN users u ON s.shared_with_id = u.id
        WHERE s.resource_type = ? AND s.resource_id = ? AND s.owner_id = ?
        ORDER BY s.id
    """, (kind.value, resource_id, owner_id))


def get_shared_resources_for_user(db, user_id, kind):
    """Resources of one kind shared with a user, joined with the resource row"""
    kind = ResourceKind.parse(kind)
    table = table_for(kind)
    return db.fetch_all(f"""
        SELECT r.*, s.id AS share_id, s.permission,
               u.email AS owner_email, u.name AS owner_name
        FROM shares s
        JOIN {table} r ON r.id = s.resource_id
        JOIN users u ON s.owner_id = u.id
        WHERE s.shared_with_id = ? AND s.resource_type = ?
        ORDER BY s.created_at DESC, s.id DESC
    """, (user_id, kind.value))


def delete_share(db, share_id, owner_id):
    """Delete a share; only the resource owner may do so"""
    share = get_share(db, share_id)
    if not share or share['owner_id'] != owner_id:
        raise NotFoundError('Share')

    with db.transaction() as conn:
        conn.execute('DELETE FROM shares WHERE id = ?', (share_id,))
    return True


def delete_shares_for_resource(db, kind, resource_id):
    """Called when a resource is deleted"""
    kind = ResourceKind.parse(kind)
    with db.transaction() as conn:
        conn.execute(
            'DELETE FROM shares WHERE resource_type = ? AND resource_id = ?',
            (kind.value, resource_id)
        )
