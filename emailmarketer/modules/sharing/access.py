"""
Resource Access
===============

Ownership-or-share access checks over the closed set of shareable
resource kinds. Table names come from a fixed mapping, never from
request input.
"""

from collections import namedtuple
from enum import Enum

from ...core.errors import NotFoundError, PermissionDeniedError, ValidationError


class ResourceKind(str, Enum):
    LIST = 'list'
    TEMPLATE = 'template'
    CAMPAIGN = 'campaign'

    @classmethod
    def parse(cls, value):
        """Accept 'list' as well as the plural table-style 'lists'"""
        if isinstance(value, cls):
            return value
        key = (value or '').strip().lower()
        if key.endswith('s'):
            key = key[:-1]
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(f"Unknown resource type: {value}")


_TABLES = {
    ResourceKind.LIST: 'lists',
    ResourceKind.TEMPLATE: 'templates',
    ResourceKind.CAMPAIGN: 'campaigns',
}

_LABELS = {
    ResourceKind.LIST: 'List',
    ResourceKind.TEMPLATE: 'Template',
    ResourceKind.CAMPAIGN: 'Campaign',
}

PERMISSIONS = ('view', 'edit')

# Required levels, weakest first
VIEW = 'view'
EDIT = 'edit'
OWNER = 'owner'

Access = namedtuple('Access', ['can_access', 'is_owner', 'permission'])

NO_ACCESS = Access(False, False, None)


def table_for(kind):
    return _TABLES[ResourceKind.parse(kind)]


def check_access(db, kind, resource_id, user_id):
    """Return Access(can_access, is_owner, permission) for a user on a resource.

    A missing resource yields NO_ACCESS as well; callers map both to 404.
    """
    kind = ResourceKind.parse(kind)
    row = db.fetch_one(f'SELECT owner_id FROM {_TABLES[kind]} WHERE id = ?', (resource_id,))
    if not row:
        return NO_ACCESS

    if row['owner_id'] == user_id:
        return Access(True, True, OWNER)

    share = db.fetch_one("""
        SELECT permission FROM shares
        WHERE resource_type = ? AND resource_id = ? AND shared_with_id = ?
    """, (kind.value, resource_id, user_id))
    if share:
        return Access(True, False, share['permission'])

    return NO_ACCESS


def require_access(db, kind, resource_id, user_id, level=VIEW):
    """Raise unless the user holds at least `level` on the resource.

    Inaccessible resources are reported as not found so their existence
    is not leaked to other tenants.
    """
    kind = ResourceKind.parse(kind)
    access = check_access(db, kind, resource_id, user_id)
    if not access.can_access:
        raise NotFoundError(_LABELS[kind])

    if level == OWNER and not access.is_owner:
        raise PermissionDeniedError(f"Only the owner can do that to this {kind.value}")
    if level == EDIT and access.permission not in (OWNER, EDIT):
        raise PermissionDeniedError(f"You have view-only access to this {kind.value}")

    return access

