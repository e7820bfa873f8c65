import logging

from flask import jsonify, g

from . import sharing_bp
from ...core import get_db, db_log
from ...core.errors import NotFoundError, ValidationError
from ...core.validators import json_body, normalize_email, optional_text, parse_int
from ..auth import UserDatabase, token_required
from .access import OWNER, ResourceKind, require_access
from .models import (
    create_share, delete_share, get_shared_resources_for_user, get_shares_for_resource
)

logger = logging.getLogger(__name__)


@sharing_bp.route('/shares', methods=['POST'])
@token_required
def share_resource():
    """Share a resource with another user"""
    data = json_body()
    resource_type = optional_text(data.get('resourceType') or data.get('resource_type'), 'resourceType')
    resource_id = parse_int(data.get('resourceId') or data.get('resource_id'))
    shared_with_email = normalize_email(data.get('sharedWithEmail') or data.get('shared_with_email'))
    permission = optional_text(data.get('permission'), 'permission') or 'view'

    if not resource_type or not resource_id or not shared_with_email:
        raise ValidationError('Resource type, resource ID, and shared with email are required')

    db = get_db()
    kind = ResourceKind.parse(resource_type)
    require_access(db, kind, resource_id, g.user_id, level=OWNER)

    target_user = UserDatabase(db).get_user_by_email(shared_with_email)
    if not target_user:
        raise NotFoundError('User')

    shares = create_share(db, kind, resource_id, g.user_id, target_user['id'], permission)
    db_log('info', 'sharing', f'Shared {kind.value} {resource_id}', {
        'with': shared_with_email, 'permission': permission
    })
    return jsonify({'success': True, 'shares': shares})


@sharing_bp.route('/shares/<resource_type>/<int:resource_id>', methods=['GET'])
@token_required
def resource_shares(resource_type, resource_id):
    """Get shares for a resource (owner only)"""
    db = get_db()
    kind = ResourceKind.parse(resource_type)
    require_access(db, kind, resource_id, g.user_id, level=OWNER)
    return jsonify(get_shares_for_resource(db, kind, resource_id, g.user_id))


@sharing_bp.route('/shares/<int:share_id>', methods=['DELETE'])
@token_required
def revoke_share(share_id):
    """Delete a share"""
    delete_share(get_db(), share_id, g.user_id)
    return jsonify({'success': True})


@sharing_bp.route('/shared-with-me', methods=['GET'])
@token_required
def shared_with_me():
    """Get resources shared with me"""
    db = get_db()
    return jsonify({
        'lists': get_shared_resources_for_user(db, g.user_id, ResourceKind.LIST),
        'templates': get_shared_resources_for_user(db, g.user_id, ResourceKind.TEMPLATE),
        'campaigns': get_shared_resources_for_user(db, g.user_id, ResourceKind.CAMPAIGN),
    })
