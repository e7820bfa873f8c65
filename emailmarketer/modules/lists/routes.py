from flask import jsonify, g

from . import lists_bp
from ...core import get_db
from ...core.errors import ValidationError
from ...core.validators import json_body, parse_int
from ..auth import token_required
from ..contacts.models import require_contact
from ..sharing.access import EDIT, OWNER, ResourceKind, require_access
from .models import (
    add_contact_to_list, create_list, delete_list, get_list, get_list_contacts,
    get_list_stats, get_lists, remove_contact_from_list, update_list
)


@lists_bp.route('', methods=['GET'])
@token_required
def all_lists():
    """Owned lists with stats"""
    return jsonify(get_lists(get_db(), g.user_id))


@lists_bp.route('/<int:list_id>', methods=['GET'])
@token_required
def list_detail(list_id):
    """List with its contacts and stats"""
    db = get_db()
    access = require_access(db, ResourceKind.LIST, list_id, g.user_id)
    item = get_list(db, list_id)
    item['contacts'] = get_list_contacts(db, list_id)
    item['stats'] = get_list_stats(db, list_id)
    item['permission'] = access.permission
    return jsonify(item)


@lists_bp.route('', methods=['POST'])
@token_required
def new_list():
    data = json_body()
    item = create_list(get_db(), g.user_id, data.get('name'), data.get('description') or '')
    return jsonify(item), 201


@lists_bp.route('/<int:list_id>', methods=['PUT'])
@token_required
def edit_list(list_id):
    db = get_db()
    require_access(db, ResourceKind.LIST, list_id, g.user_id, level=EDIT)
    data = json_body()
    return jsonify(update_list(db, list_id, data.get('name'), data.get('description')))


@lists_bp.route('/<int:list_id>', methods=['DELETE'])
@token_required
def remove_list(list_id):
    db = get_db()
    require_access(db, ResourceKind.LIST, list_id, g.user_id, level=OWNER)
    delete_list(db, list_id)
    return jsonify({'message': 'List deleted successfully'})


@lists_bp.route('/<int:list_id>/contacts', methods=['POST'])
@token_required
def add_list_contact(list_id):
    """Add one of the caller's contacts to a list"""
    db = get_db()
    require_access(db, ResourceKind.LIST, list_id, g.user_id, level=EDIT)

    data = json_body()
    contact_id = parse_int(data.get('contactId') or data.get('contact_id'))
    if not contact_id:
        raise ValidationError('Contact ID is required')

    require_contact(db, contact_id, g.user_id)
    add_contact_to_list(db, list_id, contact_id)
    return jsonify({'message': 'Contact added to list', 'stats': get_list_stats(db, list_id)})


@lists_bp.route('/<int:list_id>/contacts/<int:contact_id>', methods=['DELETE'])
@token_required
def remove_list_contact(list_id, contact_id):
    db = get_db()
    require_access(db, ResourceKind.LIST, list_id, g.user_id, level=EDIT)
    remove_contact_from_list(db, list_id, contact_id)
    return jsonify({'message': 'Contact removed from list', 'stats': get_list_stats(db, list_id)})
