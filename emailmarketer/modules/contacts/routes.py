from flask import request, jsonify, g

from . import contacts_bp
from ...core import get_db
from ...core.validators import json_body, parse_int
from ..auth import token_required
from .models import (
    create_contact, delete_contact, list_contacts, require_contact, update_contact
)


@contacts_bp.route('', methods=['GET'])
@token_required
def get_contacts():
    """List contacts (search, tag, limit, offset)"""
    contacts = list_contacts(
        get_db(),
        g.user_id,
        search=request.args.get('search') or None,
        tag=request.args.get('tag') or None,
        limit=parse_int(request.args.get('limit'), 100),
        offset=parse_int(request.args.get('offset'), 0),
    )
    return jsonify(contacts)


@contacts_bp.route('/<int:contact_id>', methods=['GET'])
@token_required
def get_contact(contact_id):
    return jsonify(require_contact(get_db(), contact_id, g.user_id))


@contacts_bp.route('', methods=['POST'])
@token_required
def add_contact():
    """Create a contact"""
    data = json_body()
    contact = create_contact(
        get_db(), g.user_id, data.get('email'), data.get('name') or '', data.get('tags') or []
    )
    return jsonify(contact), 201


@contacts_bp.route('/<int:contact_id>', methods=['PUT'])
@token_required
def edit_contact(contact_id):
    data = json_body()
    contact = update_contact(
        get_db(), contact_id, g.user_id,
        email=data.get('email'), name=data.get('name'), tags=data.get('tags')
    )
    return jsonify(contact)


@contacts_bp.route('/<int:contact_id>', methods=['DELETE'])
@token_required
def remove_contact(contact_id):
    delete_contact(get_db(), contact_id, g.user_id)
    return jsonify({'message': 'Contact deleted successfully'})
