from flask import jsonify, g

from . import templates_bp
from ...core import get_db
from ...core.validators import json_body
from ..auth import token_required
from ..sharing.access import EDIT, OWNER, ResourceKind, require_access
from .models import create_template, delete_template, get_template, get_templates, update_template


@templates_bp.route('', methods=['GET'])
@token_required
def all_templates():
    return jsonify(get_templates(get_db(), g.user_id))


@templates_bp.route('/<int:template_id>', methods=['GET'])
@token_required
def template_detail(template_id):
    db = get_db()
    access = require_access(db, ResourceKind.TEMPLATE, template_id, g.user_id)
    template = get_template(db, template_id)
    template['permission'] = access.permission
    return jsonify(template)


@templates_bp.route('', methods=['POST'])
@token_required
def new_template():
    """Create a template (camelCase or snake_case fields)"""
    template = create_template(get_db(), g.user_id, json_body())
    return jsonify(template), 201


@templates_bp.route('/<int:template_id>', methods=['PUT'])
@token_required
def edit_template(template_id):
    db = get_db()
    require_access(db, ResourceKind.TEMPLATE, template_id, g.user_id, level=EDIT)
    return jsonify(update_template(db, template_id, json_body()))


@templates_bp.route('/<int:template_id>', methods=['DELETE'])
@token_required
def remove_template(template_id):
    db = get_db()
    require_access(db, ResourceKind.TEMPLATE, template_id, g.user_id, level=OWNER)
    delete_template(db, template_id)
    return jsonify({'message': 'Template deleted successfully'})
