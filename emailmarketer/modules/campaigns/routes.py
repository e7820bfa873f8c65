"""
Campaigns Routes
================

CRUD, send trigger, statistics and delivery records for campaigns.
All routes require a bearer token.
"""

import logging

from flask import current_app, jsonify, g

from . import campaigns_bp
from ...core import get_db
from ...core.validators import json_body, parse_int
from ..auth import token_required
from ..email_templates.models import get_template
from ..sharing.access import EDIT, OWNER, ResourceKind, require_access
from ..tracking import DeliveryTracker, get_campaign_stats
from .models import (
    create_campaign, delete_campaign, get_campaign, get_campaigns, update_campaign
)
from .sender import CampaignSender

logger = logging.getLogger(__name__)


def _check_references(db, data):
    """Referenced template/list must be readable by the caller"""
    template = None
    template_id = parse_int(data.get('templateId') or data.get('template_id'))
    if template_id:
        require_access(db, ResourceKind.TEMPLATE, template_id, g.user_id)
        template = get_template(db, template_id)

    list_id = parse_int(data.get('listId') or data.get('list_id'))
    if list_id:
        require_access(db, ResourceKind.LIST, list_id, g.user_id)

    return template


def get_sender(db):
    """Build a sender over the app's transport"""
    return CampaignSender(
        db,
        current_app.extensions['emailmarketer'].transport,
        mark_failed=current_app.config.get('TRACKING_MARK_FAILED', True),
    )


@campaigns_bp.route('', methods=['GET'])
@token_required
def all_campaigns():
    return jsonify(get_campaigns(get_db(), g.user_id))


@campaigns_bp.route('/<int:campaign_id>', methods=['GET'])
@token_required
def campaign_detail(campaign_id):
    """Campaign with stats"""
    db = get_db()
    access = require_access(db, ResourceKind.CAMPAIGN, campaign_id, g.user_id)
    campaign = get_campaign(db, campaign_id)
    campaign['stats'] = get_campaign_stats(db, campaign_id)
    campaign['permission'] = access.permission
    return jsonify(campaign)


@campaigns_bp.route('', methods=['POST'])
@token_required
def new_campaign():
    """Create a draft campaign, copying content from templateId if given"""
    db = get_db()
    data = json_body()
    template = _check_references(db, data)
    campaign = create_campaign(db, g.user_id, data, template=template)
    return jsonify(campaign), 201


@campaigns_bp.route('/<int:campaign_id>', methods=['PUT'])
@token_required
def edit_campaign(campaign_id):
    db = get_db()
    require_access(db, ResourceKind.CAMPAIGN, campaign_id, g.user_id, level=EDIT)
    data = json_body()
    _check_references(db, data)
    return jsonify(update_campaign(db, campaign_id, data))


@campaigns_bp.route('/<int:campaign_id>', methods=['DELETE'])
@token_required
def remove_campaign(campaign_id):
    db = get_db()
    require_access(db, ResourceKind.CAMPAIGN, campaign_id, g.user_id, level=OWNER)
    delete_campaign(db, campaign_id)
    return jsonify({'message': 'Campaign deleted successfully'})


@campaigns_bp.route('/<int:campaign_id>/send', methods=['POST'])
@token_required
def send_campaign(campaign_id):
    """Send a draft campaign to its list"""
    db = get_db()
    require_access(db, ResourceKind.CAMPAIGN, campaign_id, g.user_id, level=EDIT)
    result = get_sender(db).send(campaign_id)
    return jsonify(result)


@campaigns_bp.route('/<int:campaign_id>/stats', methods=['GET'])
@token_required
def campaign_stats(campaign_id):
    db = get_db()
    require_access(db, ResourceKind.CAMPAIGN, campaign_id, g.user_id)
    return jsonify(get_campaign_stats(db, campaign_id))


@campaigns_bp.route('/<int:campaign_id>/tracking', methods=['GET'])
@token_required
def campaign_tracking(campaign_id):
    """Per-recipient delivery records"""
    db = get_db()
    require_access(db, ResourceKind.CAMPAIGN, campaign_id, g.user_id)
    return jsonify(DeliveryTracker(db).list_for_campaign(campaign_id))
