from flask import jsonify, g, request

from . import dashboard_bp
from ...core import get_db, LoggingService
from ...core.validators import json_body, parse_int
from ..auth import admin_required, token_required
from ..campaigns.models import count_campaigns, get_campaigns, total_emails_sent
from ..contacts.models import count_contacts
from ..lists.models import count_lists

RECENT_CAMPAIGNS = 10
MAX_LOG_ENTRIES = 500


@dashboard_bp.route('/api/stats', methods=['GET'])
@token_required
def stats():
    """Dashboard counts for the current user"""
    db = get_db()
    return jsonify({
        'contacts': count_contacts(db, g.user_id),
        'lists': count_lists(db, g.user_id),
        'campaigns': count_campaigns(db, g.user_id),
        'totalEmailsSent': total_emails_sent(db, g.user_id),
        'recentCampaigns': get_campaigns(db, g.user_id, limit=RECENT_CAMPAIGNS),
    })


@dashboard_bp.route('/api/logs', methods=['GET'])
@admin_required
def logs():
    """Recent application log entries, filterable by level and source"""
    limit = min(max(parse_int(request.args.get('limit'), 100), 1), MAX_LOG_ENTRIES)
    entries = LoggingService(get_db()).recent(
        limit=limit,
        level=request.args.get('level'),
        source=request.args.get('source'),
    )
    return jsonify(entries)


@dashboard_bp.route('/api/logs/cleanup', methods=['POST'])
@admin_required
def cleanup_logs():
    data = json_body()
    days = parse_int(data.get('days'), 30)
    if days < 1:
        days = 1
    deleted = LoggingService(get_db()).cleanup_old_logs(days_to_keep=days)
    return jsonify({'deleted': deleted})


@dashboard_bp.route('/health', methods=['GET'])
def health():
    from ... import __version__
    return jsonify({'status': 'ok', 'version': __version__})
