import logging

from flask import jsonify

from . import settings_bp
from ...core import get_db, db_log
from ...core.errors import NotFoundError
from ...core.validators import json_body
from ..auth import admin_required
from .database import SETTINGS_SCHEMA, delete_setting, get_public_settings, set_setting

logger = logging.getLogger(__name__)


@settings_bp.route('', methods=['GET'])
@admin_required
def get_settings():
    """Current settings with secrets masked"""
    return jsonify(get_public_settings(get_db()))


@settings_bp.route('', methods=['POST'])
@admin_required
def save_settings():
    """Store any non-empty known settings; missing or empty fields are left alone"""
    data = json_body()
    db = get_db()

    updated = []
    for key in SETTINGS_SCHEMA:
        value = data.get(key)
        if value:
            set_setting(db, key, str(value).strip())
            updated.append(key)

    if updated:
        logger.info(f"Settings updated: {', '.join(updated)}")
        db_log('info', 'settings', 'Settings updated', {'keys': updated})

    return jsonify({'success': True})


@settings_bp.route('/<key>', methods=['DELETE'])
@admin_required
def clear_setting(key):
    """Remove a stored value so the environment default applies again"""
    if key not in SETTINGS_SCHEMA:
        raise NotFoundError('Setting')
    removed = delete_setting(get_db(), key)
    if removed:
        logger.info(f"Setting cleared: {key}")
        db_log('info', 'settings', 'Setting cleared', {'key': key})
    return jsonify({'success': True, 'removed': removed})
