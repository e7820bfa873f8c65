"""
Email Marketer
==============

A small multi-tenant email marketing service built on Flask:
- Contacts, lists and reusable templates
- Campaigns sent through Mailgun with per-recipient merge tags
- Delivery tracking reconciled from Mailgun webhooks
- JWT auth and per-resource sharing

Usage:
    from emailmarketer import create_app

    app = create_app()
    app.run()
"""

__version__ = '0.1.0'

import os
import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .core import Config, Database, EmailMarketerError, log_service

logger = logging.getLogger(__name__)


class EmailMarketer:
    """Per-app state, stored as app.extensions['emailmarketer']"""

    def __init__(self, db, transport=None):
        self.db = db
        self.transport = transport


def register_blueprints(app):
    from .modules.auth import auth_bp
    from .modules.campaigns import campaigns_bp
    from .modules.contacts import contacts_bp
    from .modules.dashboard import dashboard_bp
    from .modules.email_templates import templates_bp
    from .modules.lists import lists_bp
    from .modules.settings import settings_bp
    from .modules.sharing import sharing_bp
    from .modules.webhooks import webhooks_bp

    for blueprint in (auth_bp, contacts_bp, lists_bp, templates_bp, campaigns_bp,
                      webhooks_bp, settings_bp, sharing_bp, dashboard_bp):
        app.register_blueprint(blueprint)


def register_error_handlers(app):
    @app.errorhandler(EmailMarketerError)
    def handle_app_error(error):
        return jsonify({'error': error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception(f"Unhandled error: {error}")
        log_service.log_error_with_traceback('app', error)
        return jsonify({'error': 'Internal server error'}), 500


def create_app(config=None):
    """
    Build the Flask app.

    Args:
        config: optional dict of overrides applied on top of Config
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)
        if 'DB_DIR' in config and 'DATABASE_PATH' not in config:
            app.config['DATABASE_PATH'] = os.path.join(config['DB_DIR'], 'email-marketer.db')
    if not app.config.get('JWT_SECRET'):
        app.config['JWT_SECRET'] = app.config['SECRET_KEY']

    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)
    CORS(app)

    db = Database(app.config['DATABASE_PATH'])
    db.init_schema()

    from .modules.email import MailgunTransport
    app.extensions['emailmarketer'] = EmailMarketer(db, MailgunTransport.from_app(app, db))

    register_blueprints(app)
    register_error_handlers(app)

    logger.info(f"Email marketer initialized (database: {app.config['DATABASE_PATH']})")
    return app


__all__ = ['create_app', 'EmailMarketer', '__version__']
