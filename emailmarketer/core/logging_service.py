"""
Centralized logging service for the email marketer.
Provides structured logging with database storage alongside the stdout logger.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta

from flask import current_app, has_app_context, has_request_context, request, g

logger = logging.getLogger(__name__)


class LoggingService:
    """Persists notable application events to the app_logs table"""

    def __init__(self, db=None):
        self.db = db

    def _get_db(self):
        if self.db is not None:
            return self.db
        if has_app_context():
            return current_app.extensions['emailmarketer'].db
        return None

    @staticmethod
    def _get_request_context():
        """Extract request path and authenticated user, if any"""
        if not has_request_context():
            return None, None
        return request.path, getattr(g, 'user_id', None)

    def log(self, level, source, message, details=None, user_id=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (campaigns, webhooks, auth, etc.)
            message (str): Main log message
            details (str/dict): Additional details (JSON-encoded if dict)
            user_id (int): Optional user identifier
        """
        db = self._get_db()
        if db is None:
            logger.log(getattr(logging, level.upper(), logging.INFO), f"[{source}] {message}")
            return

        request_path, request_user = self._get_request_context()
        if user_id is None:
            user_id = request_user

        if isinstance(details, dict):
            details = json.dumps(details, default=str)

        try:
            with db.transaction() as conn:
                conn.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level.upper(), source, message,
                    details, request_path, user_id
                ))
        except Exception as e:
            # Fallback to console logging if database fails
            logger.error(f"Logging service error: {e}")
            logger.log(getattr(logging, level.upper(), logging.INFO), f"[{source}] {message} {details or ''}")

    def info(self, source, message, details=None, user_id=None):
        self.log('INFO', source, message, details, user_id)

    def warning(self, source, message, details=None, user_id=None):
        self.log('WARNING', source, message, details, user_id)

    def error(self, source, message, details=None, user_id=None):
        self.log('ERROR', source, message, details, user_id)

    def log_error_with_traceback(self, source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        self.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    def recent(self, limit=100, level=None, source=None):
        """Most recent log entries, newest first"""
        db = self._get_db()
        sql = 'SELECT * FROM app_logs WHERE 1=1'
        params = []
        if level:
            sql += ' AND level = ?'
            params.append(level.upper())
        if source:
            sql += ' AND source = ?'
            params.append(source)
        sql += ' ORDER BY id DESC LIMIT ?'
        params.append(limit)
        return db.fetch_all(sql, params)

    def cleanup_old_logs(self, days_to_keep=30):
        """Delete log entries older than days_to_keep; returns the count removed"""
        cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()
        with self._get_db().transaction() as conn:
            cursor = conn.execute('DELETE FROM app_logs WHERE timestamp < ?', (cutoff_iso,))
            deleted_count = cursor.rowcount

        self.info('system', f"Cleaned up {deleted_count} old log entries")
        return deleted_count


# Convenience instance bound to whichever app is current
log_service = LoggingService()


def db_log(level, source, message, details=None, user_id=None):
    """Log to the persistent app_logs table"""
    log_service.log(level, source, message, details, user_id)
