"""
Email Marketer Core
===================

Configuration, storage, errors and logging shared by every module.
"""

from .config import Config
from .database import Database, get_db
from .errors import (
    EmailMarketerError, ValidationError, AuthenticationError, PermissionDeniedError,
    NotFoundError, ConflictError, TransportError
)
from .logging_service import LoggingService, log_service, db_log

__all__ = [
    'Config', 'Database', 'get_db', 'LoggingService', 'log_service', 'db_log',
    'EmailMarketerError', 'ValidationError', 'AuthenticationError', 'PermissionDeniedError',
    'NotFoundError', 'ConflictError', 'TransportError',
]
