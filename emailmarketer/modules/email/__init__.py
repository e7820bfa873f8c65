"""
Email Module
============

Provides outbound email sending through the Mailgun HTTP API.
"""

from .email_service import MailgunTransport

__all__ = ['MailgunTransport']
