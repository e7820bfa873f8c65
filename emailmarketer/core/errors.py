"""
Custom exceptions for the email marketer.
Each carries the HTTP status the API answers with; the app factory
registers one handler that turns them into {"error": message} responses.
"""


class EmailMarketerError(Exception):
    """Base exception for the email marketer"""
    status_code = 500

    def __init__(self, message="An error occurred"):
        self.message = message
        super().__init__(self.message)


class ValidationError(EmailMarketerError):
    """Missing or invalid input, duplicate unique key, illegal transition"""
    status_code = 400


class AuthenticationError(EmailMarketerError):
    """Missing, invalid or expired credentials"""
    status_code = 401

    def __init__(self, message="Could not validate credentials"):
        super().__init__(message)


class PermissionDeniedError(EmailMarketerError):
    """Authenticated but not allowed"""
    status_code = 403

    def __init__(self, message="You don't have permission to access this resource"):
        super().__init__(message)


class NotFoundError(EmailMarketerError):
    """Resource not found"""
    status_code = 404

    def __init__(self, resource="Resource", resource_id=None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class ConflictError(EmailMarketerError):
    """Request conflicts with the resource's current state"""
    status_code = 409


class TransportError(EmailMarketerError):
    """Outbound email provider call failed"""
    status_code = 502
