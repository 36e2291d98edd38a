"""Error types raised by the frontend client"""
from rest_framework.exceptions import ValidationError


class ClientError(Exception):
    """Base class for client errors."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self):
        return self.message


class APIError(ClientError):
    """Non-2xx response. `message` is the server-supplied reason when there is one."""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @property
    def is_unauthorized(self):
        return self.status_code == 401

    @property
    def is_not_found(self):
        return self.status_code == 404


class TransportError(ClientError):
    """The request never produced an HTTP response (DNS, refused, timeout...)."""

    def __init__(self, cause):
        super().__init__(f"Network error: {cause}", cause)


class SessionError(ClientError):
    pass


class NotAuthenticated(SessionError):
    def __init__(self, message='Not logged in'):
        super().__init__(message)


def _first_validation_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            message = _first_validation_message(value)
            if message:
                return message
        return None
    if isinstance(detail, (list, tuple)):
        for value in detail:
            message = _first_validation_message(value)
            if message:
                return message
        return None
    return str(detail) if detail else None


def user_message(exc, default='Something went wrong'):
    """Turn a client or validation error into the string shown to the user"""
    if isinstance(exc, ValidationError):
        return _first_validation_message(exc.detail) or default
    if isinstance(exc, ClientError):
        return exc.message or default
    return str(exc) or default
