"""Error taxonomy shared by the API client and the command handlers."""
from typing import Optional


class ValidationError(Exception):
    """Local input problem detected before any network call."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class ApiError(Exception):
    """Failure of a schedule service call, with a human-readable message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConnectivityError(ApiError):
    """The service could not be reached (connection refused, timeout)."""


class ServiceError(ApiError):
    """The service answered with a structured error body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StaleReferenceError(ServiceError):
    """The referenced event no longer exists on the service."""

    def __init__(self, event_id: str, message: str = 'Event not found',
                 status_code: Optional[int] = 404):
        super().__init__(message, status_code)
        self.event_id = event_id
