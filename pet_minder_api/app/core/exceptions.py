"""
Typed errors raised by the service layer.

Each error carries the HTTP status it maps to.  Services raise these
exceptions and the application translates them into responses with a
single exception handler (see ``main.create_app``), so route handlers
do not need their own ``try``/``except`` blocks for the common cases.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for errors reported back to the API client."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """The requested record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(ServiceError):
    """The caller is authenticated but may not touch the record."""

    status_code = status.HTTP_403_FORBIDDEN


class InvalidRequestError(ServiceError):
    """The request is well formed but cannot be honoured as given."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidScheduleError(ServiceError):
    """A reminder schedule is inconsistent or uses an unknown pattern."""

    status_code = status.HTTP_400_BAD_REQUEST
