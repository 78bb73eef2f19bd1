"""
Failure taxonomy shared by the service layer and the HTTP boundary.

Every service operation raises a subclass of ``ServiceError``.  The
exception carries the HTTP status code the boundary answers with, so
``main.py`` can turn any of them into ``{"error": message}`` without
knowing which operation raised it.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for classified service failures."""

    status_code: int = 500
    default_message: str = "Internal server error."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ServiceError):
    status_code = 400
    default_message = "Bad Request"


class Unauthorized(ServiceError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ServiceError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class Conflict(ServiceError):
    status_code = 409
    default_message = "Conflict"


class UnprocessableIdentifier(ServiceError):
    """Malformed identifier, or any unclassified failure of an operation."""

    status_code = 422
    default_message = "_id length is incorrect"


class InternalError(ServiceError):
    status_code = 500
    default_message = "Internal server error."
