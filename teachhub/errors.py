"""
Domain Errors

Every public service operation either returns its result or raises exactly one
of these. The API layer renders them as:

    {"error": {"code": ..., "message": ..., "details": ...}}
"""
from typing import Any, Optional


class TeachHubError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class NotFoundError(TeachHubError):
    """Referenced batch/section/lesson/note/enrollment does not exist"""

    status_code = 404
    code = "NOT_FOUND"


class UnauthenticatedError(TeachHubError):
    """No valid identity presented"""

    status_code = 401
    code = "AUTH_001"


class InvalidTokenError(UnauthenticatedError):
    """A bearer token was presented but does not resolve to a user"""

    code = "AUTH_002"


class ForbiddenError(TeachHubError):
    """Identity present but the role is not allowed to do this"""

    status_code = 403
    code = "FORBIDDEN"


class NotEnrolledError(ForbiddenError):
    """Identity present but no approved enrollment in the batch"""

    code = "NOT_ENROLLED"


class ConflictError(TeachHubError):
    status_code = 409
    code = "CONFLICT"


class ValidationFailure(TeachHubError):
    """Required field missing or value out of range"""

    status_code = 422
    code = "VALIDATION_ERROR"
