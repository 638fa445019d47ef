# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Error taxonomy shared by every feature module.

Domain code raises these; ``main.py`` maps them onto HTTP responses.  Form
handlers (login, register) catch the user-correctable ones themselves and
re-render the page instead.
"""

from dataclasses import dataclass
from typing import List, Optional

from fastapi import status


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationError(AppError):
    """One or more user-correctable field violations."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid submission"

    def __init__(self, errors: List[FieldError], detail: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(detail)


class InvalidStatusError(ValidationError):
    def __init__(self, value: str, allowed):
        allowed = tuple(allowed)
        super().__init__(
            [FieldError("status", f"Status must be one of: {', '.join(allowed)}")],
            detail=f"Invalid status '{value}'",
        )
        self.allowed = allowed


class DuplicateError(AppError):
    status_code = status.HTTP_409_CONFLICT
    detail = "User with this email or username already exists"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Record not found"


class AuthError(AppError):
    # Same text for unknown identifier and wrong password
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid credentials"


class AccessDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Access denied. Admin privileges required."


class StoreUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Service temporarily unavailable. Please try again later."


class RedirectRequired(Exception):
    """
    Raised by guards that answer with a redirect rather than an error.

    ``session_id`` is set when the guard had to open a fresh anonymous
    session (to remember ``return_to``) whose cookie must go out with the
    redirect.
    """

    def __init__(self, location: str, session_id: Optional[str] = None):
        super().__init__(location)
        self.location = location
        self.session_id = session_id
