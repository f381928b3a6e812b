"""
Domain errors raised by the service layer.

Each error carries the HTTP status the web layer answers with; the mapping is
applied by the exception handler registered in web.main.
"""

from typing import Any, Dict, Optional


class TaskboardError(Exception):
    """Base class for domain errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"detail": self.message}


class ValidationError(TaskboardError):
    """Malformed or missing input field."""

    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_payload(self) -> Dict[str, Any]:
        return {
            "detail": "Validation error",
            "errors": [{"field": self.field or "body", "message": self.message}],
        }


class NotFoundError(TaskboardError):
    """No record matches the given id or token."""

    status_code = 404


class ForbiddenError(TaskboardError):
    """Authenticated caller does not own the resource."""

    status_code = 403


class ConflictError(TaskboardError):
    """Uniqueness violation (duplicate category name, email, ...)."""

    status_code = 409


class AuthenticationError(TaskboardError):
    """Bad credentials or an invalid/revoked access token."""

    status_code = 401
