"""Error taxonomy shared by services and the HTTP layer.

Every error carries the HTTP status it maps to and a human-readable message.
The exception handlers in ``app.main`` render them into the response
envelope, so services simply raise.
"""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors that are reported to API clients."""

    status_code: int = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(AppError):
    """One or more fields failed validation."""

    def __init__(self, message: str = "Validation failed", errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, errors=errors)

    @classmethod
    def for_field(cls, field: str, reason: str) -> "ValidationError":
        return cls(errors=[{"field": field, "message": reason}])


class MalformedIdError(AppError):
    """An id is not syntactically valid."""


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """A uniqueness constraint would be violated."""


class AvailabilityError(AppError):
    """An order references a menu item that is currently unavailable."""


class ItemReferenceError(AppError):
    """An order references a menu item id that does not exist."""


class InvalidTransitionError(AppError):
    """An order status change is not allowed from the current status."""

    def __init__(self, current: str, requested: str, message: Optional[str] = None):
        super().__init__(message or f"Cannot change status from {current} to {requested}")
        self.current = current
        self.requested = requested


class ServerError(AppError):
    status_code = 500
