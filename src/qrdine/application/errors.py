from __future__ import annotations

from typing import Any


class ApplicationError(Exception):
    """Base of every failure a use case reports to its caller.

    Subclasses fix the failure kind; the HTTP layer maps each concrete class to a
    status code and a stable error code.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class NotFoundError(ApplicationError):
    pass


class UnauthorizedError(ApplicationError):
    pass


class ForbiddenError(ApplicationError):
    pass


class ConflictError(ApplicationError):
    pass


class InvalidStateError(ApplicationError):
    pass


class ValidationError(ApplicationError):
    pass
