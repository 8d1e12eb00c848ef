"""
Custom exceptions for the application.
Project: Auto Shop Manager

Domain exceptions mapped to HTTP responses by the handlers in main.py.
Every error body has the shape {"error": detail, **extra}.

NOTE: BusinessValidationError is distinct from pydantic.ValidationError.
- pydantic.ValidationError: malformed/missing request data (FastAPI, mapped to 400)
- BusinessValidationError: business rule violations (our handler, 400)
"""

from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NotFoundError",
    "DuplicateError",
    "BusinessValidationError",
    "ValidationError",       # alias of BusinessValidationError
    "ConflictError",
]


class AppException(Exception):
    """
    Base exception for the application.

    Attributes:
        status_code: HTTP status code returned to the client
        error_code: stable identifier of the error, logged with it
        detail: human readable message, rendered as "error"
        extra: additional fields merged into the error body
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.detail = detail
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(detail)

    def to_body(self) -> Dict[str, Any]:
        """Returns the JSON error body."""
        body: Dict[str, Any] = {"error": self.detail}
        if self.extra:
            body.update(self.extra)
        return body


class NotFoundError(AppException):
    """
    Raised when an entity, or a required relation between entities, does not exist.

    A vehicle that exists but belongs to another customer is reported
    through this exception as well.
    """

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        detail: str = "Resource not found",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class DuplicateError(AppException):
    """
    Raised when a unique value (customer email, VIN, part number) is already taken.

    The API reports duplicates as validation failures, hence 400.
    """

    status_code: int = 400
    error_code: str = "DUPLICATE_RESOURCE"

    def __init__(
        self,
        detail: str = "Resource already exists",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class BusinessValidationError(ValueError, AppException):
    """
    Raised for business rule violations.

    Inherits from ValueError so Pydantic validators can raise it too.

    Examples:
        - "Cannot update a work order that is already invoiced or paid"
        - "Cannot delete vehicle with active work orders"
        - "Insufficient stock for BRK-001"
    """

    status_code: int = 400
    error_code: str = "BUSINESS_VALIDATION_ERROR"

    def __init__(
        self,
        detail: str = "Validation failed",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Skip ValueError.__init__
        AppException.__init__(self, detail, error_code, extra)


# Short alias
ValidationError = BusinessValidationError


class ConflictError(AppException):
    """
    Raised when the database rejects a write for a reason other than a
    known unique constraint.
    """

    status_code: int = 409
    error_code: str = "CONFLICT_STATE"

    def __init__(
        self,
        detail: str = "Conflicting state",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)
