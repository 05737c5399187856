"""Error taxonomy shared by the workflow, the data accessors and the HTTP layer.

Every error the service expects to surface to a caller is an ``ApiError``
tagged with an ``ErrorKind``. The HTTP layer switches on the kind only.
No framework imports allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    CONNECTIVITY = "connectivity"


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single field-level failure, serialised as ``{param, msg}``."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"param": self.field, "msg": self.message}


class ApiError(Exception):
    """Base error carrying everything needed to build the response envelope.

    ``locale_tag`` names the ``DEFAULT_ERRORS`` entry used when no explicit
    message is given.
    """

    kind: ErrorKind
    status_code: int
    error_code: str
    locale_tag: str

    def __init__(self, message: str | None = None, errors: list[FieldError] | None = None) -> None:
        self.message = message
        self.errors = list(errors) if errors else []
        super().__init__(message or self.error_code)

    def errors_payload(self) -> list[dict[str, Any]]:
        return [item.to_dict() for item in self.errors]


class ValidationError(ApiError):
    """Raised for malformed input or business-rule violations on input fields."""

    kind = ErrorKind.VALIDATION
    status_code = 422
    error_code = "validation_error"
    locale_tag = "VALIDATION_ERROR"

    def __init__(self, errors: list[FieldError], message: str | None = None) -> None:
        super().__init__(message, errors)


class BadRequestError(ApiError):
    """Raised when the request body cannot be interpreted at all."""

    kind = ErrorKind.BAD_REQUEST
    status_code = 400
    error_code = "bad_request"
    locale_tag = "BAD_REQUEST"


class NotFoundError(ApiError):
    """Raised when no route or resource matches the request."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404
    error_code = "not_found"
    locale_tag = "NOT_FOUND"


class MethodNotAllowedError(ApiError):
    kind = ErrorKind.METHOD_NOT_ALLOWED
    status_code = 405
    error_code = "method_not_allowed"
    locale_tag = "METHOD_NOT_ALLOWED"


class ConnectivityError(ApiError):
    """Raised when the document store is unreachable or not configured."""

    kind = ErrorKind.CONNECTIVITY
    status_code = 503
    error_code = "temporarily_unavailable"
    locale_tag = "TEMPORARILY_UNAVAILABLE"


class DuplicateEmailError(Exception):
    """Raised by the data accessors when the unique email index rejects an insert."""

    def __init__(self, email: str) -> None:
        super().__init__(f"account already exists for {email}")
        self.email = email


class ConnectionBootstrapError(Exception):
    """Raised when the initial database connection cannot be established."""
