"""
userpatch/errors.py

Exception hierarchy for the user service.

Every error carries the HTTP status it maps to, a short message and an optional
list of field errors. The handlers registered in userpatch/main.py turn any
UserPatchError into an ErrorResponse body, so routers and services only raise.
"""

from typing import List, Optional, Sequence

from userpatch.schemas.error import ErrorResponse, FieldError


class UserPatchError(Exception):
    """Base exception for all service errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Sequence[FieldError] = ()) -> None:
        self.message = message or self.default_message
        self.errors: List[FieldError] = list(errors)
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.message, errors=self.errors)


class MalformedInput(UserPatchError):
    """Body is not JSON, or a field could not be decoded as its declared type."""

    status_code = 400
    default_message = "Malformed input"


class ValidationFailed(UserPatchError):
    """One or more fields broke their validation rules."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: Sequence[FieldError], message: Optional[str] = None) -> None:
        super().__init__(message, errors)


class EmptyPatch(UserPatchError):
    """A PATCH body that would not change any column."""

    status_code = 400
    default_message = "No fields to update"


class NotFound(UserPatchError):
    status_code = 404
    default_message = "User not found"


class DuplicateEmail(UserPatchError):
    status_code = 409
    default_message = "Email already registered"


class StorageFailure(UserPatchError):
    """Unexpected database error. Surfaced as-is; nothing is retried."""

    status_code = 500
    default_message = "Storage failure"


# Leading location parts added by FastAPI for where a value came from
_LOCATION_SOURCES = ("body", "path", "query", "header", "cookie")


def malformed_input_from(errors: Sequence[dict]) -> MalformedInput:
    """
    Convert pydantic error dicts (from ValidationError.errors() or FastAPI's
    RequestValidationError.errors()) into a MalformedInput listing each field.
    """
    field_errors = []
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in _LOCATION_SOURCES:
            loc = loc[1:]
        field = loc[0] if loc and isinstance(loc[0], str) else None
        field_errors.append(FieldError(field=field, rule=err.get("type", "invalid"), message=err.get("msg", "")))
    return MalformedInput(errors=field_errors)
