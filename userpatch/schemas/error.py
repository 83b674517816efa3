from typing import List

from pydantic import BaseModel


class FieldError(BaseModel):
    """One rejected field: which field, which rule, and a readable message."""

    field: str | None = None
    rule: str
    message: str


class ErrorResponse(BaseModel):
    """Body returned for every 4xx/5xx raised by the service."""

    error: str
    errors: List[FieldError] = []
