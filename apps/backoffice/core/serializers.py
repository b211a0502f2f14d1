"""
Pydantic schemas shared by every JSON endpoint.
"""

from typing import Literal

from pydantic import BaseModel


class ValidationErrorDetail(BaseModel):
    """A single validation error."""

    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """Response for request bodies that fail schema validation."""

    error: Literal["validation_error"]
    details: list[ValidationErrorDetail]
