"""
JSON request/response helpers for the API views.
"""

import json
from typing import Any, TypeVar

from django.http import HttpRequest, JsonResponse

from pydantic import BaseModel

from .exceptions import InvalidInput

_S = TypeVar("_S", bound=BaseModel)


def json_response(data: dict[str, Any], status: int = 200) -> JsonResponse:
    """Create a JSON response."""
    return JsonResponse(data, status=status)


def parse_body(request: HttpRequest, schema: type[_S]) -> _S:
    """
    Validate the JSON request body against a pydantic schema.

    Raises:
        InvalidInput: Body is not valid JSON
        pydantic.ValidationError: Body does not match the schema; rendered
            as a validation_error response by LedgerErrorMiddleware
    """
    try:
        body = json.loads(request.body or b"{}")
    except json.JSONDecodeError as e:
        raise InvalidInput("Invalid JSON in request body") from e
    return schema.model_validate(body)
