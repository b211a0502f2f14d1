"""
Ledger error middleware - maps LedgerError to JSON responses.
"""

import logging
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse, JsonResponse

from pydantic import ValidationError as PydanticValidationError

from .exceptions import LedgerError
from .serializers import ValidationErrorDetail, ValidationErrorResponse

logger = logging.getLogger(__name__)


class LedgerErrorMiddleware:
    """
    Middleware that renders rejected ledger operations.

    Any LedgerError escaping a view becomes
    {"error": <kind>, "message": <message>} with the error's status code.
    Request bodies rejected by a pydantic schema become a 400
    validation_error response. Other exceptions are left to Django.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        return self.get_response(request)

    def process_exception(
        self, request: HttpRequest, exception: Exception
    ) -> HttpResponse | None:
        if isinstance(exception, PydanticValidationError):
            errors = [
                ValidationErrorDetail(
                    field=".".join(str(loc) for loc in err["loc"]),
                    message=err["msg"],
                )
                for err in exception.errors()
            ]
            response = ValidationErrorResponse(error="validation_error", details=errors)
            return JsonResponse(response.model_dump(), status=400)

        if not isinstance(exception, LedgerError):
            return None

        logger.info(
            "Rejected %s %s: %s (%s)",
            request.method,
            request.path,
            exception.kind,
            exception.message,
        )
        return JsonResponse(exception.as_dict(), status=exception.status_code)
