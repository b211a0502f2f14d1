"""
Core views - service health.
"""

import logging

from django.db import DatabaseError, connection
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from .http import json_response

logger = logging.getLogger(__name__)


@require_GET
def healthcheck(request: HttpRequest) -> JsonResponse:
    """
    GET /api/healthcheck

    Public. 200 when the database answers, 503 otherwise.
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError:
        logger.exception("Health check could not reach the database")
        return json_response({"status": "unavailable", "database": "down"}, status=503)

    return json_response({"status": "ok", "database": "up"})
