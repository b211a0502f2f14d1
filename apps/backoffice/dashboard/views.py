"""
Dashboard views - admin summary.
"""

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from apps.backoffice.core.decorators import admin_required, api_login_required
from apps.backoffice.core.http import json_response
from apps.backoffice.dashboard.serializers import serialize_dashboard
from apps.backoffice.dashboard.services import build_dashboard


@require_GET
@api_login_required
@admin_required
def dashboard(request: HttpRequest) -> JsonResponse:
    """
    GET /api/admin/dashboard

    Order counts, top-selling item, user count and outstanding points.
    """
    summary = build_dashboard()
    return json_response(serialize_dashboard(summary).model_dump(mode="json"))
