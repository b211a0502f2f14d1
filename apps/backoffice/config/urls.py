"""
URL configuration for the restaurant back-office.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    # JSON API
    path("api/", include("apps.backoffice.core.urls")),
    path("api/", include("apps.backoffice.orders.urls")),
    path("api/", include("apps.backoffice.takeaway.urls")),
    path("api/", include("apps.backoffice.dashboard.urls")),
]
