"""
URL routing for core endpoints.

Mounted under /api/ by the root URLconf.
"""

from django.urls import path

from apps.backoffice.core import views

app_name = "core"

urlpatterns = [
    path("healthcheck", views.healthcheck, name="healthcheck"),
]
