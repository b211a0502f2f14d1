"""
URL routing for the admin dashboard.

Mounted under /api/ by the root URLconf.
"""

from django.urls import path

from apps.backoffice.dashboard import views

app_name = "dashboard"

urlpatterns = [
    path("admin/dashboard", views.dashboard, name="dashboard"),
]
