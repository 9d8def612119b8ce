"""Dashboard URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.dashboards.views import admin_console, customer_dashboard, manufacturer_hub

urlpatterns = [
    path("dashboards/customer/", customer_dashboard, name="dashboard-customer"),
    path("dashboards/manufacturer/", manufacturer_hub, name="dashboard-manufacturer"),
    path("dashboards/admin/", admin_console, name="dashboard-admin"),
]
